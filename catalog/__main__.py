"""Command-line entry point: `python -m catalog` or `catalog-service`.

Builds settings, configures logging, runs the startup orchestrator, serves
until uvicorn is signalled to stop, then shuts every subsystem down.
Exit status 1 when startup fails.
"""

import asyncio
import logging
import sys

from catalog.config import Settings, get_settings
from catalog.context import AppContext
from catalog.core.errors import StartupError
from catalog.infrastructure.observability import setup_logging
from catalog.main import create_app
from catalog.startup import StartupOrchestrator

logger = logging.getLogger("catalog")


async def serve(settings: Settings) -> int:
    app = create_app(AppContext(settings))
    orchestrator = StartupOrchestrator(settings, app)
    try:
        try:
            ready = await orchestrator.start()
        except StartupError as e:
            logger.error(
                "Deployment failure",
                extra={"subsystem": e.subsystem, "error_code": e.code},
                exc_info=e.cause,
            )
            return 1
        logger.info(
            f"Deployment success, started in {ready.elapsed_ms}ms",
            extra={"elapsed_ms": ready.elapsed_ms, "port": ready.listener.port},
        )
        await ready.listener.wait_closed()
        return 0
    finally:
        await orchestrator.shutdown()


def main() -> None:
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    logger.info("Starting catalog service")
    sys.exit(asyncio.run(serve(settings)))


if __name__ == "__main__":
    main()
