"""Startup Orchestrator: brings up persistence and the HTTP listener as one readiness signal.

Invariants:
    - Persistence init and listener bind run as two independent asyncio tasks;
      neither reads the other's state
    - start() resolves only after BOTH tasks succeed
    - The first failure raises StartupError at once; a later failure of the
      other task is logged, never raised
    - No partial Ready: callers get a Ready with both subsystems or an error
    - Blocking-capable persistence construction runs on a bounded thread pool,
      never on the event loop thread
    - shutdown() releases whatever did come up, and is safe after a failed start

Design Decisions:
    - asyncio.wait(FIRST_EXCEPTION) as the fan-in barrier; stragglers get a
      done-callback that logs their outcome
    - Starters are injectable so tests substitute fakes for either subsystem
"""

import asyncio
import functools
import logging
import time
from concurrent.futures import Executor, ThreadPoolExecutor
from dataclasses import dataclass
from typing import Awaitable, Callable

from fastapi import FastAPI

from catalog.config import Settings
from catalog.context import AppContext
from catalog.core.errors import StartupError
from catalog.infrastructure.database import PersistenceGateway
from catalog.infrastructure.listener import HttpListener, start_listener

logger = logging.getLogger(__name__)

PERSISTENCE = "persistence"
HTTP = "http"

PersistenceStarter = Callable[[Settings, Executor], Awaitable[PersistenceGateway]]
ListenerStarter = Callable[[FastAPI, Settings], Awaitable[HttpListener]]


async def init_persistence(settings: Settings, executor: Executor) -> PersistenceGateway:
    """Build the gateway on the worker pool, then validate it from the loop."""
    loop = asyncio.get_running_loop()
    gateway = await loop.run_in_executor(
        executor,
        functools.partial(
            PersistenceGateway.build,
            settings.resolved_database_url,
            pool_size=settings.database_pool_size,
            max_overflow=settings.database_max_overflow,
            create_schema=settings.create_schema,
        ),
    )
    try:
        await gateway.prepare()
    except BaseException:
        await gateway.dispose()
        raise
    logger.info("Persistence gateway is ready", extra={"subsystem": PERSISTENCE})
    return gateway


@dataclass(frozen=True)
class Ready:
    """Both subsystems are up."""
    gateway: PersistenceGateway
    listener: HttpListener
    elapsed_ms: float


def _failure(task: asyncio.Task) -> BaseException | None:
    if task.cancelled():
        return asyncio.CancelledError(f"{task.get_name()} startup was cancelled")
    return task.exception()


class StartupOrchestrator:
    """Runs the two startup tasks and joins them into one result."""

    def __init__(
        self,
        settings: Settings,
        app: FastAPI,
        *,
        persistence_starter: PersistenceStarter = init_persistence,
        listener_starter: ListenerStarter = start_listener,
        executor: Executor | None = None,
    ):
        self.settings = settings
        self.app = app
        self._persistence_starter = persistence_starter
        self._listener_starter = listener_starter
        self._owns_executor = executor is None
        self._executor = executor or ThreadPoolExecutor(
            max_workers=settings.blocking_pool_size,
            thread_name_prefix="catalog-blocking",
        )
        self._tasks: dict[str, asyncio.Task] = {}
        self._gateway: PersistenceGateway | None = None
        self._listener: HttpListener | None = None
        self._aborted = False

    @property
    def context(self) -> AppContext:
        return self.app.state.context

    async def start(self) -> Ready:
        """Start both subsystems; raise StartupError on the first failure."""
        if self._tasks:
            raise RuntimeError("start() may only be called once")
        started = time.perf_counter()

        persistence = asyncio.create_task(
            self._persistence_starter(self.settings, self._executor), name=PERSISTENCE,
        )
        persistence.add_done_callback(self._on_persistence_done)
        listener = asyncio.create_task(
            self._listener_starter(self.app, self.settings), name=HTTP,
        )
        listener.add_done_callback(self._on_listener_done)
        self._tasks = {PERSISTENCE: persistence, HTTP: listener}

        pending = {persistence, listener}
        try:
            while pending:
                done, pending = await asyncio.wait(
                    pending, return_when=asyncio.FIRST_EXCEPTION,
                )
                failed = [t for t in self._tasks.values() if t in done and _failure(t)]
                if failed:
                    self._abort(failed, pending)
        except asyncio.CancelledError:
            self._aborted = True
            for task in self._tasks.values():
                task.cancel()
            raise

        return Ready(
            gateway=persistence.result(),
            listener=listener.result(),
            elapsed_ms=round((time.perf_counter() - started) * 1000, 1),
        )

    def _abort(self, failed: list[asyncio.Task], pending: set[asyncio.Task]) -> None:
        self._aborted = True
        self.context.detach_gateway()
        first, *others = failed
        exc = _failure(first)
        for task in others:
            self._log_straggler(task)
        for task in pending:
            task.add_done_callback(self._log_straggler)
        logger.error(
            f"Startup failed: {first.get_name()} did not come up",
            extra={"subsystem": first.get_name()},
            exc_info=exc,
        )
        raise StartupError(first.get_name(), exc) from exc

    def _on_persistence_done(self, task: asyncio.Task) -> None:
        if _failure(task) is None:
            self._gateway = task.result()
            # an aborted startup keeps the gateway only so shutdown can dispose it
            if not self._aborted:
                self.context.attach_gateway(self._gateway)

    def _on_listener_done(self, task: asyncio.Task) -> None:
        if _failure(task) is None:
            self._listener = task.result()

    @staticmethod
    def _log_straggler(task: asyncio.Task) -> None:
        if task.cancelled():
            return
        exc = task.exception()
        if exc is not None:
            logger.warning(
                f"{task.get_name()} also failed after startup was aborted: {exc}",
                extra={"subsystem": task.get_name()},
            )

    async def shutdown(self) -> None:
        """Stop the listener, dispose the engine, release the worker pool."""
        for task in self._tasks.values():
            if not task.done():
                task.cancel()
        if self._tasks:
            await asyncio.gather(*self._tasks.values(), return_exceptions=True)
        if self._listener is not None:
            await self._listener.stop()
            self._listener = None
        self.context.detach_gateway()
        if self._gateway is not None:
            await self._gateway.dispose()
            self._gateway = None
        if self._owns_executor:
            self._executor.shutdown(wait=False, cancel_futures=True)
        logger.info("Shutdown complete")
