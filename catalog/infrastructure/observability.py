"""Structured Logging: JSON formatter and setup for readiness and failure events.

Invariants:
    - All logs include timestamp, level, logger name, and message
    - Only whitelisted extras are surfaced: the keys the orchestrator, listener,
      gateway and error handlers attach (subsystem, port, elapsed_ms, operation,
      kind, error_code, path). Anything else on the record stays out of the payload
    - JSON format in production, human-readable text otherwise
    - setup_logging installs exactly one catalog handler on the root logger,
      replacing the one from an earlier call

Design Decisions:
    - setup_logging called once by the entry point, before orchestration starts
    - uvicorn runs with log_config=None, so its loggers propagate to this handler
"""

import logging
import json
from datetime import datetime, timezone

# startup events
_STARTUP_FIELDS = ("subsystem", "port", "elapsed_ms")
# store failures
_PERSISTENCE_FIELDS = ("operation", "kind")
# request failures
_REQUEST_FIELDS = ("error_code", "path")

EXTRA_FIELDS = _STARTUP_FIELDS + _PERSISTENCE_FIELDS + _REQUEST_FIELDS


class JSONFormatter(logging.Formatter):
    """Format logs as JSON, one object per line."""

    def format(self, record: logging.LogRecord) -> str:
        log = {
            "timestamp": datetime.fromtimestamp(record.created, timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        for key in EXTRA_FIELDS:
            val = record.__dict__.get(key)
            if val is not None:
                log[key] = val
        if record.exc_info:
            log["exception"] = self.formatException(record.exc_info)
        return json.dumps(log, ensure_ascii=False, default=str)


class _CatalogHandler(logging.StreamHandler):
    pass


def setup_logging(level: str = "INFO", fmt: str = "json") -> logging.Handler:
    """Configure root logging for the service and return the installed handler."""
    handler = _CatalogHandler()
    if fmt == "json":
        handler.setFormatter(JSONFormatter())
    else:
        handler.setFormatter(logging.Formatter(
            "%(asctime)s %(levelname)s %(name)s [%(subsystem)s] - %(message)s",
            defaults={"subsystem": "-"},
        ))
    for existing in [h for h in logging.root.handlers if isinstance(h, _CatalogHandler)]:
        logging.root.removeHandler(existing)
    logging.root.addHandler(handler)
    logging.root.setLevel(getattr(logging, level.upper(), logging.INFO))
    return handler
