"""Package logger with a per-request id on every record."""
from __future__ import annotations

import logging
import uuid
from contextvars import ContextVar

_request_id: ContextVar[str] = ContextVar("catalog_request_id", default="-")

LOG_FORMAT = "%(asctime)s %(levelname)s [%(request_id)s] %(name)s: %(message)s"

logger = logging.getLogger("catalog")


def get_request_id() -> str:
    return _request_id.get()


def set_request_id(value: str | None = None) -> str:
    """Bind a request id to the current context; generates one when missing."""
    rid = value or uuid.uuid4().hex
    _request_id.set(rid)
    return rid


class RequestIdFilter(logging.Filter):
    def filter(self, record: logging.LogRecord) -> bool:
        record.request_id = get_request_id()
        return True


def configure_logging(level: str | int = "INFO") -> None:
    """Attach one stream handler to the package logger (idempotent)."""
    logger.setLevel(level if isinstance(level, int) else level.upper())
    for handler in logger.handlers:
        if getattr(handler, "_catalog_handler", False):
            return
    handler = logging.StreamHandler()
    handler.setFormatter(logging.Formatter(LOG_FORMAT))
    handler.addFilter(RequestIdFilter())
    handler._catalog_handler = True  # type: ignore[attr-defined]
    logger.addHandler(handler)
