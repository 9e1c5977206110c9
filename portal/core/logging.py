"""
core/logging.py
---------------
structlog setup for the portal.

Output:
  DEBUG=true  → coloured console lines
  DEBUG=false → one JSON object per line

Per-request context (request_id, method, path and, once the gate has
resolved the session, user_id) lives in structlog contextvars. Any event
logged while a request is being handled carries those keys without the
caller passing them:

    logger.info("Bill paid", bill_id=bill.id)
    → {"event": "Bill paid", "bill_id": ..., "request_id": ..., "user_id": ...}
"""

import logging
import sys
import uuid

import structlog

from portal.core.config import settings

# Libraries that are chatty at INFO and add nothing outside development
_QUIET_LOGGERS = ("uvicorn.access", "sqlalchemy.engine", "passlib.handlers.bcrypt")


def configure_logging() -> None:
    level = logging.DEBUG if settings.DEBUG else logging.INFO
    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level)

    if not settings.DEBUG:
        for name in _QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)

    if settings.DEBUG:
        renderer = structlog.dev.ConsoleRenderer()
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            renderer,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(level),
        context_class=dict,
        logger_factory=structlog.PrintLoggerFactory(),
        cache_logger_on_first_use=True,
    )


def bind_request_context(method: str, path: str, request_id: str | None = None) -> str:
    """Start a fresh log context for an incoming request; returns its id."""
    request_id = request_id or uuid.uuid4().hex
    structlog.contextvars.clear_contextvars()
    structlog.contextvars.bind_contextvars(
        request_id=request_id, method=method, path=path
    )
    return request_id


def bind_user(user_id: str, role: str) -> None:
    structlog.contextvars.bind_contextvars(user_id=user_id, role=role)


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()


def get_logger(name: str = __name__):
    return structlog.get_logger(name)
