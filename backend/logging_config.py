"""Structured JSON logging configuration.

DEBUG=true logs human-readable lines for local development; otherwise every
record is a single-line JSON object.  Each record emitted while a request is
being handled carries that request's id.  Field values, key material and
tokens are never passed to a logger.
"""

from __future__ import annotations

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone

from config import get_settings

NO_REQUEST = "-"

# Set by the request-id middleware for the duration of one request
request_id_var: ContextVar[str | None] = ContextVar("request_id", default=None)

QUIET_LOGGERS = ("uvicorn.access", "httpcore", "httpx")


class RequestIdFilter(logging.Filter):
    """Stamp the current request id onto every record passing the handler."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not getattr(record, "request_id", None):
            record.request_id = request_id_var.get() or NO_REQUEST
        return True


class JSONFormatter(logging.Formatter):
    """Emit log records as single-line JSON objects."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "ts": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        request_id = getattr(record, "request_id", None)
        if request_id and request_id != NO_REQUEST:
            payload["request_id"] = request_id
        if record.exc_info and record.exc_info[0] is not None:
            payload["exception"] = self.formatException(record.exc_info)
        return json.dumps(payload, default=str)


def build_handler(debug: bool, stream=None) -> logging.Handler:
    handler = logging.StreamHandler(stream or sys.stdout)
    handler.addFilter(RequestIdFilter())
    if debug:
        handler.setFormatter(
            logging.Formatter(
                "%(asctime)s %(levelname)-8s [%(name)s] [%(request_id)s] %(message)s",
                datefmt="%H:%M:%S",
            )
        )
    else:
        handler.setFormatter(JSONFormatter())
    return handler


def setup_logging() -> None:
    """Replace the root handlers with one request-aware stdout handler."""
    settings = get_settings()

    root = logging.getLogger()
    root.setLevel(logging.DEBUG if settings.debug else logging.INFO)
    root.handlers.clear()
    root.addHandler(build_handler(settings.debug))

    # Store URLs carry the bin id
    if not settings.debug:
        for name in QUIET_LOGGERS:
            logging.getLogger(name).setLevel(logging.WARNING)
