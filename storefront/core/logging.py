"""Logging setup.

Every module obtains its logger through ``get_logger(__name__)``. The first
call installs a single stream handler on the ``storefront`` root logger,
formatted as JSON lines or plain text depending on ``settings.log_format``.
"""

import json
import logging
import sys
from datetime import datetime, timezone
from typing import Optional

from storefront.core.config import settings
from storefront.core.context import get_context

_LOG_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s | %(message)s"
_ROOT_LOGGER = "storefront"
_CONTEXT_FIELDS = ("request_id", "tenant_id", "user_id")

# Attributes every LogRecord carries; anything else came in through ``extra=``
_RESERVED_ATTRS = set(
    logging.LogRecord("", 0, "", 0, "", None, None).__dict__.keys()
) | {"message", "asctime", "taskName"}

_initialized = False


class JsonFormatter(logging.Formatter):
    """Render records as one JSON object per line."""

    def format(self, record: logging.LogRecord) -> str:
        payload = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }

        ctx = get_context()
        for field in _CONTEXT_FIELDS:
            if ctx.get(field):
                payload[field] = ctx[field]

        for key, value in record.__dict__.items():
            if key not in _RESERVED_ATTRS and not key.startswith("_"):
                payload[key] = value

        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)

        return json.dumps(payload, default=str, ensure_ascii=False)


def configure_logging(level: Optional[str] = None, fmt: Optional[str] = None) -> None:
    """Install the handler on the package root logger. Safe to call repeatedly."""
    global _initialized

    root = logging.getLogger(_ROOT_LOGGER)
    root.setLevel((level or settings.log_level).upper())

    if _initialized:
        return

    handler = logging.StreamHandler(sys.stdout)
    if (fmt or settings.log_format) == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
    root.addHandler(handler)
    _initialized = True


def get_logger(name: str) -> logging.Logger:
    """Return a named logger, configuring logging on first use."""
    if not _initialized:
        configure_logging()
    return logging.getLogger(name)
