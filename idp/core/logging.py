"""Logging configuration for the authorization service.

Every record written to stdout carries the authorization context it was
emitted under: the request ID and, when the request named one, the
client_id. Both live in ContextVars bound by ``bind_request_context`` for
the lifetime of one request, so interleaved sign-in attempts on the same
event loop stay separable.

LOG_JSON selects the output shape:

  _ContainerFormatter — one readable line, context as key=value pairs.
  _JsonFormatter      — one JSON object per line, context as top-level keys.

Credentials never reach the log stream: call sites log emails and client
ids, never passwords, password hashes or authorization codes.
"""

from __future__ import annotations

import json
import logging
import sys
from collections.abc import Iterator
from contextlib import contextmanager
from contextvars import ContextVar
from datetime import datetime, timezone

request_id_var: ContextVar[str] = ContextVar("request_id", default="-")
client_id_var: ContextVar[str | None] = ContextVar("client_id", default=None)

# Fields lifted out of `extra=` or the bound context, in output order
_CONTEXT_FIELDS = (
    "request_id",
    "client_id",
    "method",
    "path",
    "status_code",
    "duration_ms",
)

_NOISY_LOGGERS = (
    "uvicorn",
    "uvicorn.access",
    "uvicorn.error",
    "sqlalchemy.engine",
    "httpx",
)


@contextmanager
def bind_request_context(request_id: str, client_id: str | None) -> Iterator[None]:
    """Bind request-scoped logging fields until the block exits."""
    request_token = request_id_var.set(request_id)
    client_token = client_id_var.set(client_id)
    try:
        yield
    finally:
        client_id_var.reset(client_token)
        request_id_var.reset(request_token)


class RequestContextFilter(logging.Filter):
    """Stamp the bound request_id / client_id onto records that lack them.

    Installed on the handler: filters on the root logger are skipped for
    records propagated from child loggers.
    """

    def filter(self, record: logging.LogRecord) -> bool:
        if getattr(record, "request_id", None) is None:
            record.request_id = request_id_var.get()
        if getattr(record, "client_id", None) is None:
            record.client_id = client_id_var.get()
        return True


def _context(record: logging.LogRecord) -> dict[str, object]:
    fields: dict[str, object] = {}
    for key in _CONTEXT_FIELDS:
        value = getattr(record, key, None)
        if value is not None and value != "-":
            fields[key] = value
    return fields


def _timestamp(record: logging.LogRecord) -> str:
    created = datetime.fromtimestamp(record.created, tz=timezone.utc)
    return created.isoformat(timespec="milliseconds")


class _ContainerFormatter(logging.Formatter):
    """``<ts> <LEVEL> <logger>  <message>  request_id=.. client_id=..``

    WARNING and above also get a [filename:lineno] suffix.
    """

    _SHOWN_CONTEXT = ("request_id", "client_id")

    def format(self, record: logging.LogRecord) -> str:
        parts = [
            f"{_timestamp(record)} {record.levelname:<8} {record.name}  "
            f"{record.getMessage()}"
        ]
        context = _context(record)
        pairs = [f"{k}={context[k]}" for k in self._SHOWN_CONTEXT if k in context]
        if pairs:
            parts.append(" ".join(pairs))
        if record.levelno >= logging.WARNING:
            parts.append(f"[{record.filename}:{record.lineno}]")

        line = "  ".join(parts)
        if record.exc_info and record.exc_info[0] is not None:
            line += "\n" + self.formatException(record.exc_info)
        return line


class _JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry: dict[str, object] = {
            "timestamp": _timestamp(record),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(_context(record))
        if record.exc_info and record.exc_info[0] is not None:
            entry["exception"] = self.formatException(record.exc_info)
        return json.dumps(entry, default=str)


def setup_logging(level_name: str, *, json_format: bool = False) -> None:
    """Send every log record to stdout with the request context attached.

    Args:
        level_name: debug/info/warning/error; unknown names fall back to INFO.
        json_format: emit JSON lines instead of the human-readable format.
    """
    level = getattr(logging, level_name.upper(), logging.INFO)

    handler = logging.StreamHandler(sys.stdout)
    handler.setFormatter(_JsonFormatter() if json_format else _ContainerFormatter())
    handler.addFilter(RequestContextFilter())

    root = logging.getLogger()
    root.setLevel(level)
    root.handlers.clear()
    root.addHandler(handler)

    # SQLAlchemy echo and the server access log drown out sign-in events
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(level, logging.WARNING))
