# utils/log.py
"""
Structured logging bound to the request being served.

Middleware binds the request id, method and path when a request comes in,
and authentication adds the user id once the token has been resolved.
Every record emitted afterwards, from routers down to crud, carries those
fields without passing them around. Output is one JSON object per line,
or a plain text line for local development (LOG_FORMAT=text).
"""
import json
import logging
import sys
from contextvars import ContextVar, Token
from datetime import datetime, timezone
from typing import Any, Dict, Mapping

# Fields callers attach with `extra=` that belong in the structured output
DOMAIN_FIELDS = ("course_id", "quiz_id", "order_id", "enrollment_id", "certificate_id")

_context: ContextVar[Mapping[str, Any]] = ContextVar("log_context", default={})


def bind_context(**fields: Any) -> Token:
    """Merge fields into the current log context. Returns a token for `reset_context`."""
    merged = dict(_context.get())
    merged.update({k: v for k, v in fields.items() if v is not None})
    return _context.set(merged)


def reset_context(token: Token) -> None:
    _context.reset(token)


def current_context() -> Dict[str, Any]:
    return dict(_context.get())


class ContextFilter(logging.Filter):
    """Copies the bound context onto each record."""

    def filter(self, record: logging.LogRecord) -> bool:
        context = current_context()
        record.context = context
        record.request_id = context.get("request_id", "-")
        if not hasattr(record, "user_id"):
            record.user_id = context.get("user_id")
        return True


class JsonFormatter(logging.Formatter):
    def format(self, record: logging.LogRecord) -> str:
        entry: Dict[str, Any] = {
            "timestamp": datetime.fromtimestamp(record.created, tz=timezone.utc).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
        }
        entry.update(getattr(record, "context", {}))
        if getattr(record, "user_id", None):
            entry["user_id"] = record.user_id
        for key in DOMAIN_FIELDS:
            value = getattr(record, key, None)
            if value is not None:
                entry[key] = value
        if record.exc_info:
            entry["exc_info"] = self.formatException(record.exc_info)
        return json.dumps(entry, ensure_ascii=False, default=str)


TEXT_FORMAT = "%(asctime)s %(levelname)-7s [%(request_id)s] %(name)s: %(message)s"


def build_formatter(fmt: str) -> logging.Formatter:
    if fmt == "json":
        return JsonFormatter()
    if fmt == "text":
        return logging.Formatter(TEXT_FORMAT)
    raise ValueError(f"Unknown log format: {fmt}")


def configure_logging(level: str = "INFO", fmt: str = "json") -> None:
    handler = logging.StreamHandler(stream=sys.stdout)
    handler.setFormatter(build_formatter(fmt))
    handler.addFilter(ContextFilter())

    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(level.upper())
    root.addHandler(handler)

    # uvicorn installs its own handlers; route its records through ours
    for name in ("uvicorn", "uvicorn.error", "uvicorn.access"):
        uvicorn_logger = logging.getLogger(name)
        uvicorn_logger.handlers.clear()
        uvicorn_logger.propagate = True
        uvicorn_logger.setLevel(level.upper())
