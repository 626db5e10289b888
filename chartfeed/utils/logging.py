"""structlog setup and per-request log context.

Log lines render as JSON (one object per line) or as colored console text.
Every orchestrator call opens a request context: a fresh correlation ID plus
the operation and symbol, attached to each provider attempt and fallback
step logged while serving it. Context lives in contextvars, so concurrent
requests never see each other's fields.
"""

from __future__ import annotations

import logging
import sys
import uuid
from contextvars import ContextVar
from typing import IO, Any

import structlog

_correlation_id: ContextVar[str] = ContextVar("correlation_id", default="")

# Request-level chatter from the HTTP stack, silenced below DEBUG
_NOISY_LOGGERS = ("httpx", "httpcore")


def get_correlation_id() -> str:
    return _correlation_id.get()


def set_correlation_id(cid: str) -> None:
    _correlation_id.set(cid)


def new_correlation_id(**fields: Any) -> str:
    """Start a request context and return its correlation ID.

    Replaces any fields bound by the previous request in this context with
    ``fields`` (e.g. ``operation="series", symbol="AAPL"``).
    """
    cid = uuid.uuid4().hex[:12]
    set_correlation_id(cid)
    structlog.contextvars.clear_contextvars()
    if fields:
        structlog.contextvars.bind_contextvars(**fields)
    return cid


def _inject_correlation_id(
    logger: structlog.types.WrappedLogger,
    method_name: str,
    event_dict: structlog.types.EventDict,
) -> structlog.types.EventDict:
    cid = _correlation_id.get()
    if cid:
        event_dict.setdefault("correlation_id", cid)
    return event_dict


def _renderer(log_format: str) -> structlog.types.Processor:
    if log_format == "json":
        return structlog.processors.JSONRenderer()
    return structlog.dev.ConsoleRenderer()


def setup_logging(
    level: str = "INFO",
    log_format: str = "json",
    stream: IO[str] | None = None,
) -> None:
    """Route structlog through one stdlib root handler.

    Args:
        level: Root log level name (DEBUG ... CRITICAL).
        log_format: "json" or "console".
        stream: Destination; defaults to stderr so command output stays clean.
    """
    level_no = logging.getLevelName(level.upper())

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            _inject_correlation_id,
            structlog.stdlib.add_log_level,
            structlog.stdlib.add_logger_name,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.StackInfoRenderer(),
            structlog.processors.format_exc_info,
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    handler = logging.StreamHandler(stream if stream is not None else sys.stderr)
    handler.setFormatter(
        structlog.stdlib.ProcessorFormatter(
            processors=[
                structlog.stdlib.ProcessorFormatter.remove_processors_meta,
                _renderer(log_format),
            ],
        ),
    )

    root = logging.getLogger()
    root.handlers.clear()
    root.addHandler(handler)
    root.setLevel(level_no)

    quiet = logging.WARNING if level_no > logging.DEBUG else logging.NOTSET
    for name in _NOISY_LOGGERS:
        logging.getLogger(name).setLevel(quiet)
