"""structlog JSON logging with request and webhook-event context."""

from __future__ import annotations

import logging
from typing import Any

import structlog

from muxsync.core.config import get_settings


CONTEXT_KEYS = ("request_id", "mux_event_id")

_CONFIGURED = False


def _ensure_context_keys(_logger: Any, _method_name: str, event_dict: dict[str, Any]) -> dict[str, Any]:
    for key in CONTEXT_KEYS:
        event_dict.setdefault(key, None)
    return event_dict


def _resolve_level(name: str) -> int:
    level = logging.getLevelName(name.strip().upper())
    return level if isinstance(level, int) else logging.INFO


def configure_logging() -> None:
    global _CONFIGURED
    if _CONFIGURED:
        return

    level = _resolve_level(get_settings().log_level)
    logging.basicConfig(level=level, format="%(message)s")
    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            _ensure_context_keys,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            structlog.processors.JSONRenderer(),
        ],
        logger_factory=structlog.PrintLoggerFactory(),
        wrapper_class=structlog.make_filtering_bound_logger(level),
        cache_logger_on_first_use=True,
    )
    _CONFIGURED = True


def get_logger(name: str | None = None) -> structlog.BoundLogger:
    configure_logging()
    return structlog.get_logger(name)


def bind_request_context(request_id: str) -> None:
    structlog.contextvars.bind_contextvars(request_id=request_id)


def bind_event_context(mux_event_id: str | None) -> None:
    """Tag every log line of the current delivery with the Mux event id."""

    structlog.contextvars.bind_contextvars(mux_event_id=mux_event_id)


def clear_request_context() -> None:
    structlog.contextvars.clear_contextvars()
