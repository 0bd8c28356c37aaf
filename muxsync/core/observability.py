"""Sentry wiring: one-time init, scoped tags and exception reporting."""

from __future__ import annotations

from contextlib import contextmanager
from typing import Any, Dict, Iterator, Optional

import sentry_sdk
from sentry_sdk.integrations.fastapi import FastApiIntegration

from muxsync.core.config import get_settings
from muxsync.core.logger import get_logger


_SENTRY_INITIALIZED = False


def _call_sentry_init(**kwargs: Any) -> None:
    sentry_sdk.init(**kwargs)


def _sentry_options(settings: Any, dsn: str) -> Dict[str, Any]:
    return {
        "dsn": dsn,
        "environment": settings.env,
        "release": f"{settings.app_name}@{settings.app_version}",
        "traces_sample_rate": settings.sentry_traces_sample_rate,
        "send_default_pii": False,
        "integrations": [FastApiIntegration()],
    }


def init_sentry() -> bool:
    """Initialise Sentry when SENTRY_DSN is set; returns whether reporting is active."""

    global _SENTRY_INITIALIZED
    if _SENTRY_INITIALIZED:
        return True

    settings = get_settings()
    dsn = settings.sentry_dsn.strip()
    if not dsn:
        return False

    _call_sentry_init(**_sentry_options(settings, dsn))
    _SENTRY_INITIALIZED = True
    get_logger("muxsync.observability").info(
        "sentry_initialized",
        env=settings.env,
        traces_sample_rate=settings.sentry_traces_sample_rate,
    )
    return True


@contextmanager
def sentry_scope(*, request_id: Optional[str] = None, mux_event_id: Optional[str] = None) -> Iterator[None]:
    if not _SENTRY_INITIALIZED:
        yield
        return

    tags = {name: value for name, value in (("request_id", request_id), ("mux_event_id", mux_event_id)) if value}
    with sentry_sdk.push_scope() as scope:
        for name, value in tags.items():
            scope.set_tag(name, value)
        if tags:
            scope.set_context("mux_sync", tags)
        yield


def capture_exception(exc: BaseException) -> None:
    if _SENTRY_INITIALIZED:
        sentry_sdk.capture_exception(exc)


def reset_observability_for_tests() -> None:
    global _SENTRY_INITIALIZED
    _SENTRY_INITIALIZED = False
