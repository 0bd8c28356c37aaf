"""End-to-end handling of a single Mux webhook delivery."""

from __future__ import annotations

from typing import Mapping, Optional

from sqlalchemy.orm import Session

from muxsync.core.logger import bind_event_context, get_logger
from muxsync.core.metrics import record_webhook_event
from muxsync.core.observability import capture_exception
from muxsync.integrations.mux.mux_client import MuxClient
from muxsync.sync.events import record_webhook_event as record_event
from muxsync.sync.normalize import as_string
from muxsync.webhooks.dispatcher import DispatchOutcome, dispatch_event
from muxsync.webhooks.signature import (
    SIGNATURE_HEADER,
    normalize_headers,
    parse_mux_event,
    verify_mux_signature,
)


logger = get_logger("muxsync.webhooks")


def ingest_webhook(
    session: Session,
    *,
    raw_body: bytes | str,
    headers: Mapping[str, str],
    webhook_secret: str,
    verify_signature: bool = True,
    tolerance_seconds: int = 300,
    mux_client: Optional[MuxClient] = None,
) -> DispatchOutcome:
    """Verify, record and apply one delivery.

    ``MuxWebhookError`` is raised for bad signatures or bodies before anything is
    stored. Redeliveries of an already recorded event are reported as duplicates
    and have no side effects.
    """

    if verify_signature:
        normalized_headers = normalize_headers(headers)
        verify_mux_signature(
            payload=raw_body,
            signature_header=normalized_headers.get(SIGNATURE_HEADER, ""),
            webhook_secret=webhook_secret,
            tolerance_seconds=tolerance_seconds,
        )
    event = parse_mux_event(raw_body)
    bind_event_context(as_string(event.get("id")))

    record = record_event(session, event, verified=verify_signature)
    if record.already_processed:
        logger.info("mux_webhook_duplicate", event_record_id=record.record_id)
    else:
        logger.info("mux_webhook_recorded", event_record_id=record.record_id, event_type=event.get("type"))

    try:
        outcome = dispatch_event(session, event, event_record=record, mux_client=mux_client)
    except Exception as exc:
        session.rollback()
        record_webhook_event(status="failed", reason=type(exc).__name__)
        capture_exception(exc)
        logger.error(
            "mux_webhook_processing_failed",
            event_record_id=record.record_id,
            event_type=event.get("type"),
            error=str(exc),
        )
        raise

    record_webhook_event(status=outcome.status, reason=outcome.reason or outcome.action)
    logger.info(
        "mux_webhook_dispatched",
        event_record_id=outcome.event_record_id,
        event_type=outcome.event_type,
        status=outcome.status,
        reason=outcome.reason,
        action=outcome.action,
        object_type=outcome.object_type,
        object_id=outcome.object_id,
    )
    return outcome
