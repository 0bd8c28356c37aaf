"""Exactly-once recording of inbound Mux webhook events."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Mapping

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from muxsync.core import clock
from muxsync.storage.models import MuxEvent
from muxsync.sync.normalize import normalize_event


@dataclass(frozen=True)
class EventRecordResult:
    record_id: str
    already_processed: bool


def _find_event(session: Session, mux_event_id: str):
    return session.scalar(select(MuxEvent).where(MuxEvent.mux_event_id == mux_event_id))


def record_webhook_event(session: Session, event: Mapping[str, Any], *, verified: bool) -> EventRecordResult:
    """Insert ``event`` unless its Mux event id was already recorded.

    Events without an id carry no dedup key and are always inserted. A concurrent
    delivery that wins the unique constraint between our lookup and our commit is
    reported as already processed rather than failing the request.
    """

    fields = normalize_event(event)
    mux_event_id = fields.get("mux_event_id")

    if mux_event_id is not None:
        existing = _find_event(session, mux_event_id)
        if existing is not None:
            return EventRecordResult(record_id=existing.id, already_processed=True)

    record = MuxEvent(
        received_at_ms=clock.now_ms(),
        verified=verified,
        raw=dict(event),
        **fields,
    )
    session.add(record)
    try:
        session.commit()
    except IntegrityError:
        session.rollback()
        winner = _find_event(session, mux_event_id) if mux_event_id is not None else None
        if winner is None:
            raise
        return EventRecordResult(record_id=winner.id, already_processed=True)

    return EventRecordResult(record_id=record.id, already_processed=False)
