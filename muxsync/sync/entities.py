"""Upsert and soft-delete of mirrored Mux assets, live streams and uploads."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional, Type

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from muxsync.core import clock
from muxsync.core.metrics import record_entity_upsert
from muxsync.storage.models import MuxAsset, MuxLiveStream, MuxUpload
from muxsync.sync.normalize import as_string, normalize_asset, normalize_live_stream, normalize_upload


DELETED_STATUS = "deleted"


class PayloadValidationError(ValueError):
    """Raised when a remote payload cannot be used at all (e.g. it has no id)."""


@dataclass(frozen=True)
class EntityKind:
    name: str
    label: str
    model: Type[Any]
    external_id_attr: str
    normalizer: Callable[[Mapping[str, Any]], Dict[str, Any]]

    def external_id_column(self):
        return getattr(self.model, self.external_id_attr)


ASSET = EntityKind("asset", "asset", MuxAsset, "mux_asset_id", normalize_asset)
LIVE_STREAM = EntityKind("live_stream", "live stream", MuxLiveStream, "mux_live_stream_id", normalize_live_stream)
UPLOAD = EntityKind("upload", "upload", MuxUpload, "mux_upload_id", normalize_upload)


def find_by_external_id(session: Session, kind: EntityKind, external_id: str):
    return session.scalar(select(kind.model).where(kind.external_id_column() == external_id))


def _apply_patch(record: Any, patch: Mapping[str, Any]) -> None:
    for field_name, value in patch.items():
        setattr(record, field_name, value)


def upsert_entity(session: Session, kind: EntityKind, payload: Mapping[str, Any]) -> str:
    """Sparse-merge ``payload`` into the row for its external id, creating it if needed.

    When a concurrent writer inserts the same external id between our lookup and our
    commit, the patch is applied to the row that won instead.
    """

    external_id = as_string(payload.get("id"))
    if external_id is None:
        raise PayloadValidationError(f"Mux {kind.label} payload is missing an id.")

    now = clock.now_ms()
    patch = kind.normalizer(payload)
    patch["updated_at_ms"] = now
    patch["raw"] = dict(payload)
    if patch.get("status") == DELETED_STATUS:
        patch["deleted_at_ms"] = now

    record = find_by_external_id(session, kind, external_id)
    action = "patched"
    if record is None:
        record = kind.model(**{kind.external_id_attr: external_id}, created_at_ms=now, **patch)
        session.add(record)
        try:
            session.commit()
            action = "inserted"
        except IntegrityError:
            session.rollback()
            record = find_by_external_id(session, kind, external_id)
            if record is None:
                raise
            _apply_patch(record, patch)
            session.commit()
    else:
        _apply_patch(record, patch)
        session.commit()

    record_entity_upsert(kind=kind.name, action=action)
    return record.id


def mark_entity_deleted(session: Session, kind: EntityKind, external_id: str) -> Optional[str]:
    """Soft-delete by external id; unknown ids are a no-op returning ``None``."""

    record = find_by_external_id(session, kind, external_id)
    if record is None:
        return None

    now = clock.now_ms()
    record.status = DELETED_STATUS
    record.deleted_at_ms = now
    record.updated_at_ms = now
    session.commit()
    record_entity_upsert(kind=kind.name, action="deleted")
    return record.id


def upsert_asset(session: Session, payload: Mapping[str, Any]) -> str:
    return upsert_entity(session, ASSET, payload)


def upsert_live_stream(session: Session, payload: Mapping[str, Any]) -> str:
    return upsert_entity(session, LIVE_STREAM, payload)


def upsert_upload(session: Session, payload: Mapping[str, Any]) -> str:
    return upsert_entity(session, UPLOAD, payload)


def mark_asset_deleted(session: Session, mux_asset_id: str) -> Optional[str]:
    return mark_entity_deleted(session, ASSET, mux_asset_id)


def mark_live_stream_deleted(session: Session, mux_live_stream_id: str) -> Optional[str]:
    return mark_entity_deleted(session, LIVE_STREAM, mux_live_stream_id)


def mark_upload_deleted(session: Session, mux_upload_id: str) -> Optional[str]:
    return mark_entity_deleted(session, UPLOAD, mux_upload_id)
