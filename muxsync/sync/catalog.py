"""Read-side lookups over mirrored Mux objects and recorded events."""

from __future__ import annotations

from typing import List, Optional

from sqlalchemy import desc, select
from sqlalchemy.orm import Session

from muxsync.storage.models import MuxAsset, MuxEvent, MuxLiveStream, MuxUpload
from muxsync.sync.entities import ASSET, LIVE_STREAM, UPLOAD, find_by_external_id


DEFAULT_LIST_LIMIT = 50


def get_asset_by_mux_id(session: Session, mux_asset_id: str) -> Optional[MuxAsset]:
    return find_by_external_id(session, ASSET, mux_asset_id)


def get_live_stream_by_mux_id(session: Session, mux_live_stream_id: str) -> Optional[MuxLiveStream]:
    return find_by_external_id(session, LIVE_STREAM, mux_live_stream_id)


def get_upload_by_mux_id(session: Session, mux_upload_id: str) -> Optional[MuxUpload]:
    return find_by_external_id(session, UPLOAD, mux_upload_id)


def list_assets(session: Session, *, limit: int = DEFAULT_LIST_LIMIT) -> List[MuxAsset]:
    return list(session.scalars(select(MuxAsset).order_by(desc(MuxAsset.updated_at_ms)).limit(limit)).all())


def list_live_streams(session: Session, *, limit: int = DEFAULT_LIST_LIMIT) -> List[MuxLiveStream]:
    return list(
        session.scalars(select(MuxLiveStream).order_by(desc(MuxLiveStream.updated_at_ms)).limit(limit)).all()
    )


def list_uploads(session: Session, *, limit: int = DEFAULT_LIST_LIMIT) -> List[MuxUpload]:
    return list(session.scalars(select(MuxUpload).order_by(desc(MuxUpload.updated_at_ms)).limit(limit)).all())


def list_recent_events(session: Session, *, limit: int = DEFAULT_LIST_LIMIT) -> List[MuxEvent]:
    return list(session.scalars(select(MuxEvent).order_by(desc(MuxEvent.received_at_ms)).limit(limit)).all())
