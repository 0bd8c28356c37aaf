"""Explicit create/sync actions: call Mux, then mirror the result locally."""

from __future__ import annotations

from typing import Any, Dict, Optional

from sqlalchemy.orm import Session

from muxsync.integrations.mux.mux_client import MuxClient
from muxsync.sync.entities import upsert_asset, upsert_live_stream, upsert_upload


def create_asset(session: Session, mux_client: MuxClient, params: Dict[str, Any]) -> Dict[str, Any]:
    asset = mux_client.create_asset(params)
    upsert_asset(session, asset)
    return asset


def create_live_stream(
    session: Session,
    mux_client: MuxClient,
    params: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    live_stream = mux_client.create_live_stream(params)
    upsert_live_stream(session, live_stream)
    return live_stream


def create_upload(
    session: Session,
    mux_client: MuxClient,
    params: Optional[Dict[str, Any]] = None,
) -> Dict[str, Any]:
    upload = mux_client.create_upload(params)
    upsert_upload(session, upload)
    return upload


def sync_asset_by_id(session: Session, mux_client: MuxClient, mux_asset_id: str) -> Dict[str, Any]:
    asset = mux_client.retrieve_asset(mux_asset_id)
    upsert_asset(session, asset)
    return asset


def sync_live_stream_by_id(session: Session, mux_client: MuxClient, mux_live_stream_id: str) -> Dict[str, Any]:
    live_stream = mux_client.retrieve_live_stream(mux_live_stream_id)
    upsert_live_stream(session, live_stream)
    return live_stream


def sync_upload_by_id(session: Session, mux_client: MuxClient, mux_upload_id: str) -> Dict[str, Any]:
    upload = mux_client.retrieve_upload(mux_upload_id)
    upsert_upload(session, upload)
    return upload
