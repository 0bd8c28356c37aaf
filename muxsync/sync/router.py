"""Mux catalog, sync action and backfill routes."""

from __future__ import annotations

from typing import Any, Callable, Dict

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from muxsync.api.dependencies import require_admin_key
from muxsync.api.serializers import (
    asset_to_response,
    event_to_response,
    live_stream_to_response,
    upload_to_response,
)
from muxsync.core.config import get_settings
from muxsync.integrations.mux.mux_client import MuxClient, MuxClientError, get_mux_client
from muxsync.schemas.mux import (
    AssetListResponse,
    AssetResponse,
    BackfillRequest,
    BackfillResponse,
    EventListResponse,
    LiveStreamListResponse,
    LiveStreamResponse,
    MuxCreateRequest,
    MuxObjectResponse,
    UploadListResponse,
    UploadResponse,
)
from muxsync.storage.db import get_session
from muxsync.sync import actions, catalog
from muxsync.sync.backfill import backfill_assets
from muxsync.sync.entities import PayloadValidationError


router = APIRouter(prefix="/mux", tags=["mux"])

_CREATE_ACTIONS: Dict[str, Callable[..., Dict[str, Any]]] = {
    "assets": actions.create_asset,
    "live-streams": actions.create_live_stream,
    "uploads": actions.create_upload,
}
_SYNC_ACTIONS: Dict[str, Callable[..., Dict[str, Any]]] = {
    "assets": actions.sync_asset_by_id,
    "live-streams": actions.sync_live_stream_by_id,
    "uploads": actions.sync_upload_by_id,
}


def _not_found(kind: str, mux_id: str) -> HTTPException:
    return HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Mux {kind} {mux_id} not found")


def _run_remote_action(session: Session, action: Callable[[], Dict[str, Any]]) -> Dict[str, Any]:
    try:
        return action()
    except MuxClientError as exc:
        session.rollback()
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc
    except PayloadValidationError as exc:
        session.rollback()
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc


@router.get("/assets", response_model=AssetListResponse)
def get_assets(limit: int = Query(default=50, ge=1, le=500), session: Session = Depends(get_session)):
    rows = catalog.list_assets(session, limit=limit)
    return AssetListResponse(count=len(rows), items=[asset_to_response(row) for row in rows])


@router.get("/assets/{mux_asset_id}", response_model=AssetResponse)
def get_asset(mux_asset_id: str, session: Session = Depends(get_session)) -> AssetResponse:
    row = catalog.get_asset_by_mux_id(session, mux_asset_id)
    if row is None:
        raise _not_found("asset", mux_asset_id)
    return asset_to_response(row)


@router.get("/live-streams", response_model=LiveStreamListResponse)
def get_live_streams(limit: int = Query(default=50, ge=1, le=500), session: Session = Depends(get_session)):
    rows = catalog.list_live_streams(session, limit=limit)
    return LiveStreamListResponse(count=len(rows), items=[live_stream_to_response(row) for row in rows])


@router.get("/live-streams/{mux_live_stream_id}", response_model=LiveStreamResponse)
def get_live_stream(mux_live_stream_id: str, session: Session = Depends(get_session)) -> LiveStreamResponse:
    row = catalog.get_live_stream_by_mux_id(session, mux_live_stream_id)
    if row is None:
        raise _not_found("live stream", mux_live_stream_id)
    return live_stream_to_response(row)


@router.get("/uploads", response_model=UploadListResponse)
def get_uploads(limit: int = Query(default=50, ge=1, le=500), session: Session = Depends(get_session)):
    rows = catalog.list_uploads(session, limit=limit)
    return UploadListResponse(count=len(rows), items=[upload_to_response(row) for row in rows])


@router.get("/uploads/{mux_upload_id}", response_model=UploadResponse)
def get_upload(mux_upload_id: str, session: Session = Depends(get_session)) -> UploadResponse:
    row = catalog.get_upload_by_mux_id(session, mux_upload_id)
    if row is None:
        raise _not_found("upload", mux_upload_id)
    return upload_to_response(row)


@router.get("/events", response_model=EventListResponse)
def get_events(limit: int = Query(default=50, ge=1, le=500), session: Session = Depends(get_session)):
    rows = catalog.list_recent_events(session, limit=limit)
    return EventListResponse(count=len(rows), items=[event_to_response(row) for row in rows])


@router.post("/backfill", response_model=BackfillResponse, dependencies=[Depends(require_admin_key)])
def run_backfill(
    payload: BackfillRequest,
    session: Session = Depends(get_session),
    mux_client: MuxClient = Depends(get_mux_client),
) -> BackfillResponse:
    max_assets = payload.max_assets or get_settings().backfill_default_max_assets
    try:
        result = backfill_assets(
            session,
            mux_client,
            max_assets=max_assets,
            default_user_id=payload.default_user_id,
            include_video_metadata=payload.include_video_metadata,
        )
    except MuxClientError as exc:
        session.rollback()
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc

    return BackfillResponse(
        scanned=result.scanned,
        synced_assets=result.synced_assets,
        metadata_upserts=result.metadata_upserts,
        missing_user_id=result.missing_user_id,
    )


@router.post(
    "/{kind}",
    response_model=MuxObjectResponse,
    status_code=status.HTTP_201_CREATED,
    dependencies=[Depends(require_admin_key)],
)
def create_mux_object(
    kind: str,
    payload: MuxCreateRequest,
    session: Session = Depends(get_session),
    mux_client: MuxClient = Depends(get_mux_client),
) -> MuxObjectResponse:
    action = _CREATE_ACTIONS.get(kind)
    if action is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unsupported Mux object kind: {kind}")
    data = _run_remote_action(session, lambda: action(session, mux_client, payload.params))
    return MuxObjectResponse(kind=kind, mux_id=str(data.get("id")), data=data)


@router.post(
    "/{kind}/{mux_id}/sync",
    response_model=MuxObjectResponse,
    dependencies=[Depends(require_admin_key)],
)
def sync_mux_object(
    kind: str,
    mux_id: str,
    session: Session = Depends(get_session),
    mux_client: MuxClient = Depends(get_mux_client),
) -> MuxObjectResponse:
    action = _SYNC_ACTIONS.get(kind)
    if action is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Unsupported Mux object kind: {kind}")
    data = _run_remote_action(session, lambda: action(session, mux_client, mux_id))
    return MuxObjectResponse(kind=kind, mux_id=mux_id, data=data)
