"""Video metadata routes."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Query, status
from sqlalchemy.orm import Session

from muxsync.api.dependencies import require_admin_key
from muxsync.api.serializers import asset_to_response, metadata_to_response
from muxsync.schemas.videos import (
    UserVideoItem,
    UserVideoListResponse,
    VideoMetadataUpsertRequest,
    VideoMetadataUpsertResponse,
    VideoResponse,
)
from muxsync.storage.db import get_session
from muxsync.videos.metadata import get_video_by_mux_asset_id, list_videos_for_user, upsert_video_metadata


router = APIRouter(tags=["videos"])


@router.put(
    "/videos/{mux_asset_id}/metadata",
    response_model=VideoMetadataUpsertResponse,
    dependencies=[Depends(require_admin_key)],
)
def put_video_metadata(
    mux_asset_id: str,
    payload: VideoMetadataUpsertRequest,
    session: Session = Depends(get_session),
) -> VideoMetadataUpsertResponse:
    metadata_id = upsert_video_metadata(
        session,
        mux_asset_id=mux_asset_id,
        user_id=payload.user_id,
        title=payload.title,
        description=payload.description,
        tags=payload.tags,
        visibility=payload.visibility,
        custom=payload.custom,
    )
    return VideoMetadataUpsertResponse(
        metadata_id=metadata_id,
        mux_asset_id=mux_asset_id,
        user_id=payload.user_id,
    )


@router.get("/videos/{mux_asset_id}", response_model=VideoResponse)
def get_video(
    mux_asset_id: str,
    user_id: str | None = None,
    session: Session = Depends(get_session),
) -> VideoResponse:
    view = get_video_by_mux_asset_id(session, mux_asset_id=mux_asset_id, user_id=user_id)
    if view is None:
        raise HTTPException(status_code=status.HTTP_404_NOT_FOUND, detail=f"Mux asset {mux_asset_id} not found")
    return VideoResponse(
        asset=asset_to_response(view.asset),
        metadata=[metadata_to_response(row) for row in view.metadata],
    )


@router.get("/users/{user_id}/videos", response_model=UserVideoListResponse)
def get_user_videos(
    user_id: str,
    limit: int = Query(default=25, ge=1, le=200),
    session: Session = Depends(get_session),
) -> UserVideoListResponse:
    rows = list_videos_for_user(session, user_id=user_id, limit=limit)
    items = [
        UserVideoItem(
            metadata=metadata_to_response(row.metadata),
            asset=asset_to_response(row.asset) if row.asset is not None else None,
        )
        for row in rows
    ]
    return UserVideoListResponse(user_id=user_id, count=len(items), items=items)
