"""Pydantic schemas for mirrored Mux objects, sync actions and backfill."""

from __future__ import annotations

from typing import Any, Dict, List, Optional

from pydantic import BaseModel, Field

from muxsync.storage.models import USER_ID_MAX_LENGTH


class PlaybackIdItem(BaseModel):
    id: str
    policy: Optional[str] = None


class TrackItem(BaseModel):
    id: Optional[str] = None
    type: Optional[str] = None
    text_type: Optional[str] = None
    language_code: Optional[str] = None
    status: Optional[str] = None
    name: Optional[str] = None


class AssetResponse(BaseModel):
    id: str
    mux_asset_id: str
    status: Optional[str]
    playback_ids: Optional[List[PlaybackIdItem]]
    duration_seconds: Optional[float]
    aspect_ratio: Optional[str]
    max_stored_resolution: Optional[str]
    max_stored_frame_rate: Optional[float]
    passthrough: Optional[str]
    upload_id: Optional[str]
    live_stream_id: Optional[str]
    tracks: Optional[List[TrackItem]]
    created_at_ms: int
    updated_at_ms: int
    deleted_at_ms: Optional[int]


class LiveStreamResponse(BaseModel):
    id: str
    mux_live_stream_id: str
    status: Optional[str]
    playback_ids: Optional[List[PlaybackIdItem]]
    reconnect_window_seconds: Optional[float]
    recent_asset_ids: Optional[List[str]]
    created_at_ms: int
    updated_at_ms: int
    deleted_at_ms: Optional[int]


class UploadResponse(BaseModel):
    id: str
    mux_upload_id: str
    status: Optional[str]
    upload_url: Optional[str]
    timeout_seconds: Optional[float]
    cors_origin: Optional[str]
    asset_id: Optional[str]
    error: Optional[Dict[str, Any]]
    created_at_ms: int
    updated_at_ms: int
    deleted_at_ms: Optional[int]


class EventResponse(BaseModel):
    id: str
    mux_event_id: Optional[str]
    type: str
    object_type: Optional[str]
    object_id: Optional[str]
    occurred_at_ms: Optional[int]
    received_at_ms: int
    verified: bool


class AssetListResponse(BaseModel):
    count: int
    items: List[AssetResponse]


class LiveStreamListResponse(BaseModel):
    count: int
    items: List[LiveStreamResponse]


class UploadListResponse(BaseModel):
    count: int
    items: List[UploadResponse]


class EventListResponse(BaseModel):
    count: int
    items: List[EventResponse]


class MuxCreateRequest(BaseModel):
    params: Dict[str, Any] = Field(default_factory=dict)


class MuxObjectResponse(BaseModel):
    kind: str
    mux_id: str
    data: Dict[str, Any]


class BackfillRequest(BaseModel):
    max_assets: Optional[int] = Field(default=None, ge=1)
    default_user_id: Optional[str] = Field(default=None, max_length=USER_ID_MAX_LENGTH)
    include_video_metadata: bool = True


class BackfillResponse(BaseModel):
    scanned: int
    synced_assets: int
    metadata_upserts: int
    missing_user_id: int
