"""Pydantic schemas for video metadata endpoints."""

from __future__ import annotations

from typing import Any, Dict, List, Literal, Optional

from pydantic import BaseModel, Field

from muxsync.schemas.mux import AssetResponse
from muxsync.storage.models import USER_ID_MAX_LENGTH


Visibility = Literal["private", "unlisted", "public"]


class VideoMetadataUpsertRequest(BaseModel):
    user_id: str = Field(min_length=1, max_length=USER_ID_MAX_LENGTH)
    title: Optional[str] = Field(default=None, max_length=500)
    description: Optional[str] = None
    tags: Optional[List[str]] = None
    visibility: Optional[Visibility] = None
    custom: Optional[Dict[str, Any]] = None


class VideoMetadataUpsertResponse(BaseModel):
    metadata_id: str
    mux_asset_id: str
    user_id: str


class VideoMetadataResponse(BaseModel):
    id: str
    mux_asset_id: str
    user_id: str
    title: Optional[str]
    description: Optional[str]
    tags: Optional[List[str]]
    visibility: Optional[Visibility]
    custom: Optional[Dict[str, Any]]
    created_at_ms: int
    updated_at_ms: int


class VideoResponse(BaseModel):
    asset: AssetResponse
    metadata: List[VideoMetadataResponse]


class UserVideoItem(BaseModel):
    metadata: VideoMetadataResponse
    asset: Optional[AssetResponse]


class UserVideoListResponse(BaseModel):
    user_id: str
    count: int
    items: List[UserVideoItem]
