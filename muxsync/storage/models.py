"""SQLAlchemy ORM models mirroring remote Mux objects, webhook events and video metadata."""

from __future__ import annotations

from typing import Any, Optional
import uuid

from sqlalchemy import JSON, BigInteger, Boolean, CheckConstraint, Float, Index, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column

from muxsync.storage.db import Base


def _uuid() -> str:
    return str(uuid.uuid4())


# JSON null is stored as SQL NULL so "absent" stays queryable.
_Json = JSON(none_as_null=True)

# A non-JSON asset passthrough (up to 255 chars at Mux) is used verbatim as the user id.
USER_ID_MAX_LENGTH = 255


class MuxAsset(Base):
    __tablename__ = "mux_assets"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    mux_asset_id: Mapped[str] = mapped_column(String(128), nullable=False)
    status: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    playback_ids: Mapped[Optional[list[dict[str, str]]]] = mapped_column(_Json, nullable=True)
    duration_seconds: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    aspect_ratio: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    max_stored_resolution: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    max_stored_frame_rate: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    passthrough: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    upload_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    live_stream_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    tracks: Mapped[Optional[list[dict[str, Any]]]] = mapped_column(_Json, nullable=True)
    created_at_ms: Mapped[int] = mapped_column(BigInteger, nullable=False)
    updated_at_ms: Mapped[int] = mapped_column(BigInteger, nullable=False)
    deleted_at_ms: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    raw: Mapped[dict[str, Any]] = mapped_column(_Json, nullable=False, default=dict)

    __table_args__ = (
        UniqueConstraint("mux_asset_id", name="uq_mux_assets_mux_asset_id"),
        Index("ix_mux_assets_status", "status"),
        Index("ix_mux_assets_updated_at_ms", "updated_at_ms"),
    )


class MuxLiveStream(Base):
    __tablename__ = "mux_live_streams"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    mux_live_stream_id: Mapped[str] = mapped_column(String(128), nullable=False)
    status: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    playback_ids: Mapped[Optional[list[dict[str, str]]]] = mapped_column(_Json, nullable=True)
    reconnect_window_seconds: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    recent_asset_ids: Mapped[Optional[list[str]]] = mapped_column(_Json, nullable=True)
    created_at_ms: Mapped[int] = mapped_column(BigInteger, nullable=False)
    updated_at_ms: Mapped[int] = mapped_column(BigInteger, nullable=False)
    deleted_at_ms: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    raw: Mapped[dict[str, Any]] = mapped_column(_Json, nullable=False, default=dict)

    __table_args__ = (
        UniqueConstraint("mux_live_stream_id", name="uq_mux_live_streams_mux_live_stream_id"),
        Index("ix_mux_live_streams_status", "status"),
        Index("ix_mux_live_streams_updated_at_ms", "updated_at_ms"),
    )


class MuxUpload(Base):
    __tablename__ = "mux_uploads"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    mux_upload_id: Mapped[str] = mapped_column(String(128), nullable=False)
    status: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    upload_url: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    timeout_seconds: Mapped[Optional[float]] = mapped_column(Float, nullable=True)
    cors_origin: Mapped[Optional[str]] = mapped_column(String(255), nullable=True)
    asset_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    error: Mapped[Optional[dict[str, Any]]] = mapped_column(_Json, nullable=True)
    created_at_ms: Mapped[int] = mapped_column(BigInteger, nullable=False)
    updated_at_ms: Mapped[int] = mapped_column(BigInteger, nullable=False)
    deleted_at_ms: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    raw: Mapped[dict[str, Any]] = mapped_column(_Json, nullable=False, default=dict)

    __table_args__ = (
        UniqueConstraint("mux_upload_id", name="uq_mux_uploads_mux_upload_id"),
        Index("ix_mux_uploads_status", "status"),
        Index("ix_mux_uploads_updated_at_ms", "updated_at_ms"),
    )


class MuxEvent(Base):
    """Append-only log of webhook deliveries; never patched or deleted."""

    __tablename__ = "mux_events"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    mux_event_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    type: Mapped[str] = mapped_column(String(80), nullable=False)
    object_type: Mapped[Optional[str]] = mapped_column(String(32), nullable=True)
    object_id: Mapped[Optional[str]] = mapped_column(String(128), nullable=True)
    occurred_at_ms: Mapped[Optional[int]] = mapped_column(BigInteger, nullable=True)
    received_at_ms: Mapped[int] = mapped_column(BigInteger, nullable=False)
    verified: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    raw: Mapped[dict[str, Any]] = mapped_column(_Json, nullable=False, default=dict)

    __table_args__ = (
        UniqueConstraint("mux_event_id", name="uq_mux_events_mux_event_id"),
        Index("ix_mux_events_type", "type"),
        Index("ix_mux_events_object", "object_type", "object_id"),
        Index("ix_mux_events_received_at_ms", "received_at_ms"),
    )


class VideoMetadata(Base):
    __tablename__ = "video_metadata"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=_uuid)
    mux_asset_id: Mapped[str] = mapped_column(String(128), nullable=False)
    user_id: Mapped[str] = mapped_column(String(USER_ID_MAX_LENGTH), nullable=False)
    title: Mapped[Optional[str]] = mapped_column(String(500), nullable=True)
    description: Mapped[Optional[str]] = mapped_column(Text, nullable=True)
    tags: Mapped[Optional[list[str]]] = mapped_column(_Json, nullable=True)
    visibility: Mapped[Optional[str]] = mapped_column(String(16), nullable=True)
    custom: Mapped[Optional[dict[str, Any]]] = mapped_column(_Json, nullable=True)
    created_at_ms: Mapped[int] = mapped_column(BigInteger, nullable=False)
    updated_at_ms: Mapped[int] = mapped_column(BigInteger, nullable=False)

    __table_args__ = (
        UniqueConstraint("mux_asset_id", "user_id", name="uq_video_metadata_asset_user"),
        CheckConstraint(
            "visibility IS NULL OR visibility IN ('private', 'unlisted', 'public')",
            name="ck_video_metadata_visibility",
        ),
        Index("ix_video_metadata_mux_asset_id", "mux_asset_id"),
        Index("ix_video_metadata_user_id", "user_id"),
        Index("ix_video_metadata_updated_at_ms", "updated_at_ms"),
    )
