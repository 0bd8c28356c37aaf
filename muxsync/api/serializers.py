"""ORM row -> response schema mapping shared by the API routers."""

from __future__ import annotations

from muxsync.schemas.mux import AssetResponse, EventResponse, LiveStreamResponse, UploadResponse
from muxsync.schemas.videos import VideoMetadataResponse
from muxsync.storage.models import MuxAsset, MuxEvent, MuxLiveStream, MuxUpload, VideoMetadata


def asset_to_response(row: MuxAsset) -> AssetResponse:
    return AssetResponse(
        id=row.id,
        mux_asset_id=row.mux_asset_id,
        status=row.status,
        playback_ids=row.playback_ids,
        duration_seconds=row.duration_seconds,
        aspect_ratio=row.aspect_ratio,
        max_stored_resolution=row.max_stored_resolution,
        max_stored_frame_rate=row.max_stored_frame_rate,
        passthrough=row.passthrough,
        upload_id=row.upload_id,
        live_stream_id=row.live_stream_id,
        tracks=row.tracks,
        created_at_ms=row.created_at_ms,
        updated_at_ms=row.updated_at_ms,
        deleted_at_ms=row.deleted_at_ms,
    )


def live_stream_to_response(row: MuxLiveStream) -> LiveStreamResponse:
    return LiveStreamResponse(
        id=row.id,
        mux_live_stream_id=row.mux_live_stream_id,
        status=row.status,
        playback_ids=row.playback_ids,
        reconnect_window_seconds=row.reconnect_window_seconds,
        recent_asset_ids=row.recent_asset_ids,
        created_at_ms=row.created_at_ms,
        updated_at_ms=row.updated_at_ms,
        deleted_at_ms=row.deleted_at_ms,
    )


def upload_to_response(row: MuxUpload) -> UploadResponse:
    return UploadResponse(
        id=row.id,
        mux_upload_id=row.mux_upload_id,
        status=row.status,
        upload_url=row.upload_url,
        timeout_seconds=row.timeout_seconds,
        cors_origin=row.cors_origin,
        asset_id=row.asset_id,
        error=row.error,
        created_at_ms=row.created_at_ms,
        updated_at_ms=row.updated_at_ms,
        deleted_at_ms=row.deleted_at_ms,
    )


def event_to_response(row: MuxEvent) -> EventResponse:
    return EventResponse(
        id=row.id,
        mux_event_id=row.mux_event_id,
        type=row.type,
        object_type=row.object_type,
        object_id=row.object_id,
        occurred_at_ms=row.occurred_at_ms,
        received_at_ms=row.received_at_ms,
        verified=row.verified,
    )


def metadata_to_response(row: VideoMetadata) -> VideoMetadataResponse:
    return VideoMetadataResponse(
        id=row.id,
        mux_asset_id=row.mux_asset_id,
        user_id=row.user_id,
        title=row.title,
        description=row.description,
        tags=row.tags,
        visibility=row.visibility,
        custom=row.custom,
        created_at_ms=row.created_at_ms,
        updated_at_ms=row.updated_at_ms,
    )
