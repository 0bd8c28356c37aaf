"""Routing of recorded Mux events to entity upserts, soft deletes and metadata."""

from __future__ import annotations

from dataclasses import dataclass
from typing import Any, Callable, Dict, Mapping, Optional

from sqlalchemy.orm import Session

from muxsync.integrations.mux.mux_client import MuxClient
from muxsync.sync.entities import (
    mark_asset_deleted,
    mark_live_stream_deleted,
    mark_upload_deleted,
    upsert_asset,
    upsert_live_stream,
    upsert_upload,
)
from muxsync.sync.events import EventRecordResult
from muxsync.sync.normalize import as_object, as_string, parse_metadata_passthrough
from muxsync.videos.metadata import DEFAULT_METADATA_USER_ID, upsert_video_metadata


REASON_DUPLICATE = "duplicate"
REASON_MISSING_DATA = "missing_data"
REASON_UNSUPPORTED_EVENT = "unsupported_event"


@dataclass(frozen=True)
class EventRoute:
    prefix: str
    object_type: str
    upsert: Callable[[Session, Mapping[str, Any]], str]
    mark_deleted: Callable[[Session, str], Optional[str]]
    retrieve: Callable[[MuxClient, str], Dict[str, Any]]


EVENT_ROUTES = (
    EventRoute(
        "video.asset.",
        "asset",
        upsert_asset,
        mark_asset_deleted,
        lambda client, object_id: client.retrieve_asset(object_id),
    ),
    EventRoute(
        "video.live_stream.",
        "live_stream",
        upsert_live_stream,
        mark_live_stream_deleted,
        lambda client, object_id: client.retrieve_live_stream(object_id),
    ),
    EventRoute(
        "video.upload.",
        "upload",
        upsert_upload,
        mark_upload_deleted,
        lambda client, object_id: client.retrieve_upload(object_id),
    ),
)


@dataclass(frozen=True)
class DispatchOutcome:
    event_record_id: str
    event_type: str
    status: str
    object_id: Optional[str] = None
    object_type: Optional[str] = None
    action: Optional[str] = None
    reason: Optional[str] = None

    @property
    def skipped(self) -> bool:
        return self.status != "processed"


def resolve_route(event_type: str) -> Optional[EventRoute]:
    matches = [route for route in EVENT_ROUTES if event_type.startswith(route.prefix)]
    if not matches:
        return None
    return max(matches, key=lambda route: len(route.prefix))


def _reconcile_asset_metadata(session: Session, mux_asset_id: str, asset_payload: Mapping[str, Any]) -> str:
    metadata = parse_metadata_passthrough(asset_payload.get("passthrough"))
    user_id = metadata.pop("user_id", None) or DEFAULT_METADATA_USER_ID
    return upsert_video_metadata(session, mux_asset_id=mux_asset_id, user_id=user_id, **metadata)


def dispatch_event(
    session: Session,
    event: Mapping[str, Any],
    *,
    event_record: EventRecordResult,
    mux_client: Optional[MuxClient] = None,
) -> DispatchOutcome:
    """Apply a recorded event to local state.

    With usable API credentials on ``mux_client`` the canonical object is fetched
    from Mux; otherwise the object embedded in ``event["data"]`` is used.
    """

    event_type = as_string(event.get("type")) or ""
    data = as_object(event.get("data"))
    object_id = as_string(data.get("id")) if data is not None else None

    def outcome(status: str, **kwargs: Any) -> DispatchOutcome:
        return DispatchOutcome(
            event_record_id=event_record.record_id,
            event_type=event_type,
            status=status,
            object_id=object_id,
            **kwargs,
        )

    if event_record.already_processed:
        return outcome("duplicate", reason=REASON_DUPLICATE)
    if object_id is None:
        return outcome("skipped", reason=REASON_MISSING_DATA)

    route = resolve_route(event_type)
    if route is None:
        return outcome("skipped", reason=REASON_UNSUPPORTED_EVENT)

    if event_type.endswith(".deleted"):
        route.mark_deleted(session, object_id)
        return outcome("processed", object_type=route.object_type, action="deleted")

    payload: Mapping[str, Any] = data or {}
    if mux_client is not None and mux_client.has_api_credentials:
        payload = route.retrieve(mux_client, object_id)

    route.upsert(session, payload)
    if route.object_type == "asset":
        _reconcile_asset_metadata(session, object_id, payload)
    return outcome("processed", object_type=route.object_type, action="upserted")
