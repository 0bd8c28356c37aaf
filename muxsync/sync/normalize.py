"""Coercion of loosely-typed Mux JSON payloads into trusted field sets.

Every helper returns ``None`` for values it cannot trust instead of raising, and the
``normalize_*`` builders drop ``None`` entries so callers can apply the result as a
sparse patch: keys that are missing must leave stored values untouched.
"""

from __future__ import annotations

from datetime import datetime, timezone
from email.utils import parsedate_to_datetime
import json
import math
from typing import Any, Dict, List, Mapping, Optional


VISIBILITY_VALUES = ("private", "unlisted", "public")

# Largest magnitude a JavaScript Date can hold, in epoch milliseconds.
MAX_TIMESTAMP_MS = 8_640_000_000_000_000

INT64_MIN = -(2**63)
INT64_MAX = 2**63 - 1

OBJECT_TYPE_PREFIXES = (
    ("video.asset.", "asset"),
    ("video.live_stream.", "live_stream"),
    ("video.upload.", "upload"),
)


def omit_absent(doc: Mapping[str, Any]) -> Dict[str, Any]:
    return {key: value for key, value in doc.items() if value is not None}


def as_string(value: Any) -> Optional[str]:
    if isinstance(value, str) and value:
        return value
    return None


def as_number(value: Any) -> Optional[float]:
    # bool is an int subclass; JSON true/false are not numbers here.
    if isinstance(value, bool) or not isinstance(value, (int, float)):
        return None
    if isinstance(value, int) and not INT64_MIN <= value <= INT64_MAX:
        # Wider than any integer column; carry it as a float if it fits one.
        try:
            value = float(value)
        except OverflowError:
            return None
    if not math.isfinite(value):
        return None
    return value


def _datetime_to_ms(parsed: datetime) -> int:
    if parsed.tzinfo is None:
        parsed = parsed.replace(tzinfo=timezone.utc)
    return int(parsed.timestamp() * 1000)


def _within_date_range(ms: Optional[float]) -> Optional[float]:
    if ms is None or abs(ms) > MAX_TIMESTAMP_MS:
        return None
    return ms


def _parse_timestamp_text(text: str) -> Optional[float]:
    if text.isascii() and text.isdigit():
        # Mux serialises created_at as a string of epoch seconds.
        try:
            return int(text) * 1000
        except ValueError:
            return None
    try:
        return _datetime_to_ms(datetime.fromisoformat(text.replace("Z", "+00:00")))
    except (ValueError, OverflowError):
        pass
    try:
        return _datetime_to_ms(parsedate_to_datetime(text))
    except (TypeError, ValueError, IndexError, OverflowError):
        return None


def as_timestamp(value: Any) -> Optional[float]:
    """Epoch milliseconds from a finite number or a parseable date string.

    Values outside the range a JavaScript ``Date`` can represent are treated as absent.
    """

    number = as_number(value)
    if number is not None:
        return _within_date_range(number)
    if not isinstance(value, str):
        return None

    text = value.strip()
    if not text:
        return None
    return _within_date_range(_parse_timestamp_text(text))


def as_object(value: Any) -> Optional[Dict[str, Any]]:
    if isinstance(value, dict):
        return value
    return None


def as_string_list(value: Any) -> Optional[List[str]]:
    if not isinstance(value, list):
        return None
    items = [item for item in value if isinstance(item, str)]
    return items or None


def as_visibility(value: Any) -> Optional[str]:
    if isinstance(value, str) and value in VISIBILITY_VALUES:
        return value
    return None


def as_playback_ids(value: Any) -> Optional[List[Dict[str, str]]]:
    if not isinstance(value, list):
        return None

    playback_ids: List[Dict[str, str]] = []
    for entry in value:
        if not isinstance(entry, dict):
            continue
        playback_id = as_string(entry.get("id"))
        if playback_id is None:
            continue
        item = {"id": playback_id}
        policy = as_string(entry.get("policy"))
        if policy is not None:
            item["policy"] = policy
        playback_ids.append(item)
    return playback_ids or None


def as_tracks(value: Any) -> Optional[List[Dict[str, str]]]:
    if not isinstance(value, list):
        return None

    tracks: List[Dict[str, str]] = []
    for entry in value:
        track = entry if isinstance(entry, dict) else {}
        # Tracks without an id are kept; an all-empty element becomes {}.
        tracks.append(
            omit_absent(
                {
                    "id": as_string(track.get("id")),
                    "type": as_string(track.get("type")),
                    "text_type": as_string(track.get("text_type")),
                    "language_code": as_string(track.get("language_code")),
                    "status": as_string(track.get("status")),
                    "name": as_string(track.get("name")),
                }
            )
        )
    return tracks or None


def normalize_asset(payload: Mapping[str, Any]) -> Dict[str, Any]:
    return omit_absent(
        {
            "status": as_string(payload.get("status")),
            "playback_ids": as_playback_ids(payload.get("playback_ids")),
            "duration_seconds": as_number(payload.get("duration")),
            "aspect_ratio": as_string(payload.get("aspect_ratio")),
            "max_stored_resolution": as_string(payload.get("max_stored_resolution")),
            "max_stored_frame_rate": as_number(payload.get("max_stored_frame_rate")),
            "passthrough": as_string(payload.get("passthrough")),
            "upload_id": as_string(payload.get("upload_id")),
            "live_stream_id": as_string(payload.get("live_stream_id")),
            "tracks": as_tracks(payload.get("tracks")),
        }
    )


def normalize_live_stream(payload: Mapping[str, Any]) -> Dict[str, Any]:
    return omit_absent(
        {
            "status": as_string(payload.get("status")),
            "playback_ids": as_playback_ids(payload.get("playback_ids")),
            "reconnect_window_seconds": as_number(payload.get("reconnect_window")),
            "recent_asset_ids": as_string_list(payload.get("recent_asset_ids")),
        }
    )


def normalize_upload(payload: Mapping[str, Any]) -> Dict[str, Any]:
    return omit_absent(
        {
            "status": as_string(payload.get("status")),
            "upload_url": as_string(payload.get("url")),
            "timeout_seconds": as_number(payload.get("timeout")),
            "cors_origin": as_string(payload.get("cors_origin")),
            "asset_id": as_string(payload.get("asset_id")),
            "error": as_object(payload.get("error")),
        }
    )


def infer_object_type(event_type: str) -> Optional[str]:
    for prefix, object_type in OBJECT_TYPE_PREFIXES:
        if event_type.startswith(prefix):
            return object_type
    return None


def normalize_event(event: Mapping[str, Any]) -> Dict[str, Any]:
    """Event row fields; ``type`` always present, defaulting to ``"unknown"``."""

    event_type = as_string(event.get("type")) or "unknown"
    data = as_object(event.get("data")) or {}
    occurred_at = as_timestamp(event.get("created_at"))
    return omit_absent(
        {
            "mux_event_id": as_string(event.get("id")),
            "type": event_type,
            "object_type": infer_object_type(event_type),
            "object_id": as_string(data.get("id")),
            "occurred_at_ms": int(occurred_at) if occurred_at is not None else None,
        }
    )


def parse_metadata_passthrough(passthrough: Any) -> Dict[str, Any]:
    """Read user identity and display metadata out of an asset passthrough string.

    A JSON object contributes ``user_id`` (from ``userId`` or ``user_id``), ``title``,
    ``description``, ``tags``, ``visibility`` and ``custom``. Any other non-empty
    passthrough is taken verbatim as the user id.
    """

    raw = as_string(passthrough)
    if raw is None:
        return {}

    try:
        parsed = json.loads(raw)
    except ValueError:
        return {"user_id": raw}

    parsed_obj = as_object(parsed)
    if parsed_obj is None:
        return {"user_id": raw}

    return omit_absent(
        {
            "user_id": as_string(parsed_obj.get("userId")) or as_string(parsed_obj.get("user_id")),
            "title": as_string(parsed_obj.get("title")),
            "description": as_string(parsed_obj.get("description")),
            "tags": as_string_list(parsed_obj.get("tags")),
            "visibility": as_visibility(parsed_obj.get("visibility")),
            "custom": as_object(parsed_obj.get("custom")),
        }
    )
