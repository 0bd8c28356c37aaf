"""Mux webhook signature verification and body parsing.

Mux signs each delivery with a ``Mux-Signature: t=<unix seconds>,v1=<hex digest>``
header, where the digest is HMAC-SHA256 over ``"<t>." + raw body`` keyed by the
webhook signing secret.
"""

from __future__ import annotations

import hashlib
import hmac
import json
from dataclasses import dataclass
from datetime import datetime, timezone
from typing import Any, Dict, Mapping, Optional, Tuple


SIGNATURE_HEADER = "mux-signature"
SIGNATURE_SCHEME = "v1"


class MuxWebhookError(ValueError):
    """The delivery cannot be trusted or decoded; nothing is stored for it."""


@dataclass(frozen=True)
class MuxSignatureData:
    timestamp: int
    signatures: Tuple[str, ...]


def normalize_headers(headers: Mapping[str, str]) -> Dict[str, str]:
    return {key.lower(): value for key, value in headers.items()}


def _as_bytes(payload: bytes | str) -> bytes:
    return payload.encode("utf-8") if isinstance(payload, str) else payload


def compute_mux_signature(*, payload: bytes | str, webhook_secret: str, timestamp: int) -> str:
    message = str(timestamp).encode("utf-8") + b"." + _as_bytes(payload)
    return hmac.new(webhook_secret.encode("utf-8"), message, hashlib.sha256).hexdigest()


def parse_mux_signature_header(signature_header: str) -> MuxSignatureData:
    pairs = [part.strip().split("=", 1) for part in signature_header.split(",") if "=" in part]
    timestamps = [value for key, value in pairs if key == "t"]
    signatures = tuple(value for key, value in pairs if key == SIGNATURE_SCHEME and value)

    if not timestamps or not signatures:
        raise MuxWebhookError("Invalid Mux signature header")
    try:
        timestamp = int(timestamps[-1])
    except ValueError as exc:
        raise MuxWebhookError("Invalid Mux signature timestamp") from exc

    return MuxSignatureData(timestamp=timestamp, signatures=signatures)


def verify_mux_signature(
    *,
    payload: bytes | str,
    signature_header: str,
    webhook_secret: str,
    tolerance_seconds: int = 300,
    now: Optional[datetime] = None,
) -> None:
    """Raise ``MuxWebhookError`` unless one ``v1`` digest matches a fresh timestamp."""

    if not webhook_secret:
        raise MuxWebhookError("Mux webhook secret is not configured")

    data = parse_mux_signature_header(signature_header)
    current_seconds = int((now or datetime.now(timezone.utc)).timestamp())
    if abs(current_seconds - data.timestamp) > tolerance_seconds:
        raise MuxWebhookError("Mux signature timestamp outside tolerance window")

    expected = compute_mux_signature(payload=payload, webhook_secret=webhook_secret, timestamp=data.timestamp)
    if not any(hmac.compare_digest(expected, candidate) for candidate in data.signatures):
        raise MuxWebhookError("Mux signature mismatch")


def parse_mux_event(payload: bytes | str) -> Dict[str, Any]:
    try:
        event = json.loads(_as_bytes(payload))
    except (UnicodeDecodeError, ValueError) as exc:
        raise MuxWebhookError("Invalid Mux JSON payload") from exc

    if not isinstance(event, dict):
        raise MuxWebhookError("Mux payload must be a JSON object")
    return event
