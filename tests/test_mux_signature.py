from datetime import datetime, timezone
import hashlib
import hmac

import pytest

from muxsync.webhooks.signature import (
    MuxWebhookError,
    compute_mux_signature,
    normalize_headers,
    parse_mux_event,
    parse_mux_signature_header,
    verify_mux_signature,
)


SECRET = "mux-signing-secret"
NOW = datetime(2026, 10, 19, 12, 0, 0, tzinfo=timezone.utc)
TIMESTAMP = int(NOW.timestamp())


def _signature_header(payload: bytes, *, secret: str = SECRET, timestamp: int = TIMESTAMP) -> str:
    digest = hmac.new(secret.encode("utf-8"), f"{timestamp}.".encode("utf-8") + payload, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"


def test_parse_signature_header_collects_all_v1_values() -> None:
    data = parse_mux_signature_header("t=123, v1=aaa, v0=legacy, v1=bbb")
    assert data.timestamp == 123
    assert data.signatures == ("aaa", "bbb")


@pytest.mark.parametrize("header", ["", "v1=abc", "t=123", "t=abc,v1=def"])
def test_parse_signature_header_rejects_malformed_values(header: str) -> None:
    with pytest.raises(MuxWebhookError):
        parse_mux_signature_header(header)


def test_verify_accepts_valid_signature_for_bytes_and_text() -> None:
    payload = b'{"type":"video.asset.ready"}'
    header = _signature_header(payload)

    verify_mux_signature(payload=payload, signature_header=header, webhook_secret=SECRET, now=NOW)
    verify_mux_signature(payload=payload.decode("utf-8"), signature_header=header, webhook_secret=SECRET, now=NOW)


def test_verify_rejects_tampered_body() -> None:
    header = _signature_header(b'{"type":"video.asset.ready"}')

    with pytest.raises(MuxWebhookError, match="mismatch"):
        verify_mux_signature(
            payload=b'{"type":"video.asset.deleted"}',
            signature_header=header,
            webhook_secret=SECRET,
            now=NOW,
        )


def test_verify_rejects_wrong_secret() -> None:
    payload = b"{}"
    header = _signature_header(payload, secret="other-secret")

    with pytest.raises(MuxWebhookError):
        verify_mux_signature(payload=payload, signature_header=header, webhook_secret=SECRET, now=NOW)


def test_verify_rejects_stale_timestamp() -> None:
    payload = b"{}"
    header = _signature_header(payload, timestamp=TIMESTAMP - 301)

    with pytest.raises(MuxWebhookError, match="tolerance"):
        verify_mux_signature(payload=payload, signature_header=header, webhook_secret=SECRET, now=NOW)

    verify_mux_signature(
        payload=payload,
        signature_header=header,
        webhook_secret=SECRET,
        tolerance_seconds=600,
        now=NOW,
    )


def test_verify_requires_secret() -> None:
    with pytest.raises(MuxWebhookError, match="not configured"):
        verify_mux_signature(payload=b"{}", signature_header="t=1,v1=x", webhook_secret="", now=NOW)


def test_parse_event_requires_json_object() -> None:
    assert parse_mux_event(b'{"id":"evt-1"}') == {"id": "evt-1"}

    with pytest.raises(MuxWebhookError):
        parse_mux_event(b"not-json")
    with pytest.raises(MuxWebhookError):
        parse_mux_event(b"[1, 2]")


def test_normalize_headers_lowercases_names() -> None:
    assert normalize_headers({"Mux-Signature": "t=1,v1=x"}) == {"mux-signature": "t=1,v1=x"}


def test_compute_signature_matches_header_format() -> None:
    payload = b'{"id":"evt-1"}'
    digest = compute_mux_signature(payload=payload, webhook_secret=SECRET, timestamp=TIMESTAMP)

    assert _signature_header(payload) == f"t={TIMESTAMP},v1={digest}"
