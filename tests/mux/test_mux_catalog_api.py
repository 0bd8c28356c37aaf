from __future__ import annotations

from muxsync.api.dependencies import ADMIN_KEY_HEADER
from tests.mux.conftest import (
    ADMIN_KEY,
    FakeMuxClient,
    create_mux_test_context,
    teardown_mux_test_context,
)


ADMIN_HEADERS = {ADMIN_KEY_HEADER: ADMIN_KEY}


def test_create_asset_mirrors_remote_object(monkeypatch) -> None:
    context = create_mux_test_context(monkeypatch, admin_key=ADMIN_KEY, fake_mux=FakeMuxClient())
    try:
        response = context.client.post(
            "/mux/assets",
            json={"params": {"input": "https://example.com/video.mp4", "passthrough": "u1"}},
            headers=ADMIN_HEADERS,
        )

        assert response.status_code == 201
        body = response.json()
        assert body["kind"] == "assets"
        assert body["mux_id"] == "asset-1"
        assert body["data"]["input"] == "https://example.com/video.mp4"

        stored = context.client.get("/mux/assets/asset-1").json()
        assert stored["status"] == "preparing"
        assert stored["passthrough"] == "u1"
    finally:
        teardown_mux_test_context()


def test_create_live_stream_and_upload(monkeypatch) -> None:
    context = create_mux_test_context(monkeypatch, admin_key=ADMIN_KEY, fake_mux=FakeMuxClient())
    try:
        live = context.client.post("/mux/live-streams", json={}, headers=ADMIN_HEADERS)
        upload = context.client.post(
            "/mux/uploads",
            json={"params": {"cors_origin": "*"}},
            headers=ADMIN_HEADERS,
        )

        assert live.status_code == 201
        assert upload.status_code == 201
        assert context.client.get("/mux/live-streams").json()["count"] == 1
        uploads = context.client.get("/mux/uploads").json()
        assert uploads["count"] == 1
        assert uploads["items"][0]["cors_origin"] == "*"
    finally:
        teardown_mux_test_context()


def test_sync_by_id_refreshes_local_row(monkeypatch) -> None:
    fake_mux = FakeMuxClient(live_streams=[{"id": "live-7", "status": "active", "recent_asset_ids": ["a1"]}])
    context = create_mux_test_context(monkeypatch, admin_key=ADMIN_KEY, fake_mux=fake_mux)
    try:
        response = context.client.post("/mux/live-streams/live-7/sync", headers=ADMIN_HEADERS)

        assert response.status_code == 200
        assert response.json()["mux_id"] == "live-7"
        stored = context.client.get("/mux/live-streams/live-7").json()
        assert stored["status"] == "active"
        assert stored["recent_asset_ids"] == ["a1"]
    finally:
        teardown_mux_test_context()


def test_action_errors_are_mapped(monkeypatch) -> None:
    fake_mux = FakeMuxClient()
    fake_mux.create_upload = lambda params=None: {"status": "waiting"}  # type: ignore[method-assign]
    context = create_mux_test_context(monkeypatch, admin_key=ADMIN_KEY, fake_mux=fake_mux)
    try:
        remote_missing = context.client.post("/mux/assets/asset-404/sync", headers=ADMIN_HEADERS)
        no_id = context.client.post("/mux/uploads", json={}, headers=ADMIN_HEADERS)
        unknown_kind = context.client.post("/mux/widgets", json={}, headers=ADMIN_HEADERS)

        assert remote_missing.status_code == 502
        assert no_id.status_code == 422
        assert unknown_kind.status_code == 404
    finally:
        teardown_mux_test_context()


def test_actions_require_admin_key(monkeypatch) -> None:
    context = create_mux_test_context(monkeypatch, admin_key=ADMIN_KEY, fake_mux=FakeMuxClient())
    try:
        missing = context.client.post("/mux/assets", json={})
        wrong = context.client.post("/mux/assets", json={}, headers={ADMIN_KEY_HEADER: "nope"})
        backfill = context.client.post("/mux/backfill", json={})

        assert missing.status_code == 403
        assert wrong.status_code == 403
        assert backfill.status_code == 403
        assert missing.json()["detail"] == "invalid_admin_key"
        assert context.fake_mux.created == []
    finally:
        teardown_mux_test_context()


def test_backfill_route(monkeypatch) -> None:
    fake_mux = FakeMuxClient(assets=[{"id": f"asset-{index}", "passthrough": "u1"} for index in range(4)])
    context = create_mux_test_context(monkeypatch, admin_key=ADMIN_KEY, fake_mux=fake_mux)
    try:
        response = context.client.post("/mux/backfill", json={"max_assets": 3}, headers=ADMIN_HEADERS)

        assert response.status_code == 200
        assert response.json() == {
            "scanned": 3,
            "synced_assets": 3,
            "metadata_upserts": 3,
            "missing_user_id": 0,
        }
        videos = context.client.get("/users/u1/videos").json()
        assert videos["count"] == 3
    finally:
        teardown_mux_test_context()


def test_catalog_reads(monkeypatch) -> None:
    context = create_mux_test_context(monkeypatch, fake_mux=FakeMuxClient())
    try:
        assert context.client.get("/mux/assets").json() == {"count": 0, "items": []}
        assert context.client.get("/mux/assets/missing").status_code == 404
        assert context.client.get("/mux/live-streams/missing").status_code == 404
        assert context.client.get("/mux/uploads/missing").status_code == 404
        assert context.client.get("/mux/assets", params={"limit": 0}).status_code == 422

        context.client.post("/mux/assets", json={"params": {}})
        context.client.post("/mux/assets", json={"params": {}})
        listed = context.client.get("/mux/assets", params={"limit": 1}).json()
        assert listed["count"] == 1
    finally:
        teardown_mux_test_context()
