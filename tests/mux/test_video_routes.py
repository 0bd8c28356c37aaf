from __future__ import annotations

from muxsync.api.dependencies import ADMIN_KEY_HEADER
from tests.mux.conftest import (
    ADMIN_KEY,
    FakeMuxClient,
    create_mux_test_context,
    teardown_mux_test_context,
)


ADMIN_HEADERS = {ADMIN_KEY_HEADER: ADMIN_KEY}


def test_put_metadata_then_read_back(monkeypatch) -> None:
    fake_mux = FakeMuxClient(assets=[{"id": "asset-1", "status": "ready"}])
    context = create_mux_test_context(monkeypatch, admin_key=ADMIN_KEY, fake_mux=fake_mux)
    try:
        context.client.post("/mux/assets/asset-1/sync", headers=ADMIN_HEADERS)

        response = context.client.put(
            "/videos/asset-1/metadata",
            json={"user_id": "u1", "title": "Launch", "tags": ["a"], "visibility": "unlisted"},
            headers=ADMIN_HEADERS,
        )
        assert response.status_code == 200
        assert response.json()["user_id"] == "u1"
        assert response.json()["metadata_id"]

        video = context.client.get("/videos/asset-1").json()
        assert video["asset"]["mux_asset_id"] == "asset-1"
        assert video["metadata"][0]["title"] == "Launch"
        assert video["metadata"][0]["visibility"] == "unlisted"

        listing = context.client.get("/users/u1/videos").json()
        assert listing["user_id"] == "u1"
        assert listing["count"] == 1
        assert listing["items"][0]["asset"]["status"] == "ready"
    finally:
        teardown_mux_test_context()


def test_put_metadata_absorbs_placeholder(monkeypatch) -> None:
    context = create_mux_test_context(monkeypatch, admin_key=ADMIN_KEY, fake_mux=FakeMuxClient())
    try:
        context.client.put(
            "/videos/asset-2/metadata",
            json={"user_id": "default", "title": "Placeholder", "description": "Kept"},
            headers=ADMIN_HEADERS,
        )
        context.client.put(
            "/videos/asset-2/metadata",
            json={"user_id": "u1", "title": "Mine"},
            headers=ADMIN_HEADERS,
        )

        assert context.client.get("/users/default/videos").json()["count"] == 0
        items = context.client.get("/users/u1/videos").json()["items"]
        assert len(items) == 1
        assert items[0]["metadata"]["title"] == "Mine"
        assert items[0]["metadata"]["description"] == "Kept"
        assert items[0]["asset"] is None
    finally:
        teardown_mux_test_context()


def test_metadata_validation_and_missing_video(monkeypatch) -> None:
    context = create_mux_test_context(monkeypatch, admin_key=ADMIN_KEY, fake_mux=FakeMuxClient())
    try:
        bad_visibility = context.client.put(
            "/videos/asset-3/metadata",
            json={"user_id": "u1", "visibility": "secret"},
            headers=ADMIN_HEADERS,
        )
        no_user = context.client.put("/videos/asset-3/metadata", json={"title": "T"}, headers=ADMIN_HEADERS)
        unauthorized = context.client.put("/videos/asset-3/metadata", json={"user_id": "u1"})

        assert bad_visibility.status_code == 422
        assert no_user.status_code == 422
        assert unauthorized.status_code == 403
        assert context.client.get("/videos/asset-3").status_code == 404
    finally:
        teardown_mux_test_context()
