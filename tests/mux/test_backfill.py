from __future__ import annotations

import json

import pytest

from muxsync.integrations.mux.mux_client import MuxClientError
from muxsync.storage.models import MuxAsset, VideoMetadata
from muxsync.sync.backfill import backfill_assets
from muxsync.sync.catalog import get_asset_by_mux_id
from tests.mux.conftest import FakeMuxClient, build_sqlite_session_factory


def _assets(count: int) -> list[dict]:
    return [{"id": f"asset-{index}", "status": "ready"} for index in range(count)]


def test_backfill_stops_at_max_assets() -> None:
    session_factory = build_sqlite_session_factory()
    fake_mux = FakeMuxClient(assets=_assets(12))

    with session_factory() as session:
        result = backfill_assets(session, fake_mux, max_assets=5)

        assert result.scanned == 5
        assert result.synced_assets == 5
        assert result.metadata_upserts == 5
        assert result.missing_user_id == 5
        assert session.query(MuxAsset).count() == 5
        assert fake_mux.listed == 6


def test_fractional_and_tiny_limits_are_clamped() -> None:
    session_factory = build_sqlite_session_factory()

    with session_factory() as session:
        assert backfill_assets(session, FakeMuxClient(assets=_assets(4)), max_assets=2.7).scanned == 2
        assert backfill_assets(session, FakeMuxClient(assets=_assets(4)), max_assets=0).scanned == 1


def test_passthrough_user_and_default_user_resolution() -> None:
    session_factory = build_sqlite_session_factory()
    fake_mux = FakeMuxClient(
        assets=[
            {"id": "a-json", "passthrough": json.dumps({"user_id": "u1", "title": "Hello", "tags": ["x"]})},
            {"id": "a-plain", "passthrough": "u2"},
            {"id": "a-none"},
            {"status": "ready"},
        ]
    )

    with session_factory() as session:
        result = backfill_assets(session, fake_mux, default_user_id="fallback")

        assert result.scanned == 4
        assert result.synced_assets == 3
        assert result.metadata_upserts == 3
        assert result.missing_user_id == 0

        rows = {row.mux_asset_id: row for row in session.query(VideoMetadata).all()}
        assert rows["a-json"].user_id == "u1"
        assert rows["a-json"].title == "Hello"
        assert rows["a-json"].tags == ["x"]
        assert rows["a-plain"].user_id == "u2"
        assert rows["a-none"].user_id == "fallback"


def test_metadata_can_be_disabled() -> None:
    session_factory = build_sqlite_session_factory()

    with session_factory() as session:
        result = backfill_assets(
            session,
            FakeMuxClient(assets=_assets(3)),
            include_video_metadata=False,
        )

        assert result.synced_assets == 3
        assert result.metadata_upserts == 0
        assert result.missing_user_id == 0
        assert session.query(VideoMetadata).count() == 0


def test_remote_failure_aborts_run_but_keeps_synced_assets() -> None:
    session_factory = build_sqlite_session_factory()
    fake_mux = FakeMuxClient(assets=_assets(5), fail_after=2)

    with session_factory() as session:
        with pytest.raises(MuxClientError):
            backfill_assets(session, fake_mux)

        assert get_asset_by_mux_id(session, "asset-0") is not None
        assert get_asset_by_mux_id(session, "asset-1") is not None
        assert get_asset_by_mux_id(session, "asset-2") is None
