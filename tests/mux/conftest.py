from __future__ import annotations

from dataclasses import dataclass
import hashlib
import hmac
import json
import time
from typing import Any, Dict, Iterator, List, Optional

from fastapi.testclient import TestClient
from sqlalchemy import create_engine
from sqlalchemy.orm import Session, sessionmaker
from sqlalchemy.pool import StaticPool

import muxsync.api.main as api_main
from muxsync.core.config import get_settings
from muxsync.integrations.mux.mux_client import MuxClientError, get_mux_client
from muxsync.storage.db import Base, get_session, load_models


WEBHOOK_SECRET = "mux-webhook-secret-test"
ADMIN_KEY = "admin-key-test"


class FakeMuxClient:
    def __init__(
        self,
        *,
        assets: Optional[List[Dict[str, Any]]] = None,
        live_streams: Optional[List[Dict[str, Any]]] = None,
        uploads: Optional[List[Dict[str, Any]]] = None,
        has_api_credentials: bool = True,
        fail_after: Optional[int] = None,
    ) -> None:
        self.assets = list(assets or [])
        self.live_streams = list(live_streams or [])
        self.uploads = list(uploads or [])
        self.has_api_credentials = has_api_credentials
        self.fail_after = fail_after
        self.listed = 0
        self.retrieved: List[str] = []
        self.created: List[Dict[str, Any]] = []

    def list_assets(self, *, page_size: Optional[int] = None) -> Iterator[Dict[str, Any]]:
        del page_size
        for asset in self.assets:
            if self.fail_after is not None and self.listed >= self.fail_after:
                raise MuxClientError("Mux list assets failed with status 500")
            self.listed += 1
            yield asset

    def _find(self, items: List[Dict[str, Any]], object_id: str) -> Dict[str, Any]:
        self.retrieved.append(object_id)
        for item in items:
            if item.get("id") == object_id:
                return dict(item)
        raise MuxClientError("Mux retrieve failed with status 404")

    def retrieve_asset(self, asset_id: str) -> Dict[str, Any]:
        return self._find(self.assets, asset_id)

    def retrieve_live_stream(self, live_stream_id: str) -> Dict[str, Any]:
        return self._find(self.live_streams, live_stream_id)

    def retrieve_upload(self, upload_id: str) -> Dict[str, Any]:
        return self._find(self.uploads, upload_id)

    def _create(self, prefix: str, params: Optional[Dict[str, Any]]) -> Dict[str, Any]:
        created = {"id": f"{prefix}-{len(self.created) + 1}", "status": "preparing", **(params or {})}
        self.created.append(created)
        return created

    def create_asset(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return self._create("asset", params)

    def create_live_stream(self, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self._create("live", params)

    def create_upload(self, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self._create("upload", params)


@dataclass
class MuxTestContext:
    client: TestClient
    session_factory: sessionmaker
    fake_mux: FakeMuxClient


def build_sqlite_session_factory() -> sessionmaker:
    load_models()
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
        future=True,
    )
    Base.metadata.create_all(engine)
    return sessionmaker(bind=engine, autoflush=False, autocommit=False, expire_on_commit=False)


def miss_first_lookups(session: Session, count: int = 1) -> None:
    """Make the first ``count`` ``session.scalar`` lookups return None, as if a
    concurrent writer committed its row right after we looked."""

    original_scalar = session.scalar
    calls = {"count": 0}

    def scalar_with_misses(statement, *args, **kwargs):
        calls["count"] += 1
        if calls["count"] <= count:
            return None
        return original_scalar(statement, *args, **kwargs)

    session.scalar = scalar_with_misses  # type: ignore[method-assign]


def sign_payload(payload: bytes, secret: str = WEBHOOK_SECRET, timestamp: Optional[int] = None) -> str:
    timestamp = int(time.time()) if timestamp is None else timestamp
    message = f"{timestamp}.".encode("utf-8") + payload
    digest = hmac.new(secret.encode("utf-8"), message, hashlib.sha256).hexdigest()
    return f"t={timestamp},v1={digest}"


def signed_webhook_request(event: Dict[str, Any], secret: str = WEBHOOK_SECRET) -> tuple[bytes, Dict[str, str]]:
    payload = json.dumps(event).encode("utf-8")
    headers = {
        "content-type": "application/json",
        "Mux-Signature": sign_payload(payload, secret),
    }
    return payload, headers


def create_mux_test_context(
    monkeypatch,
    *,
    webhook_secret: str = WEBHOOK_SECRET,
    admin_key: str = "",
    verify_signature: bool = True,
    fake_mux: Optional[FakeMuxClient] = None,
) -> MuxTestContext:
    monkeypatch.setenv("ENV", "test")
    monkeypatch.setenv("MUX_WEBHOOK_SECRET", webhook_secret)
    monkeypatch.setenv("ADMIN_API_KEY", admin_key)
    monkeypatch.setenv("WEBHOOK_VERIFY_SIGNATURE", "true" if verify_signature else "false")
    get_settings.cache_clear()

    session_factory = build_sqlite_session_factory()
    fake_mux = fake_mux or FakeMuxClient(has_api_credentials=False)

    def override_get_session():
        session = session_factory()
        try:
            yield session
        finally:
            session.close()

    api_main.app.dependency_overrides[get_session] = override_get_session
    api_main.app.dependency_overrides[get_mux_client] = lambda: fake_mux

    return MuxTestContext(
        client=TestClient(api_main.app),
        session_factory=session_factory,
        fake_mux=fake_mux,
    )


def teardown_mux_test_context() -> None:
    api_main.app.dependency_overrides.clear()
    get_settings.cache_clear()
