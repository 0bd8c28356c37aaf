"""HTTP client for the Mux Video REST API."""

from __future__ import annotations

from typing import Any, Dict, Iterator, Optional

import httpx

from muxsync.core.config import get_settings


ASSETS_PATH = "/video/v1/assets"
LIVE_STREAMS_PATH = "/video/v1/live-streams"
UPLOADS_PATH = "/video/v1/uploads"


class MuxClientError(RuntimeError):
    """Raised when a Mux API request fails."""


class MuxClient:
    def __init__(
        self,
        *,
        base_url: str,
        token_id: str,
        token_secret: str,
        timeout_seconds: int = 20,
        page_size: int = 100,
    ) -> None:
        self.base_url = base_url.rstrip("/")
        self.token_id = token_id.strip()
        self.token_secret = token_secret.strip()
        self.timeout_seconds = timeout_seconds
        self.page_size = page_size

    @property
    def has_api_credentials(self) -> bool:
        return bool(self.token_id and self.token_secret)

    def _safe_json(self, response: httpx.Response, *, context: str) -> Dict[str, Any]:
        try:
            payload = response.json()
        except ValueError as exc:
            raise MuxClientError(f"{context} returned invalid JSON") from exc
        if not isinstance(payload, dict):
            raise MuxClientError(f"{context} returned invalid payload format")
        return payload

    def _request(
        self,
        method: str,
        path: str,
        *,
        context: str,
        params: Optional[Dict[str, Any]] = None,
        json_body: Optional[Dict[str, Any]] = None,
    ) -> Any:
        if not self.has_api_credentials:
            raise MuxClientError("MUX_TOKEN_ID/MUX_TOKEN_SECRET are not configured")

        try:
            with httpx.Client(timeout=self.timeout_seconds) as client:
                response = client.request(
                    method,
                    f"{self.base_url}{path}",
                    auth=(self.token_id, self.token_secret),
                    params=params,
                    json=json_body,
                )
        except httpx.HTTPError as exc:
            raise MuxClientError(f"{context} request failed") from exc
        if response.status_code >= 400:
            raise MuxClientError(f"{context} failed with status {response.status_code}")

        return self._safe_json(response, context=context).get("data")

    def _retrieve(self, collection_path: str, object_id: str, *, context: str) -> Dict[str, Any]:
        if not object_id.strip():
            raise MuxClientError(f"{context} requires an id")
        data = self._request("GET", f"{collection_path}/{object_id}", context=context)
        if not isinstance(data, dict):
            raise MuxClientError(f"{context} response missing data object")
        return data

    def _create(self, collection_path: str, params: Optional[Dict[str, Any]], *, context: str) -> Dict[str, Any]:
        data = self._request("POST", collection_path, context=context, json_body=params or {})
        if not isinstance(data, dict):
            raise MuxClientError(f"{context} response missing data object")
        return data

    def list_assets(self, *, page_size: Optional[int] = None) -> Iterator[Dict[str, Any]]:
        """Yield assets page by page until Mux returns a short or empty page."""

        limit = max(1, min(page_size or self.page_size, 100))
        page = 1
        while True:
            data = self._request(
                "GET",
                ASSETS_PATH,
                context="Mux list assets",
                params={"limit": limit, "page": page},
            )
            if not isinstance(data, list):
                raise MuxClientError("Mux list assets response missing data list")
            for item in data:
                if isinstance(item, dict):
                    yield item
            if len(data) < limit:
                return
            page += 1

    def retrieve_asset(self, asset_id: str) -> Dict[str, Any]:
        return self._retrieve(ASSETS_PATH, asset_id, context="Mux retrieve asset")

    def retrieve_live_stream(self, live_stream_id: str) -> Dict[str, Any]:
        return self._retrieve(LIVE_STREAMS_PATH, live_stream_id, context="Mux retrieve live stream")

    def retrieve_upload(self, upload_id: str) -> Dict[str, Any]:
        return self._retrieve(UPLOADS_PATH, upload_id, context="Mux retrieve upload")

    def create_asset(self, params: Dict[str, Any]) -> Dict[str, Any]:
        return self._create(ASSETS_PATH, params, context="Mux create asset")

    def create_live_stream(self, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self._create(LIVE_STREAMS_PATH, params, context="Mux create live stream")

    def create_upload(self, params: Optional[Dict[str, Any]] = None) -> Dict[str, Any]:
        return self._create(UPLOADS_PATH, params, context="Mux create upload")


def get_mux_client() -> MuxClient:
    settings = get_settings()
    return MuxClient(
        base_url=settings.mux_api_base_url,
        token_id=settings.mux_token_id,
        token_secret=settings.mux_token_secret,
        timeout_seconds=settings.mux_api_timeout_seconds,
        page_size=settings.mux_list_page_size,
    )
