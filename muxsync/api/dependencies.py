"""Request guards shared by the API routers."""

from __future__ import annotations

import secrets
from typing import Optional

from fastapi import Header, HTTPException, status

from muxsync.core.config import get_settings


ADMIN_KEY_HEADER = "X-Mux-Sync-Admin-Key"


def require_admin_key(admin_key: Optional[str] = Header(default=None, alias=ADMIN_KEY_HEADER)) -> None:
    """Guard write/action routes when ADMIN_API_KEY is configured."""

    expected = get_settings().admin_api_key.strip()
    if not expected:
        return

    received = (admin_key or "").strip()
    if not received or not secrets.compare_digest(received, expected):
        raise HTTPException(
            status_code=status.HTTP_403_FORBIDDEN,
            detail="invalid_admin_key",
        )
