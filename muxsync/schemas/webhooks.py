"""Pydantic schemas for the Mux webhook endpoint."""

from __future__ import annotations

from typing import Optional

from pydantic import BaseModel


class MuxWebhookResponse(BaseModel):
    status: str
    skipped: bool
    duplicate: bool
    reason: Optional[str] = None
    action: Optional[str] = None
    event_record_id: str
    event_type: str
    object_type: Optional[str] = None
    object_id: Optional[str] = None
