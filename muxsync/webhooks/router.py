"""Mux webhook endpoint."""

from __future__ import annotations

from fastapi import APIRouter, Depends, HTTPException, Request, status
from sqlalchemy.orm import Session

from muxsync.core.config import get_settings
from muxsync.integrations.mux.mux_client import MuxClient, MuxClientError, get_mux_client
from muxsync.schemas.webhooks import MuxWebhookResponse
from muxsync.storage.db import get_session
from muxsync.sync.entities import PayloadValidationError
from muxsync.webhooks.service import ingest_webhook
from muxsync.webhooks.signature import MuxWebhookError


router = APIRouter(prefix="/mux", tags=["webhooks"])


@router.post("/webhook", response_model=MuxWebhookResponse)
async def mux_webhook(
    request: Request,
    session: Session = Depends(get_session),
    mux_client: MuxClient = Depends(get_mux_client),
) -> MuxWebhookResponse:
    settings = get_settings()
    if settings.webhook_verify_signature and not settings.mux_webhook_secret:
        raise HTTPException(
            status_code=status.HTTP_503_SERVICE_UNAVAILABLE,
            detail="Mux webhook secret is not configured",
        )

    payload_bytes = await request.body()
    try:
        outcome = ingest_webhook(
            session,
            raw_body=payload_bytes,
            headers=dict(request.headers),
            webhook_secret=settings.mux_webhook_secret,
            verify_signature=settings.webhook_verify_signature,
            tolerance_seconds=settings.mux_signature_tolerance_seconds,
            mux_client=mux_client,
        )
    except MuxWebhookError as exc:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(exc)) from exc
    except PayloadValidationError as exc:
        raise HTTPException(status_code=status.HTTP_422_UNPROCESSABLE_ENTITY, detail=str(exc)) from exc
    except MuxClientError as exc:
        raise HTTPException(status_code=status.HTTP_502_BAD_GATEWAY, detail=str(exc)) from exc

    return MuxWebhookResponse(
        status=outcome.status,
        skipped=outcome.skipped,
        duplicate=outcome.status == "duplicate",
        reason=outcome.reason,
        action=outcome.action,
        event_record_id=outcome.event_record_id,
        event_type=outcome.event_type,
        object_type=outcome.object_type,
        object_id=outcome.object_id,
    )
