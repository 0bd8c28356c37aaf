"""Sequential historical sync of Mux assets and their passthrough metadata."""

from __future__ import annotations

from dataclasses import dataclass
import math
from typing import Optional

from sqlalchemy.orm import Session

from muxsync.core.logger import get_logger
from muxsync.core.metrics import record_backfill_assets
from muxsync.integrations.mux.mux_client import MuxClient
from muxsync.sync.entities import upsert_asset
from muxsync.sync.normalize import as_string, parse_metadata_passthrough
from muxsync.videos.metadata import DEFAULT_METADATA_USER_ID, upsert_video_metadata


DEFAULT_MAX_ASSETS = 200

logger = get_logger("muxsync.sync.backfill")


@dataclass(frozen=True)
class BackfillResult:
    scanned: int
    synced_assets: int
    metadata_upserts: int
    missing_user_id: int


def backfill_assets(
    session: Session,
    mux_client: MuxClient,
    *,
    max_assets: Optional[float] = None,
    default_user_id: Optional[str] = None,
    include_video_metadata: bool = True,
) -> BackfillResult:
    """Walk the remote asset listing once, mirroring at most ``max_assets`` assets.

    There is no checkpoint: a remote or store failure aborts the run and the
    exception propagates to the caller.
    """

    limit = max(1, math.floor(max_assets if max_assets is not None else DEFAULT_MAX_ASSETS))
    fallback_user_id = as_string(default_user_id)

    scanned = 0
    synced_assets = 0
    metadata_upserts = 0
    missing_user_id = 0

    for asset in mux_client.list_assets():
        if scanned >= limit:
            break
        scanned += 1

        mux_asset_id = as_string(asset.get("id"))
        if mux_asset_id is None:
            record_backfill_assets(outcome="skipped_missing_id")
            continue

        upsert_asset(session, asset)
        synced_assets += 1
        record_backfill_assets(outcome="synced")

        if not include_video_metadata:
            continue

        metadata = parse_metadata_passthrough(asset.get("passthrough"))
        user_id = metadata.pop("user_id", None) or fallback_user_id
        if user_id is None:
            user_id = DEFAULT_METADATA_USER_ID
            missing_user_id += 1

        upsert_video_metadata(session, mux_asset_id=mux_asset_id, user_id=user_id, **metadata)
        metadata_upserts += 1

    result = BackfillResult(
        scanned=scanned,
        synced_assets=synced_assets,
        metadata_upserts=metadata_upserts,
        missing_user_id=missing_user_id,
    )
    logger.info(
        "mux_backfill_completed",
        max_assets=limit,
        scanned=result.scanned,
        synced_assets=result.synced_assets,
        metadata_upserts=result.metadata_upserts,
        missing_user_id=result.missing_user_id,
    )
    return result
