"""Per-(asset, user) video metadata with deferred owner resolution.

Metadata can reach us through an asset passthrough before we know which user owns
the video. Such rows are filed under the placeholder user ``"default"`` and are
absorbed into the real user's row the first time that user writes metadata for the
same asset, so there is never more than one row per (asset, user) pair and
placeholder rows do not outlive the discovery of the real owner.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import Any, Dict, List, Optional, Tuple

from sqlalchemy import desc, select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from muxsync.core import clock
from muxsync.core.logger import get_logger
from muxsync.storage.models import MuxAsset, VideoMetadata
from muxsync.sync.normalize import VISIBILITY_VALUES, omit_absent


DEFAULT_METADATA_USER_ID = "default"
METADATA_FIELDS = ("title", "description", "tags", "visibility", "custom")

PATCH_EXISTING = "patch_existing"
MERGE_PLACEHOLDER = "merge_placeholder"
RELOCATE_PLACEHOLDER = "relocate_placeholder"
INSERT = "insert"

logger = get_logger("muxsync.videos.metadata")


@dataclass(frozen=True)
class MetadataMergePlan:
    action: str
    fields: Dict[str, Any]
    delete_placeholder: bool = False


@dataclass(frozen=True)
class VideoView:
    asset: MuxAsset
    metadata: List[VideoMetadata] = field(default_factory=list)


@dataclass(frozen=True)
class UserVideo:
    metadata: VideoMetadata
    asset: Optional[MuxAsset]


def _first_present(*values: Any) -> Any:
    for value in values:
        if value is not None:
            return value
    return None


def plan_metadata_merge(
    *,
    user_id: str,
    incoming: Dict[str, Any],
    existing: Optional[Dict[str, Any]],
    placeholder: Optional[Dict[str, Any]],
) -> MetadataMergePlan:
    """Decide how a metadata write lands, given snapshots of the rows involved.

    ``existing`` is the row for (asset, user_id) and ``placeholder`` the row for
    (asset, "default"); both are plain field dicts or ``None``. Explicit empty
    ``tags`` lists count as present values. Arrays are replaced wholesale.
    """

    sparse_incoming = omit_absent({name: incoming.get(name) for name in METADATA_FIELDS})

    if user_id == DEFAULT_METADATA_USER_ID or placeholder is None:
        if existing is not None:
            return MetadataMergePlan(action=PATCH_EXISTING, fields=sparse_incoming)
        return MetadataMergePlan(action=INSERT, fields=sparse_incoming)

    if existing is not None:
        # incoming > real row > placeholder row
        merged = omit_absent(
            {
                name: _first_present(incoming.get(name), existing.get(name), placeholder.get(name))
                for name in METADATA_FIELDS
            }
        )
        return MetadataMergePlan(action=MERGE_PLACEHOLDER, fields=merged, delete_placeholder=True)

    relocated = omit_absent(
        {name: _first_present(incoming.get(name), placeholder.get(name)) for name in METADATA_FIELDS}
    )
    return MetadataMergePlan(action=RELOCATE_PLACEHOLDER, fields=relocated)


def _snapshot(row: Optional[VideoMetadata]) -> Optional[Dict[str, Any]]:
    if row is None:
        return None
    return {name: getattr(row, name) for name in METADATA_FIELDS}


def _find_metadata(session: Session, mux_asset_id: str, user_id: str) -> Optional[VideoMetadata]:
    return session.scalar(
        select(VideoMetadata).where(
            VideoMetadata.mux_asset_id == mux_asset_id,
            VideoMetadata.user_id == user_id,
        )
    )


def _write_metadata(
    session: Session,
    *,
    mux_asset_id: str,
    user_id: str,
    incoming: Dict[str, Any],
    now: int,
) -> Tuple[MetadataMergePlan, VideoMetadata]:
    existing = _find_metadata(session, mux_asset_id, user_id)
    placeholder = None
    if user_id != DEFAULT_METADATA_USER_ID:
        placeholder = _find_metadata(session, mux_asset_id, DEFAULT_METADATA_USER_ID)

    plan = plan_metadata_merge(
        user_id=user_id,
        incoming=incoming,
        existing=_snapshot(existing),
        placeholder=_snapshot(placeholder),
    )

    if plan.action == INSERT:
        target = VideoMetadata(
            mux_asset_id=mux_asset_id,
            user_id=user_id,
            created_at_ms=now,
            updated_at_ms=now,
            **plan.fields,
        )
        session.add(target)
    elif plan.action == RELOCATE_PLACEHOLDER:
        assert placeholder is not None
        target = placeholder
        target.user_id = user_id
    else:
        assert existing is not None
        target = existing

    if plan.action != INSERT:
        for name, value in plan.fields.items():
            setattr(target, name, value)
        target.updated_at_ms = now

    if plan.delete_placeholder:
        assert placeholder is not None
        session.delete(placeholder)

    session.commit()
    return plan, target


def upsert_video_metadata(
    session: Session,
    *,
    mux_asset_id: str,
    user_id: str,
    title: Optional[str] = None,
    description: Optional[str] = None,
    tags: Optional[List[str]] = None,
    visibility: Optional[str] = None,
    custom: Optional[Dict[str, Any]] = None,
) -> str:
    """Write metadata for (asset, user), absorbing any placeholder row.

    A concurrent writer can claim the (asset, user) key between our reads and our
    commit; the write is then re-planned once against the rows that now exist.
    """

    if visibility is not None and visibility not in VISIBILITY_VALUES:
        raise ValueError(f"Invalid visibility: {visibility!r}")

    now = clock.now_ms()
    incoming = {
        "title": title,
        "description": description,
        "tags": tags,
        "visibility": visibility,
        "custom": custom,
    }
    try:
        plan, target = _write_metadata(
            session, mux_asset_id=mux_asset_id, user_id=user_id, incoming=incoming, now=now
        )
    except IntegrityError:
        session.rollback()
        logger.info("video_metadata_write_conflict", mux_asset_id=mux_asset_id, user_id=user_id)
        plan, target = _write_metadata(
            session, mux_asset_id=mux_asset_id, user_id=user_id, incoming=incoming, now=now
        )

    if plan.action in {MERGE_PLACEHOLDER, RELOCATE_PLACEHOLDER}:
        logger.info(
            "video_metadata_placeholder_absorbed",
            action=plan.action,
            mux_asset_id=mux_asset_id,
            user_id=user_id,
            metadata_id=target.id,
        )
    return target.id


def get_video_by_mux_asset_id(
    session: Session,
    *,
    mux_asset_id: str,
    user_id: Optional[str] = None,
) -> Optional[VideoView]:
    asset = session.scalar(select(MuxAsset).where(MuxAsset.mux_asset_id == mux_asset_id))
    if asset is None:
        return None

    if user_id:
        row = _find_metadata(session, mux_asset_id, user_id)
        return VideoView(asset=asset, metadata=[row] if row is not None else [])

    rows = session.scalars(
        select(VideoMetadata)
        .where(VideoMetadata.mux_asset_id == mux_asset_id)
        .order_by(VideoMetadata.created_at_ms)
    ).all()
    return VideoView(asset=asset, metadata=list(rows))


def list_videos_for_user(session: Session, *, user_id: str, limit: int = 25) -> List[UserVideo]:
    rows = session.scalars(
        select(VideoMetadata)
        .where(VideoMetadata.user_id == user_id)
        .order_by(desc(VideoMetadata.updated_at_ms))
        .limit(limit)
    ).all()

    asset_ids = {row.mux_asset_id for row in rows}
    assets_by_id: Dict[str, MuxAsset] = {}
    if asset_ids:
        assets = session.scalars(select(MuxAsset).where(MuxAsset.mux_asset_id.in_(asset_ids))).all()
        assets_by_id = {asset.mux_asset_id: asset for asset in assets}

    return [UserVideo(metadata=row, asset=assets_by_id.get(row.mux_asset_id)) for row in rows]
