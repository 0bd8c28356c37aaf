"""mux sync core tables

Revision ID: 20261019_0001
Revises:
Create Date: 2026-10-19

"""

from __future__ import annotations

from alembic import op
import sqlalchemy as sa


# revision identifiers, used by Alembic.
revision = "20261019_0001"
down_revision = None
branch_labels = None
depends_on = None


def _timestamp_columns() -> list[sa.Column]:
    return [
        sa.Column("created_at_ms", sa.BigInteger(), nullable=False),
        sa.Column("updated_at_ms", sa.BigInteger(), nullable=False),
        sa.Column("deleted_at_ms", sa.BigInteger(), nullable=True),
    ]


def upgrade() -> None:
    op.create_table(
        "mux_assets",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("mux_asset_id", sa.String(length=128), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=True),
        sa.Column("playback_ids", sa.JSON(), nullable=True),
        sa.Column("duration_seconds", sa.Float(), nullable=True),
        sa.Column("aspect_ratio", sa.String(length=32), nullable=True),
        sa.Column("max_stored_resolution", sa.String(length=32), nullable=True),
        sa.Column("max_stored_frame_rate", sa.Float(), nullable=True),
        sa.Column("passthrough", sa.Text(), nullable=True),
        sa.Column("upload_id", sa.String(length=128), nullable=True),
        sa.Column("live_stream_id", sa.String(length=128), nullable=True),
        sa.Column("tracks", sa.JSON(), nullable=True),
        *_timestamp_columns(),
        sa.Column("raw", sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("mux_asset_id", name="uq_mux_assets_mux_asset_id"),
    )
    op.create_index("ix_mux_assets_status", "mux_assets", ["status"], unique=False)
    op.create_index("ix_mux_assets_updated_at_ms", "mux_assets", ["updated_at_ms"], unique=False)

    op.create_table(
        "mux_live_streams",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("mux_live_stream_id", sa.String(length=128), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=True),
        sa.Column("playback_ids", sa.JSON(), nullable=True),
        sa.Column("reconnect_window_seconds", sa.Float(), nullable=True),
        sa.Column("recent_asset_ids", sa.JSON(), nullable=True),
        *_timestamp_columns(),
        sa.Column("raw", sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("mux_live_stream_id", name="uq_mux_live_streams_mux_live_stream_id"),
    )
    op.create_index("ix_mux_live_streams_status", "mux_live_streams", ["status"], unique=False)
    op.create_index("ix_mux_live_streams_updated_at_ms", "mux_live_streams", ["updated_at_ms"], unique=False)

    op.create_table(
        "mux_uploads",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("mux_upload_id", sa.String(length=128), nullable=False),
        sa.Column("status", sa.String(length=32), nullable=True),
        sa.Column("upload_url", sa.Text(), nullable=True),
        sa.Column("timeout_seconds", sa.Float(), nullable=True),
        sa.Column("cors_origin", sa.String(length=255), nullable=True),
        sa.Column("asset_id", sa.String(length=128), nullable=True),
        sa.Column("error", sa.JSON(), nullable=True),
        *_timestamp_columns(),
        sa.Column("raw", sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("mux_upload_id", name="uq_mux_uploads_mux_upload_id"),
    )
    op.create_index("ix_mux_uploads_status", "mux_uploads", ["status"], unique=False)
    op.create_index("ix_mux_uploads_updated_at_ms", "mux_uploads", ["updated_at_ms"], unique=False)

    op.create_table(
        "mux_events",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("mux_event_id", sa.String(length=128), nullable=True),
        sa.Column("type", sa.String(length=80), nullable=False),
        sa.Column("object_type", sa.String(length=32), nullable=True),
        sa.Column("object_id", sa.String(length=128), nullable=True),
        sa.Column("occurred_at_ms", sa.BigInteger(), nullable=True),
        sa.Column("received_at_ms", sa.BigInteger(), nullable=False),
        sa.Column("verified", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("raw", sa.JSON(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("mux_event_id", name="uq_mux_events_mux_event_id"),
    )
    op.create_index("ix_mux_events_type", "mux_events", ["type"], unique=False)
    op.create_index("ix_mux_events_object", "mux_events", ["object_type", "object_id"], unique=False)
    op.create_index("ix_mux_events_received_at_ms", "mux_events", ["received_at_ms"], unique=False)

    op.create_table(
        "video_metadata",
        sa.Column("id", sa.String(length=36), nullable=False),
        sa.Column("mux_asset_id", sa.String(length=128), nullable=False),
        sa.Column("user_id", sa.String(length=255), nullable=False),
        sa.Column("title", sa.String(length=500), nullable=True),
        sa.Column("description", sa.Text(), nullable=True),
        sa.Column("tags", sa.JSON(), nullable=True),
        sa.Column("visibility", sa.String(length=16), nullable=True),
        sa.Column("custom", sa.JSON(), nullable=True),
        sa.Column("created_at_ms", sa.BigInteger(), nullable=False),
        sa.Column("updated_at_ms", sa.BigInteger(), nullable=False),
        sa.PrimaryKeyConstraint("id"),
        sa.UniqueConstraint("mux_asset_id", "user_id", name="uq_video_metadata_asset_user"),
        sa.CheckConstraint(
            "visibility IS NULL OR visibility IN ('private', 'unlisted', 'public')",
            name="ck_video_metadata_visibility",
        ),
    )
    op.create_index("ix_video_metadata_mux_asset_id", "video_metadata", ["mux_asset_id"], unique=False)
    op.create_index("ix_video_metadata_user_id", "video_metadata", ["user_id"], unique=False)
    op.create_index("ix_video_metadata_updated_at_ms", "video_metadata", ["updated_at_ms"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_video_metadata_updated_at_ms", table_name="video_metadata")
    op.drop_index("ix_video_metadata_user_id", table_name="video_metadata")
    op.drop_index("ix_video_metadata_mux_asset_id", table_name="video_metadata")
    op.drop_table("video_metadata")

    op.drop_index("ix_mux_events_received_at_ms", table_name="mux_events")
    op.drop_index("ix_mux_events_object", table_name="mux_events")
    op.drop_index("ix_mux_events_type", table_name="mux_events")
    op.drop_table("mux_events")

    op.drop_index("ix_mux_uploads_updated_at_ms", table_name="mux_uploads")
    op.drop_index("ix_mux_uploads_status", table_name="mux_uploads")
    op.drop_table("mux_uploads")

    op.drop_index("ix_mux_live_streams_updated_at_ms", table_name="mux_live_streams")
    op.drop_index("ix_mux_live_streams_status", table_name="mux_live_streams")
    op.drop_table("mux_live_streams")

    op.drop_index("ix_mux_assets_updated_at_ms", table_name="mux_assets")
    op.drop_index("ix_mux_assets_status", table_name="mux_assets")
    op.drop_table("mux_assets")
