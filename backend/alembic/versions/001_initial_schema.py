"""Initial schema — artists, sessions, queue_items.

Revision ID: 001_initial
Revises: None
Create Date: 2026-09-14

"""
from typing import Sequence, Union

from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects.postgresql import UUID

revision: str = "001_initial"
down_revision: Union[str, None] = None
branch_labels: Union[str, Sequence[str], None] = None
depends_on: Union[str, Sequence[str], None] = None


def upgrade() -> None:
    op.create_table(
        "artists",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("handle", sa.String(40), nullable=False),
        sa.Column("display_name", sa.String(100), nullable=False),
        sa.Column("subscribed", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_artists_handle", "artists", ["handle"], unique=True)

    op.create_table(
        "sessions",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("artist_id", UUID(as_uuid=True), sa.ForeignKey("artists.id"), nullable=False),
        sa.Column("active", sa.Boolean, nullable=False, server_default=sa.true()),
        sa.Column("start_time", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.Column("end_time", sa.DateTime(timezone=True), nullable=True),
        sa.Column("total_earnings", sa.Numeric(10, 2), nullable=False, server_default="0"),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
    )
    op.create_index("ix_sessions_artist_id", "sessions", ["artist_id"])
    op.create_index(
        "uq_sessions_one_active_per_artist", "sessions", ["artist_id"],
        unique=True,
        postgresql_where=sa.text("active"),
        sqlite_where=sa.text("active = 1"),
    )

    op.create_table(
        "queue_items",
        sa.Column("id", UUID(as_uuid=True), primary_key=True),
        sa.Column("session_id", UUID(as_uuid=True), sa.ForeignKey("sessions.id"), nullable=False),
        sa.Column("song_title", sa.String(200), nullable=False),
        sa.Column("tip_amount", sa.Numeric(10, 2), nullable=False),
        sa.Column("requester_name", sa.String(100), nullable=True),
        sa.Column("completed", sa.Boolean, nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), nullable=False, server_default=sa.func.now()),
        sa.CheckConstraint("tip_amount > 0", name="ck_queue_items_tip_amount_positive"),
    )
    op.create_index(
        "ix_queue_items_session_live", "queue_items", ["session_id", "completed"],
    )


def downgrade() -> None:
    op.drop_index("ix_queue_items_session_live", table_name="queue_items")
    op.drop_table("queue_items")
    op.drop_index("uq_sessions_one_active_per_artist", table_name="sessions")
    op.drop_index("ix_sessions_artist_id", table_name="sessions")
    op.drop_table("sessions")
    op.drop_index("ix_artists_handle", table_name="artists")
    op.drop_table("artists")
