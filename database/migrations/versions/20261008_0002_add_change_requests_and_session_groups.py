"""add change requests and session group columns

Revision ID: 20261008_0002
Revises: 20261001_0001
Create Date: 2026-10-08 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa
from sqlalchemy.dialects import postgresql

revision = "20261008_0002"
down_revision = "20261001_0001"
branch_labels = None
depends_on = None


change_request_status = sa.Enum(
    "pending",
    "approved",
    "rejected",
    "cancelled",
    name="change_request_status",
)
# Created by the previous revision.
weekday = postgresql.ENUM(
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
    name="weekday",
    create_type=False,
)


def upgrade() -> None:
    op.add_column("schedule_entries", sa.Column("custom_start_time", sa.String(length=5), nullable=True))
    op.add_column("schedule_entries", sa.Column("custom_end_time", sa.String(length=5), nullable=True))
    op.add_column("schedule_entries", sa.Column("session_group_id", sa.String(length=36), nullable=True))
    op.add_column(
        "schedule_entries",
        sa.Column("slots_span", sa.Integer(), nullable=False, server_default="1"),
    )
    op.create_index(
        "ix_schedule_entries_session_group_id",
        "schedule_entries",
        ["session_group_id"],
        unique=False,
    )

    op.create_table(
        "schedule_change_requests",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column(
            "schedule_entry_id",
            sa.String(length=36),
            sa.ForeignKey("schedule_entries.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("requester_id", sa.String(length=36), sa.ForeignKey("users.id"), nullable=False),
        sa.Column("target_day", weekday, nullable=False),
        sa.Column("target_time_slot_id", sa.String(length=36), sa.ForeignKey("time_slots.id"), nullable=False),
        sa.Column("target_room_id", sa.String(length=36), sa.ForeignKey("rooms.id"), nullable=False),
        sa.Column("reason", sa.Text(), nullable=True),
        sa.Column("status", change_request_status, nullable=False, server_default="pending"),
        sa.Column("conflict_snapshot", sa.JSON(), nullable=False),
        sa.Column("reviewer_notes", sa.Text(), nullable=True),
        sa.Column("reviewed_by_id", sa.String(length=36), sa.ForeignKey("users.id"), nullable=True),
        sa.Column("reviewed_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index(
        "ix_schedule_change_requests_schedule_entry_id",
        "schedule_change_requests",
        ["schedule_entry_id"],
        unique=False,
    )
    op.create_index(
        "ix_schedule_change_requests_requester_id",
        "schedule_change_requests",
        ["requester_id"],
        unique=False,
    )
    op.create_index(
        "ix_schedule_change_requests_status",
        "schedule_change_requests",
        ["status"],
        unique=False,
    )
    op.create_index(
        "uq_change_requests_pending_entry",
        "schedule_change_requests",
        ["schedule_entry_id"],
        unique=True,
        postgresql_where=sa.text("status = 'pending'"),
        sqlite_where=sa.text("status = 'pending'"),
    )


def downgrade() -> None:
    op.drop_index("uq_change_requests_pending_entry", table_name="schedule_change_requests")
    op.drop_index("ix_schedule_change_requests_status", table_name="schedule_change_requests")
    op.drop_index("ix_schedule_change_requests_requester_id", table_name="schedule_change_requests")
    op.drop_index("ix_schedule_change_requests_schedule_entry_id", table_name="schedule_change_requests")
    op.drop_table("schedule_change_requests")
    change_request_status.drop(op.get_bind(), checkfirst=True)
    op.drop_index("ix_schedule_entries_session_group_id", table_name="schedule_entries")
    op.drop_column("schedule_entries", "slots_span")
    op.drop_column("schedule_entries", "session_group_id")
    op.drop_column("schedule_entries", "custom_end_time")
    op.drop_column("schedule_entries", "custom_start_time")
