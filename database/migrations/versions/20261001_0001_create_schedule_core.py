"""create schedule core tables

Revision ID: 20261001_0001
Revises:
Create Date: 2026-10-01 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261001_0001"
down_revision = None
branch_labels = None
depends_on = None


user_role = sa.Enum("admin", "scheduler", "faculty", name="user_role")
room_type = sa.Enum("lecture", "lab", name="room_type")
day_group = sa.Enum(
    "twice_weekly_a",
    "twice_weekly_b",
    "once_weekly_c",
    "once_weekly_d",
    "once_weekly_e",
    name="day_group",
)
schedule_status = sa.Enum("draft", "published", "archived", name="schedule_status")
weekday = sa.Enum(
    "monday",
    "tuesday",
    "wednesday",
    "thursday",
    "friday",
    "saturday",
    "sunday",
    name="weekday",
)


def upgrade() -> None:
    op.create_table(
        "users",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("email", sa.String(length=255), nullable=False),
        sa.Column("role", user_role, nullable=False),
        sa.Column("department", sa.String(length=200), nullable=True),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_users_email", "users", ["email"], unique=True)

    op.create_table(
        "rooms",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=100), nullable=False),
        sa.Column("building", sa.String(length=200), nullable=True),
        sa.Column("capacity", sa.Integer(), nullable=False, server_default="40"),
        sa.Column("room_type", room_type, nullable=False, server_default="lecture"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_rooms_name", "rooms", ["name"], unique=True)

    op.create_table(
        "time_slots",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=50), nullable=False),
        sa.Column("start_time", sa.String(length=5), nullable=False),
        sa.Column("end_time", sa.String(length=5), nullable=False),
        sa.Column("duration_minutes", sa.Integer(), nullable=False),
        sa.Column("day_group", day_group, nullable=False),
        sa.Column("priority", sa.Integer(), nullable=False, server_default="0"),
        sa.Column("is_active", sa.Boolean(), nullable=False, server_default=sa.true()),
    )
    op.create_index("ix_time_slots_day_group", "time_slots", ["day_group"], unique=False)

    op.create_table(
        "session_blocks",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("year_level", sa.Integer(), nullable=False),
        sa.Column("subject_code", sa.String(length=50), nullable=False),
        sa.Column("subject_name", sa.String(length=200), nullable=True),
        sa.Column("course_combination", sa.String(length=200), nullable=False),
        sa.Column("block_number", sa.Integer(), nullable=False, server_default="1"),
        sa.Column("units", sa.Integer(), nullable=False, server_default="3"),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.UniqueConstraint(
            "year_level",
            "subject_code",
            "course_combination",
            "block_number",
            name="uq_session_blocks_identity",
        ),
    )
    op.create_index("ix_session_blocks_subject_code", "session_blocks", ["subject_code"], unique=False)

    op.create_table(
        "schedules",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("name", sa.String(length=200), nullable=False),
        sa.Column("status", schedule_status, nullable=False, server_default="draft"),
        sa.Column("is_locked", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("published_at", sa.DateTime(timezone=True), nullable=True),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )

    op.create_table(
        "schedule_entries",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column(
            "schedule_id",
            sa.String(length=36),
            sa.ForeignKey("schedules.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column(
            "session_block_id",
            sa.String(length=36),
            sa.ForeignKey("session_blocks.id", ondelete="CASCADE"),
            nullable=False,
        ),
        sa.Column("room_id", sa.String(length=36), sa.ForeignKey("rooms.id"), nullable=False),
        sa.Column("time_slot_id", sa.String(length=36), sa.ForeignKey("time_slots.id"), nullable=False),
        sa.Column(
            "faculty_id",
            sa.String(length=36),
            sa.ForeignKey("users.id", ondelete="SET NULL"),
            nullable=True,
        ),
        sa.Column("day", weekday, nullable=False),
        sa.Column("is_lab_session", sa.Boolean(), nullable=False, server_default=sa.false()),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
        sa.Column("updated_at", sa.DateTime(timezone=True), nullable=True),
    )
    op.create_index("ix_schedule_entries_schedule_id", "schedule_entries", ["schedule_id"], unique=False)
    op.create_index("ix_schedule_entries_session_block_id", "schedule_entries", ["session_block_id"], unique=False)
    op.create_index(
        "ix_schedule_entries_schedule_day_room",
        "schedule_entries",
        ["schedule_id", "day", "room_id"],
        unique=False,
    )
    op.create_index(
        "ix_schedule_entries_schedule_day_faculty",
        "schedule_entries",
        ["schedule_id", "day", "faculty_id"],
        unique=False,
    )

    op.create_table(
        "activity_logs",
        sa.Column("id", sa.String(length=36), primary_key=True, nullable=False),
        sa.Column("user_id", sa.String(length=36), nullable=True),
        sa.Column("schedule_id", sa.String(length=36), nullable=True),
        sa.Column("action", sa.String(length=100), nullable=False),
        sa.Column("entity_type", sa.String(length=100), nullable=True),
        sa.Column("entity_id", sa.String(length=100), nullable=True),
        sa.Column("details", sa.JSON(), nullable=False),
        sa.Column("created_at", sa.DateTime(timezone=True), server_default=sa.func.now()),
    )
    op.create_index("ix_activity_logs_schedule_id", "activity_logs", ["schedule_id"], unique=False)
    op.create_index("ix_activity_logs_action", "activity_logs", ["action"], unique=False)


def downgrade() -> None:
    op.drop_index("ix_activity_logs_action", table_name="activity_logs")
    op.drop_index("ix_activity_logs_schedule_id", table_name="activity_logs")
    op.drop_table("activity_logs")
    op.drop_index("ix_schedule_entries_schedule_day_faculty", table_name="schedule_entries")
    op.drop_index("ix_schedule_entries_schedule_day_room", table_name="schedule_entries")
    op.drop_index("ix_schedule_entries_session_block_id", table_name="schedule_entries")
    op.drop_index("ix_schedule_entries_schedule_id", table_name="schedule_entries")
    op.drop_table("schedule_entries")
    op.drop_table("schedules")
    op.drop_index("ix_session_blocks_subject_code", table_name="session_blocks")
    op.drop_table("session_blocks")
    op.drop_index("ix_time_slots_day_group", table_name="time_slots")
    op.drop_table("time_slots")
    op.drop_index("ix_rooms_name", table_name="rooms")
    op.drop_table("rooms")
    op.drop_index("ix_users_email", table_name="users")
    op.drop_table("users")
    weekday.drop(op.get_bind(), checkfirst=True)
    schedule_status.drop(op.get_bind(), checkfirst=True)
    day_group.drop(op.get_bind(), checkfirst=True)
    room_type.drop(op.get_bind(), checkfirst=True)
    user_role.drop(op.get_bind(), checkfirst=True)
