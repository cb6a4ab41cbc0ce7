"""keep change request history when an entry is merged away

Revision ID: 20261019_0003
Revises: 20261008_0002
Create Date: 2026-10-19 00:00:00.000000

"""
from alembic import op
import sqlalchemy as sa

revision = "20261019_0003"
down_revision = "20261008_0002"
branch_labels = None
depends_on = None

# PostgreSQL's generated name for the unnamed constraint from 20261008_0002.
ENTRY_FK = "schedule_change_requests_schedule_entry_id_fkey"


def upgrade() -> None:
    op.drop_constraint(ENTRY_FK, "schedule_change_requests", type_="foreignkey")
    op.alter_column(
        "schedule_change_requests",
        "schedule_entry_id",
        existing_type=sa.String(length=36),
        nullable=True,
    )
    op.create_foreign_key(
        ENTRY_FK,
        "schedule_change_requests",
        "schedule_entries",
        ["schedule_entry_id"],
        ["id"],
        ondelete="SET NULL",
    )


def downgrade() -> None:
    op.execute("DELETE FROM schedule_change_requests WHERE schedule_entry_id IS NULL")
    op.drop_constraint(ENTRY_FK, "schedule_change_requests", type_="foreignkey")
    op.alter_column(
        "schedule_change_requests",
        "schedule_entry_id",
        existing_type=sa.String(length=36),
        nullable=False,
    )
    op.create_foreign_key(
        ENTRY_FK,
        "schedule_change_requests",
        "schedule_entries",
        ["schedule_entry_id"],
        ["id"],
        ondelete="CASCADE",
    )
