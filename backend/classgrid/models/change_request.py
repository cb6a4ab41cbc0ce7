import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import JSON, DateTime, Enum as SAEnum, ForeignKey, Index, String, Text, text
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from classgrid.db.base import Base
from classgrid.models.time_slot import Weekday


class ChangeRequestStatus(str, Enum):
    pending = "pending"
    approved = "approved"
    rejected = "rejected"
    cancelled = "cancelled"


class ReviewDecision(str, Enum):
    approve = "approve"
    reject = "reject"


class ChangeRequest(Base):
    __tablename__ = "schedule_change_requests"
    __table_args__ = (
        # At most one pending request per entry, enforced by the database as well as the workflow.
        Index(
            "uq_change_requests_pending_entry",
            "schedule_entry_id",
            unique=True,
            postgresql_where=text("status = 'pending'"),
            sqlite_where=text("status = 'pending'"),
        ),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    schedule_entry_id: Mapped[str | None] = mapped_column(
        String(36),
        # Cleared when the entry is merged away; the request row stays as history.
        ForeignKey("schedule_entries.id", ondelete="SET NULL"),
        nullable=True,
        index=True,
    )
    requester_id: Mapped[str] = mapped_column(String(36), ForeignKey("users.id"), nullable=False, index=True)
    target_day: Mapped[Weekday] = mapped_column(SAEnum(Weekday, name="weekday"), nullable=False)
    target_time_slot_id: Mapped[str] = mapped_column(String(36), ForeignKey("time_slots.id"), nullable=False)
    target_room_id: Mapped[str] = mapped_column(String(36), ForeignKey("rooms.id"), nullable=False)
    reason: Mapped[str | None] = mapped_column(Text, nullable=True)
    status: Mapped[ChangeRequestStatus] = mapped_column(
        SAEnum(ChangeRequestStatus, name="change_request_status"),
        nullable=False,
        default=ChangeRequestStatus.pending,
        index=True,
    )
    conflict_snapshot: Mapped[dict] = mapped_column(JSON, nullable=False, default=dict)
    reviewer_notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    reviewed_by_id: Mapped[str | None] = mapped_column(String(36), ForeignKey("users.id"), nullable=True)
    reviewed_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())
