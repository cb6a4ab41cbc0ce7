import uuid
from datetime import datetime

from sqlalchemy import Boolean, DateTime, Enum as SAEnum, ForeignKey, Index, Integer, String
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from classgrid.db.base import Base
from classgrid.models.time_slot import Weekday


class ScheduleEntry(Base):
    __tablename__ = "schedule_entries"
    __table_args__ = (
        Index("ix_schedule_entries_schedule_day_room", "schedule_id", "day", "room_id"),
        Index("ix_schedule_entries_schedule_day_faculty", "schedule_id", "day", "faculty_id"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    schedule_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("schedules.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    session_block_id: Mapped[str] = mapped_column(
        String(36),
        ForeignKey("session_blocks.id", ondelete="CASCADE"),
        nullable=False,
        index=True,
    )
    room_id: Mapped[str] = mapped_column(String(36), ForeignKey("rooms.id"), nullable=False)
    time_slot_id: Mapped[str] = mapped_column(String(36), ForeignKey("time_slots.id"), nullable=False)
    faculty_id: Mapped[str | None] = mapped_column(
        String(36),
        ForeignKey("users.id", ondelete="SET NULL"),
        nullable=True,
    )
    day: Mapped[Weekday] = mapped_column(SAEnum(Weekday, name="weekday"), nullable=False)
    is_lab_session: Mapped[bool] = mapped_column(Boolean, nullable=False, default=False)
    custom_start_time: Mapped[str | None] = mapped_column(String(5), nullable=True)
    custom_end_time: Mapped[str | None] = mapped_column(String(5), nullable=True)
    session_group_id: Mapped[str | None] = mapped_column(String(36), nullable=True, index=True)
    slots_span: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())

    @property
    def has_custom_time(self) -> bool:
        return bool(self.custom_start_time and self.custom_end_time)
