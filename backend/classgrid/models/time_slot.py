import uuid
from enum import Enum

from sqlalchemy import Boolean, Enum as SAEnum, Integer, String
from sqlalchemy.orm import Mapped, mapped_column

from classgrid.db.base import Base


class Weekday(str, Enum):
    monday = "monday"
    tuesday = "tuesday"
    wednesday = "wednesday"
    thursday = "thursday"
    friday = "friday"
    saturday = "saturday"
    sunday = "sunday"


class DayGroup(str, Enum):
    twice_weekly_a = "twice_weekly_a"
    twice_weekly_b = "twice_weekly_b"
    once_weekly_c = "once_weekly_c"
    once_weekly_d = "once_weekly_d"
    once_weekly_e = "once_weekly_e"


class TimeSlot(Base):
    """Catalog slot. Rows are reference data and are never edited by the workflow."""

    __tablename__ = "time_slots"

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    name: Mapped[str] = mapped_column(String(50), nullable=False)
    start_time: Mapped[str] = mapped_column(String(5), nullable=False)
    end_time: Mapped[str] = mapped_column(String(5), nullable=False)
    duration_minutes: Mapped[int] = mapped_column(Integer, nullable=False)
    day_group: Mapped[DayGroup] = mapped_column(SAEnum(DayGroup, name="day_group"), nullable=False, index=True)
    priority: Mapped[int] = mapped_column(Integer, nullable=False, default=0)
    is_active: Mapped[bool] = mapped_column(Boolean, nullable=False, default=True)
