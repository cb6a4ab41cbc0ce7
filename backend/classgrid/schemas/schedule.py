from __future__ import annotations

import re

from pydantic import BaseModel, Field

from classgrid.models.time_slot import Weekday

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d$")
MINUTES_PER_DAY = 24 * 60


def parse_time_to_minutes(value: str) -> int:
    if not TIME_PATTERN.match(value):
        raise ValueError("Time must be in HH:MM 24-hour format")
    hours, minutes = value.split(":")
    return int(hours) * 60 + int(minutes)


def minutes_to_hhmm(minutes: int) -> str:
    return f"{minutes // 60:02d}:{minutes % 60:02d}"


class ScheduleEntryOut(BaseModel):
    id: str
    schedule_id: str
    session_block_id: str
    room_id: str
    time_slot_id: str
    faculty_id: str | None = None
    day: Weekday
    is_lab_session: bool
    session_group_id: str | None = None
    slots_span: int
    start_time: str
    end_time: str
    duration_minutes: int


class FacultyLoadOut(BaseModel):
    faculty_id: str | None = None
    faculty_name: str
    total_units: int = Field(ge=0)
    session_count: int = Field(ge=0)
    entry_ids: list[str] = Field(default_factory=list)
