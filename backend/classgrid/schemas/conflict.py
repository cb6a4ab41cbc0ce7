from typing import Literal

from pydantic import BaseModel, Field

from classgrid.models.time_slot import Weekday

ConflictType = Literal["room_conflict", "faculty_conflict", "block_conflict"]


class ConflictDetail(BaseModel):
    id: str
    conflict_type: ConflictType
    description: str
    entry_id: str  # the existing entry that collides
    session_block_id: str
    room_id: str
    faculty_id: str | None = None
    day: Weekday
    time_slot_id: str
    start_time: str
    end_time: str
    proposed_start_time: str
    proposed_end_time: str


class ConflictReport(BaseModel):
    has_conflict: bool = False
    conflicts: list[ConflictDetail] = Field(default_factory=list)

    @classmethod
    def from_conflicts(cls, conflicts: list[ConflictDetail]) -> "ConflictReport":
        return cls(has_conflict=bool(conflicts), conflicts=conflicts)


class PlacementCheckRequest(BaseModel):
    day: str = Field(min_length=2, max_length=16)
    time_slot_id: str = Field(min_length=1, max_length=36)
    room_id: str = Field(min_length=1, max_length=36)
    faculty_id: str | None = Field(default=None, max_length=36)
    session_block_id: str | None = Field(default=None, max_length=36)
    exclude_entry_id: str | None = Field(default=None, max_length=36)
    slots_span: int = Field(default=1, ge=1)


class EntryClash(BaseModel):
    """Two stored entries that collide; the window is their shared overlap."""

    id: str
    conflict_type: ConflictType
    description: str
    day: Weekday
    entry_ids: list[str]
    room_id: str | None = None
    faculty_id: str | None = None
    start_time: str
    end_time: str


class ScheduleConflictReport(BaseModel):
    schedule_id: str
    has_conflict: bool = False
    conflicts: list[EntryClash] = Field(default_factory=list)
