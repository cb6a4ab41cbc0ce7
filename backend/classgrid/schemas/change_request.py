from datetime import datetime

from pydantic import BaseModel, Field

from classgrid.models.change_request import ChangeRequestStatus, ReviewDecision
from classgrid.models.time_slot import Weekday
from classgrid.schemas.conflict import ConflictReport


class ConflictCheckRequest(BaseModel):
    schedule_entry_id: str = Field(min_length=1, max_length=36)
    target_day: str = Field(min_length=2, max_length=16)
    target_time_slot_id: str = Field(min_length=1, max_length=36)
    target_room_id: str = Field(min_length=1, max_length=36)


class ChangeRequestCreate(ConflictCheckRequest):
    reason: str | None = Field(default=None, max_length=1000)


class ChangeRequestReview(BaseModel):
    decision: ReviewDecision
    notes: str | None = Field(default=None, max_length=1000)


class ChangeRequestOut(BaseModel):
    id: str
    # Empty once the entry has been merged into its partner.
    schedule_entry_id: str | None = None
    requester_id: str
    target_day: Weekday
    target_time_slot_id: str
    target_room_id: str
    reason: str | None = None
    status: ChangeRequestStatus
    conflict_snapshot: ConflictReport = Field(default_factory=ConflictReport)
    reviewer_notes: str | None = None
    reviewed_by_id: str | None = None
    reviewed_at: datetime | None = None
    created_at: datetime
    updated_at: datetime | None = None
    # Where the entry currently sits.
    current_day: Weekday | None = None
    current_time_slot_id: str | None = None
    current_room_id: str | None = None

    model_config = {"from_attributes": True}
