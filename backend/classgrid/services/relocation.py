from __future__ import annotations

import uuid
from dataclasses import dataclass, field

from classgrid.models.schedule_entry import ScheduleEntry
from classgrid.models.time_slot import TimeSlot, Weekday
from classgrid.schemas.schedule import parse_time_to_minutes
from classgrid.services.conflict_service import Placement
from classgrid.services.day_groups import day_group_for, ensure_slot_matches_day
from classgrid.services.duration import DurationTransform, PairingAction, transform_duration
from classgrid.services.intervals import Interval, SlotCatalog, interval_from_start


@dataclass(frozen=True)
class PlannedPlacement:
    # None means the row does not exist yet and will be inserted.
    entry_id: str | None
    role: str
    day: Weekday
    time_slot_id: str
    room_id: str
    faculty_id: str | None
    interval: Interval
    slots_span: int
    session_block_id: str | None = None

    def as_placement(self) -> Placement:
        return Placement(
            day=self.day,
            time_slot_id=self.time_slot_id,
            room_id=self.room_id,
            interval=self.interval,
            faculty_id=self.faculty_id,
            session_block_id=self.session_block_id,
        )


@dataclass
class RelocationPlan:
    source_entry_id: str
    paired_entry_id: str | None
    session_group_id: str
    transform: DurationTransform
    placements: list[PlannedPlacement] = field(default_factory=list)
    drop_entry_ids: list[str] = field(default_factory=list)

    @property
    def exclude_entry_ids(self) -> set[str]:
        ids = {self.source_entry_id}
        if self.paired_entry_id:
            ids.add(self.paired_entry_id)
        return ids

    def conflict_placements(self) -> list[Placement]:
        return [item.as_placement() for item in self.placements]

    def summary(self) -> dict:
        return {
            "pairing": self.transform.pairing.value,
            "new_duration_minutes": self.transform.new_duration_minutes,
            "paired_day": self.transform.paired_day.value if self.transform.paired_day else None,
            "placements": [
                {
                    "entry_id": item.entry_id,
                    "role": item.role,
                    "day": item.day.value,
                    "room_id": item.room_id,
                    "time_slot_id": item.time_slot_id,
                    "start_time": item.interval.start_time,
                    "end_time": item.interval.end_time,
                }
                for item in self.placements
            ],
            "dropped_entry_ids": list(self.drop_entry_ids),
        }


def plan_relocation(
    entry: ScheduleEntry,
    pair: ScheduleEntry | None,
    *,
    target_day: Weekday,
    target_slot: TimeSlot,
    target_room_id: str,
    catalog: SlotCatalog,
) -> RelocationPlan:
    """Work out every row change a move of ``entry`` implies, without touching the database."""
    ensure_slot_matches_day(target_slot.day_group, target_day)

    source_interval = catalog.entry_interval(entry)
    transform = transform_duration(
        day_group_for(entry.day),
        target_slot.day_group,
        source_interval.duration,
        target_day=target_day,
    )
    interval = interval_from_start(parse_time_to_minutes(target_slot.start_time), transform.new_duration_minutes)
    span = catalog.span_for(target_slot, interval.end)

    group_id = entry.session_group_id or (pair.session_group_id if pair is not None else None) or str(uuid.uuid4())
    plan = RelocationPlan(
        source_entry_id=entry.id,
        paired_entry_id=pair.id if pair is not None else None,
        session_group_id=group_id,
        transform=transform,
    )
    plan.placements.append(
        PlannedPlacement(
            entry_id=entry.id,
            role="source",
            day=target_day,
            time_slot_id=target_slot.id,
            room_id=target_room_id,
            faculty_id=entry.faculty_id,
            interval=interval,
            slots_span=span,
            session_block_id=entry.session_block_id,
        )
    )

    if transform.pairing in (PairingAction.keep, PairingAction.repoint) and pair is not None:
        plan.placements.append(
            PlannedPlacement(
                entry_id=pair.id,
                role="pair",
                day=transform.paired_day,
                time_slot_id=target_slot.id,
                room_id=target_room_id,
                faculty_id=pair.faculty_id,
                interval=interval,
                slots_span=span,
                session_block_id=entry.session_block_id,
            )
        )
    elif transform.pairing == PairingAction.drop and pair is not None:
        plan.drop_entry_ids.append(pair.id)
    elif transform.pairing == PairingAction.create:
        plan.placements.append(
            PlannedPlacement(
                entry_id=pair.id if pair is not None else None,
                role="pair",
                day=transform.paired_day,
                time_slot_id=target_slot.id,
                room_id=target_room_id,
                faculty_id=entry.faculty_id,
                interval=interval,
                slots_span=span,
                session_block_id=entry.session_block_id,
            )
        )
    return plan
