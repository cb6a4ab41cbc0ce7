from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass

from sqlalchemy import select
from sqlalchemy.orm import Session

from classgrid.core.exceptions import InvariantViolationError, ScheduleValidationError
from classgrid.models.schedule_entry import ScheduleEntry
from classgrid.models.time_slot import DayGroup, TimeSlot
from classgrid.schemas.schedule import MINUTES_PER_DAY, minutes_to_hhmm, parse_time_to_minutes


@dataclass(frozen=True)
class Interval:
    """Half-open [start, end) window in minutes after midnight."""

    start: int
    end: int

    @property
    def duration(self) -> int:
        return self.end - self.start

    @property
    def start_time(self) -> str:
        return minutes_to_hhmm(self.start)

    @property
    def end_time(self) -> str:
        return minutes_to_hhmm(self.end)

    def overlaps(self, other: "Interval") -> bool:
        return self.start < other.end and other.start < self.end


def interval_from_times(start_time: str, end_time: str) -> Interval:
    try:
        start = parse_time_to_minutes(start_time)
        end = parse_time_to_minutes(end_time)
    except ValueError as exc:
        raise ScheduleValidationError(
            str(exc),
            details={"start_time": start_time, "end_time": end_time},
        ) from exc
    if end <= start:
        raise ScheduleValidationError(
            "End time must be after start time",
            details={"start_time": start_time, "end_time": end_time},
        )
    return Interval(start, end)


def interval_from_start(start: int, duration_minutes: int) -> Interval:
    end = start + duration_minutes
    if end >= MINUTES_PER_DAY:
        raise ScheduleValidationError(
            "Session would run past midnight",
            details={"start_time": minutes_to_hhmm(start), "duration_minutes": duration_minutes},
        )
    return Interval(start, end)


class SlotCatalog:
    """Read-only view over the time-slot catalog, grouped by day-group and ordered by start."""

    def __init__(self, slots: Iterable[TimeSlot]):
        self._by_id: dict[str, TimeSlot] = {}
        by_group: dict[DayGroup, list[TimeSlot]] = defaultdict(list)
        for slot in slots:
            self._by_id[slot.id] = slot
            by_group[slot.day_group].append(slot)
        self._by_group = {
            group: sorted(items, key=lambda item: parse_time_to_minutes(item.start_time))
            for group, items in by_group.items()
        }

    def get(self, slot_id: str) -> TimeSlot | None:
        return self._by_id.get(slot_id)

    def require(self, slot_id: str) -> TimeSlot:
        slot = self._by_id.get(slot_id)
        if slot is None:
            raise ScheduleValidationError(f"Unknown time slot: {slot_id}", details={"time_slot_id": slot_id})
        return slot

    def _following(self, slot: TimeSlot) -> list[TimeSlot]:
        ordered = self._by_group.get(slot.day_group, [])
        for index, item in enumerate(ordered):
            if item.id == slot.id:
                return ordered[index + 1 :]
        return []

    def slot_interval(self, slot: TimeSlot, slots_span: int = 1) -> Interval:
        interval = interval_from_times(slot.start_time, slot.end_time)
        end = interval.end
        following = self._following(slot)
        for step in range(max(1, slots_span) - 1):
            if step < len(following) and parse_time_to_minutes(following[step].start_time) >= end:
                end = parse_time_to_minutes(following[step].end_time)
            else:
                end += slot.duration_minutes
        if end >= MINUTES_PER_DAY:
            raise ScheduleValidationError(
                "Slot span runs past midnight",
                details={"time_slot_id": slot.id, "slots_span": slots_span},
            )
        return Interval(interval.start, end)

    def span_for(self, slot: TimeSlot, end: int) -> int:
        """Number of catalog slots, starting at ``slot``, that an interval ending at ``end`` touches."""
        span = 1
        for item in self._following(slot):
            if parse_time_to_minutes(item.start_time) >= end:
                break
            span += 1
        return span

    def entry_interval(self, entry: ScheduleEntry) -> Interval:
        if entry.has_custom_time:
            return interval_from_times(entry.custom_start_time, entry.custom_end_time)
        slot = self._by_id.get(entry.time_slot_id)
        if slot is None:
            raise InvariantViolationError(
                "Schedule entry references a time slot missing from the catalog",
                context={"entry_id": entry.id, "time_slot_id": entry.time_slot_id},
            )
        return self.slot_interval(slot, entry.slots_span or 1)


def load_slot_catalog(db: Session) -> SlotCatalog:
    return SlotCatalog(db.execute(select(TimeSlot)).scalars())
