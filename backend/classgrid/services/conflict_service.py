from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable
from dataclasses import dataclass

from classgrid.models.schedule_entry import ScheduleEntry
from classgrid.models.time_slot import Weekday
from classgrid.schemas.conflict import ConflictDetail, ConflictReport, EntryClash
from classgrid.services.intervals import Interval, SlotCatalog

ID_PREFIXES = {"room_conflict": "room", "faculty_conflict": "fac", "block_conflict": "blk"}


@dataclass(frozen=True)
class Placement:
    """A proposed position on the grid for one occurrence of a session."""

    day: Weekday
    time_slot_id: str
    room_id: str
    interval: Interval
    faculty_id: str | None = None
    session_block_id: str | None = None


class ConflictService:
    """Checks proposed placements against a snapshot of one schedule's entries.

    The service never touches the database; callers load the entries they want
    checked. Running it twice on the same snapshot gives the same report.

    ``block_cohorts`` maps a session block id to its (year level, block number);
    two blocks with the same cohort share students, so they cannot overlap.
    """

    def __init__(
        self,
        entries: Iterable[ScheduleEntry],
        catalog: SlotCatalog,
        block_labels: dict[str, str] | None = None,
        room_labels: dict[str, str] | None = None,
        block_cohorts: dict[str, tuple[int, int]] | None = None,
    ):
        self.catalog = catalog
        self.block_labels = block_labels or {}
        self.room_labels = room_labels or {}
        self.block_cohorts = block_cohorts or {}
        self._by_day: dict[Weekday, list[tuple[ScheduleEntry, Interval]]] = defaultdict(list)
        for entry in entries:
            self._by_day[entry.day].append((entry, catalog.entry_interval(entry)))

    def detect_conflicts(self, placement: Placement, exclude_entry_ids: Iterable[str] = ()) -> ConflictReport:
        return ConflictReport.from_conflicts(self._collect(placement, set(exclude_entry_ids)))

    def detect_plan_conflicts(
        self,
        placements: Iterable[Placement],
        exclude_entry_ids: Iterable[str] = (),
    ) -> ConflictReport:
        excluded = set(exclude_entry_ids)
        conflicts: list[ConflictDetail] = []
        for placement in placements:
            conflicts.extend(self._collect(placement, excluded))
        return ConflictReport.from_conflicts(conflicts)

    def _cohort(self, session_block_id: str | None) -> tuple[int, int] | None:
        if session_block_id is None:
            return None
        return self.block_cohorts.get(session_block_id)

    def _label(self, entry: ScheduleEntry) -> str:
        return self.block_labels.get(entry.session_block_id, entry.session_block_id)

    def _collect(self, placement: Placement, excluded: set[str]) -> list[ConflictDetail]:
        conflicts: list[ConflictDetail] = []
        cohort = self._cohort(placement.session_block_id)
        for other, other_interval in self._by_day.get(placement.day, []):
            if other.id in excluded:
                continue
            if not placement.interval.overlaps(other_interval):
                continue

            label = self._label(other)
            window = f"{placement.day.value} {other_interval.start_time}-{other_interval.end_time}"
            if other.room_id == placement.room_id:
                room_name = self.room_labels.get(other.room_id, other.room_id)
                conflicts.append(
                    self._detail(
                        "room_conflict",
                        f"Room {room_name} is occupied by {label} on {window}",
                        placement,
                        other,
                        other_interval,
                    )
                )
            if placement.faculty_id and other.faculty_id == placement.faculty_id:
                conflicts.append(
                    self._detail(
                        "faculty_conflict",
                        f"Faculty is already teaching {label} on {window}",
                        placement,
                        other,
                        other_interval,
                    )
                )
            if cohort is not None and self._cohort(other.session_block_id) == cohort:
                conflicts.append(
                    self._detail(
                        "block_conflict",
                        f"Students of year {cohort[0]} block {cohort[1]} already have {label} on {window}",
                        placement,
                        other,
                        other_interval,
                    )
                )
        return conflicts

    @staticmethod
    def _detail(
        conflict_type: str,
        description: str,
        placement: Placement,
        other: ScheduleEntry,
        other_interval: Interval,
    ) -> ConflictDetail:
        return ConflictDetail(
            id=f"{ID_PREFIXES[conflict_type]}-{placement.day.value}-{placement.interval.start_time}-{other.id}",
            conflict_type=conflict_type,
            description=description,
            entry_id=other.id,
            session_block_id=other.session_block_id,
            room_id=other.room_id,
            faculty_id=other.faculty_id,
            day=other.day,
            time_slot_id=other.time_slot_id,
            start_time=other_interval.start_time,
            end_time=other_interval.end_time,
            proposed_start_time=placement.interval.start_time,
            proposed_end_time=placement.interval.end_time,
        )

    def analyze_schedule(self) -> list[EntryClash]:
        """Every room, faculty and student-block clash among the stored entries.

        Each colliding pair is reported once per conflict class, ordered by
        weekday and then by start time.
        """
        clashes: list[EntryClash] = []
        for day in Weekday:
            bookings = sorted(self._by_day.get(day, []), key=lambda item: (item[1].start, item[0].id))
            for index, (entry, interval) in enumerate(bookings):
                for other, other_interval in bookings[index + 1 :]:
                    if other_interval.start >= interval.end:
                        break
                    clashes.extend(self._pair_clashes(day, entry, interval, other, other_interval))
        return clashes

    def _pair_clashes(
        self,
        day: Weekday,
        entry: ScheduleEntry,
        interval: Interval,
        other: ScheduleEntry,
        other_interval: Interval,
    ) -> list[EntryClash]:
        overlap = Interval(max(interval.start, other_interval.start), min(interval.end, other_interval.end))
        labels = f"{self._label(entry)} and {self._label(other)}"
        found: list[tuple[str, str, str | None, str | None]] = []
        if entry.room_id == other.room_id:
            room_name = self.room_labels.get(entry.room_id, entry.room_id)
            found.append(("room_conflict", f"Room {room_name} is double-booked by {labels}", entry.room_id, None))
        if entry.faculty_id and entry.faculty_id == other.faculty_id:
            found.append(("faculty_conflict", f"Faculty is teaching both {labels}", None, entry.faculty_id))
        cohort = self._cohort(entry.session_block_id)
        if cohort is not None and cohort == self._cohort(other.session_block_id):
            found.append(
                ("block_conflict", f"Students of year {cohort[0]} block {cohort[1]} have both {labels}", None, None)
            )

        return [
            EntryClash(
                id=f"{ID_PREFIXES[conflict_type]}-{day.value}-{entry.id}-{other.id}",
                conflict_type=conflict_type,
                description=f"{description} on {day.value} {overlap.start_time}-{overlap.end_time}",
                day=day,
                entry_ids=[entry.id, other.id],
                room_id=room_id,
                faculty_id=faculty_id,
                start_time=overlap.start_time,
                end_time=overlap.end_time,
            )
            for conflict_type, description, room_id, faculty_id in found
        ]
