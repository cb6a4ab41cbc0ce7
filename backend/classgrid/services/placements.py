from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select, update
from sqlalchemy.orm import Session

from classgrid.core.exceptions import ResourceNotFoundError, ScheduleValidationError
from classgrid.models.change_request import ChangeRequest
from classgrid.models.room import Room
from classgrid.models.schedule_entry import ScheduleEntry
from classgrid.models.session_block import SessionBlock
from classgrid.models.time_slot import Weekday
from classgrid.schemas.conflict import ConflictReport, ScheduleConflictReport
from classgrid.schemas.schedule import ScheduleEntryOut
from classgrid.services.conflict_service import ConflictService, Placement
from classgrid.services.day_groups import parse_weekday
from classgrid.services.intervals import SlotCatalog
from classgrid.services.pairing import find_paired_entry
from classgrid.services.relocation import RelocationPlan, plan_relocation


def get_entry(db: Session, entry_id: str, *, for_update: bool = False) -> ScheduleEntry:
    query = select(ScheduleEntry).where(ScheduleEntry.id == entry_id).execution_options(populate_existing=True)
    if for_update:
        query = query.with_for_update()
    entry = db.execute(query).scalar_one_or_none()
    if entry is None:
        raise ResourceNotFoundError("Schedule entry", entry_id)
    return entry


def require_room(db: Session, room_id: str) -> Room:
    room = db.get(Room, room_id)
    if room is None:
        raise ScheduleValidationError(f"Unknown room: {room_id}", details={"room_id": room_id})
    return room


def load_schedule_entries(
    db: Session,
    schedule_id: str,
    days: Iterable[Weekday] | None = None,
) -> list[ScheduleEntry]:
    query = select(ScheduleEntry).where(ScheduleEntry.schedule_id == schedule_id)
    if days is not None:
        query = query.where(ScheduleEntry.day.in_(list(days)))
    query = query.order_by(ScheduleEntry.day, ScheduleEntry.id).execution_options(populate_existing=True)
    return list(db.execute(query).scalars())


def build_conflict_service(
    db: Session,
    entries: list[ScheduleEntry],
    catalog: SlotCatalog,
    extra_block_ids: Iterable[str] = (),
) -> ConflictService:
    block_ids = {item.session_block_id for item in entries} | set(extra_block_ids)
    room_ids = {item.room_id for item in entries}
    blocks = list(db.execute(select(SessionBlock).where(SessionBlock.id.in_(block_ids))).scalars())
    block_labels = {item.id: item.display_code for item in blocks}
    block_cohorts = {item.id: item.cohort for item in blocks}
    room_labels = {
        item.id: item.name
        for item in db.execute(select(Room).where(Room.id.in_(room_ids))).scalars()
    }
    return ConflictService(
        entries,
        catalog,
        block_labels=block_labels,
        room_labels=room_labels,
        block_cohorts=block_cohorts,
    )


def detect_conflicts(
    db: Session,
    *,
    schedule_id: str,
    day: str | Weekday,
    time_slot_id: str,
    room_id: str,
    catalog: SlotCatalog,
    faculty_id: str | None = None,
    session_block_id: str | None = None,
    exclude_entry_id: str | None = None,
    slots_span: int = 1,
) -> ConflictReport:
    """Check a single slot-aligned placement against the schedule's current entries.

    Room clashes are always checked; faculty and student-block clashes only
    when ``faculty_id`` or ``session_block_id`` is given.
    """
    weekday = parse_weekday(day)
    slot = catalog.require(time_slot_id)
    require_room(db, room_id)
    placement = Placement(
        day=weekday,
        time_slot_id=slot.id,
        room_id=room_id,
        interval=catalog.slot_interval(slot, slots_span),
        faculty_id=faculty_id,
        session_block_id=session_block_id,
    )
    entries = load_schedule_entries(db, schedule_id, [weekday])
    extra = [session_block_id] if session_block_id else []
    service = build_conflict_service(db, entries, catalog, extra)
    excluded = [exclude_entry_id] if exclude_entry_id else []
    return service.detect_conflicts(placement, excluded)


def build_relocation_plan(
    db: Session,
    entry: ScheduleEntry,
    *,
    target_day: str | Weekday,
    target_slot_id: str,
    target_room_id: str,
    catalog: SlotCatalog,
    for_update: bool = False,
) -> RelocationPlan:
    day = parse_weekday(target_day)
    slot = catalog.require(target_slot_id)
    require_room(db, target_room_id)
    pair = find_paired_entry(db, entry, for_update=for_update)
    return plan_relocation(
        entry,
        pair,
        target_day=day,
        target_slot=slot,
        target_room_id=target_room_id,
        catalog=catalog,
    )


def detect_plan_conflicts(
    db: Session,
    entry: ScheduleEntry,
    plan: RelocationPlan,
    catalog: SlotCatalog,
) -> ConflictReport:
    days = {item.day for item in plan.placements}
    entries = load_schedule_entries(db, entry.schedule_id, days)
    service = build_conflict_service(db, entries, catalog, [entry.session_block_id])
    return service.detect_plan_conflicts(plan.conflict_placements(), plan.exclude_entry_ids)


def schedule_conflict_report(db: Session, schedule_id: str, catalog: SlotCatalog) -> ScheduleConflictReport:
    entries = load_schedule_entries(db, schedule_id)
    clashes = build_conflict_service(db, entries, catalog).analyze_schedule()
    return ScheduleConflictReport(schedule_id=schedule_id, has_conflict=bool(clashes), conflicts=clashes)


def apply_relocation_plan(db: Session, source: ScheduleEntry, plan: RelocationPlan) -> list[ScheduleEntry]:
    """Stage every row change of ``plan``. The caller owns the transaction."""
    rows: dict[str, ScheduleEntry] = {source.id: source}
    if plan.paired_entry_id:
        rows[plan.paired_entry_id] = get_entry(db, plan.paired_entry_id)

    touched: list[ScheduleEntry] = []
    for placement in plan.placements:
        if placement.entry_id is None:
            row = ScheduleEntry(
                schedule_id=source.schedule_id,
                session_block_id=source.session_block_id,
                is_lab_session=source.is_lab_session,
            )
            db.add(row)
        else:
            row = rows[placement.entry_id]
        row.day = placement.day
        row.time_slot_id = placement.time_slot_id
        row.room_id = placement.room_id
        row.faculty_id = placement.faculty_id
        row.custom_start_time = placement.interval.start_time
        row.custom_end_time = placement.interval.end_time
        row.slots_span = placement.slots_span
        row.session_group_id = plan.session_group_id
        touched.append(row)

    if plan.drop_entry_ids:
        # Requests on a merged entry stay as history without an entry link.
        db.execute(
            update(ChangeRequest)
            .where(ChangeRequest.schedule_entry_id.in_(plan.drop_entry_ids))
            .values(schedule_entry_id=None)
        )
        for entry_id in plan.drop_entry_ids:
            db.delete(rows[entry_id])
    db.flush()
    return touched


def entry_to_out(entry: ScheduleEntry, catalog: SlotCatalog) -> ScheduleEntryOut:
    interval = catalog.entry_interval(entry)
    return ScheduleEntryOut(
        id=entry.id,
        schedule_id=entry.schedule_id,
        session_block_id=entry.session_block_id,
        room_id=entry.room_id,
        time_slot_id=entry.time_slot_id,
        faculty_id=entry.faculty_id,
        day=entry.day,
        is_lab_session=entry.is_lab_session,
        session_group_id=entry.session_group_id,
        slots_span=entry.slots_span,
        start_time=interval.start_time,
        end_time=interval.end_time,
        duration_minutes=interval.duration,
    )
