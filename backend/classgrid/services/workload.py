from __future__ import annotations

from collections import defaultdict
from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.orm import Session

from classgrid.models.schedule_entry import ScheduleEntry
from classgrid.models.session_block import SessionBlock
from classgrid.models.user import User
from classgrid.schemas.schedule import FacultyLoadOut
from classgrid.services.pairing import pairing_key

UNASSIGNED_LABEL = "UNASSIGNED"


def faculty_unit_load(
    entries: Iterable[ScheduleEntry],
    units_by_block: dict[str, int],
) -> dict[str | None, tuple[int, int, list[str]]]:
    """Total units per faculty, counting each session once.

    Both occurrences of a twice-weekly session share a pairing key, so the
    session's units are added a single time; a once-weekly session has one
    row and contributes its full units.
    Returns ``{faculty_id: (total_units, session_count, entry_ids)}``.
    """
    seen: dict[str | None, set[tuple]] = defaultdict(set)
    totals: dict[str | None, int] = defaultdict(int)
    entry_ids: dict[str | None, list[str]] = defaultdict(list)
    for entry in entries:
        faculty_id = entry.faculty_id
        entry_ids[faculty_id].append(entry.id)
        key = pairing_key(entry)
        if key in seen[faculty_id]:
            continue
        seen[faculty_id].add(key)
        totals[faculty_id] += units_by_block.get(entry.session_block_id, 0)
    return {
        faculty_id: (totals[faculty_id], len(seen[faculty_id]), entry_ids[faculty_id])
        for faculty_id in entry_ids
    }


def schedule_teaching_load(db: Session, schedule_id: str) -> list[FacultyLoadOut]:
    entries = list(
        db.execute(
            select(ScheduleEntry).where(ScheduleEntry.schedule_id == schedule_id).order_by(ScheduleEntry.id)
        ).scalars()
    )
    block_ids = {item.session_block_id for item in entries}
    units_by_block = {
        item.id: item.units
        for item in db.execute(select(SessionBlock).where(SessionBlock.id.in_(block_ids))).scalars()
    }
    faculty_ids = {item.faculty_id for item in entries if item.faculty_id}
    names = {
        item.id: item.name
        for item in db.execute(select(User).where(User.id.in_(faculty_ids))).scalars()
    }

    output = [
        FacultyLoadOut(
            faculty_id=faculty_id,
            faculty_name=names.get(faculty_id, UNASSIGNED_LABEL) if faculty_id else UNASSIGNED_LABEL,
            total_units=total,
            session_count=sessions,
            entry_ids=ids,
        )
        for faculty_id, (total, sessions, ids) in faculty_unit_load(entries, units_by_block).items()
    ]
    return sorted(output, key=lambda item: item.faculty_name)
