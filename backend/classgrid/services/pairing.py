from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from classgrid.core.exceptions import InvariantViolationError
from classgrid.models.schedule_entry import ScheduleEntry
from classgrid.services.day_groups import partner_day

logger = logging.getLogger(__name__)


def find_paired_entry(db: Session, entry: ScheduleEntry, *, for_update: bool = False) -> ScheduleEntry | None:
    """Return the other occurrence of ``entry``'s twice-weekly session, if any.

    Entries written by this service always carry a session-group id. Rows from
    older imports may not, in which case the partner is inferred from the
    schedule, session block, lab flag, time slot and partner weekday.
    """
    if entry.session_group_id:
        query = select(ScheduleEntry).where(
            ScheduleEntry.schedule_id == entry.schedule_id,
            ScheduleEntry.session_group_id == entry.session_group_id,
            ScheduleEntry.id != entry.id,
        )
        basis = "session_group"
    else:
        other_day = partner_day(entry.day)
        if other_day is None:
            return None
        query = select(ScheduleEntry).where(
            ScheduleEntry.schedule_id == entry.schedule_id,
            ScheduleEntry.session_block_id == entry.session_block_id,
            ScheduleEntry.is_lab_session == entry.is_lab_session,
            ScheduleEntry.time_slot_id == entry.time_slot_id,
            ScheduleEntry.day == other_day,
            ScheduleEntry.session_group_id.is_(None),
            ScheduleEntry.id != entry.id,
        )
        basis = "legacy_attributes"

    query = query.order_by(ScheduleEntry.id)
    if for_update:
        query = query.with_for_update()
    candidates = list(db.execute(query).scalars())

    if len(candidates) > 1:
        context = {
            "entry_id": entry.id,
            "basis": basis,
            "candidate_ids": [item.id for item in candidates],
        }
        logger.error("Ambiguous paired entry lookup: %s", context)
        raise InvariantViolationError("More than one paired entry candidate", context=context)
    return candidates[0] if candidates else None


def pairing_key(entry: ScheduleEntry) -> tuple:
    """Key shared by both occurrences of one session, used to count sessions once."""
    if entry.session_group_id:
        return ("group", entry.session_group_id)
    other_day = partner_day(entry.day)
    if other_day is None:
        return ("entry", entry.id)
    days = tuple(sorted((entry.day.value, other_day.value)))
    return (
        "legacy",
        entry.schedule_id,
        entry.session_block_id,
        entry.is_lab_session,
        entry.time_slot_id,
        days,
    )
