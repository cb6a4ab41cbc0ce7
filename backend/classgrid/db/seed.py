from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.orm import Session

from classgrid.models.time_slot import DayGroup, TimeSlot
from classgrid.schemas.schedule import parse_time_to_minutes

logger = logging.getLogger(__name__)

# 90-minute teaching slots with 5-minute breaks and a lunch gap after the third slot.
DEFAULT_SLOT_TIMES: list[tuple[str, str]] = [
    ("08:00", "09:30"),
    ("09:35", "11:05"),
    ("11:10", "12:40"),
    ("13:00", "14:30"),
    ("14:35", "16:05"),
    ("16:10", "17:40"),
    ("17:45", "19:15"),
]


def default_time_slots() -> list[dict]:
    rows: list[dict] = []
    for group in DayGroup:
        for priority, (start, end) in enumerate(DEFAULT_SLOT_TIMES, start=1):
            rows.append(
                {
                    "name": f"{group.value} #{priority} {start}-{end}",
                    "start_time": start,
                    "end_time": end,
                    "duration_minutes": parse_time_to_minutes(end) - parse_time_to_minutes(start),
                    "day_group": group,
                    "priority": priority,
                }
            )
    return rows


def seed_time_slots(db: Session) -> int:
    """Insert the default catalog rows that are not present yet. Returns the number created."""
    existing = {
        (item.day_group, item.start_time)
        for item in db.execute(select(TimeSlot)).scalars()
    }
    created = 0
    for row in default_time_slots():
        if (row["day_group"], row["start_time"]) in existing:
            continue
        db.add(TimeSlot(**row))
        created += 1
    db.commit()
    logger.info("Seeded %d time slot(s)", created)
    return created
