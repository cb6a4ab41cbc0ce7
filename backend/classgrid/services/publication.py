from __future__ import annotations

from classgrid.core.exceptions import LockedScheduleError
from classgrid.models.schedule import Schedule, ScheduleStatus


def schedule_accepts_edits(schedule: Schedule) -> bool:
    return not schedule.is_locked and schedule.status != ScheduleStatus.archived


def ensure_schedule_editable(schedule: Schedule) -> None:
    if not schedule_accepts_edits(schedule):
        raise LockedScheduleError(schedule.id)
