"""Weekly contact-minute conservation for moves between meeting patterns.

A twice-weekly session meets on both days of its family, so its weekly contact
time is twice the per-meeting duration. Moving it onto a single day doubles the
meeting length; moving a single-day session onto a twice-weekly family halves it.
"""
from __future__ import annotations

from dataclasses import dataclass
from enum import Enum

from classgrid.core.exceptions import ScheduleValidationError
from classgrid.models.time_slot import DayGroup, Weekday
from classgrid.services.day_groups import ensure_slot_matches_day, is_twice_weekly, partner_day


class PairingAction(str, Enum):
    none = "none"
    keep = "keep"
    repoint = "repoint"
    drop = "drop"
    create = "create"


@dataclass(frozen=True)
class DurationTransform:
    new_duration_minutes: int
    pairing: PairingAction
    paired_day: Weekday | None = None


def transform_duration(
    source_group: DayGroup,
    target_group: DayGroup,
    source_duration_minutes: int,
    *,
    target_day: Weekday | None = None,
) -> DurationTransform:
    if source_duration_minutes <= 0:
        raise ScheduleValidationError(
            "Session duration must be positive",
            details={"duration_minutes": source_duration_minutes},
        )
    if target_day is not None:
        ensure_slot_matches_day(target_group, target_day)

    paired_day = partner_day(target_day) if target_day is not None else None
    source_twice = is_twice_weekly(source_group)
    target_twice = is_twice_weekly(target_group)

    if source_twice and target_twice:
        pairing = PairingAction.keep if source_group == target_group else PairingAction.repoint
        return DurationTransform(source_duration_minutes, pairing, paired_day)

    if source_twice and not target_twice:
        return DurationTransform(source_duration_minutes * 2, PairingAction.drop)

    if not source_twice and target_twice:
        if source_duration_minutes % 2:
            raise ScheduleValidationError(
                "A once-weekly session can only be split across two days when its duration is even",
                details={"duration_minutes": source_duration_minutes},
            )
        return DurationTransform(source_duration_minutes // 2, PairingAction.create, paired_day)

    return DurationTransform(source_duration_minutes, PairingAction.none)
