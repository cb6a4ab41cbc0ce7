from __future__ import annotations

from classgrid.core.exceptions import ScheduleValidationError
from classgrid.models.time_slot import DayGroup, Weekday

DAY_GROUP_DAYS: dict[DayGroup, tuple[Weekday, ...]] = {
    DayGroup.twice_weekly_a: (Weekday.monday, Weekday.wednesday),
    DayGroup.twice_weekly_b: (Weekday.tuesday, Weekday.thursday),
    DayGroup.once_weekly_c: (Weekday.friday,),
    DayGroup.once_weekly_d: (Weekday.saturday,),
    DayGroup.once_weekly_e: (Weekday.sunday,),
}

DAY_TO_GROUP: dict[Weekday, DayGroup] = {
    day: group for group, days in DAY_GROUP_DAYS.items() for day in days
}

PARTNER_DAYS: dict[Weekday, Weekday] = {
    Weekday.monday: Weekday.wednesday,
    Weekday.wednesday: Weekday.monday,
    Weekday.tuesday: Weekday.thursday,
    Weekday.thursday: Weekday.tuesday,
}

DAY_SHORT_MAP = {
    "mon": Weekday.monday,
    "tue": Weekday.tuesday,
    "wed": Weekday.wednesday,
    "thu": Weekday.thursday,
    "fri": Weekday.friday,
    "sat": Weekday.saturday,
    "sun": Weekday.sunday,
}


def parse_weekday(value: str | Weekday) -> Weekday:
    if isinstance(value, Weekday):
        return value
    normalized = str(value).strip().lower()
    normalized = DAY_SHORT_MAP.get(normalized, normalized)
    try:
        return Weekday(normalized)
    except ValueError as exc:
        raise ScheduleValidationError(f"Unknown day: {value!r}", details={"day": str(value)}) from exc


def day_group_for(day: Weekday) -> DayGroup:
    return DAY_TO_GROUP[day]


def is_twice_weekly(group: DayGroup) -> bool:
    return len(DAY_GROUP_DAYS[group]) == 2


def partner_day(day: Weekday) -> Weekday | None:
    return PARTNER_DAYS.get(day)


def ensure_slot_matches_day(group: DayGroup, day: Weekday) -> None:
    if day not in DAY_GROUP_DAYS[group]:
        raise ScheduleValidationError(
            f"Time slot of group {group.value} does not run on {day.value}",
            details={"day_group": group.value, "day": day.value},
        )
