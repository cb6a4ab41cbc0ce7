import pytest

from classgrid.core.exceptions import ScheduleValidationError
from classgrid.models.time_slot import DayGroup, Weekday
from classgrid.services.duration import PairingAction, transform_duration


def test_twice_weekly_to_once_weekly_doubles_and_drops_pair():
    result = transform_duration(DayGroup.twice_weekly_a, DayGroup.once_weekly_c, 90, target_day=Weekday.friday)
    assert result.new_duration_minutes == 180
    assert result.pairing == PairingAction.drop
    assert result.paired_day is None


def test_once_weekly_to_twice_weekly_halves_and_creates_pair():
    result = transform_duration(DayGroup.once_weekly_c, DayGroup.twice_weekly_b, 180, target_day=Weekday.tuesday)
    assert result.new_duration_minutes == 90
    assert result.pairing == PairingAction.create
    assert result.paired_day == Weekday.thursday


def test_same_twice_weekly_family_keeps_pair_on_partner_day():
    result = transform_duration(DayGroup.twice_weekly_a, DayGroup.twice_weekly_a, 90, target_day=Weekday.wednesday)
    assert result.new_duration_minutes == 90
    assert result.pairing == PairingAction.keep
    assert result.paired_day == Weekday.monday


def test_switching_twice_weekly_family_repoints_pair():
    result = transform_duration(DayGroup.twice_weekly_a, DayGroup.twice_weekly_b, 60, target_day=Weekday.tuesday)
    assert result.new_duration_minutes == 60
    assert result.pairing == PairingAction.repoint
    assert result.paired_day == Weekday.thursday


def test_once_weekly_to_once_weekly_is_unchanged():
    result = transform_duration(DayGroup.once_weekly_c, DayGroup.once_weekly_e, 180, target_day=Weekday.sunday)
    assert result.new_duration_minutes == 180
    assert result.pairing == PairingAction.none


@pytest.mark.parametrize("minutes", [60, 90, 120, 180])
def test_once_twice_once_round_trip_restores_duration(minutes):
    split = transform_duration(DayGroup.once_weekly_d, DayGroup.twice_weekly_a, minutes)
    merged = transform_duration(DayGroup.twice_weekly_a, DayGroup.once_weekly_d, split.new_duration_minutes)
    assert merged.new_duration_minutes == minutes


def test_odd_duration_cannot_be_split():
    with pytest.raises(ScheduleValidationError) as exc:
        transform_duration(DayGroup.once_weekly_c, DayGroup.twice_weekly_a, 75)
    assert exc.value.details["duration_minutes"] == 75


def test_target_day_must_belong_to_target_group():
    with pytest.raises(ScheduleValidationError):
        transform_duration(DayGroup.twice_weekly_a, DayGroup.twice_weekly_b, 90, target_day=Weekday.monday)


def test_non_positive_duration_rejected():
    with pytest.raises(ScheduleValidationError):
        transform_duration(DayGroup.twice_weekly_a, DayGroup.once_weekly_c, 0)
