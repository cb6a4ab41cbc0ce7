import pytest

from classgrid.core.exceptions import InvariantViolationError
from classgrid.services.pairing import find_paired_entry, pairing_key


def test_paired_entry_found_by_session_group(db, world):
    monday, wednesday = world.paired(code="CS101", days=("mon", "wed"), slot_start="08:00")

    assert find_paired_entry(db, monday).id == wednesday.id
    assert find_paired_entry(db, wednesday).id == monday.id


def test_legacy_pair_inferred_from_attributes(db, world):
    monday = world.entry(code="CS102", day="mon", slot_start="09:35")
    wednesday = world.entry(code="CS102", day="wed", slot_start="09:35")

    assert find_paired_entry(db, monday).id == wednesday.id


def test_legacy_lookup_never_crosses_session_blocks(db, world):
    monday = world.entry(code="CS103", day="mon", slot_start="09:35")
    world.entry(code="MATH1", day="wed", slot_start="09:35")

    assert find_paired_entry(db, monday) is None


def test_legacy_lookup_requires_matching_lab_flag(db, world):
    tuesday = world.entry(code="CS104", day="tue", slot_start="13:00")
    thursday = world.entry(code="CS104", day="thu", slot_start="13:00")
    thursday.is_lab_session = True
    db.commit()

    assert find_paired_entry(db, tuesday) is None


def test_once_weekly_entry_has_no_pair(db, world):
    friday = world.entry(code="CS105", day="fri", slot_start="08:00")

    assert find_paired_entry(db, friday) is None


def test_ambiguous_pair_raises_invariant_violation(db, world):
    monday = world.entry(code="CS106", day="mon", slot_start="11:10")
    world.entry(code="CS106", day="wed", slot_start="11:10")
    world.entry(code="CS106", day="wed", slot_start="11:10", room="R2")

    with pytest.raises(InvariantViolationError) as exc:
        find_paired_entry(db, monday)
    assert len(exc.value.context["candidate_ids"]) == 2
    assert exc.value.message == "The request could not be completed"


def test_both_occurrences_share_a_pairing_key(db, world):
    grouped = world.paired(code="CS107", days=("tue", "thu"), slot_start="08:00")
    legacy_mon = world.entry(code="CS108", day="mon", slot_start="14:35")
    legacy_wed = world.entry(code="CS108", day="wed", slot_start="14:35")

    assert pairing_key(grouped[0]) == pairing_key(grouped[1])
    assert pairing_key(legacy_mon) == pairing_key(legacy_wed)
    assert pairing_key(grouped[0]) != pairing_key(legacy_mon)
