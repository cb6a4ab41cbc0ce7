import pytest

from classgrid.db.seed import default_time_slots
from classgrid.models.schedule_entry import ScheduleEntry
from classgrid.models.time_slot import DayGroup, TimeSlot, Weekday
from classgrid.services.conflict_service import ConflictService, Placement
from classgrid.services.intervals import Interval, SlotCatalog, load_slot_catalog
from classgrid.services.placements import detect_conflicts, schedule_conflict_report


@pytest.fixture
def catalog():
    slots = [TimeSlot(id=f"{row['day_group'].value}-{row['start_time']}", **row) for row in default_time_slots()]
    return SlotCatalog(slots)


def make_entry(entry_id, *, day, slot_id, room_id="r1", faculty_id=None, span=1, start=None, end=None, block_id=None):
    return ScheduleEntry(
        id=entry_id,
        schedule_id="s1",
        session_block_id=block_id or f"block-{entry_id}",
        room_id=room_id,
        time_slot_id=slot_id,
        faculty_id=faculty_id,
        day=day,
        slots_span=span,
        custom_start_time=start,
        custom_end_time=end,
    )


def test_detect_room_conflict(catalog):
    existing = make_entry("e1", day=Weekday.monday, slot_id="twice_weekly_a-08:00", faculty_id="f1")
    service = ConflictService([existing], catalog, block_labels={"block-e1": "CS101-B1"}, room_labels={"r1": "Room 1"})

    report = service.detect_conflicts(
        Placement(Weekday.monday, "twice_weekly_a-08:00", "r1", Interval(480, 570), faculty_id="f2")
    )

    assert report.has_conflict
    assert len(report.conflicts) == 1
    conflict = report.conflicts[0]
    assert conflict.conflict_type == "room_conflict"
    assert conflict.entry_id == "e1"
    assert "Room 1" in conflict.description
    assert "CS101-B1" in conflict.description
    assert (conflict.start_time, conflict.end_time) == ("08:00", "09:30")


def test_detect_faculty_conflict_in_other_room(catalog):
    existing = make_entry("e1", day=Weekday.monday, slot_id="twice_weekly_a-08:00", room_id="r2", faculty_id="f1")
    service = ConflictService([existing], catalog)

    report = service.detect_conflicts(
        Placement(Weekday.monday, "twice_weekly_a-08:00", "r1", Interval(480, 570), faculty_id="f1")
    )

    assert [item.conflict_type for item in report.conflicts] == ["faculty_conflict"]
    assert report.conflicts[0].id.startswith("fac-")


def test_same_room_and_faculty_report_both(catalog):
    existing = make_entry("e1", day=Weekday.monday, slot_id="twice_weekly_a-08:00", faculty_id="f1")
    service = ConflictService([existing], catalog)

    report = service.detect_conflicts(
        Placement(Weekday.monday, "twice_weekly_a-08:00", "r1", Interval(480, 570), faculty_id="f1")
    )

    assert sorted(item.conflict_type for item in report.conflicts) == ["faculty_conflict", "room_conflict"]


def test_different_day_or_adjacent_time_is_clear(catalog):
    entries = [
        make_entry("e1", day=Weekday.wednesday, slot_id="twice_weekly_a-08:00"),
        make_entry("e2", day=Weekday.monday, slot_id="twice_weekly_a-09:35"),
    ]
    service = ConflictService(entries, catalog)

    report = service.detect_conflicts(Placement(Weekday.monday, "twice_weekly_a-08:00", "r1", Interval(480, 570)))

    assert not report.has_conflict
    assert report.conflicts == []


def test_doubled_duration_reaches_next_slot(catalog):
    existing = make_entry("e1", day=Weekday.friday, slot_id="once_weekly_c-09:35")
    service = ConflictService([existing], catalog)

    short = service.detect_conflicts(Placement(Weekday.friday, "once_weekly_c-08:00", "r1", Interval(480, 570)))
    doubled = service.detect_conflicts(Placement(Weekday.friday, "once_weekly_c-08:00", "r1", Interval(480, 660)))

    assert not short.has_conflict
    assert doubled.has_conflict
    assert doubled.conflicts[0].proposed_end_time == "11:00"


def test_multi_slot_entry_blocks_its_whole_span(catalog):
    existing = make_entry("e1", day=Weekday.friday, slot_id="once_weekly_c-08:00", span=2)
    service = ConflictService([existing], catalog)

    report = service.detect_conflicts(Placement(Weekday.friday, "once_weekly_c-09:35", "r1", Interval(575, 665)))

    assert report.has_conflict
    assert report.conflicts[0].end_time == "11:05"


def test_excluded_entries_are_ignored(catalog):
    existing = make_entry("e1", day=Weekday.monday, slot_id="twice_weekly_a-08:00")
    service = ConflictService([existing], catalog)

    report = service.detect_conflicts(
        Placement(Weekday.monday, "twice_weekly_a-08:00", "r1", Interval(480, 570)),
        exclude_entry_ids=["e1"],
    )

    assert not report.has_conflict


def test_plan_conflicts_cover_every_placement(catalog):
    entries = [
        make_entry("e1", day=Weekday.tuesday, slot_id="twice_weekly_b-13:00"),
        make_entry("e2", day=Weekday.thursday, slot_id="twice_weekly_b-13:00"),
    ]
    service = ConflictService(entries, catalog)

    report = service.detect_plan_conflicts(
        [
            Placement(Weekday.tuesday, "twice_weekly_b-13:00", "r1", Interval(780, 870)),
            Placement(Weekday.thursday, "twice_weekly_b-13:00", "r1", Interval(780, 870)),
        ]
    )

    assert {item.entry_id for item in report.conflicts} == {"e1", "e2"}


def test_detection_is_repeatable(catalog):
    existing = make_entry("e1", day=Weekday.monday, slot_id="twice_weekly_a-08:00")
    service = ConflictService([existing], catalog)
    placement = Placement(Weekday.monday, "twice_weekly_a-08:00", "r1", Interval(480, 570))

    assert service.detect_conflicts(placement) == service.detect_conflicts(placement)


def test_block_conflict_needs_same_year_and_block_number(catalog):
    entries = [
        make_entry("e1", day=Weekday.monday, slot_id="twice_weekly_a-08:00", room_id="r2", block_id="math-1"),
        make_entry("e2", day=Weekday.monday, slot_id="twice_weekly_a-08:00", room_id="r3", block_id="phys-2"),
    ]
    cohorts = {"cs-1": (1, 1), "math-1": (1, 1), "phys-2": (1, 2)}
    service = ConflictService(entries, catalog, block_labels={"math-1": "MATH101-B1"}, block_cohorts=cohorts)

    report = service.detect_conflicts(
        Placement(Weekday.monday, "twice_weekly_a-08:00", "r1", Interval(480, 570), session_block_id="cs-1")
    )

    assert [(item.conflict_type, item.entry_id) for item in report.conflicts] == [("block_conflict", "e1")]
    assert report.conflicts[0].id.startswith("blk-")
    assert "MATH101-B1" in report.conflicts[0].description


def test_block_conflict_skipped_without_block(catalog):
    existing = make_entry("e1", day=Weekday.monday, slot_id="twice_weekly_a-08:00", room_id="r2", block_id="math-1")
    service = ConflictService([existing], catalog, block_cohorts={"math-1": (1, 1)})

    report = service.detect_conflicts(Placement(Weekday.monday, "twice_weekly_a-08:00", "r1", Interval(480, 570)))

    assert not report.has_conflict


def test_analyze_schedule_reports_each_clash_once(catalog):
    entries = [
        make_entry("e1", day=Weekday.friday, slot_id="once_weekly_c-08:00", start="08:00", end="11:00", faculty_id="f1"),
        make_entry("e2", day=Weekday.friday, slot_id="once_weekly_c-09:35", faculty_id="f1"),
        make_entry("e3", day=Weekday.friday, slot_id="once_weekly_c-11:10"),
        make_entry("e4", day=Weekday.friday, slot_id="once_weekly_c-09:35", room_id="r2", block_id="blk-a"),
        make_entry(
            "e5", day=Weekday.friday, slot_id="once_weekly_c-08:00", room_id="r3", start="09:00", end="10:00", block_id="blk-b"
        ),
        make_entry("e6", day=Weekday.monday, slot_id="twice_weekly_a-08:00"),
    ]
    service = ConflictService(
        entries,
        catalog,
        room_labels={"r1": "Room 1"},
        block_cohorts={"blk-a": (2, 1), "blk-b": (2, 1)},
    )

    clashes = service.analyze_schedule()

    assert [(item.conflict_type, item.entry_ids) for item in clashes] == [
        ("room_conflict", ["e1", "e2"]),
        ("faculty_conflict", ["e1", "e2"]),
        ("block_conflict", ["e5", "e4"]),
    ]
    room, faculty, block = clashes
    assert (room.start_time, room.end_time) == ("09:35", "11:00")
    assert room.room_id == "r1"
    assert "Room 1" in room.description
    assert faculty.faculty_id == "f1"
    assert (block.start_time, block.end_time) == ("09:35", "10:00")
    assert "year 2 block 1" in block.description


def test_analyze_schedule_on_clean_schedule(catalog):
    entries = [
        make_entry("e1", day=Weekday.friday, slot_id="once_weekly_c-08:00", faculty_id="f1"),
        make_entry("e2", day=Weekday.friday, slot_id="once_weekly_c-09:35", faculty_id="f1"),
        make_entry("e3", day=Weekday.saturday, slot_id="once_weekly_d-08:00", faculty_id="f1"),
    ]

    assert ConflictService(entries, catalog).analyze_schedule() == []



def test_detect_conflicts_against_stored_schedule(db, world):
    existing = world.entry(code="CS101", day="fri", slot_start="08:00", faculty=world.faculty_a, slots_span=2)
    catalog = load_slot_catalog(db)
    slot = world.slot(DayGroup.once_weekly_c, "09:35")

    report = detect_conflicts(
        db,
        schedule_id=world.schedule.id,
        day="Fri",
        time_slot_id=slot.id,
        room_id=world.room_id("R2"),
        catalog=catalog,
        faculty_id=world.faculty_a.id,
    )
    assert [item.conflict_type for item in report.conflicts] == ["faculty_conflict"]

    excluded = detect_conflicts(
        db,
        schedule_id=world.schedule.id,
        day="friday",
        time_slot_id=slot.id,
        room_id=world.room_id("R1"),
        catalog=catalog,
        exclude_entry_id=existing.id,
    )
    assert not excluded.has_conflict


def test_detect_conflicts_checks_student_block(db, world):
    cs = world.block("CS140", year_level=3, block_number=1)
    world.block("MATH140", year_level=3, block_number=1)
    existing = world.entry(code="MATH140", day="sat", slot_start="08:00", room="R2")
    catalog = load_slot_catalog(db)
    slot = world.slot(DayGroup.once_weekly_d, "08:00")

    def check(**kwargs):
        return detect_conflicts(
            db,
            schedule_id=world.schedule.id,
            day="sat",
            time_slot_id=slot.id,
            room_id=world.room_id("R1"),
            catalog=catalog,
            **kwargs,
        )

    assert not check().has_conflict
    report = check(session_block_id=cs.id)
    assert [(item.conflict_type, item.entry_id) for item in report.conflicts] == [("block_conflict", existing.id)]
    assert "MATH140-B1" in report.conflicts[0].description


def test_schedule_conflict_report_from_stored_entries(db, world):
    world.block("CS141", year_level=3, block_number=2)
    world.block("MATH141", year_level=3, block_number=2)
    first = world.entry(code="CS141", day="fri", slot_start="08:00", room="R1", faculty=world.faculty_a)
    second = world.entry(code="MATH141", day="fri", slot_start="08:00", room="R1", faculty=world.faculty_b)
    world.entry(code="PHYS141", day="fri", slot_start="09:35", room="R1", faculty=world.faculty_a)

    report = schedule_conflict_report(db, world.schedule.id, load_slot_catalog(db))

    assert report.schedule_id == world.schedule.id
    assert report.has_conflict
    expected_ids = sorted([first.id, second.id])
    assert sorted((item.conflict_type, sorted(item.entry_ids) == expected_ids) for item in report.conflicts) == [
        ("block_conflict", True),
        ("room_conflict", True),
    ]
    room = next(item for item in report.conflicts if item.conflict_type == "room_conflict")
    assert "R1" in room.description
    assert (room.start_time, room.end_time) == ("08:00", "09:30")
