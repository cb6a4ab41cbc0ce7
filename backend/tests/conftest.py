import os
import tempfile
import uuid

# Point the application engine at a throwaway database before classgrid is imported.
_TEST_DB_DIR = tempfile.mkdtemp(prefix="classgrid-tests-")
os.environ["DATABASE_URL"] = f"sqlite+pysqlite:///{os.path.join(_TEST_DB_DIR, 'app.db')}"
os.environ["JWT_SECRET_KEY"] = "test-secret"

import pytest  # noqa: E402
from fastapi.testclient import TestClient  # noqa: E402
from sqlalchemy import create_engine, select  # noqa: E402
from sqlalchemy.orm import sessionmaker  # noqa: E402
from sqlalchemy.pool import StaticPool  # noqa: E402

from classgrid.api.deps import get_db  # noqa: E402
from classgrid.core.security import create_access_token  # noqa: E402
from classgrid.db.base import Base  # noqa: E402
from classgrid.db.seed import seed_time_slots  # noqa: E402
from classgrid.main import app  # noqa: E402
from classgrid.models.room import Room  # noqa: E402
from classgrid.models.schedule import Schedule  # noqa: E402
from classgrid.models.schedule_entry import ScheduleEntry  # noqa: E402
from classgrid.models.session_block import SessionBlock  # noqa: E402
from classgrid.models.time_slot import DayGroup, TimeSlot  # noqa: E402
from classgrid.models.user import User, UserRole  # noqa: E402
from classgrid.services.day_groups import day_group_for, parse_weekday  # noqa: E402
from classgrid.services.locks import schedule_locks  # noqa: E402


class ScheduleWorld:
    """One schedule with rooms R1-R3, a scheduler, two faculty and the default slot catalog."""

    def __init__(self, db, *, seed_slots: bool = True):
        self.db = db
        if seed_slots:
            seed_time_slots(db)
        self.schedule = Schedule(name="First Term 2026")
        self.rooms = {name: Room(name=name, building="Main") for name in ("R1", "R2", "R3")}
        self.admin = User(name="Ada Admin", email="admin@example.edu", role=UserRole.admin)
        self.scheduler = User(name="Sam Scheduler", email="scheduler@example.edu", role=UserRole.scheduler)
        self.faculty_a = User(name="Faculty A", email="faculty.a@example.edu", role=UserRole.faculty)
        self.faculty_b = User(name="Faculty B", email="faculty.b@example.edu", role=UserRole.faculty)
        db.add_all(
            [
                self.schedule,
                *self.rooms.values(),
                self.admin,
                self.scheduler,
                self.faculty_a,
                self.faculty_b,
            ]
        )
        db.commit()
        self._blocks: dict[str, SessionBlock] = {}

    def room_id(self, name: str) -> str:
        return self.rooms[name].id

    def slot(self, group: DayGroup, start_time: str) -> TimeSlot:
        return self.db.execute(
            select(TimeSlot).where(TimeSlot.day_group == group, TimeSlot.start_time == start_time)
        ).scalar_one()

    def add_slot(self, group: DayGroup, start_time: str, end_time: str, duration_minutes: int) -> TimeSlot:
        slot = TimeSlot(
            name=f"{group.value} extra {start_time}",
            start_time=start_time,
            end_time=end_time,
            duration_minutes=duration_minutes,
            day_group=group,
            priority=99,
        )
        self.db.add(slot)
        self.db.commit()
        return slot

    def block(self, code: str, *, units: int = 3, year_level: int = 1, block_number: int | None = None) -> SessionBlock:
        # Each subject gets its own block number unless one is given, so students never clash by accident.
        block = self._blocks.get(code)
        if block is None:
            block = SessionBlock(
                year_level=year_level,
                subject_code=code,
                subject_name=f"{code} Lecture",
                course_combination="BSCS",
                block_number=block_number if block_number is not None else len(self._blocks) + 1,
                units=units,
            )
            self.db.add(block)
            self.db.commit()
            self._blocks[code] = block
        return block

    def entry(
        self,
        *,
        code: str,
        day: str,
        slot_start: str,
        room: str = "R1",
        faculty: User | None = None,
        start_time: str | None = None,
        end_time: str | None = None,
        session_group_id: str | None = None,
        slots_span: int = 1,
        units: int = 3,
    ) -> ScheduleEntry:
        weekday = parse_weekday(day)
        slot = self.slot(day_group_for(weekday), slot_start)
        entry = ScheduleEntry(
            schedule_id=self.schedule.id,
            session_block_id=self.block(code, units=units).id,
            room_id=self.room_id(room),
            time_slot_id=slot.id,
            faculty_id=faculty.id if faculty is not None else None,
            day=weekday,
            custom_start_time=start_time,
            custom_end_time=end_time,
            session_group_id=session_group_id,
            slots_span=slots_span,
        )
        self.db.add(entry)
        self.db.commit()
        return entry

    def paired(self, *, code: str, days: tuple[str, str], slot_start: str, **kwargs) -> tuple[ScheduleEntry, ScheduleEntry]:
        group_id = kwargs.pop("session_group_id", str(uuid.uuid4()))
        first = self.entry(code=code, day=days[0], slot_start=slot_start, session_group_id=group_id, **kwargs)
        second = self.entry(code=code, day=days[1], slot_start=slot_start, session_group_id=group_id, **kwargs)
        return first, second

    def headers(self, user: User) -> dict:
        token = create_access_token(user.id, role=user.role.value)
        return {"Authorization": f"Bearer {token}"}


@pytest.fixture()
def engine():
    engine = create_engine(
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db(session_factory):
    schedule_locks.clear()
    session = session_factory()
    try:
        yield session
    finally:
        session.close()
        schedule_locks.clear()


@pytest.fixture()
def world(db):
    return ScheduleWorld(db)


@pytest.fixture()
def make_world():
    return ScheduleWorld


@pytest.fixture()
def client(session_factory):
    schedule_locks.clear()

    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()
    schedule_locks.clear()
