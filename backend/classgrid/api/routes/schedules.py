from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from classgrid.api.deps import get_current_reviewer, get_current_user, get_db
from classgrid.core.exceptions import ResourceNotFoundError
from classgrid.models.schedule import Schedule
from classgrid.models.user import User
from classgrid.schemas.conflict import ConflictReport, PlacementCheckRequest, ScheduleConflictReport
from classgrid.schemas.schedule import FacultyLoadOut, ScheduleEntryOut
from classgrid.services.intervals import load_slot_catalog
from classgrid.services.placements import (
    detect_conflicts,
    entry_to_out,
    load_schedule_entries,
    schedule_conflict_report,
)
from classgrid.services.workload import schedule_teaching_load

router = APIRouter()


def _require_schedule(db: Session, schedule_id: str) -> Schedule:
    schedule = db.get(Schedule, schedule_id)
    if schedule is None:
        raise ResourceNotFoundError("Schedule", schedule_id)
    return schedule


@router.get("/schedules/{schedule_id}/entries", response_model=list[ScheduleEntryOut])
def list_schedule_entries(
    schedule_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[ScheduleEntryOut]:
    _require_schedule(db, schedule_id)
    catalog = load_slot_catalog(db)
    return [entry_to_out(item, catalog) for item in load_schedule_entries(db, schedule_id)]


@router.get("/schedules/{schedule_id}/conflicts", response_model=ScheduleConflictReport)
def get_schedule_conflicts(
    schedule_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ScheduleConflictReport:
    _require_schedule(db, schedule_id)
    return schedule_conflict_report(db, schedule_id, load_slot_catalog(db))


@router.post("/schedules/{schedule_id}/conflicts/check", response_model=ConflictReport)
def check_placement(
    schedule_id: str,
    payload: PlacementCheckRequest,
    current_user: User = Depends(get_current_reviewer),
    db: Session = Depends(get_db),
) -> ConflictReport:
    _require_schedule(db, schedule_id)
    return detect_conflicts(
        db,
        schedule_id=schedule_id,
        day=payload.day,
        time_slot_id=payload.time_slot_id,
        room_id=payload.room_id,
        catalog=load_slot_catalog(db),
        faculty_id=payload.faculty_id,
        session_block_id=payload.session_block_id,
        exclude_entry_id=payload.exclude_entry_id,
        slots_span=payload.slots_span,
    )


@router.get("/schedules/{schedule_id}/teaching-load", response_model=list[FacultyLoadOut])
def get_teaching_load(
    schedule_id: str,
    current_user: User = Depends(get_current_reviewer),
    db: Session = Depends(get_db),
) -> list[FacultyLoadOut]:
    _require_schedule(db, schedule_id)
    return schedule_teaching_load(db, schedule_id)
