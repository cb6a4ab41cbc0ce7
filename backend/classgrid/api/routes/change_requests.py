from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from classgrid.api.deps import get_current_user, get_db
from classgrid.models.change_request import ChangeRequest, ChangeRequestStatus
from classgrid.models.schedule_entry import ScheduleEntry
from classgrid.models.user import User
from classgrid.schemas.change_request import (
    ChangeRequestCreate,
    ChangeRequestOut,
    ChangeRequestReview,
    ConflictCheckRequest,
)
from classgrid.schemas.conflict import ConflictReport
from classgrid.services import change_requests as workflow

router = APIRouter()


def _hydrate_change_requests(db: Session, requests: list[ChangeRequest]) -> list[ChangeRequestOut]:
    if not requests:
        return []
    entry_ids = {item.schedule_entry_id for item in requests if item.schedule_entry_id}
    entries = {
        item.id: item
        for item in db.execute(select(ScheduleEntry).where(ScheduleEntry.id.in_(entry_ids))).scalars()
    }

    output: list[ChangeRequestOut] = []
    for request in requests:
        payload = ChangeRequestOut.model_validate(request)
        entry = entries.get(request.schedule_entry_id)
        if entry is not None:
            payload.current_day = entry.day
            payload.current_time_slot_id = entry.time_slot_id
            payload.current_room_id = entry.room_id
        output.append(payload)
    return output


@router.post("/change-requests/check", response_model=ConflictReport)
def check_change_request(
    payload: ConflictCheckRequest,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ConflictReport:
    return workflow.check_conflict(
        db,
        actor=current_user,
        entry_id=payload.schedule_entry_id,
        target_day=payload.target_day,
        target_slot_id=payload.target_time_slot_id,
        target_room_id=payload.target_room_id,
    )


@router.get("/change-requests", response_model=list[ChangeRequestOut])
def list_change_requests(
    request_status: ChangeRequestStatus | None = Query(default=None, alias="status"),
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> list[ChangeRequestOut]:
    requests = workflow.list_change_requests(db, actor=current_user, status=request_status)
    return _hydrate_change_requests(db, requests)


@router.post(
    "/change-requests",
    response_model=ChangeRequestOut,
    status_code=status.HTTP_201_CREATED,
)
def create_change_request(
    payload: ChangeRequestCreate,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ChangeRequestOut:
    request = workflow.submit_change_request(
        db,
        actor=current_user,
        entry_id=payload.schedule_entry_id,
        target_day=payload.target_day,
        target_slot_id=payload.target_time_slot_id,
        target_room_id=payload.target_room_id,
        reason=payload.reason,
    )
    return _hydrate_change_requests(db, [request])[0]


@router.post("/change-requests/{request_id}/cancel", response_model=ChangeRequestOut)
def cancel_change_request(
    request_id: str,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ChangeRequestOut:
    request = workflow.cancel_change_request(db, actor=current_user, request_id=request_id)
    return _hydrate_change_requests(db, [request])[0]


@router.post("/change-requests/{request_id}/review", response_model=ChangeRequestOut)
def review_change_request(
    request_id: str,
    payload: ChangeRequestReview,
    current_user: User = Depends(get_current_user),
    db: Session = Depends(get_db),
) -> ChangeRequestOut:
    request = workflow.review_change_request(
        db,
        actor=current_user,
        request_id=request_id,
        decision=payload.decision,
        notes=payload.notes,
    )
    return _hydrate_change_requests(db, [request])[0]
