"""Change-request state machine: pending -> approved | rejected | cancelled.

Every transition takes the acting user explicitly and runs inside the schedule's
lock as one database transaction. Approval re-checks conflicts against the
committed state before writing, so two approvals that target the same room and
time cannot both succeed.
"""
from __future__ import annotations

from datetime import datetime, timezone
import logging

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.orm import Session

from classgrid.core.exceptions import (
    DuplicateRequestError,
    ForbiddenError,
    InvalidStateError,
    PlacementConflictError,
    ResourceNotFoundError,
    ScheduleValidationError,
)
from classgrid.models.change_request import ChangeRequest, ChangeRequestStatus, ReviewDecision
from classgrid.models.schedule import Schedule
from classgrid.models.schedule_entry import ScheduleEntry
from classgrid.models.user import User, UserRole
from classgrid.schemas.conflict import ConflictReport
from classgrid.services.audit import log_activity
from classgrid.services.day_groups import parse_weekday
from classgrid.services.intervals import load_slot_catalog
from classgrid.services.locks import schedule_locks
from classgrid.services.placements import (
    apply_relocation_plan,
    build_relocation_plan,
    detect_plan_conflicts,
    get_entry,
)
from classgrid.services.publication import ensure_schedule_editable
from classgrid.services.relocation import RelocationPlan

logger = logging.getLogger(__name__)


def _utc_now() -> datetime:
    return datetime.now(timezone.utc)


def _as_utc(value: datetime | None) -> datetime | None:
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


def _normalize_text(value: str | None) -> str | None:
    if value is None:
        return None
    trimmed = value.strip()
    return trimmed or None


def _require_reviewer(actor: User) -> None:
    if not actor.is_reviewer:
        raise ForbiddenError("Only schedulers can review change requests")


def _get_schedule(db: Session, schedule_id: str, *, for_update: bool = False) -> Schedule:
    query = select(Schedule).where(Schedule.id == schedule_id).execution_options(populate_existing=True)
    if for_update:
        query = query.with_for_update()
    schedule = db.execute(query).scalar_one_or_none()
    if schedule is None:
        raise ResourceNotFoundError("Schedule", schedule_id)
    return schedule


def _get_request(db: Session, request_id: str, *, for_update: bool = False) -> ChangeRequest:
    query = select(ChangeRequest).where(ChangeRequest.id == request_id).execution_options(populate_existing=True)
    if for_update:
        query = query.with_for_update()
    request = db.execute(query).scalar_one_or_none()
    if request is None:
        raise ResourceNotFoundError("Change request", request_id)
    return request


def _schedule_id_for_request(db: Session, request_id: str, action: str) -> str:
    row = db.execute(
        select(ChangeRequest.schedule_entry_id, ChangeRequest.status).where(ChangeRequest.id == request_id)
    ).one_or_none()
    if row is None:
        raise ResourceNotFoundError("Change request", request_id)
    entry_id, status = row
    if entry_id is None:
        # Only terminal requests lose their entry link.
        raise InvalidStateError(request_id, status.value, action)
    schedule_id = db.execute(
        select(ScheduleEntry.schedule_id).where(ScheduleEntry.id == entry_id)
    ).scalar_one_or_none()
    if schedule_id is None:
        raise ResourceNotFoundError("Schedule entry", entry_id)
    return schedule_id


def _ensure_entry_access(actor: User, entry: ScheduleEntry) -> None:
    if actor.role == UserRole.faculty and entry.faculty_id != actor.id:
        raise ForbiddenError("Faculty can only request changes to their own schedule entries")


def _pending_request_for_entry(db: Session, entry_id: str) -> ChangeRequest | None:
    return db.execute(
        select(ChangeRequest).where(
            ChangeRequest.schedule_entry_id == entry_id,
            ChangeRequest.status == ChangeRequestStatus.pending,
        )
    ).scalar_one_or_none()


def check_conflict(
    db: Session,
    *,
    actor: User,
    entry_id: str,
    target_day: str,
    target_slot_id: str,
    target_room_id: str,
) -> ConflictReport:
    """Advisory, read-only check. Conflicts are reported, never raised."""
    entry = get_entry(db, entry_id)
    _ensure_entry_access(actor, entry)
    catalog = load_slot_catalog(db)
    plan = build_relocation_plan(
        db,
        entry,
        target_day=target_day,
        target_slot_id=target_slot_id,
        target_room_id=target_room_id,
        catalog=catalog,
    )
    return detect_plan_conflicts(db, entry, plan, catalog)


def submit_change_request(
    db: Session,
    *,
    actor: User,
    entry_id: str,
    target_day: str,
    target_slot_id: str,
    target_room_id: str,
    reason: str | None = None,
) -> ChangeRequest:
    entry = get_entry(db, entry_id)
    _ensure_entry_access(actor, entry)

    ensure_schedule_editable(_get_schedule(db, entry.schedule_id))

    existing = _pending_request_for_entry(db, entry.id)
    if existing is not None:
        raise DuplicateRequestError(entry.id, existing.id)

    catalog = load_slot_catalog(db)
    plan = build_relocation_plan(
        db,
        entry,
        target_day=target_day,
        target_slot_id=target_slot_id,
        target_room_id=target_room_id,
        catalog=catalog,
    )
    report = detect_plan_conflicts(db, entry, plan, catalog)

    request = ChangeRequest(
        schedule_entry_id=entry.id,
        requester_id=actor.id,
        target_day=parse_weekday(target_day),
        target_time_slot_id=target_slot_id,
        target_room_id=target_room_id,
        reason=_normalize_text(reason),
        status=ChangeRequestStatus.pending,
        conflict_snapshot=report.model_dump(mode="json"),
    )
    db.add(request)
    try:
        db.flush()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateRequestError(entry_id) from exc

    log_activity(
        db,
        user=actor,
        action="change_request.submit",
        entity_type="schedule_change_request",
        entity_id=request.id,
        schedule_id=entry.schedule_id,
        details={
            "schedule_entry_id": entry.id,
            "has_conflict": report.has_conflict,
            "plan": plan.summary(),
        },
    )
    try:
        db.commit()
    except IntegrityError as exc:
        db.rollback()
        raise DuplicateRequestError(entry_id) from exc
    db.refresh(request)
    logger.info(
        "Change request %s submitted for entry %s by %s (advisory conflicts: %d)",
        request.id,
        entry.id,
        actor.id,
        len(report.conflicts),
    )
    return request


def cancel_change_request(db: Session, *, actor: User, request_id: str) -> ChangeRequest:
    schedule_id = _schedule_id_for_request(db, request_id, "cancel")
    with schedule_locks.hold(schedule_id):
        try:
            _get_schedule(db, schedule_id, for_update=True)
            request = _get_request(db, request_id, for_update=True)
            if request.requester_id != actor.id:
                raise ForbiddenError("Only the requester can cancel a change request")
            if request.status != ChangeRequestStatus.pending:
                raise InvalidStateError(request.id, request.status.value, "cancel")

            request.status = ChangeRequestStatus.cancelled
            log_activity(
                db,
                user=actor,
                action="change_request.cancel",
                entity_type="schedule_change_request",
                entity_id=request.id,
                schedule_id=schedule_id,
            )
            db.commit()
        except Exception:
            db.rollback()
            raise
    db.refresh(request)
    logger.info("Change request %s cancelled by %s", request.id, actor.id)
    return request


def review_change_request(
    db: Session,
    *,
    actor: User,
    request_id: str,
    decision: ReviewDecision | str,
    notes: str | None = None,
) -> ChangeRequest:
    _require_reviewer(actor)
    try:
        decision = ReviewDecision(decision)
    except ValueError as exc:
        raise ScheduleValidationError(f"Unknown review decision: {decision!r}") from exc
    schedule_id = _schedule_id_for_request(db, request_id, decision.value)

    with schedule_locks.hold(schedule_id):
        try:
            # Row locks are always taken schedule first, then request, source entry and pair.
            schedule = _get_schedule(db, schedule_id, for_update=True)
            if decision == ReviewDecision.approve:
                request = _approve_locked(db, actor=actor, schedule=schedule, request_id=request_id, notes=notes)
            else:
                request = _reject_locked(
                    db,
                    actor=actor,
                    request_id=request_id,
                    schedule_id=schedule_id,
                    notes=notes,
                )
            db.commit()
        except Exception:
            db.rollback()
            raise
    db.refresh(request)
    logger.info("Change request %s %s by %s", request.id, request.status.value, actor.id)
    return request


def _reject_locked(
    db: Session,
    *,
    actor: User,
    request_id: str,
    schedule_id: str,
    notes: str | None,
) -> ChangeRequest:
    request = _get_request(db, request_id, for_update=True)
    if request.status != ChangeRequestStatus.pending:
        raise InvalidStateError(request.id, request.status.value, "reject")

    request.status = ChangeRequestStatus.rejected
    request.reviewer_notes = _normalize_text(notes)
    request.reviewed_by_id = actor.id
    request.reviewed_at = _utc_now()
    log_activity(
        db,
        user=actor,
        action="change_request.reject",
        entity_type="schedule_change_request",
        entity_id=request.id,
        schedule_id=schedule_id,
        details={"notes": request.reviewer_notes},
    )
    return request


def _approve_locked(
    db: Session,
    *,
    actor: User,
    schedule: Schedule,
    request_id: str,
    notes: str | None,
) -> ChangeRequest:
    request = _get_request(db, request_id, for_update=True)
    if request.status != ChangeRequestStatus.pending:
        raise InvalidStateError(request.id, request.status.value, "approve")
    ensure_schedule_editable(schedule)

    entry = get_entry(db, request.schedule_entry_id, for_update=True)

    catalog = load_slot_catalog(db)
    plan = build_relocation_plan(
        db,
        entry,
        target_day=request.target_day,
        target_slot_id=request.target_time_slot_id,
        target_room_id=request.target_room_id,
        catalog=catalog,
        for_update=True,
    )
    report = detect_plan_conflicts(db, entry, plan, catalog)
    if report.has_conflict:
        logger.warning(
            "Approval of change request %s blocked by %d conflict(s)",
            request.id,
            len(report.conflicts),
        )
        raise PlacementConflictError([item.model_dump(mode="json") for item in report.conflicts])

    _close_requests_on_merged_entries(db, actor=actor, approved=request, schedule_id=entry.schedule_id, plan=plan)
    apply_relocation_plan(db, entry, plan)

    request.status = ChangeRequestStatus.approved
    request.reviewer_notes = _normalize_text(notes)
    request.reviewed_by_id = actor.id
    request.reviewed_at = _utc_now()
    log_activity(
        db,
        user=actor,
        action="change_request.approve",
        entity_type="schedule_change_request",
        entity_id=request.id,
        schedule_id=entry.schedule_id,
        details=plan.summary(),
    )
    db.flush()
    return request


def _close_requests_on_merged_entries(
    db: Session,
    *,
    actor: User,
    approved: ChangeRequest,
    schedule_id: str,
    plan: RelocationPlan,
) -> None:
    """Reject pending requests on entries the approved move merges away."""
    if not plan.drop_entry_ids:
        return
    orphaned = list(
        db.execute(
            select(ChangeRequest)
            .where(
                ChangeRequest.schedule_entry_id.in_(plan.drop_entry_ids),
                ChangeRequest.status == ChangeRequestStatus.pending,
            )
            .with_for_update()
        ).scalars()
    )
    for item in orphaned:
        item.status = ChangeRequestStatus.rejected
        item.reviewer_notes = f"Paired entry merged into a once-weekly session by change request {approved.id}"
        item.reviewed_by_id = actor.id
        item.reviewed_at = _utc_now()
        log_activity(
            db,
            user=actor,
            action="change_request.reject",
            entity_type="schedule_change_request",
            entity_id=item.id,
            schedule_id=schedule_id,
            details={
                "notes": item.reviewer_notes,
                "schedule_entry_id": item.schedule_entry_id,
                "merged_by_request_id": approved.id,
            },
        )
        logger.info("Change request %s closed: entry %s merged by %s", item.id, item.schedule_entry_id, approved.id)
    db.flush()


def list_change_requests(
    db: Session,
    *,
    actor: User,
    status: ChangeRequestStatus | None = None,
) -> list[ChangeRequest]:
    query = select(ChangeRequest)
    if not actor.is_reviewer:
        query = query.where(ChangeRequest.requester_id == actor.id)
    if status is not None:
        query = query.where(ChangeRequest.status == status)
    requests = list(db.execute(query).scalars())

    epoch = datetime.min.replace(tzinfo=timezone.utc)
    pending = sorted(
        (item for item in requests if item.status == ChangeRequestStatus.pending),
        key=lambda item: _as_utc(item.created_at) or epoch,
    )
    history = sorted(
        (item for item in requests if item.status != ChangeRequestStatus.pending),
        key=lambda item: _as_utc(item.reviewed_at or item.updated_at or item.created_at) or epoch,
        reverse=True,
    )
    return pending + history
