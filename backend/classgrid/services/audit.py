from __future__ import annotations

from sqlalchemy.orm import Session

from classgrid.models.activity_log import ActivityLog
from classgrid.models.user import User


def log_activity(
    db: Session,
    *,
    user: User | None,
    action: str,
    entity_type: str | None = None,
    entity_id: str | None = None,
    schedule_id: str | None = None,
    details: dict | None = None,
) -> None:
    """Stage an audit row in the caller's transaction; it commits or rolls back with the change."""
    record = ActivityLog(
        user_id=user.id if user is not None else None,
        schedule_id=schedule_id,
        action=action,
        entity_type=entity_type,
        entity_id=entity_id,
        details=details or {},
    )
    db.add(record)
