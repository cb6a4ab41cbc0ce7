from __future__ import annotations

import logging

from sqlalchemy import inspect, text

from classgrid.db.base import Base
from classgrid.db.session import engine
import classgrid.models  # noqa: F401

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "users": {"id", "email", "role"},
    "time_slots": {"id", "start_time", "end_time", "day_group"},
    "schedule_entries": {
        "id",
        "schedule_id",
        "session_block_id",
        "day",
        "custom_start_time",
        "custom_end_time",
        "session_group_id",
        "slots_span",
    },
    "schedule_change_requests": {"id", "schedule_entry_id", "status", "conflict_snapshot"},
}

# Columns added after the first release of schedule_entries.
SCHEDULE_ENTRY_COLUMNS: dict[str, str] = {
    "custom_start_time": "VARCHAR(5)",
    "custom_end_time": "VARCHAR(5)",
    "session_group_id": "VARCHAR(36)",
    "slots_span": "INTEGER NOT NULL DEFAULT 1",
}


def _ensure_schedule_entry_columns() -> None:
    with engine.begin() as connection:
        inspector = inspect(connection)
        if "schedule_entries" not in set(inspector.get_table_names()):
            return
        column_names = {item["name"] for item in inspector.get_columns("schedule_entries")}
        for column_name, ddl in SCHEDULE_ENTRY_COLUMNS.items():
            if column_name in column_names:
                continue
            logger.info("Adding schedule_entries.%s", column_name)
            connection.execute(text(f"ALTER TABLE schedule_entries ADD COLUMN {column_name} {ddl}"))


def _assert_required_columns() -> None:
    with engine.begin() as connection:
        inspector = inspect(connection)
        table_names = set(inspector.get_table_names())
        missing_tables = [name for name in REQUIRED_COLUMNS if name not in table_names]
        if missing_tables:
            raise RuntimeError(f"Missing required tables: {', '.join(sorted(missing_tables))}")

        missing_columns: list[str] = []
        for table_name, required in REQUIRED_COLUMNS.items():
            existing = {item["name"] for item in inspector.get_columns(table_name)}
            for column_name in sorted(required - existing):
                missing_columns.append(f"{table_name}.{column_name}")
        if missing_columns:
            raise RuntimeError(f"Missing required columns: {', '.join(missing_columns)}")


def ensure_runtime_schema_compatibility() -> None:
    try:
        # Ensure missing tables are present before additive compatibility patches.
        Base.metadata.create_all(bind=engine)
        _ensure_schedule_entry_columns()
        _assert_required_columns()
    except Exception as exc:  # pragma: no cover - runtime environment dependent
        logger.exception("Runtime schema compatibility bootstrap failed")
        raise RuntimeError("Runtime schema compatibility bootstrap failed") from exc
