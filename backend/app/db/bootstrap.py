from __future__ import annotations

import logging

from sqlalchemy import inspect
from sqlalchemy.engine import Connection, Engine

from app.db.base import Base
import app.models  # noqa: F401

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "users": {"id", "email", "role", "is_active"},
    "classrooms": {"id", "room_number", "capacity"},
    "students": {"id", "class_id", "section_id", "is_active"},
    "schedules": {
        "id",
        "teacher_id",
        "classroom_id",
        "class_id",
        "section_id",
        "academic_year",
        "day_of_week",
        "start_time",
        "end_time",
        "is_active",
    },
}


def inspect_schema(connection: Connection) -> tuple[list[str], dict[str, list[str]]]:
    inspector = inspect(connection)
    table_names = set(inspector.get_table_names())
    missing_tables: list[str] = []
    missing_columns: dict[str, list[str]] = {}
    for table_name, required in REQUIRED_COLUMNS.items():
        if table_name not in table_names:
            missing_tables.append(table_name)
            continue
        existing = {item["name"] for item in inspector.get_columns(table_name)}
        missing = sorted(required - existing)
        if missing:
            missing_columns[table_name] = missing
    return sorted(missing_tables), missing_columns


def _assert_required_columns(engine: Engine) -> None:
    with engine.connect() as connection:
        missing_tables, missing_columns = inspect_schema(connection)
    if missing_tables:
        raise RuntimeError(f"Missing required tables: {', '.join(missing_tables)}")
    if missing_columns:
        flattened = [f"{table}.{column}" for table, columns in missing_columns.items() for column in columns]
        raise RuntimeError(f"Missing required columns: {', '.join(flattened)}")


def ensure_runtime_schema(engine: Engine) -> None:
    """Create missing tables for development databases and verify the columns
    the conflict engine reads. Production databases are migrated with Alembic,
    which also installs the PostgreSQL exclusion constraints."""
    try:
        Base.metadata.create_all(bind=engine)
        _assert_required_columns(engine)
    except Exception as exc:  # pragma: no cover - runtime environment dependent
        logger.exception("Runtime schema bootstrap failed")
        raise RuntimeError("Runtime schema bootstrap failed") from exc
    logger.info("Runtime schema verified for %s", engine.dialect.name)
