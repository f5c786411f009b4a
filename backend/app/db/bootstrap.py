from __future__ import annotations

import logging

from sqlalchemy import inspect
from sqlalchemy.engine import Engine

from app.db.base import Base
from app.db.session import engine as default_engine

logger = logging.getLogger(__name__)

REQUIRED_COLUMNS: dict[str, set[str]] = {
    "teachers": {"id", "name", "status"},
    "class_subjects": {"id", "class_id", "subject_id", "teacher_id"},
    "schedules": {"id", "class_subject_id", "day_of_week", "start_time", "end_time", "room"},
    "teacher_workloads": {
        "id",
        "teacher_id",
        "academic_year",
        "semester",
        "max_hours_per_week",
        "teaching_hours",
        "administrative_hours",
        "extracurricular_hours",
        "preparation_hours",
        "grading_hours",
        "other_duties_hours",
        "total_hours_per_week",
        "workload_status",
    },
}


def find_schema_gaps(engine: Engine) -> tuple[list[str], dict[str, list[str]]]:
    with engine.connect() as connection:
        inspector = inspect(connection)
        table_names = set(inspector.get_table_names())
        missing_tables = sorted(name for name in REQUIRED_COLUMNS if name not in table_names)
        missing_columns: dict[str, list[str]] = {}
        for table_name, required in REQUIRED_COLUMNS.items():
            if table_name not in table_names:
                continue
            existing = {item["name"] for item in inspector.get_columns(table_name)}
            missing = sorted(required - existing)
            if missing:
                missing_columns[table_name] = missing
    return missing_tables, missing_columns


def _assert_required_columns(engine: Engine) -> None:
    missing_tables, missing_columns = find_schema_gaps(engine)
    if missing_tables:
        raise RuntimeError(f"Missing required tables: {', '.join(missing_tables)}")
    if missing_columns:
        flattened = [f"{table}.{column}" for table, columns in missing_columns.items() for column in columns]
        raise RuntimeError(f"Missing required columns: {', '.join(flattened)}")


def ensure_runtime_schema(engine: Engine | None = None) -> None:
    target = engine or default_engine
    try:
        import app.models  # noqa: F401

        Base.metadata.create_all(bind=target)
        _assert_required_columns(target)
    except Exception as exc:  # pragma: no cover - runtime environment dependent
        logger.exception("Runtime schema bootstrap failed")
        raise RuntimeError("Runtime schema bootstrap failed") from exc
