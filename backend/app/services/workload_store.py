from __future__ import annotations

import logging

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from app.core.exceptions import ConflictError, ResourceNotFoundError
from app.models.teacher_workload import TeacherWorkload
from app.schemas.workload import HOUR_FIELDS, WorkloadCreate, WorkloadRecord, WorkloadUpdate
from app.services.schedule_store import entries_for_teacher, teacher_exists
from app.services.workload import WorkloadAggregator

logger = logging.getLogger(__name__)

STORED_FIELDS = ("max_hours_per_week", *HOUR_FIELDS, "notes")


def to_record(row: TeacherWorkload, aggregator: WorkloadAggregator) -> WorkloadRecord:
    record = WorkloadRecord.model_validate(row, from_attributes=True)
    return record.with_underload_threshold(aggregator.policy.underload_threshold)


def _write_record(row: TeacherWorkload, record: WorkloadRecord) -> None:
    for name in STORED_FIELDS:
        setattr(row, name, getattr(record, name))
    row.total_hours_per_week = record.total_hours_per_week
    row.workload_status = record.workload_status


def _commit(db: Session, row: TeacherWorkload) -> TeacherWorkload:
    try:
        db.commit()
    except SQLAlchemyError:
        db.rollback()
        logger.exception(
            "Failed to persist workload for teacher %s (%s %s)", row.teacher_id, row.academic_year, row.semester
        )
        raise
    db.refresh(row)
    return row


def find_row(db: Session, teacher_id: str, academic_year: str, semester: str) -> TeacherWorkload | None:
    return db.execute(
        select(TeacherWorkload).where(
            TeacherWorkload.teacher_id == teacher_id,
            TeacherWorkload.academic_year == academic_year,
            TeacherWorkload.semester == semester,
        )
    ).scalar_one_or_none()


def load_rows(
    db: Session,
    *,
    academic_year: str | None = None,
    semester: str | None = None,
    teacher_id: str | None = None,
) -> list[TeacherWorkload]:
    query = select(TeacherWorkload)
    if academic_year:
        query = query.where(TeacherWorkload.academic_year == academic_year)
    if semester:
        query = query.where(TeacherWorkload.semester == semester)
    if teacher_id:
        query = query.where(TeacherWorkload.teacher_id == teacher_id)
    query = query.order_by(TeacherWorkload.created_at.desc(), TeacherWorkload.id)
    return list(db.execute(query).scalars())


def load_records(db: Session, aggregator: WorkloadAggregator, **filters) -> list[WorkloadRecord]:
    return [to_record(row, aggregator) for row in load_rows(db, **filters)]


def create_workload(db: Session, payload: WorkloadCreate, aggregator: WorkloadAggregator) -> TeacherWorkload:
    if not teacher_exists(db, payload.teacher_id):
        raise ResourceNotFoundError("Teacher", payload.teacher_id)
    if find_row(db, payload.teacher_id, payload.academic_year, payload.semester) is not None:
        raise ConflictError(
            "Workload record already exists for this teacher in the specified academic period",
            details={
                "teacher_id": payload.teacher_id,
                "academic_year": payload.academic_year,
                "semester": payload.semester,
            },
        )

    fields = payload.model_dump(exclude={"teacher_id", "academic_year", "semester"})
    record = aggregator.create(payload.teacher_id, payload.academic_year, payload.semester, **fields)
    row = TeacherWorkload(
        teacher_id=record.teacher_id,
        academic_year=record.academic_year,
        semester=record.semester,
    )
    _write_record(row, record)
    db.add(row)
    return _commit(db, row)


def update_workload(
    db: Session, row: TeacherWorkload, payload: WorkloadUpdate, aggregator: WorkloadAggregator
) -> TeacherWorkload:
    record = aggregator.recompute(to_record(row, aggregator), payload)
    _write_record(row, record)
    return _commit(db, row)


def calculate_from_schedule(
    db: Session,
    teacher_id: str,
    academic_year: str,
    semester: str,
    aggregator: WorkloadAggregator,
) -> TeacherWorkload:
    """Derive teaching, preparation and grading hours from the timetable and upsert them."""
    if not teacher_exists(db, teacher_id):
        raise ResourceNotFoundError("Teacher", teacher_id)

    schedule_rows = entries_for_teacher(db, teacher_id)
    row = find_row(db, teacher_id, academic_year, semester)
    existing = to_record(row, aggregator) if row is not None else None
    record = aggregator.derive_from_schedule(teacher_id, academic_year, semester, schedule_rows, existing=existing)

    if row is None:
        row = TeacherWorkload(teacher_id=teacher_id, academic_year=academic_year, semester=semester)
        db.add(row)
    _write_record(row, record)
    row = _commit(db, row)
    logger.info(
        "Recalculated workload for teacher %s (%s %s): %.2f hours from %d slot(s), %s",
        teacher_id,
        academic_year,
        semester,
        record.total_hours_per_week,
        len(schedule_rows),
        record.workload_status.value,
    )
    return row
