from __future__ import annotations

import logging
from collections.abc import Iterable

from pydantic import ValidationError
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.core.config import get_settings
from app.core.exceptions import ConflictError, ResourceNotFoundError
from app.models.class_subject import ClassSubject
from app.models.schedule import Schedule
from app.models.teacher import Teacher
from app.schemas.conflict import ConflictReport
from app.schemas.schedule import ClassSubjectAssignment, ScheduleEntry, TimeSlot
from app.services.conflict_service import ConflictDetector

logger = logging.getLogger(__name__)


def to_entry(schedule: Schedule) -> ScheduleEntry:
    return ScheduleEntry.model_validate(schedule, from_attributes=True)


def usable_entries(rows: Iterable[Schedule]) -> list[ScheduleEntry]:
    """Convert stored rows, skipping any that no longer pass validation."""
    entries = []
    for row in rows:
        try:
            entries.append(to_entry(row))
        except ValidationError as exc:
            logger.warning("Skipping malformed schedule %s: %d validation error(s)", row.id, exc.error_count())
    return entries


def assignment_map(db: Session, class_subject_ids: set[str] | None = None) -> dict[str, ClassSubjectAssignment]:
    query = select(ClassSubject)
    if class_subject_ids is not None:
        if not class_subject_ids:
            return {}
        query = query.where(ClassSubject.id.in_(class_subject_ids))
    rows = db.execute(query).scalars()
    return {row.id: ClassSubjectAssignment.model_validate(row, from_attributes=True) for row in rows}


def entries_for_day(db: Session, day_of_week: int, teacher_id: str | None = None) -> list[ScheduleEntry]:
    query = select(Schedule).where(Schedule.day_of_week == day_of_week)
    if teacher_id is not None:
        query = query.join(ClassSubject, Schedule.class_subject_id == ClassSubject.id).where(
            ClassSubject.teacher_id == teacher_id
        )
    query = query.order_by(Schedule.start_time)
    return usable_entries(db.execute(query).unique().scalars())


def entries_for_teacher(db: Session, teacher_id: str) -> list[ScheduleEntry]:
    query = (
        select(Schedule)
        .join(ClassSubject, Schedule.class_subject_id == ClassSubject.id)
        .where(ClassSubject.teacher_id == teacher_id)
        .order_by(Schedule.day_of_week, Schedule.start_time)
    )
    return usable_entries(db.execute(query).unique().scalars())


def teacher_exists(db: Session, teacher_id: str) -> bool:
    return db.get(Teacher, teacher_id) is not None


def build_detector(db: Session, class_subject_ids: set[str] | None = None) -> ConflictDetector:
    settings = get_settings()
    return ConflictDetector(
        assignment_map(db, class_subject_ids),
        check_class_overlap=settings.conflict_check_class_overlap,
        min_duration_minutes=settings.schedule_min_duration_minutes,
        max_duration_minutes=settings.schedule_max_duration_minutes,
    )


def check_slot(db: Session, candidate: TimeSlot, exclude_id: str | None = None) -> ConflictReport:
    existing = entries_for_day(db, candidate.day_of_week)
    referenced = {candidate.class_subject_id} | {entry.class_subject_id for entry in existing}
    detector = build_detector(db, referenced)
    return detector.detect(candidate, existing, exclude_id=exclude_id)


def ensure_slot_is_free(db: Session, candidate: TimeSlot, exclude_id: str | None = None) -> ConflictReport:
    report = check_slot(db, candidate, exclude_id=exclude_id)
    if report.of_type("class_subject_not_found"):
        raise ResourceNotFoundError("Class subject", candidate.class_subject_id)
    if report.has_conflicts:
        logger.info(
            "Rejected slot for class subject %s on day %s (%s-%s): %d conflict(s)",
            candidate.class_subject_id,
            candidate.day_of_week,
            candidate.start_time,
            candidate.end_time,
            len(report.conflicts),
        )
        raise ConflictError(
            "Schedule conflicts detected",
            details={"conflicts": [item.model_dump() for item in report.conflicts]},
        )
    return report
