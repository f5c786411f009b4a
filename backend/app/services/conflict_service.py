"""
Conflict detection for a single proposed timetable slot.

Two half-open intervals [s1, e1) and [s2, e2) overlap iff s1 < e2 and e1 > s2,
so back-to-back slots (e1 == s2) never collide.
"""

from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping

from app.schemas.conflict import ConflictDetail, ConflictReport
from app.schemas.schedule import ClassSubjectAssignment, ScheduleEntry, TimeSlot, day_name

logger = logging.getLogger(__name__)


def intervals_overlap(a_start: int, a_end: int, b_start: int, b_end: int) -> bool:
    return a_start < b_end and a_end > b_start


class ConflictDetector:
    def __init__(
        self,
        assignments: Mapping[str, ClassSubjectAssignment],
        *,
        check_class_overlap: bool = False,
        min_duration_minutes: int | None = None,
        max_duration_minutes: int | None = None,
    ):
        self.assignments = assignments
        self.check_class_overlap = check_class_overlap
        self.min_duration_minutes = min_duration_minutes
        self.max_duration_minutes = max_duration_minutes

    def _resolve_entry(self, entry: ScheduleEntry) -> ClassSubjectAssignment | None:
        if entry.class_subject is not None:
            return entry.class_subject
        return self.assignments.get(entry.class_subject_id)

    def detect(
        self,
        candidate: TimeSlot,
        existing_entries: Iterable[ScheduleEntry],
        exclude_id: str | None = None,
    ) -> ConflictReport:
        """
        Compare ``candidate`` with the entries already booked on its day.

        The caller pre-filters ``existing_entries`` to the candidate's day.
        An empty ``conflicts`` list means the slot is safe to persist.
        """
        assignment = self.assignments.get(candidate.class_subject_id)
        if assignment is None:
            return ConflictReport(
                conflicts=[
                    ConflictDetail(
                        type="class_subject_not_found",
                        message=f"Class subject {candidate.class_subject_id} not found",
                    )
                ]
            )

        teacher_id = assignment.teacher_id
        day = day_name(candidate.day_of_week)
        start, end = candidate.start_minutes, candidate.end_minutes
        conflicts: list[ConflictDetail] = []

        for entry in existing_entries:
            if exclude_id is not None and entry.id == exclude_id:
                continue
            if not intervals_overlap(start, end, entry.start_minutes, entry.end_minutes):
                continue

            other = self._resolve_entry(entry)
            if other is None:
                logger.warning(
                    "Schedule %s references unknown class subject %s; skipping teacher check",
                    entry.id,
                    entry.class_subject_id,
                )
            other_teacher_id = other.teacher_id if other is not None else None
            window = f"{entry.start_time}-{entry.end_time}"

            if teacher_id and other_teacher_id == teacher_id:
                conflicts.append(
                    ConflictDetail(
                        type="teacher_conflict",
                        message=f"Teacher {teacher_id} is already scheduled on {day} at {window}",
                        conflicting_schedule_id=entry.id,
                    )
                )
            if candidate.room and entry.room == candidate.room:
                conflicts.append(
                    ConflictDetail(
                        type="room_conflict",
                        message=f"Room {candidate.room} is already booked on {day} at {window}",
                        conflicting_schedule_id=entry.id,
                    )
                )
            if self.check_class_overlap and other is not None and other.class_id == assignment.class_id:
                conflicts.append(
                    ConflictDetail(
                        type="class_conflict",
                        message=f"Class {assignment.class_id} is already scheduled on {day} at {window}",
                        conflicting_schedule_id=entry.id,
                    )
                )

        if start >= end:
            conflicts.append(
                ConflictDetail(
                    type="time_error",
                    message=f"End time {candidate.end_time} must be after start time {candidate.start_time}",
                )
            )

        return ConflictReport(conflicts=conflicts, warnings=self._duration_warnings(candidate))

    def _duration_warnings(self, candidate: TimeSlot) -> list[str]:
        duration = candidate.duration_minutes
        if duration <= 0:
            return []
        too_short = self.min_duration_minutes is not None and duration < self.min_duration_minutes
        too_long = self.max_duration_minutes is not None and duration > self.max_duration_minutes
        if not (too_short or too_long):
            return []
        return [
            f"Schedule duration is unusual ({duration} minutes). "
            f"Recommended: {self.min_duration_minutes}-{self.max_duration_minutes} minutes"
        ]
