from __future__ import annotations

import logging
from collections.abc import Iterable, Mapping
from dataclasses import dataclass
from typing import Any

from app.core.config import Settings, get_settings
from app.core.exceptions import ConfigurationError
from app.models.teacher_workload import WorkloadStatus
from app.schemas.schedule import ScheduleEntry
from app.schemas.workload import (
    WorkloadDistribution,
    WorkloadRecord,
    WorkloadSummary,
    WorkloadUpdate,
)

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class WorkloadPolicy:
    standard_max_hours: float = 40.0
    underload_threshold: float = 0.5
    preparation_ratio: float = 0.5
    grading_ratio: float = 0.3

    def __post_init__(self) -> None:
        if self.standard_max_hours <= 0:
            raise ConfigurationError("Standard max hours per week must be greater than 0")
        if not 0 <= self.underload_threshold < 1:
            raise ConfigurationError("Underload threshold must be in the range [0, 1)")
        if self.preparation_ratio < 0 or self.grading_ratio < 0:
            raise ConfigurationError("Preparation and grading ratios must not be negative")


def policy_from_settings(settings: Settings) -> WorkloadPolicy:
    return WorkloadPolicy(
        standard_max_hours=settings.workload_standard_max_hours,
        underload_threshold=settings.workload_underload_threshold,
        preparation_ratio=settings.workload_preparation_ratio,
        grading_ratio=settings.workload_grading_ratio,
    )


def get_workload_policy() -> WorkloadPolicy:
    return policy_from_settings(get_settings())


def _percentage(part: float, whole: float) -> float:
    if whole <= 0:
        return 0.0
    return round(part / whole * 100, 2)


class WorkloadAggregator:
    def __init__(self, policy: WorkloadPolicy | None = None):
        self.policy = policy or WorkloadPolicy()

    def create(self, teacher_id: str, academic_year: str, semester: str, **fields: Any) -> WorkloadRecord:
        values = {key: value for key, value in fields.items() if value is not None}
        values.setdefault("max_hours_per_week", self.policy.standard_max_hours)
        record = WorkloadRecord(
            teacher_id=teacher_id,
            academic_year=academic_year,
            semester=semester,
            **values,
        )
        return record.with_underload_threshold(self.policy.underload_threshold)

    def recompute(
        self,
        record: WorkloadRecord,
        updates: WorkloadUpdate | Mapping[str, Any] | None = None,
    ) -> WorkloadRecord:
        """Apply the provided fields and re-derive total and status.

        Missing or ``None`` fields keep their stored value, so calling this
        twice with the same updates returns an identical record.
        """
        if updates is None:
            changes: dict[str, Any] = {}
        else:
            if not isinstance(updates, WorkloadUpdate):
                updates = WorkloadUpdate.model_validate(dict(updates))
            changes = updates.model_dump(exclude_none=True)
        updated = record.model_copy(update=changes)
        return updated.with_underload_threshold(self.policy.underload_threshold)

    def teaching_hours_from_schedule(self, teacher_id: str, schedule_rows: Iterable[ScheduleEntry]) -> float:
        total_minutes = 0
        for row in schedule_rows:
            if row.assigned_teacher_id != teacher_id:
                continue
            duration = row.duration_minutes
            if duration <= 0:
                logger.warning(
                    "Skipping schedule %s for teacher %s with non-positive duration (%s-%s)",
                    row.id,
                    teacher_id,
                    row.start_time,
                    row.end_time,
                )
                continue
            total_minutes += duration
        return round(total_minutes / 60, 2)

    def derive_from_schedule(
        self,
        teacher_id: str,
        academic_year: str,
        semester: str,
        schedule_rows: Iterable[ScheduleEntry],
        existing: WorkloadRecord | None = None,
    ) -> WorkloadRecord:
        teaching_hours = self.teaching_hours_from_schedule(teacher_id, schedule_rows)
        base = existing or self.create(teacher_id, academic_year, semester)
        return self.recompute(
            base,
            WorkloadUpdate(
                teaching_hours=teaching_hours,
                preparation_hours=round(teaching_hours * self.policy.preparation_ratio, 2),
                grading_hours=round(teaching_hours * self.policy.grading_ratio, 2),
            ),
        )

    def classify(self, records: Iterable[WorkloadRecord]) -> list[WorkloadRecord]:
        return [record.with_underload_threshold(self.policy.underload_threshold) for record in records]

    def overloaded(self, records: Iterable[WorkloadRecord]) -> list[WorkloadRecord]:
        return [r for r in self.classify(records) if r.workload_status == WorkloadStatus.overloaded]

    def underloaded(self, records: Iterable[WorkloadRecord]) -> list[WorkloadRecord]:
        return [r for r in self.classify(records) if r.workload_status == WorkloadStatus.underloaded]

    def summarize(self, records: Iterable[WorkloadRecord], academic_year: str, semester: str) -> WorkloadSummary:
        classified = self.classify(records)
        total = len(classified)
        overloaded = sum(1 for r in classified if r.workload_status == WorkloadStatus.overloaded)
        underloaded = sum(1 for r in classified if r.workload_status == WorkloadStatus.underloaded)
        # Derived rather than counted so the three buckets always add up.
        normal = total - overloaded - underloaded

        average_hours = round(sum(r.total_hours_per_week for r in classified) / total, 2) if total else 0.0
        average_max = round(sum(r.max_hours_per_week for r in classified) / total, 2) if total else 0.0

        return WorkloadSummary(
            academic_year=academic_year,
            semester=semester,
            total_teachers=total,
            overloaded_teachers=overloaded,
            underloaded_teachers=underloaded,
            normal_workload_teachers=normal,
            average_hours_per_week=average_hours,
            average_max_hours=average_max,
            average_utilization_percentage=_percentage(average_hours, average_max),
            workload_distribution=WorkloadDistribution(
                overloaded_percentage=_percentage(overloaded, total),
                underloaded_percentage=_percentage(underloaded, total),
                normal_percentage=_percentage(normal, total),
            ),
        )
