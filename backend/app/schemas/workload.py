from __future__ import annotations

from pydantic import BaseModel, Field, PrivateAttr, computed_field

from app.models.teacher_workload import WorkloadStatus

HOUR_FIELDS = (
    "teaching_hours",
    "administrative_hours",
    "extracurricular_hours",
    "preparation_hours",
    "grading_hours",
    "other_duties_hours",
)


def classify_workload(total_hours: float, max_hours: float, underload_threshold: float) -> WorkloadStatus:
    # Overloaded wins when a low ceiling makes both predicates true.
    if total_hours > max_hours:
        return WorkloadStatus.overloaded
    if total_hours < max_hours * underload_threshold:
        return WorkloadStatus.underloaded
    return WorkloadStatus.normal


class WorkloadRecord(BaseModel):
    """Weekly duty hours of one teacher for one academic period.

    ``total_hours_per_week`` and ``workload_status`` are computed from the
    hour categories on every access. They appear in serialized output but are
    never read from input, so they cannot disagree with the categories. A record
    that did not pass through a WorkloadAggregator is classified with the
    configured policy.
    """

    id: str | None = None
    teacher_id: str
    academic_year: str
    semester: str
    max_hours_per_week: float = Field(gt=0)
    teaching_hours: float = Field(default=0, ge=0)
    administrative_hours: float = Field(default=0, ge=0)
    extracurricular_hours: float = Field(default=0, ge=0)
    preparation_hours: float = Field(default=0, ge=0)
    grading_hours: float = Field(default=0, ge=0)
    other_duties_hours: float = Field(default=0, ge=0)
    notes: str | None = None

    model_config = {"from_attributes": True}

    _underload_threshold: float | None = PrivateAttr(default=None)

    @computed_field
    @property
    def total_hours_per_week(self) -> float:
        return round(sum(getattr(self, name) for name in HOUR_FIELDS), 2)

    @computed_field
    @property
    def workload_status(self) -> WorkloadStatus:
        threshold = self._underload_threshold
        if threshold is None:
            from app.services.workload import get_workload_policy

            threshold = get_workload_policy().underload_threshold
        return classify_workload(self.total_hours_per_week, self.max_hours_per_week, threshold)

    def with_underload_threshold(self, threshold: float) -> "WorkloadRecord":
        record = self.model_copy()
        record._underload_threshold = threshold
        return record


class WorkloadUpdate(BaseModel):
    max_hours_per_week: float | None = Field(default=None, gt=0)
    teaching_hours: float | None = Field(default=None, ge=0)
    administrative_hours: float | None = Field(default=None, ge=0)
    extracurricular_hours: float | None = Field(default=None, ge=0)
    preparation_hours: float | None = Field(default=None, ge=0)
    grading_hours: float | None = Field(default=None, ge=0)
    other_duties_hours: float | None = Field(default=None, ge=0)
    notes: str | None = None


class WorkloadCreate(WorkloadUpdate):
    teacher_id: str = Field(min_length=1, max_length=36)
    academic_year: str = Field(min_length=1, max_length=20)
    semester: str = Field(min_length=1, max_length=20)


class WorkloadCalculateRequest(BaseModel):
    academic_year: str = Field(min_length=1, max_length=20)
    semester: str = Field(min_length=1, max_length=20)


class WorkloadDistribution(BaseModel):
    overloaded_percentage: float = 0
    underloaded_percentage: float = 0
    normal_percentage: float = 0


class WorkloadSummary(BaseModel):
    academic_year: str
    semester: str
    total_teachers: int = 0
    overloaded_teachers: int = 0
    underloaded_teachers: int = 0
    normal_workload_teachers: int = 0
    average_hours_per_week: float = 0
    average_max_hours: float = 0
    average_utilization_percentage: float = 0
    workload_distribution: WorkloadDistribution = Field(default_factory=WorkloadDistribution)


class WorkloadOut(BaseModel):
    id: str | None = None
    teacher_id: str
    academic_year: str
    semester: str
    max_hours_per_week: float
    teaching_hours: float
    administrative_hours: float
    extracurricular_hours: float
    preparation_hours: float
    grading_hours: float
    other_duties_hours: float
    total_hours_per_week: float
    workload_status: WorkloadStatus
    notes: str | None = None

    @classmethod
    def from_record(cls, record: WorkloadRecord) -> "WorkloadOut":
        return cls.model_validate(record.model_dump())
