import uuid
from datetime import datetime
from enum import Enum

from sqlalchemy import DateTime, Enum as SAEnum, Float, ForeignKey, String, Text, UniqueConstraint
from sqlalchemy.orm import Mapped, mapped_column
from sqlalchemy.sql import func

from app.db.base import Base


class WorkloadStatus(str, Enum):
    overloaded = "overloaded"
    underloaded = "underloaded"
    normal = "normal"


class TeacherWorkload(Base):
    __tablename__ = "teacher_workloads"
    __table_args__ = (
        UniqueConstraint("teacher_id", "academic_year", "semester", name="uq_teacher_workload_period"),
    )

    id: Mapped[str] = mapped_column(String(36), primary_key=True, default=lambda: str(uuid.uuid4()))
    teacher_id: Mapped[str] = mapped_column(
        String(36), ForeignKey("teachers.id", ondelete="CASCADE"), index=True, nullable=False
    )
    academic_year: Mapped[str] = mapped_column(String(20), index=True, nullable=False)
    semester: Mapped[str] = mapped_column(String(20), index=True, nullable=False)
    max_hours_per_week: Mapped[float] = mapped_column(Float, nullable=False)
    teaching_hours: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    administrative_hours: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    extracurricular_hours: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    preparation_hours: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    grading_hours: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    other_duties_hours: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    # Written only from an engine-produced WorkloadRecord; kept for filtering.
    total_hours_per_week: Mapped[float] = mapped_column(Float, nullable=False, default=0)
    workload_status: Mapped[WorkloadStatus] = mapped_column(
        SAEnum(WorkloadStatus, name="workload_status"),
        index=True,
        nullable=False,
        default=WorkloadStatus.normal,
    )
    notes: Mapped[str | None] = mapped_column(Text, nullable=True)
    created_at: Mapped[datetime] = mapped_column(DateTime(timezone=True), server_default=func.now())
    updated_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), onupdate=func.now())
