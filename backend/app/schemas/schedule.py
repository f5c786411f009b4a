from __future__ import annotations

import re

from pydantic import BaseModel, Field, field_validator

DAY_NAMES = (
    "Monday",
    "Tuesday",
    "Wednesday",
    "Thursday",
    "Friday",
    "Saturday",
    "Sunday",
)

TIME_PATTERN = re.compile(r"^([01]\d|2[0-3]):[0-5]\d(:[0-5]\d)?$")


def normalize_time(value: str) -> str:
    stripped = str(value).strip()
    if not TIME_PATTERN.match(stripped):
        raise ValueError("Time must be in HH:MM 24-hour format")
    return stripped[:5]


def parse_time_to_minutes(value: str) -> int:
    hours, minutes = normalize_time(value).split(":")
    return int(hours) * 60 + int(minutes)


def day_name(day_of_week: int) -> str:
    if 0 <= day_of_week < len(DAY_NAMES):
        return DAY_NAMES[day_of_week]
    return f"day {day_of_week}"


class ClassSubjectAssignment(BaseModel):
    """Links a schedule slot to the class, subject and teacher it belongs to."""

    id: str
    class_id: str
    subject_id: str
    teacher_id: str | None = None

    model_config = {"from_attributes": True, "frozen": True}


class TimeSlot(BaseModel):
    """One weekly occurrence of a class-subject.

    ``start_time < end_time`` is not enforced here; the conflict detector
    reports an inverted range as a ``time_error`` next to any overlaps.
    """

    class_subject_id: str = Field(min_length=1, max_length=36)
    day_of_week: int = Field(ge=0, le=6)
    start_time: str
    end_time: str
    room: str | None = Field(default=None, max_length=100)

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time_format(cls, value: str) -> str:
        return normalize_time(value)

    @field_validator("room")
    @classmethod
    def blank_room_is_none(cls, value: str | None) -> str | None:
        if value is None:
            return None
        stripped = value.strip()
        return stripped or None

    @property
    def start_minutes(self) -> int:
        return parse_time_to_minutes(self.start_time)

    @property
    def end_minutes(self) -> int:
        return parse_time_to_minutes(self.end_time)

    @property
    def duration_minutes(self) -> int:
        return self.end_minutes - self.start_minutes


class ScheduleEntry(TimeSlot):
    """A persisted slot together with the assignment it belongs to."""

    id: str
    class_subject: ClassSubjectAssignment | None = None

    model_config = {"from_attributes": True}

    @property
    def assigned_teacher_id(self) -> str | None:
        if self.class_subject is None:
            return None
        return self.class_subject.teacher_id


class ScheduleCreate(TimeSlot):
    # The teacher always comes from the class subject; a client-sent teacher_id is refused.
    model_config = {"extra": "forbid"}


class ScheduleUpdate(BaseModel):
    class_subject_id: str | None = Field(default=None, min_length=1, max_length=36)
    day_of_week: int | None = Field(default=None, ge=0, le=6)
    start_time: str | None = None
    end_time: str | None = None
    room: str | None = Field(default=None, max_length=100)

    model_config = {"extra": "forbid"}

    @field_validator("start_time", "end_time")
    @classmethod
    def validate_time_format(cls, value: str | None) -> str | None:
        if value is None:
            return None
        return normalize_time(value)


class ScheduleOut(ScheduleEntry):
    pass


class ConflictCheckRequest(TimeSlot):
    exclude_id: str | None = None

    model_config = {"extra": "forbid"}
