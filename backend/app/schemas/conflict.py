from pydantic import BaseModel, Field
from typing import Literal, Optional, List

ConflictType = Literal[
    "teacher_conflict",
    "room_conflict",
    "class_conflict",
    "time_error",
    "class_subject_not_found",
]


class ConflictDetail(BaseModel):
    type: ConflictType
    message: str
    conflicting_schedule_id: Optional[str] = None


class ConflictReport(BaseModel):
    conflicts: List[ConflictDetail] = Field(default_factory=list)
    # Non-blocking notes, e.g. an unusually short or long slot.
    warnings: List[str] = Field(default_factory=list)

    @property
    def has_conflicts(self) -> bool:
        return bool(self.conflicts)

    def of_type(self, conflict_type: str) -> List[ConflictDetail]:
        return [item for item in self.conflicts if item.type == conflict_type]
