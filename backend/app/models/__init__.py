from app.models.class_subject import ClassSubject  # noqa: F401
from app.models.schedule import Schedule  # noqa: F401
from app.models.teacher import Teacher, TeacherStatus  # noqa: F401
from app.models.teacher_workload import TeacherWorkload, WorkloadStatus  # noqa: F401
