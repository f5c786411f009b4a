from fastapi import APIRouter, Depends, Query, status
from sqlalchemy.orm import Session

from app.api.deps import get_db, get_workload_aggregator
from app.core.exceptions import ResourceNotFoundError
from app.models.teacher_workload import TeacherWorkload, WorkloadStatus
from app.schemas.workload import (
    WorkloadCalculateRequest,
    WorkloadCreate,
    WorkloadOut,
    WorkloadRecord,
    WorkloadSummary,
    WorkloadUpdate,
)
from app.services.workload import WorkloadAggregator
from app.services.workload_store import (
    calculate_from_schedule,
    create_workload,
    load_records,
    to_record,
    update_workload,
)

router = APIRouter()


def _get_workload_or_404(db: Session, workload_id: str) -> TeacherWorkload:
    row = db.get(TeacherWorkload, workload_id)
    if row is None:
        raise ResourceNotFoundError("Teacher workload", workload_id)
    return row


def _out(records: list[WorkloadRecord]) -> list[WorkloadOut]:
    return [WorkloadOut.from_record(record) for record in records]


@router.get("/", response_model=list[WorkloadOut])
def list_workloads(
    teacher_id: str | None = None,
    academic_year: str | None = None,
    semester: str | None = None,
    workload_status: WorkloadStatus | None = None,
    db: Session = Depends(get_db),
    aggregator: WorkloadAggregator = Depends(get_workload_aggregator),
) -> list[WorkloadOut]:
    records = load_records(db, aggregator, teacher_id=teacher_id, academic_year=academic_year, semester=semester)
    if workload_status is not None:
        # Filter on the freshly derived status, not the stored copy.
        records = [record for record in records if record.workload_status == workload_status]
    return _out(records)


@router.get("/summary", response_model=WorkloadSummary)
def workload_summary(
    academic_year: str = Query(min_length=1),
    semester: str = Query(min_length=1),
    db: Session = Depends(get_db),
    aggregator: WorkloadAggregator = Depends(get_workload_aggregator),
) -> WorkloadSummary:
    records = load_records(db, aggregator, academic_year=academic_year, semester=semester)
    return aggregator.summarize(records, academic_year, semester)


@router.get("/overloaded", response_model=list[WorkloadOut])
def overloaded_teachers(
    academic_year: str | None = None,
    semester: str | None = None,
    db: Session = Depends(get_db),
    aggregator: WorkloadAggregator = Depends(get_workload_aggregator),
) -> list[WorkloadOut]:
    return _out(aggregator.overloaded(load_records(db, aggregator, academic_year=academic_year, semester=semester)))


@router.get("/underloaded", response_model=list[WorkloadOut])
def underloaded_teachers(
    academic_year: str | None = None,
    semester: str | None = None,
    db: Session = Depends(get_db),
    aggregator: WorkloadAggregator = Depends(get_workload_aggregator),
) -> list[WorkloadOut]:
    return _out(aggregator.underloaded(load_records(db, aggregator, academic_year=academic_year, semester=semester)))


@router.get("/teacher/{teacher_id}", response_model=list[WorkloadOut])
def workloads_for_teacher(
    teacher_id: str,
    academic_year: str | None = None,
    semester: str | None = None,
    db: Session = Depends(get_db),
    aggregator: WorkloadAggregator = Depends(get_workload_aggregator),
) -> list[WorkloadOut]:
    return _out(load_records(db, aggregator, teacher_id=teacher_id, academic_year=academic_year, semester=semester))


@router.post("/teacher/{teacher_id}/calculate", response_model=WorkloadOut)
def calculate_workload(
    teacher_id: str,
    payload: WorkloadCalculateRequest,
    db: Session = Depends(get_db),
    aggregator: WorkloadAggregator = Depends(get_workload_aggregator),
) -> WorkloadOut:
    row = calculate_from_schedule(db, teacher_id, payload.academic_year, payload.semester, aggregator)
    return WorkloadOut.from_record(to_record(row, aggregator))


@router.get("/{workload_id}", response_model=WorkloadOut)
def get_workload(
    workload_id: str,
    db: Session = Depends(get_db),
    aggregator: WorkloadAggregator = Depends(get_workload_aggregator),
) -> WorkloadOut:
    return WorkloadOut.from_record(to_record(_get_workload_or_404(db, workload_id), aggregator))


@router.post("/", response_model=WorkloadOut, status_code=status.HTTP_201_CREATED)
def create_workload_record(
    payload: WorkloadCreate,
    db: Session = Depends(get_db),
    aggregator: WorkloadAggregator = Depends(get_workload_aggregator),
) -> WorkloadOut:
    return WorkloadOut.from_record(to_record(create_workload(db, payload, aggregator), aggregator))


@router.put("/{workload_id}", response_model=WorkloadOut)
def update_workload_record(
    workload_id: str,
    payload: WorkloadUpdate,
    db: Session = Depends(get_db),
    aggregator: WorkloadAggregator = Depends(get_workload_aggregator),
) -> WorkloadOut:
    row = _get_workload_or_404(db, workload_id)
    return WorkloadOut.from_record(to_record(update_workload(db, row, payload, aggregator), aggregator))


@router.delete("/{workload_id}")
def delete_workload(workload_id: str, db: Session = Depends(get_db)) -> dict:
    row = _get_workload_or_404(db, workload_id)
    db.delete(row)
    db.commit()
    return {"success": True}
