import logging

from fastapi import APIRouter, Depends, Query, status
from sqlalchemy import select
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.core.exceptions import ResourceNotFoundError
from app.models.class_subject import ClassSubject
from app.models.schedule import Schedule
from app.schemas.schedule import ScheduleCreate, ScheduleOut, ScheduleUpdate, TimeSlot
from app.services.schedule_store import ensure_slot_is_free, to_entry

logger = logging.getLogger(__name__)

router = APIRouter()


def _get_schedule_or_404(db: Session, schedule_id: str) -> Schedule:
    schedule = db.get(Schedule, schedule_id)
    if schedule is None:
        raise ResourceNotFoundError("Schedule", schedule_id)
    return schedule


@router.get("/", response_model=list[ScheduleOut])
def list_schedules(
    day_of_week: int | None = Query(default=None, ge=0, le=6),
    teacher_id: str | None = None,
    class_id: str | None = None,
    room: str | None = None,
    db: Session = Depends(get_db),
) -> list[ScheduleOut]:
    query = select(Schedule)
    if teacher_id or class_id:
        query = query.join(ClassSubject, Schedule.class_subject_id == ClassSubject.id)
        if teacher_id:
            query = query.where(ClassSubject.teacher_id == teacher_id)
        if class_id:
            query = query.where(ClassSubject.class_id == class_id)
    if day_of_week is not None:
        query = query.where(Schedule.day_of_week == day_of_week)
    if room:
        query = query.where(Schedule.room == room)
    query = query.order_by(Schedule.day_of_week, Schedule.start_time)
    return [to_entry(row) for row in db.execute(query).unique().scalars()]


@router.get("/{schedule_id}", response_model=ScheduleOut)
def get_schedule(schedule_id: str, db: Session = Depends(get_db)) -> ScheduleOut:
    return to_entry(_get_schedule_or_404(db, schedule_id))


@router.post("/", response_model=ScheduleOut, status_code=status.HTTP_201_CREATED)
def create_schedule(payload: ScheduleCreate, db: Session = Depends(get_db)) -> ScheduleOut:
    ensure_slot_is_free(db, payload)
    schedule = Schedule(
        class_subject_id=payload.class_subject_id,
        day_of_week=payload.day_of_week,
        start_time=payload.start_time,
        end_time=payload.end_time,
        room=payload.room,
    )
    db.add(schedule)
    db.commit()
    db.refresh(schedule)
    logger.info(
        "Saved schedule %s for class subject %s on day %s (%s-%s)",
        schedule.id,
        schedule.class_subject_id,
        schedule.day_of_week,
        schedule.start_time,
        schedule.end_time,
    )
    return to_entry(schedule)


@router.put("/{schedule_id}", response_model=ScheduleOut)
def update_schedule(schedule_id: str, payload: ScheduleUpdate, db: Session = Depends(get_db)) -> ScheduleOut:
    schedule = _get_schedule_or_404(db, schedule_id)
    data = payload.model_dump(exclude_unset=True)

    merged = {
        "class_subject_id": schedule.class_subject_id,
        "day_of_week": schedule.day_of_week,
        "start_time": schedule.start_time,
        "end_time": schedule.end_time,
        "room": schedule.room,
    }
    merged.update({key: value for key, value in data.items() if value is not None or key == "room"})
    candidate = TimeSlot.model_validate(merged)
    ensure_slot_is_free(db, candidate, exclude_id=schedule_id)

    schedule.class_subject_id = candidate.class_subject_id
    schedule.day_of_week = candidate.day_of_week
    schedule.start_time = candidate.start_time
    schedule.end_time = candidate.end_time
    schedule.room = candidate.room
    db.commit()
    db.refresh(schedule)
    logger.info("Updated schedule %s", schedule.id)
    return to_entry(schedule)


@router.delete("/{schedule_id}")
def delete_schedule(schedule_id: str, db: Session = Depends(get_db)) -> dict:
    schedule = _get_schedule_or_404(db, schedule_id)
    db.delete(schedule)
    db.commit()
    return {"success": True}
