from fastapi import APIRouter, Depends
from sqlalchemy.orm import Session

from app.api.deps import get_db
from app.schemas.conflict import ConflictReport
from app.schemas.schedule import ConflictCheckRequest
from app.services.schedule_store import check_slot

router = APIRouter()


@router.post("/detect", response_model=ConflictReport)
def detect_conflicts(payload: ConflictCheckRequest, db: Session = Depends(get_db)) -> ConflictReport:
    # Reports an unknown class subject inside the body instead of answering 404.
    return check_slot(db, payload, exclude_id=payload.exclude_id)
