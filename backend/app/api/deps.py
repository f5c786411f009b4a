from collections.abc import Generator

from sqlalchemy.orm import Session

from app.db.session import SessionLocal
from app.services.workload import WorkloadAggregator, get_workload_policy


def get_db() -> Generator[Session, None, None]:
    db = SessionLocal()
    try:
        yield db
    finally:
        db.close()


def get_workload_aggregator() -> WorkloadAggregator:
    return WorkloadAggregator(get_workload_policy())
