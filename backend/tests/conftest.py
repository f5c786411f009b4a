import os

# Must be set before the app builds its engine from cached settings.
os.environ.setdefault("DATABASE_URL", "sqlite+pysqlite://")

import pytest
from fastapi.testclient import TestClient #gives you a fake http client that can call your FastAPI routes without running a real server.
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from app import models  # noqa: F401
from app.api.deps import get_db
from app.db.base import Base
from app.main import app
from app.models.class_subject import ClassSubject
from app.models.teacher import Teacher


@pytest.fixture()
def engine():
    engine = create_engine( #create isolated DB
        "sqlite+pysqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture()
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture()
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture() #test client
def client(session_factory):
    def override_get_db():
        db = session_factory()
        try:
            yield db
        finally:
            db.close()

    app.dependency_overrides[get_db] = override_get_db

    with TestClient(app) as test_client:
        yield test_client

    app.dependency_overrides.clear()


@pytest.fixture()
def make_teacher(db_session):
    def _make(name="Teacher", **kwargs):
        teacher = Teacher(name=name, **kwargs)
        db_session.add(teacher)
        db_session.commit()
        db_session.refresh(teacher)
        return teacher

    return _make


@pytest.fixture()
def make_class_subject(db_session):
    def _make(teacher_id=None, class_id="class-10a", subject_id="math"):
        class_subject = ClassSubject(class_id=class_id, subject_id=subject_id, teacher_id=teacher_id)
        db_session.add(class_subject)
        db_session.commit()
        db_session.refresh(class_subject)
        return class_subject

    return _make
