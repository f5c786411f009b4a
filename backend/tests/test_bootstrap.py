import pytest
from sqlalchemy import create_engine
from sqlalchemy.pool import StaticPool

from app.db import bootstrap


def _raise_error(message: str):
    raise RuntimeError(message)


def test_runtime_schema_bootstrap_raises_on_validation_failure(monkeypatch):
    monkeypatch.setattr(bootstrap.Base.metadata, "create_all", lambda bind: None)
    monkeypatch.setattr(
        bootstrap,
        "_assert_required_columns",
        lambda engine: _raise_error("missing required schema"),
    )

    with pytest.raises(RuntimeError, match="Runtime schema bootstrap failed"):
        bootstrap.ensure_runtime_schema()


def test_runtime_schema_bootstrap_creates_required_tables():
    engine = create_engine("sqlite+pysqlite://", poolclass=StaticPool)

    assert bootstrap.find_schema_gaps(engine)[0] == sorted(bootstrap.REQUIRED_COLUMNS)

    bootstrap.ensure_runtime_schema(engine)

    assert bootstrap.find_schema_gaps(engine) == ([], {})
    engine.dispose()
