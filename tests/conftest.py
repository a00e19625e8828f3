"""
Pytest Configuration and Fixtures.

Every test gets its own file-backed SQLite database so threaded tests see a
real connection pool.
"""
import pytest
from datetime import datetime, timezone
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from srs_engine.database import init_db
from srs_engine.schemas import CatalogConcept, ScheduleRecord
from srs_engine.store import ScheduleRecordStore


@pytest.fixture
def engine(tmp_path):
    engine = create_engine(
        f"sqlite:///{tmp_path / 'srs_test.db'}",
        connect_args={"check_same_thread": False, "timeout": 30}
    )
    init_db(bind=engine)
    yield engine
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(bind=engine, autocommit=False, autoflush=False, expire_on_commit=False)


@pytest.fixture
def store(session_factory):
    return ScheduleRecordStore(session_factory, lock_timeout=5.0)


@pytest.fixture
def now():
    return datetime(2026, 3, 10, 9, 30, tzinfo=timezone.utc)


@pytest.fixture
def catalog():
    return [
        CatalogConcept(concept_id="doc-1:0", concept_label="Photosynthesis"),
        CatalogConcept(concept_id="doc-1:1", concept_label="Cellular respiration"),
        CatalogConcept(concept_id="doc-2:0", concept_label="Mitosis"),
    ]


@pytest.fixture
def make_record(now):
    """Build a detached schedule record with overridable fields"""
    def _make(**overrides):
        values = {
            "learner_id": "learner-1",
            "concept_id": "doc-1:0",
            "concept_label": "Photosynthesis",
            "next_review_at": now,
        }
        values.update(overrides)
        return ScheduleRecord(**values)
    return _make
