"""Tests for srs_engine/review.py -- review intake."""
import threading
from datetime import timedelta

import pytest
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker

from srs_engine.errors import InvalidScoreError, StaleRecordError, StoreUnavailableError, UnknownConceptError
from srs_engine.models import ScheduleRecord as ScheduleRecordRow
from srs_engine.review import submit_review
from srs_engine.store import ScheduleRecordStore
from srs_engine.sync import sync


@pytest.fixture
def synced(store, catalog, now):
    sync(store, "learner-1", catalog, now=now)
    return store


def test_first_perfect_review(synced, now):
    reviewed_at = now + timedelta(hours=2)
    record = submit_review(synced, "learner-1", "doc-1:0", 100, now=reviewed_at)

    assert record.repetitions == 1
    assert record.interval_days == 1
    assert record.easiness_factor == pytest.approx(2.6)
    assert record.last_score == 100
    assert record.last_review_at == reviewed_at
    assert record.next_review_at == reviewed_at + timedelta(days=1)
    assert synced.get_one("learner-1", "doc-1:0") == record


def test_score_45_is_a_failure(synced, now):
    """45 maps to quality 2, which resets the streak."""
    for day in range(3):
        submit_review(synced, "learner-1", "doc-1:0", 95, now=now + timedelta(days=day))
    assert synced.get_one("learner-1", "doc-1:0").repetitions == 3

    record = submit_review(synced, "learner-1", "doc-1:0", 45, now=now + timedelta(days=30))
    assert record.repetitions == 0
    assert record.interval_days == 1
    assert record.easiness_factor >= 1.3
    assert synced.review_history("learner-1", "doc-1:0")[0].quality == 2


def test_score_50_rounds_up_to_passing(synced, now):
    record = submit_review(synced, "learner-1", "doc-1:0", 50, now=now)
    assert record.repetitions == 1


def test_growing_intervals(synced, now):
    at = now
    intervals = []
    for _ in range(4):
        record = submit_review(synced, "learner-1", "doc-1:0", 100, now=at)
        intervals.append(record.interval_days)
        at = record.next_review_at
    assert intervals == [1, 6, 17, 49]


def test_only_one_record_changes(synced, now):
    before = {r.concept_id: r for r in synced.get("learner-1")}
    submit_review(synced, "learner-1", "doc-1:1", 70, now=now)
    after = {r.concept_id: r for r in synced.get("learner-1")}

    assert after["doc-1:0"] == before["doc-1:0"]
    assert after["doc-2:0"] == before["doc-2:0"]
    assert after["doc-1:1"] != before["doc-1:1"]


@pytest.mark.parametrize("score", [-1, 101, 1000, 50.5, True, "80", None])
def test_invalid_score(synced, score):
    with pytest.raises(InvalidScoreError):
        submit_review(synced, "learner-1", "doc-1:0", score)
    assert synced.get_one("learner-1", "doc-1:0").version == 1


def test_unknown_concept(synced):
    with pytest.raises(UnknownConceptError) as exc_info:
        submit_review(synced, "learner-1", "not-synced", 80)
    assert exc_info.value.learner_id == "learner-1"
    assert exc_info.value.concept_id == "not-synced"


def test_review_is_logged(synced, now):
    submit_review(synced, "learner-1", "doc-1:0", 82, now=now)
    [entry] = synced.review_history("learner-1")
    assert (entry.concept_id, entry.score, entry.quality, entry.interval_days) == ("doc-1:0", 82, 4, 1)
    assert entry.reviewed_at == now


def test_concurrent_reviews_on_same_concept_all_count(synced, now):
    """Two devices reviewing at once must not lose an update."""
    workers = 8
    barrier = threading.Barrier(workers)
    errors = []

    def review():
        barrier.wait()
        try:
            submit_review(synced, "learner-1", "doc-1:0", 100, now=now)
        except Exception as e:  # surfaced through the assertion below
            errors.append(e)

    threads = [threading.Thread(target=review) for _ in range(workers)]
    for t in threads:
        t.start()
    for t in threads:
        t.join()

    record = synced.get_one("learner-1", "doc-1:0")
    assert errors == []
    assert record.repetitions == workers
    assert record.version == workers + 1
    assert len(synced.review_history("learner-1")) == workers


def _bump_version_after_read(store, session_factory, monkeypatch, times):
    """Simulate a writer in another process updating the row right after we read it"""
    real_get_one = store.get_one
    remaining = [times]

    def racing_get_one(learner_id, concept_id):
        record = real_get_one(learner_id, concept_id)
        if remaining[0] > 0:
            remaining[0] -= 1
            with session_factory() as db:
                db.query(ScheduleRecordRow).filter(
                    ScheduleRecordRow.learner_id == learner_id,
                    ScheduleRecordRow.concept_id == concept_id
                ).update({ScheduleRecordRow.version: ScheduleRecordRow.version + 1})
                db.commit()
        return record

    monkeypatch.setattr(store, "get_one", racing_get_one)


def test_stale_write_is_retried(synced, session_factory, monkeypatch, now):
    _bump_version_after_read(synced, session_factory, monkeypatch, times=1)
    record = submit_review(synced, "learner-1", "doc-1:0", 100, now=now, max_retries=2)

    assert record.version == 3
    assert record.repetitions == 1
    assert len(synced.review_history("learner-1")) == 1


def test_stale_write_gives_up_after_retries(synced, session_factory, monkeypatch, now):
    _bump_version_after_read(synced, session_factory, monkeypatch, times=5)
    with pytest.raises(StaleRecordError):
        submit_review(synced, "learner-1", "doc-1:0", 100, now=now, max_retries=2)
    assert synced.review_history("learner-1") == []


def test_store_failure_propagates(tmp_path):
    engine = create_engine(f"sqlite:///{tmp_path / 'missing' / 'srs.db'}")
    broken = ScheduleRecordStore(sessionmaker(bind=engine))
    with pytest.raises(StoreUnavailableError):
        submit_review(broken, "learner-1", "doc-1:0", 90)
