"""Durable schedule record store.

The store is the only shared mutable resource of the engine. Writers to the
same (learner, concept) key are serialized in-process by a keyed lock, and
across processes by the record's ``version`` column: ``upsert`` only applies
when the stored version still matches the one that was read.
"""
from contextlib import contextmanager
from datetime import datetime, timezone
from typing import List, Optional, Tuple

from loguru import logger
from sqlalchemy.exc import (
    DisconnectionError,
    IntegrityError,
    InterfaceError,
    OperationalError,
    TimeoutError as PoolTimeoutError,
)

from srs_engine.config import settings
from srs_engine.crud import (
    add_review_log,
    get_concept_ids,
    get_review_logs,
    get_schedule_record,
    get_schedule_records,
    insert_schedule_record,
    update_schedule_record,
)
from srs_engine.database import SessionLocal
from srs_engine.errors import NotFoundError, StaleRecordError, StoreUnavailableError
from srs_engine.locks import KeyedLocks
from srs_engine.schemas import ReviewEntry, ScheduleRecord, as_utc

UNAVAILABLE_ERRORS = (OperationalError, InterfaceError, DisconnectionError, PoolTimeoutError)


class ScheduleRecordStore:
    """Per-(learner, concept) schedule records backed by a SQLAlchemy session factory"""

    def __init__(self, session_factory=None, locks: KeyedLocks = None, lock_timeout: float = None):
        self._session_factory = session_factory or SessionLocal
        self._locks = locks or KeyedLocks()
        self._lock_timeout = settings.lock_timeout_seconds if lock_timeout is None else lock_timeout

    @contextmanager
    def lock(self, learner_id: str, concept_id: str):
        """Serialize read-modify-write on one key within this process"""
        try:
            with self._locks.hold((learner_id, concept_id), timeout=self._lock_timeout):
                yield
        except TimeoutError as exc:
            raise StoreUnavailableError(
                f"Schedule record ({learner_id!r}, {concept_id!r}) is busy",
                learner_id,
                concept_id
            ) from exc

    @contextmanager
    def _session(self, learner_id: str = None, concept_id: str = None):
        try:
            with self._session_factory() as db:
                yield db
        except UNAVAILABLE_ERRORS as exc:
            logger.warning("Schedule store unavailable for learner={} concept={}: {}", learner_id, concept_id, exc)
            raise StoreUnavailableError(f"Schedule store unavailable: {exc}", learner_id, concept_id) from exc

    def get(self, learner_id: str) -> List[ScheduleRecord]:
        """All schedule records of a learner, soonest review first"""
        with self._session(learner_id) as db:
            return [ScheduleRecord.model_validate(row) for row in get_schedule_records(db, learner_id)]

    def get_one(self, learner_id: str, concept_id: str) -> Optional[ScheduleRecord]:
        with self._session(learner_id, concept_id) as db:
            row = get_schedule_record(db, learner_id, concept_id)
            return ScheduleRecord.model_validate(row) if row is not None else None

    def concept_ids(self, learner_id: str) -> set:
        with self._session(learner_id) as db:
            return get_concept_ids(db, learner_id)

    def create_if_absent(
        self,
        learner_id: str,
        concept_id: str,
        concept_label: str,
        now: datetime = None
    ) -> Tuple[ScheduleRecord, bool]:
        """
        Create a new, immediately due record unless one already exists.

        Returns (record, created). Atomic per key: within the process the key
        lock serializes callers, and across processes the unique constraint
        makes a losing insert fall back to the winner's row.
        """
        now = as_utc(now) or datetime.now(timezone.utc)
        with self.lock(learner_id, concept_id):
            with self._session(learner_id, concept_id) as db:
                existing = get_schedule_record(db, learner_id, concept_id)
                if existing is not None:
                    return ScheduleRecord.model_validate(existing), False

                try:
                    row = insert_schedule_record(db, learner_id, concept_id, concept_label, now)
                    record = ScheduleRecord.model_validate(row)
                    db.commit()
                except IntegrityError:
                    db.rollback()
                    existing = get_schedule_record(db, learner_id, concept_id)
                    if existing is None:
                        logger.error(
                            "Insert rejected with no existing row for learner={} concept={}",
                            learner_id,
                            concept_id
                        )
                        raise
                    logger.debug("Lost creation race for learner={} concept={}", learner_id, concept_id)
                    return ScheduleRecord.model_validate(existing), False

        logger.info("Scheduled new concept {!r} for learner {}", concept_id, learner_id)
        return record, True

    def upsert(self, record: ScheduleRecord, review: ReviewEntry = None) -> ScheduleRecord:
        """
        Overwrite the mutable fields of an existing record.

        The write applies only if the stored version equals record.version;
        the returned record carries the incremented version. When review is
        given it is appended to the review log in the same transaction.
        """
        now = datetime.now(timezone.utc)
        with self._session(record.learner_id, record.concept_id) as db:
            updated = update_schedule_record(db, record.model_dump(), record.version, now)
            if updated == 0:
                current = get_schedule_record(db, record.learner_id, record.concept_id)
                db.rollback()
                if current is None:
                    logger.error(
                        "upsert without prior create for learner={} concept={}",
                        record.learner_id,
                        record.concept_id
                    )
                    raise NotFoundError(record.learner_id, record.concept_id)
                raise StaleRecordError(record.learner_id, record.concept_id, record.version)

            if review is not None:
                add_review_log(db, review)
            db.commit()

        return record.model_copy(update={"version": record.version + 1, "updated_at": now})

    def review_history(self, learner_id: str, concept_id: str = None, limit: int = 50) -> List[ReviewEntry]:
        """Accepted reviews of a learner, newest first"""
        with self._session(learner_id, concept_id) as db:
            return [
                ReviewEntry.model_validate(row)
                for row in get_review_logs(db, learner_id, concept_id, limit)
            ]
