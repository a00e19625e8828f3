from datetime import datetime, timezone

from loguru import logger

from srs_engine.config import settings
from srs_engine.errors import InvalidScoreError, StaleRecordError, UnknownConceptError
from srs_engine.schemas import ReviewEntry, ScheduleRecord, as_utc
from srs_engine.sm2 import SM2Algorithm
from srs_engine.store import ScheduleRecordStore

MIN_SCORE = 0
MAX_SCORE = 100


def validate_score(score, learner_id: str = None, concept_id: str = None) -> int:
    """Return score if it is an integer in [0, 100], else raise InvalidScoreError"""
    if isinstance(score, bool) or not isinstance(score, int):
        raise InvalidScoreError(score, learner_id, concept_id)
    if score < MIN_SCORE or score > MAX_SCORE:
        raise InvalidScoreError(score, learner_id, concept_id)
    return score


def submit_review(
    store: ScheduleRecordStore,
    learner_id: str,
    concept_id: str,
    score: int,
    now: datetime = None,
    max_retries: int = None
) -> ScheduleRecord:
    """
    Apply a graded review to one schedule record.

    The 0-100 score is mapped to SM-2 quality, the record is rescheduled
    ``interval`` calendar days from now and persisted together with a review
    log entry. Exactly one schedule record is mutated.

    Raises:
        InvalidScoreError: score outside [0, 100]
        UnknownConceptError: the catalog was never synced for this concept
        StaleRecordError: another process kept winning the write
        StoreUnavailableError: storage failed; nothing was recorded
    """
    validate_score(score, learner_id, concept_id)
    now = as_utc(now) or datetime.now(timezone.utc)
    quality = SM2Algorithm.score_to_quality(score)
    retries = settings.review_max_retries if max_retries is None else max_retries

    with store.lock(learner_id, concept_id):
        attempt = 0
        while True:
            record = store.get_one(learner_id, concept_id)
            if record is None:
                raise UnknownConceptError(learner_id, concept_id)

            new_interval, new_ef, new_reps = SM2Algorithm.compute_next(
                quality,
                record.repetitions,
                record.easiness_factor,
                record.interval_days
            )
            updated = record.model_copy(update={
                "easiness_factor": new_ef,
                "interval_days": new_interval,
                "repetitions": new_reps,
                "last_review_at": now,
                "next_review_at": SM2Algorithm.next_review_at(now, new_interval),
                "last_score": score
            })
            entry = ReviewEntry(
                learner_id=learner_id,
                concept_id=concept_id,
                score=score,
                quality=quality,
                interval_days=new_interval,
                easiness_factor=new_ef,
                reviewed_at=now
            )

            try:
                saved = store.upsert(updated, review=entry)
            except StaleRecordError:
                attempt += 1
                if attempt > retries:
                    raise
                logger.warning(
                    "Concurrent update on learner={} concept={}, retrying ({}/{})",
                    learner_id, concept_id, attempt, retries
                )
                continue

            logger.info(
                "Review accepted: learner={} concept={} score={} quality={} next in {}d",
                learner_id, concept_id, score, quality, new_interval
            )
            return saved
