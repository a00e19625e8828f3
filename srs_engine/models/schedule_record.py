from sqlalchemy import Column, Integer, String, Float, DateTime, UniqueConstraint
from datetime import datetime, timezone
from srs_engine.database import Base


def utcnow() -> datetime:
    return datetime.now(timezone.utc)


class ScheduleRecord(Base):
    """SM-2 spaced repetition state per (learner, concept)"""
    __tablename__ = "schedule_records"
    __table_args__ = (
        UniqueConstraint("learner_id", "concept_id", name="uq_schedule_records_learner_concept"),
    )

    id = Column(Integer, primary_key=True, index=True)
    learner_id = Column(String, nullable=False, index=True)
    concept_id = Column(String, nullable=False)
    concept_label = Column(String, nullable=False)  # denormalized for display

    # SM-2 algorithm fields
    easiness_factor = Column(Float, nullable=False, default=2.5)  # EF, never below 1.3
    interval_days = Column(Integer, nullable=False, default=0)  # 0 until first success
    repetitions = Column(Integer, nullable=False, default=0)  # consecutive successes

    last_review_at = Column(DateTime(timezone=True))
    next_review_at = Column(DateTime(timezone=True), nullable=False)
    last_score = Column(Integer)  # raw 0-100

    version = Column(Integer, nullable=False, default=1)  # optimistic concurrency token
    created_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
    updated_at = Column(DateTime(timezone=True), nullable=False, default=utcnow)
