from sqlalchemy import Column, Integer, String, Float, DateTime, Index
from srs_engine.database import Base


class ReviewLog(Base):
    """Append-only record of an accepted review"""
    __tablename__ = "review_logs"
    __table_args__ = (
        Index("ix_review_logs_learner_concept", "learner_id", "concept_id"),
    )

    id = Column(Integer, primary_key=True, index=True)
    learner_id = Column(String, nullable=False)
    concept_id = Column(String, nullable=False)

    score = Column(Integer, nullable=False)  # raw 0-100
    quality = Column(Integer, nullable=False)  # derived 0-5
    interval_days = Column(Integer, nullable=False)
    easiness_factor = Column(Float, nullable=False)

    reviewed_at = Column(DateTime(timezone=True), nullable=False)
