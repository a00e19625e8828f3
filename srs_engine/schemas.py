from pydantic import BaseModel, Field, field_validator
from typing import Optional
from datetime import datetime, timezone


def as_utc(value: Optional[datetime]) -> Optional[datetime]:
    """Treat naive datetimes (e.g. read back from SQLite) as UTC"""
    if value is None:
        return None
    if value.tzinfo is None:
        return value.replace(tzinfo=timezone.utc)
    return value.astimezone(timezone.utc)


class CatalogConcept(BaseModel):
    """Reviewable concept supplied by the content catalog"""
    concept_id: str = Field(min_length=1)
    concept_label: str


class ScheduleRecord(BaseModel):
    """Detached snapshot of one learner's schedule for one concept"""
    learner_id: str
    concept_id: str
    concept_label: str

    easiness_factor: float = 2.5
    interval_days: int = 0
    repetitions: int = 0

    last_review_at: Optional[datetime] = None
    next_review_at: datetime
    last_score: Optional[int] = None

    version: int = 1
    created_at: Optional[datetime] = None
    updated_at: Optional[datetime] = None

    @field_validator("last_review_at", "next_review_at", "created_at", "updated_at")
    @classmethod
    def _utc(cls, value):
        return as_utc(value)

    class Config:
        from_attributes = True


class ReviewEntry(BaseModel):
    """One accepted review, as written to the review log"""
    learner_id: str
    concept_id: str
    score: int
    quality: int
    interval_days: int
    easiness_factor: float
    reviewed_at: datetime

    @field_validator("reviewed_at")
    @classmethod
    def _utc(cls, value):
        return as_utc(value)

    class Config:
        from_attributes = True
