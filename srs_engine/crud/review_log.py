from sqlalchemy.orm import Session
from srs_engine.models import ReviewLog
from srs_engine.schemas import ReviewEntry
from typing import List, Optional

def add_review_log(db: Session, entry: ReviewEntry) -> ReviewLog:
    """Append a review to the log (committed by the caller)"""
    log = ReviewLog(**entry.model_dump())
    db.add(log)
    return log

def get_review_logs(
    db: Session,
    learner_id: str,
    concept_id: Optional[str] = None,
    limit: int = 50
) -> List[ReviewLog]:
    """Get recent reviews for a learner, newest first"""
    query = db.query(ReviewLog).filter(ReviewLog.learner_id == learner_id)
    if concept_id is not None:
        query = query.filter(ReviewLog.concept_id == concept_id)
    return query.order_by(ReviewLog.reviewed_at.desc(), ReviewLog.id.desc()).limit(limit).all()
