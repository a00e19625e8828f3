from sqlalchemy.orm import Session
from srs_engine.models import ScheduleRecord
from srs_engine.sm2 import INITIAL_EASINESS
from datetime import datetime
from typing import List, Optional

def get_schedule_records(db: Session, learner_id: str) -> List[ScheduleRecord]:
    """Get all schedule records for a learner"""
    return db.query(ScheduleRecord).filter(
        ScheduleRecord.learner_id == learner_id
    ).order_by(ScheduleRecord.next_review_at, ScheduleRecord.concept_id).all()

def get_schedule_record(db: Session, learner_id: str, concept_id: str) -> Optional[ScheduleRecord]:
    """Get the schedule record for one (learner, concept) key"""
    return db.query(ScheduleRecord).filter(
        ScheduleRecord.learner_id == learner_id,
        ScheduleRecord.concept_id == concept_id
    ).first()

def get_concept_ids(db: Session, learner_id: str) -> set:
    """Concept ids already scheduled for a learner"""
    rows = db.query(ScheduleRecord.concept_id).filter(
        ScheduleRecord.learner_id == learner_id
    ).all()
    return {row.concept_id for row in rows}

def insert_schedule_record(
    db: Session,
    learner_id: str,
    concept_id: str,
    concept_label: str,
    now: datetime
) -> ScheduleRecord:
    """Insert a fresh record, immediately due. Flushes so a duplicate key raises here."""
    record = ScheduleRecord(
        learner_id=learner_id,
        concept_id=concept_id,
        concept_label=concept_label,
        easiness_factor=INITIAL_EASINESS,
        interval_days=0,
        repetitions=0,
        next_review_at=now,
        version=1,
        created_at=now,
        updated_at=now
    )
    db.add(record)
    db.flush()
    return record

def update_schedule_record(db: Session, values: dict, expected_version: int, now: datetime) -> int:
    """
    Overwrite the mutable fields of a record if it is still at expected_version.

    Returns the number of rows updated (0 or 1).
    """
    return db.query(ScheduleRecord).filter(
        ScheduleRecord.learner_id == values["learner_id"],
        ScheduleRecord.concept_id == values["concept_id"],
        ScheduleRecord.version == expected_version
    ).update(
        {
            ScheduleRecord.concept_label: values["concept_label"],
            ScheduleRecord.easiness_factor: values["easiness_factor"],
            ScheduleRecord.interval_days: values["interval_days"],
            ScheduleRecord.repetitions: values["repetitions"],
            ScheduleRecord.last_review_at: values["last_review_at"],
            ScheduleRecord.next_review_at: values["next_review_at"],
            ScheduleRecord.last_score: values["last_score"],
            ScheduleRecord.version: expected_version + 1,
            ScheduleRecord.updated_at: now
        },
        synchronize_session=False
    )
