from datetime import datetime, timezone
from typing import Dict, Iterable, List, Tuple

from srs_engine.schemas import ScheduleRecord, as_utc
from srs_engine.sm2 import SM2Algorithm

MASTERED_MIN_REPETITIONS = 5
MASTERED_MIN_SCORE = 80


def is_mastered(record: ScheduleRecord) -> bool:
    return (
        record.repetitions >= MASTERED_MIN_REPETITIONS
        and record.last_score is not None
        and record.last_score >= MASTERED_MIN_SCORE
    )


def categorize(
    records: Iterable[ScheduleRecord],
    now: datetime = None
) -> Tuple[List[ScheduleRecord], List[ScheduleRecord], List[ScheduleRecord]]:
    """
    Partition records into (due, upcoming, mastered) relative to now.

    First match wins: due (next review at or before now), then mastered
    (long streak with a strong last score), then upcoming. Every input record
    lands in exactly one bucket; due and upcoming are ordered by next review.
    Records are not modified.
    """
    now = as_utc(now) or datetime.now(timezone.utc)
    due, upcoming, mastered = [], [], []

    for record in records:
        if SM2Algorithm.is_due(record.next_review_at, now):
            due.append(record)
        elif is_mastered(record):
            mastered.append(record)
        else:
            upcoming.append(record)

    due.sort(key=lambda r: r.next_review_at)
    upcoming.sort(key=lambda r: r.next_review_at)
    return due, upcoming, mastered


def summarize(records: Iterable[ScheduleRecord], now: datetime = None) -> Dict[str, int]:
    """Bucket counts for dashboards"""
    records = list(records)
    due, upcoming, mastered = categorize(records, now)
    return {
        "due": len(due),
        "upcoming": len(upcoming),
        "mastered": len(mastered),
        "total": len(records)
    }


def interval_label(days: int) -> str:
    """Human-readable review cadence, e.g. "Daily" or "2 weeks" """
    if days <= 0:
        return "New"
    if days == 1:
        return "Daily"
    if days <= 7:
        return f"{days} days"
    if days <= 30:
        weeks = int(days / 7 + 0.5)
        return "1 week" if weeks == 1 else f"{weeks} weeks"
    months = int(days / 30 + 0.5)
    return "1 month" if months == 1 else f"{months} months"


def repetitions_label(repetitions: int) -> str:
    return "1 review" if repetitions == 1 else f"{repetitions} reviews"
