from datetime import datetime, timezone
from typing import Iterable

from loguru import logger

from srs_engine.schemas import CatalogConcept, as_utc
from srs_engine.store import ScheduleRecordStore


def sync(
    store: ScheduleRecordStore,
    learner_id: str,
    catalog: Iterable[CatalogConcept],
    now: datetime = None
) -> int:
    """
    Ensure every catalog concept has a schedule record for the learner.

    Returns the number of records created. Existing records are never touched,
    and records whose concept is missing from the catalog are kept: a catalog
    is a filtered view, not a deletion signal. Safe to call repeatedly.
    """
    now = as_utc(now) or datetime.now(timezone.utc)
    existing = store.concept_ids(learner_id)

    created = 0
    seen = set()
    for concept in catalog:
        if concept.concept_id in seen:
            continue
        seen.add(concept.concept_id)
        if concept.concept_id in existing:
            continue

        _, was_created = store.create_if_absent(learner_id, concept.concept_id, concept.concept_label, now=now)
        if was_created:
            created += 1

    logger.info("Catalog sync for learner {}: {} new of {} catalog concepts", learner_id, created, len(seen))
    return created
