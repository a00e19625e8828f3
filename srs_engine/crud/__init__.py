from srs_engine.crud.schedule_record import (
    get_schedule_records,
    get_schedule_record,
    get_concept_ids,
    insert_schedule_record,
    update_schedule_record
)
from srs_engine.crud.review_log import add_review_log, get_review_logs

__all__ = [
    "get_schedule_records",
    "get_schedule_record",
    "get_concept_ids",
    "insert_schedule_record",
    "update_schedule_record",
    "add_review_log",
    "get_review_logs",
]
