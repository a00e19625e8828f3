from srs_engine.models.schedule_record import ScheduleRecord
from srs_engine.models.review_log import ReviewLog

__all__ = [
    "ScheduleRecord",
    "ReviewLog"
]
