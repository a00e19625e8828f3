import math
from datetime import datetime, timedelta
from typing import Tuple

MIN_EASINESS = 1.3
INITIAL_EASINESS = 2.5
MIN_QUALITY = 0
MAX_QUALITY = 5
PASSING_QUALITY = 3


def round_half_up(value: float) -> int:
    """Round .5 away from zero for positive values (round(2.5) == 3)"""
    return int(math.floor(value + 0.5))


class SM2Algorithm:
    """
    SM-2 spaced repetition algorithm for calculating review intervals.
    Based on SuperMemo 2 algorithm by Piotr Wozniak.

    All methods are pure: no I/O, no clock reads unless a reference time is
    passed in by the caller.
    """

    @staticmethod
    def compute_next(
        quality: int,
        prior_reps: int,
        prior_ef: float,
        prior_interval_days: int
    ) -> Tuple[int, float, int]:
        """
        Calculate the next interval and updated SM-2 parameters.

        Args:
            quality: Response quality (0-5). 0=total blackout, 5=perfect
            prior_reps: Consecutive successful reviews so far
            prior_ef: Current easiness factor
            prior_interval_days: Current interval in days (0 for a new record)

        Returns:
            (new_interval, new_ef, new_reps)
        """
        quality = SM2Algorithm._clamp_quality(quality)
        prior_ef = SM2Algorithm._sanitize_ef(prior_ef)
        prior_reps = SM2Algorithm._as_int(prior_reps)
        prior_reps = max(0, prior_reps) if prior_reps is not None else 0
        prior_interval_days = SM2Algorithm._as_int(prior_interval_days)
        if prior_interval_days is None or prior_interval_days <= 0:
            prior_interval_days = 1

        # Update easiness factor based on quality
        new_ef = prior_ef + (0.1 - (5 - quality) * (0.08 + (5 - quality) * 0.02))

        # Ensure EF stays within bounds
        if new_ef < MIN_EASINESS:
            new_ef = MIN_EASINESS

        # If quality < 3, reset repetitions (failed recall)
        if quality < PASSING_QUALITY:
            new_reps = 0
            new_interval = 1
        else:
            new_reps = prior_reps + 1

            # Calculate new interval based on repetition count
            if new_reps == 1:
                new_interval = 1
            elif new_reps == 2:
                new_interval = 6
            else:
                new_interval = round_half_up(prior_interval_days * new_ef)

        return new_interval, new_ef, new_reps

    @staticmethod
    def score_to_quality(score: int) -> int:
        """
        Map a 0-100 review score onto the 0-5 quality scale.

        Lossy on purpose: SM-2 only consumes a six-level ordinal grade, so
        e.g. 90-100 all become 5 and 70-89 become 4. Integer arithmetic keeps
        the .5 boundaries exact (50 -> 3, 10 -> 1).
        """
        quality = (int(score) * 5 + 50) // 100
        return max(MIN_QUALITY, min(MAX_QUALITY, quality))

    @staticmethod
    def next_review_at(reference: datetime, interval_days: int) -> datetime:
        """Calendar-day offset from the review time"""
        return reference + timedelta(days=interval_days)

    @staticmethod
    def is_due(next_review_at: datetime, now: datetime) -> bool:
        """Check if a record is due for review"""
        return next_review_at <= now

    @staticmethod
    def days_overdue(next_review_at: datetime, now: datetime) -> int:
        """Calculate how many whole days overdue a review is"""
        if now < next_review_at:
            return 0
        return (now - next_review_at).days

    @staticmethod
    def _as_int(value):
        """Integer value of a finite number (or numeric string), else None"""
        try:
            value = float(value)
        except (TypeError, ValueError, OverflowError):
            return None
        if math.isnan(value) or math.isinf(value):
            return None
        return int(value)

    @staticmethod
    def _clamp_quality(quality) -> int:
        quality = SM2Algorithm._as_int(quality)
        if quality is None:
            return MIN_QUALITY
        return max(MIN_QUALITY, min(MAX_QUALITY, quality))

    @staticmethod
    def _sanitize_ef(ef) -> float:
        try:
            ef = float(ef)
        except (TypeError, ValueError):
            return INITIAL_EASINESS
        if math.isnan(ef) or math.isinf(ef) or ef <= 0:
            return INITIAL_EASINESS
        return ef


compute_next = SM2Algorithm.compute_next
score_to_quality = SM2Algorithm.score_to_quality
