"""
Day scoring service.
Classifies a single day's record and computes its score.
"""
from datetime import date
from typing import Any, Mapping, Optional

from prayer_tracker.constants import (
    DAILY_MAX_SCORE,
    FRIDAY_ACTIVITY_KEY,
    FRIDAY_ACTIVITY_SCORES,
    FRIDAY_MAX_SCORE,
    PRAYER_TYPES,
    PRAYERS_PER_DAY,
    STREAK_BREAKING_STATUSES,
    FridayActivityStatus,
    PrayerStatus,
    ScoringMode,
)
from prayer_tracker.schemas import DayClassification
from prayer_tracker.services.date_service import DateService


def _coerce_status(value: Any) -> Optional[PrayerStatus]:
    """Map a raw slot value to a status; anything unrecognised counts as unmarked."""
    if isinstance(value, PrayerStatus):
        return value
    try:
        return PrayerStatus(value)
    except ValueError:
        return None


def _coerce_friday_status(value: Any) -> Optional[FridayActivityStatus]:
    if isinstance(value, FridayActivityStatus):
        return value
    try:
        return FridayActivityStatus(value)
    except ValueError:
        return None


class ScoringService:
    """Pure per-day scoring. Never raises on malformed input."""

    @staticmethod
    def classify_day(
        day: date,
        record: Optional[Mapping[str, Any]],
        mode: ScoringMode = ScoringMode.STANDARD
    ) -> DayClassification:
        """
        Classify one calendar day's record.

        A day is complete when all five prayers carry a valid status and, on a
        Friday, the Friday activity is recited or missed. Streak eligibility only
        looks at the five prayers: all marked and none not_prayed/qaza.

        Args:
            day: Local calendar date of the record
            record: Raw slot -> status mapping (None is treated as empty)
            mode: Scoring mode selecting the prayer score table

        Returns:
            DayClassification for the day
        """
        record = record or {}
        scores = mode.prayer_scores
        friday = DateService.is_friday(day)

        day_score = 0
        marked_count = 0
        all_good = True
        statuses = {}

        for prayer in PRAYER_TYPES:
            status = _coerce_status(record.get(prayer.value))
            if status is None:
                all_good = False
                continue

            statuses[prayer.value] = status
            marked_count += 1
            day_score += scores[status]
            if status in STREAK_BREAKING_STATUSES:
                all_good = False

        is_complete = marked_count == PRAYERS_PER_DAY

        friday_status = None
        if friday:
            friday_status = _coerce_friday_status(record.get(FRIDAY_ACTIVITY_KEY))
            if friday_status is None:
                is_complete = False
            else:
                day_score += FRIDAY_ACTIVITY_SCORES[friday_status]

        return DayClassification(
            date=DateService.to_local_date_string(day),
            is_friday=friday,
            is_complete=is_complete,
            day_score=day_score,
            marked_count=marked_count,
            all_marked_are_good_statuses=all_good,
            statuses=statuses,
            friday_status=friday_status,
        )

    @staticmethod
    def calculate_day_score(
        record: Optional[Mapping[str, Any]],
        day: date,
        mode: ScoringMode = ScoringMode.STANDARD
    ) -> Optional[float]:
        """
        Score a single day for the calendar view.

        Returns None when the date has no record at all, which is distinct
        from a tracked day scoring zero.
        """
        if record is None:
            return None
        return ScoringService.classify_day(day, record, mode).day_score

    @staticmethod
    def max_score_for(day: date) -> int:
        """Best achievable score for a date: 135, or 145 on a Friday"""
        return FRIDAY_MAX_SCORE if DateService.is_friday(day) else DAILY_MAX_SCORE
