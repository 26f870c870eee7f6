"""
Trend series service.
Builds chartable day-by-day series. Incomplete days produce no point.
"""
from datetime import date
from typing import List

from prayer_tracker.constants import (
    COMPOSITE_STREAK_CAP,
    DAY_WEIGHT_AVERAGE,
    DAY_WEIGHT_CONSISTENCY,
    DAY_WEIGHT_MASJID,
    DAY_WEIGHT_STREAK,
    DEFAULT_DAYS_TRACKED_CAP,
    PRAYERS_PER_DAY,
    PrayerStatus,
    ScoringMode,
)
from prayer_tracker.schemas import DayClassification, TrendPoint
from prayer_tracker.services.analytics_service import (
    AnalyticsService,
    DayRecords,
    StatsAccumulator,
    classify_records,
    normalize,
)
from prayer_tracker.services.scoring_service import ScoringService


class TrendService:
    """Daily and cumulative trend builders"""

    @staticmethod
    def calculate_day_composite(day: date, classification: DayClassification, streak: int) -> float:
        """
        Composite score for a single complete day.

        Formula: Average(50%) + Consistency(25%) + Streak(15%) + Masjid(10%)

        Every component is taken from the day's own five slots, except the
        streak, which is the running streak up to and including the day.
        """
        statuses = list(classification.statuses.values())
        not_prayed = statuses.count(PrayerStatus.NOT_PRAYED)
        masjid = statuses.count(PrayerStatus.MASJID)

        average = normalize(classification.day_score, ScoringService.max_score_for(day))
        consistency = (PRAYERS_PER_DAY - not_prayed) / PRAYERS_PER_DAY * 100
        masjid_percentage = masjid / PRAYERS_PER_DAY * 100
        streak_normalized = normalize(streak, COMPOSITE_STREAK_CAP)

        composite = (
            average * DAY_WEIGHT_AVERAGE
            + consistency * DAY_WEIGHT_CONSISTENCY
            + streak_normalized * DAY_WEIGHT_STREAK
            + masjid_percentage * DAY_WEIGHT_MASJID
        )
        return round(composite, 2)

    @staticmethod
    def build_daily_trend(
        records: DayRecords,
        mode: ScoringMode = ScoringMode.STANDARD
    ) -> List[TrendPoint]:
        """
        One point per complete day, each scored on its own merits.

        The running streak walks every day in the range, so an incomplete day
        resets it without producing a point.
        """
        points = []
        running_streak = 0

        for day, classification in classify_records(records, mode):
            running_streak = running_streak + 1 if classification.streak_eligible else 0
            if not classification.is_complete:
                continue

            points.append(TrendPoint(
                date=classification.date,
                average_score=classification.day_score,
                composite_score=TrendService.calculate_day_composite(day, classification, running_streak),
            ))

        return points

    @staticmethod
    def build_cumulative_trend(
        records: DayRecords,
        mode: ScoringMode = ScoringMode.STANDARD,
        days_tracked_cap: int = DEFAULT_DAYS_TRACKED_CAP
    ) -> List[TrendPoint]:
        """
        One point per complete day carrying the period composite of everything up to it.

        Totals accumulate across the range and the ranking composite is
        recomputed at each complete day with the given days-tracked cap.
        """
        points = []
        accumulator = StatsAccumulator()

        for _, classification in classify_records(records, mode):
            accumulator.add(classification)
            if not classification.is_complete:
                continue

            # Ending on a complete day, the backward streak scan equals the running streak
            stats = accumulator.snapshot(current_streak=accumulator.running_streak)
            points.append(TrendPoint(
                date=classification.date,
                average_score=classification.day_score,
                composite_score=AnalyticsService.calculate_composite_score(stats, days_tracked_cap, mode),
            ))

        return points
