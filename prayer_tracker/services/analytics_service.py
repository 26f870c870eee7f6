"""
Analytics service.
Folds per-day records into period statistics and derives the composite ranking score.

Only complete days feed the totals, percentages and averages. Streaks are
tracked separately over every supplied day.
"""
import logging
from datetime import date
from typing import Any, List, Mapping, Optional, Tuple

from prayer_tracker.constants import (
    COMPOSITE_AVERAGE_CEILING,
    COMPOSITE_STREAK_CAP,
    COMPOSITE_WEIGHT_AVERAGE,
    COMPOSITE_WEIGHT_CONSISTENCY,
    COMPOSITE_WEIGHT_DAYS_TRACKED,
    COMPOSITE_WEIGHT_SPECIAL,
    COMPOSITE_WEIGHT_STREAK,
    DAILY_MAX_SCORE,
    FRIDAY_BONUS_SCORE,
    INSIGHT_BEST_STREAK,
    INSIGHT_CONSISTENCY_EXCELLENT,
    INSIGHT_CONSISTENCY_GOOD,
    INSIGHT_CURRENT_STREAK,
    INSIGHT_MASJID_BUILDING,
    INSIGHT_MASJID_CHAMPION,
    PRAYER_TYPES,
    PRAYERS_PER_DAY,
    TREND_CHANGE_THRESHOLD,
    FridayActivityStatus,
    PrayerStatus,
    ScoringMode,
    TrendDirection,
)
from prayer_tracker.exceptions import InvalidDateFormatException
from prayer_tracker.schemas import (
    DayClassification,
    FridayActivityStats,
    Insight,
    PeriodStats,
    empty_status_counts,
)
from prayer_tracker.services.date_service import DateService
from prayer_tracker.services.scoring_service import ScoringService

logger = logging.getLogger("prayer_tracker.analytics")

DayRecords = Mapping[str, Optional[Mapping[str, Any]]]


def clamp_percentage(value: float) -> float:
    return max(0.0, min(100.0, value))


def normalize(value: float, ceiling: float) -> float:
    """Scale value against a ceiling onto 0-100. A non-positive ceiling yields 0."""
    if ceiling <= 0:
        return 0.0
    return clamp_percentage(value / ceiling * 100)


def classify_records(
    records: DayRecords,
    mode: ScoringMode
) -> List[Tuple[date, DayClassification]]:
    """
    Classify every record in ascending date order.

    Keys that are not valid YYYY-MM-DD dates are skipped.
    """
    classified = []
    for date_str, record in records.items():
        try:
            day = DateService.parse_date_string(date_str)
        except InvalidDateFormatException:
            logger.debug(f"Skipping record with malformed date key {date_str!r}")
            continue
        classified.append((day, ScoringService.classify_day(day, record, mode)))

    classified.sort(key=lambda item: item[0])
    return classified


class StatsAccumulator:
    """
    Running period totals, fed one classified day at a time in ascending order.

    Shared by the aggregator and the cumulative trend builder so both apply
    exactly the same per-day rules.
    """

    def __init__(self):
        self.tracked_days = 0
        self.total_days = 0
        self.total_score = 0
        self.total_prayers = 0
        self.prayer_breakdown = empty_status_counts()
        self.prayer_type_breakdown = {
            prayer.value: {**empty_status_counts(), "total": 0} for prayer in PRAYER_TYPES
        }
        self.fridays_recited = 0
        self.fridays_missed = 0
        self.fridays_not_tracked = 0
        self.running_streak = 0
        self.best_streak = 0

    def add(self, day: DayClassification) -> None:
        self.tracked_days += 1

        if day.streak_eligible:
            self.running_streak += 1
            self.best_streak = max(self.best_streak, self.running_streak)
        else:
            self.running_streak = 0

        if day.is_friday and day.friday_status is None:
            self.fridays_not_tracked += 1

        if not day.is_complete:
            return

        self.total_days += 1
        self.total_score += day.day_score
        for prayer, status in day.statuses.items():
            self.prayer_breakdown[status.value] += 1
            self.prayer_type_breakdown[prayer][status.value] += 1
            self.prayer_type_breakdown[prayer]["total"] += 1
            self.total_prayers += 1

        if day.is_friday:
            if day.friday_status == FridayActivityStatus.RECITED:
                self.fridays_recited += 1
            else:
                self.fridays_missed += 1

    def snapshot(self, current_streak: int) -> PeriodStats:
        """Build PeriodStats from the totals so far"""
        total_fridays = self.fridays_recited + self.fridays_missed
        not_prayed = self.prayer_breakdown[PrayerStatus.NOT_PRAYED.value]
        masjid = self.prayer_breakdown[PrayerStatus.MASJID.value]

        return PeriodStats(
            tracked_days=self.tracked_days,
            total_days=self.total_days,
            total_score=self.total_score,
            total_prayers=self.total_prayers,
            prayer_breakdown=dict(self.prayer_breakdown),
            prayer_type_breakdown={k: dict(v) for k, v in self.prayer_type_breakdown.items()},
            average_score=self.total_score / self.total_days if self.total_days > 0 else 0.0,
            consistency=(
                (self.total_prayers - not_prayed) / self.total_prayers * 100
                if self.total_prayers > 0 else 0.0
            ),
            masjid_percentage=masjid / self.total_prayers * 100 if self.total_prayers > 0 else 0.0,
            current_streak=current_streak,
            best_streak=self.best_streak,
            friday_stats=FridayActivityStats(
                total_fridays=total_fridays,
                recited=self.fridays_recited,
                missed=self.fridays_missed,
                not_tracked=self.fridays_not_tracked,
                consistency=self.fridays_recited / total_fridays * 100 if total_fridays > 0 else 0.0,
            ),
        )


class AnalyticsService:
    """Period statistics, composite ranking and insights"""

    @staticmethod
    def calculate_current_streak(
        classified: List[Tuple[date, DayClassification]],
        today: date
    ) -> int:
        """
        Count eligible days backwards from the most recent record.

        If the most recent record is today and fewer than five prayers are
        marked, today is still in progress: skip it instead of breaking the
        streak. Otherwise stop at the first non-eligible day.
        """
        days = list(reversed(classified))
        if days and days[0][0] == today and days[0][1].marked_count < PRAYERS_PER_DAY:
            days = days[1:]

        streak = 0
        for _, day in days:
            if not day.streak_eligible:
                break
            streak += 1
        return streak

    @staticmethod
    def calculate_period_stats(
        records: DayRecords,
        mode: ScoringMode = ScoringMode.STANDARD,
        today: Optional[date] = None
    ) -> PeriodStats:
        """
        Aggregate a range of day records into period statistics.

        Args:
            records: Date string -> raw day record, as returned by the storage collaborator
            mode: Scoring mode
            today: Local date used by the in-progress-today rule (defaults to date.today())

        Returns:
            PeriodStats; all zeros for an empty range
        """
        today = today or date.today()
        classified = classify_records(records, mode)

        accumulator = StatsAccumulator()
        for _, day in classified:
            accumulator.add(day)

        current_streak = AnalyticsService.calculate_current_streak(classified, today)
        return accumulator.snapshot(current_streak)

    @staticmethod
    def calculate_composite_score(
        stats: PeriodStats,
        days_tracked_cap: float,
        mode: ScoringMode = ScoringMode.STANDARD
    ) -> float:
        """
        Calculate the 0-100 ranking score used by the leaderboard and progress views.

        Formula: Average(45%) + Consistency(20%) + Streak(10%) + Special(10%) + DaysTracked(15%)

        The special metric is masjid share in standard mode. In home-optimized
        mode it is Friday activity consistency, or prayer consistency when no
        Friday was tracked.

        Returns:
            Composite score rounded to 2 decimals
        """
        average = normalize(stats.average_score, COMPOSITE_AVERAGE_CEILING)
        consistency = clamp_percentage(stats.consistency)
        streak = normalize(stats.current_streak, COMPOSITE_STREAK_CAP)

        if mode == ScoringMode.HOME_OPTIMIZED:
            if stats.friday_stats.total_fridays > 0:
                special = stats.friday_stats.consistency
            else:
                special = stats.consistency
        else:
            special = stats.masjid_percentage
        special = clamp_percentage(special)

        days_tracked = normalize(stats.total_days, days_tracked_cap)

        composite = (
            average * COMPOSITE_WEIGHT_AVERAGE
            + consistency * COMPOSITE_WEIGHT_CONSISTENCY
            + streak * COMPOSITE_WEIGHT_STREAK
            + special * COMPOSITE_WEIGHT_SPECIAL
            + days_tracked * COMPOSITE_WEIGHT_DAYS_TRACKED
        )
        return round(composite, 2)

    @staticmethod
    def calculate_theoretical_max_average(start: date, end: date) -> float:
        """Best achievable average score over a range, counting Friday bonuses"""
        total_days = (end - start).days + 1
        if total_days <= 0:
            return 0.0
        fridays = DateService.count_fridays(start, end)
        return (total_days * DAILY_MAX_SCORE + fridays * FRIDAY_BONUS_SCORE) / total_days

    @staticmethod
    def calculate_monthly_percentage(
        records: DayRecords,
        mode: ScoringMode = ScoringMode.STANDARD
    ) -> float:
        """Share of the best possible prayer score earned over tracked days"""
        classified = classify_records(
            {k: v for k, v in records.items() if v is not None}, mode
        )
        if not classified:
            return 0.0
        total = sum(day.day_score for _, day in classified)
        return total / (DAILY_MAX_SCORE * len(classified)) * 100

    @staticmethod
    def determine_trend(current: PeriodStats, previous: Optional[PeriodStats]) -> TrendDirection:
        """
        Compare average scores against the previous period.

        More than 5% better is improving, more than 5% worse is declining.
        """
        if previous is None or previous.average_score <= 0:
            return TrendDirection.STABLE

        change = (current.average_score - previous.average_score) / previous.average_score * 100
        if change > TREND_CHANGE_THRESHOLD:
            return TrendDirection.IMPROVING
        if change < -TREND_CHANGE_THRESHOLD:
            return TrendDirection.DECLINING
        return TrendDirection.STABLE

    @staticmethod
    def get_motivational_insights(stats: PeriodStats) -> List[Insight]:
        """Short feedback messages for the progress view"""
        insights = []

        if stats.tracked_days == 0:
            insights.append(Insight(
                type="encouragement",
                title="Start Your Journey!",
                message="Start marking your prayers to see your progress here.",
            ))
            return insights

        consistency = f"{stats.consistency:.1f}%"
        if stats.consistency >= INSIGHT_CONSISTENCY_EXCELLENT:
            insights.append(Insight(
                type="praise",
                title="Outstanding Consistency!",
                message=f"You've maintained {consistency} prayer consistency. Keep up the excellent work!",
            ))
        elif stats.consistency >= INSIGHT_CONSISTENCY_GOOD:
            insights.append(Insight(
                type="encouragement",
                title="Great Progress!",
                message=f"{consistency} consistency is commendable. Aim for 90% to reach excellence!",
            ))
        else:
            insights.append(Insight(
                type="motivation",
                title="Room for Growth",
                message=f"Your {consistency} consistency shows commitment. Small daily improvements add up!",
            ))

        masjid = f"{stats.masjid_percentage:.1f}%"
        if stats.masjid_percentage >= INSIGHT_MASJID_CHAMPION:
            insights.append(Insight(
                type="praise",
                title="Masjid Champion!",
                message=f"{masjid} of your prayers are in the masjid. The reward is 27 times greater!",
            ))
        elif stats.masjid_percentage >= INSIGHT_MASJID_BUILDING:
            insights.append(Insight(
                type="encouragement",
                title="Building the Habit",
                message=f"{masjid} masjid attendance is good. Try to increase it gradually!",
            ))

        if stats.best_streak >= INSIGHT_BEST_STREAK:
            insights.append(Insight(
                type="achievement",
                title=f"{stats.best_streak}-Day Streak!",
                message="Your dedication is inspiring! Consistency is the key to spiritual growth.",
            ))

        if stats.current_streak >= INSIGHT_CURRENT_STREAK:
            insights.append(Insight(
                type="momentum",
                title=f"Current Streak: {stats.current_streak} days!",
                message="You're on fire! Keep this momentum going.",
            ))

        return insights
