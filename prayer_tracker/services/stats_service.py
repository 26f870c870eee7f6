"""
Stats service - Business logic for progress and leaderboard views.
Fetches day records through the storage collaborator and runs the pure analytics on them.
Does NOT depend on SQLAlchemy (receives any object with fetch_range).
"""
import logging
from datetime import date
from typing import Any, Dict, Iterable, Mapping, Optional, Protocol

from prayer_tracker.constants import (
    DEFAULT_DAYS_TRACKED_CAP,
    LEADERBOARD_LIMIT,
    RECENT_PERIOD_DAYS,
    STATS_CACHE_TTL_SECONDS,
    ReportingPeriod,
    ScoringMode,
)
from prayer_tracker.exceptions import StorageException
from prayer_tracker.schemas import (
    CalendarDay,
    CalendarSummary,
    DayScoreResponse,
    LeaderboardResponse,
    PeriodStats,
    PeriodSummary,
)
from prayer_tracker.services.analytics_service import AnalyticsService
from prayer_tracker.services.cache_service import NullCache, StatsCache
from prayer_tracker.services.date_service import DateService
from prayer_tracker.services.leaderboard_service import LeaderboardService
from prayer_tracker.services.scoring_service import ScoringService
from prayer_tracker.services.trend_service import TrendService

logger = logging.getLogger("prayer_tracker.stats")


class PrayerRecordSource(Protocol):
    def fetch_range(self, user_id: str, start_date: date, end_date: date) -> Mapping[str, Mapping[str, Any]]:
        ...


class StatsService:
    """Service for fetching records and computing user statistics."""

    def __init__(
        self,
        source: PrayerRecordSource,
        cache: Optional[StatsCache] = None,
        cache_ttl: float = STATS_CACHE_TTL_SECONDS
    ):
        self.source = source
        self.cache = cache or NullCache()
        self.cache_ttl = cache_ttl

    def fetch_range(self, user_id: str, start_date: date, end_date: date) -> Dict[str, Any]:
        """
        Fetch records for a range, read-through the cache.

        A storage failure is logged and degrades to an empty range so scoring
        still produces all-zero stats instead of an error.
        """
        key = (
            user_id,
            DateService.to_local_date_string(start_date),
            DateService.to_local_date_string(end_date),
        )
        cached = self.cache.get(key)
        if cached is not None:
            return cached

        try:
            records = dict(self.source.fetch_range(user_id, start_date, end_date))
        except StorageException as e:
            logger.error(f"Failed to fetch records for user {user_id} ({key[1]}..{key[2]}): {e}")
            return {}

        self.cache.set(key, records, self.cache_ttl)
        return records

    def get_day_score(
        self,
        user_id: str,
        target_date: date,
        mode: ScoringMode = ScoringMode.STANDARD
    ) -> DayScoreResponse:
        """Calendar score for one date; score is None when nothing was recorded."""
        date_str = DateService.to_local_date_string(target_date)
        record = self.fetch_range(user_id, target_date, target_date).get(date_str)

        return DayScoreResponse(
            date=date_str,
            score=ScoringService.calculate_day_score(record, target_date, mode),
            max_score=ScoringService.max_score_for(target_date),
            classification=(
                ScoringService.classify_day(target_date, record, mode) if record is not None else None
            ),
        )

    def get_calendar_summary(
        self,
        user_id: str,
        year: int,
        month: int,
        mode: ScoringMode = ScoringMode.STANDARD
    ) -> CalendarSummary:
        """Per-day scores for a calendar month plus the share of the best possible score earned"""
        start_date, end_date = DateService.get_month_range(year, month)
        records = self.fetch_range(user_id, start_date, end_date)

        days = []
        for day in DateService.iter_dates(start_date, end_date):
            date_str = DateService.to_local_date_string(day)
            record = records.get(date_str)
            classification = ScoringService.classify_day(day, record, mode) if record is not None else None
            days.append(CalendarDay(
                date=date_str,
                score=classification.day_score if classification else None,
                max_score=ScoringService.max_score_for(day),
                is_complete=bool(classification and classification.is_complete),
            ))

        return CalendarSummary(
            user_id=user_id,
            year=year,
            month=month,
            mode=mode,
            days=days,
            tracked_days=sum(1 for d in days if d.score is not None),
            monthly_percentage=round(AnalyticsService.calculate_monthly_percentage(records, mode), 2),
        )

    def get_period_stats(
        self,
        user_id: str,
        start_date: date,
        end_date: date,
        mode: ScoringMode = ScoringMode.STANDARD,
        today: Optional[date] = None
    ) -> PeriodStats:
        records = self.fetch_range(user_id, start_date, end_date)
        return AnalyticsService.calculate_period_stats(records, mode, today)

    def get_period_summary(
        self,
        user_id: str,
        period: ReportingPeriod,
        mode: ScoringMode = ScoringMode.STANDARD,
        today: Optional[date] = None,
        days: int = RECENT_PERIOD_DAYS
    ) -> PeriodSummary:
        """
        Stats, composite score and trend direction for a reporting period.

        Args:
            user_id: User to summarise
            period: week, month, year, recent or all_time
            mode: Scoring mode
            today: Current local date (defaults to date.today())
            days: Window length for the recent period

        Returns:
            PeriodSummary for the period
        """
        today = today or date.today()
        start_date, end_date = DateService.get_period_range(period, today, days)
        cap = DateService.get_days_tracked_cap(period, today, days)

        stats = self.get_period_stats(user_id, start_date, end_date, mode, today)

        previous = None
        previous_range = DateService.get_previous_period_range(period, today)
        if previous_range:
            previous = self.get_period_stats(user_id, *previous_range, mode=mode, today=today)

        return PeriodSummary(
            user_id=user_id,
            period=period,
            mode=mode,
            start_date=start_date,
            end_date=end_date,
            days_tracked_cap=cap,
            stats=stats,
            composite_score=AnalyticsService.calculate_composite_score(stats, cap, mode),
            trend=AnalyticsService.determine_trend(stats, previous),
            theoretical_max_average=round(
                AnalyticsService.calculate_theoretical_max_average(start_date, end_date), 2
            ),
            insights=AnalyticsService.get_motivational_insights(stats),
        )

    def get_daily_trend(
        self,
        user_id: str,
        start_date: date,
        end_date: date,
        mode: ScoringMode = ScoringMode.STANDARD
    ):
        records = self.fetch_range(user_id, start_date, end_date)
        return TrendService.build_daily_trend(records, mode)

    def get_cumulative_trend(
        self,
        user_id: str,
        start_date: date,
        end_date: date,
        mode: ScoringMode = ScoringMode.STANDARD,
        days_tracked_cap: int = DEFAULT_DAYS_TRACKED_CAP
    ):
        records = self.fetch_range(user_id, start_date, end_date)
        return TrendService.build_cumulative_trend(records, mode, days_tracked_cap)

    def build_leaderboard(
        self,
        users: Iterable[Any],
        period: ReportingPeriod,
        current_user_id: Optional[str] = None,
        today: Optional[date] = None,
        limit: int = LEADERBOARD_LIMIT
    ) -> LeaderboardResponse:
        """
        Rank users by composite score for a period.

        Each user is scored in their own mode. Pass every user for the global
        board or the user's friends for the friends board.

        Args:
            users: Objects with id, nickname and masjid_mode attributes
            period: Reporting period
            current_user_id: User whose rank is reported even outside the limit
            today: Current local date
            limit: Maximum number of entries

        Returns:
            LeaderboardResponse with ranked entries
        """
        today = today or date.today()
        entries = []
        for user in users:
            mode = ScoringMode.from_masjid_mode(bool(user.masjid_mode))
            summary = self.get_period_summary(user.id, period, mode, today)
            entries.append(LeaderboardService.build_entry(
                user.id, user.nickname, summary.stats, summary.composite_score, summary.trend
            ))

        ranked, current_rank = LeaderboardService.rank_entries(entries, current_user_id, limit)
        logger.info(f"Leaderboard for {period.value}: {len(ranked)} of {len(entries)} users ranked")
        return LeaderboardResponse(period=period, entries=ranked, current_user_rank=current_rank)
