"""
Date calculation and manipulation service.
Handles local date strings, Friday detection and reporting-period ranges.

All record keys are built from LOCAL calendar fields. Never derive a key from a
UTC timestamp: near midnight that shifts the day by one.
"""
import calendar
from datetime import date, datetime, timedelta
from typing import Iterator, Optional, Tuple, Union

from prayer_tracker.constants import (
    DEFAULT_DAYS_TRACKED_CAP,
    RECENT_PERIOD_DAYS,
    WEEK_PERIOD_DAYS,
    ReportingPeriod,
)
from prayer_tracker.exceptions import InvalidDateFormatException

FRIDAY_WEEKDAY = 4  # date.weekday(): Monday=0 ... Friday=4


class DateService:
    """Service for date-related operations"""

    @staticmethod
    def to_local_date_string(value: Union[date, datetime]) -> str:
        """
        Format a date as YYYY-MM-DD using local calendar fields.

        Timezone-aware datetimes are first converted to the local zone,
        naive datetimes are taken to be local already.

        Args:
            value: Date or datetime to format

        Returns:
            Date string such as "2024-12-31"
        """
        if isinstance(value, datetime) and value.tzinfo is not None:
            value = value.astimezone()
        return f"{value.year:04d}-{value.month:02d}-{value.day:02d}"

    @staticmethod
    def parse_date_string(date_str: str) -> date:
        """
        Parse a YYYY-MM-DD string back into a calendar date.

        Raises:
            InvalidDateFormatException: If the string is not a valid date
        """
        try:
            year, month, day = (int(part) for part in date_str.split("-"))
            parsed = date(year, month, day)
        except (ValueError, AttributeError, TypeError):
            raise InvalidDateFormatException(date_str)

        # Only the zero-padded form is accepted, so one day has exactly one key
        if DateService.to_local_date_string(parsed) != date_str:
            raise InvalidDateFormatException(date_str)
        return parsed

    @staticmethod
    def is_friday(value: date) -> bool:
        return value.weekday() == FRIDAY_WEEKDAY

    @staticmethod
    def days_in_month(year: int, month: int) -> int:
        return calendar.monthrange(year, month)[1]

    @staticmethod
    def iter_dates(start: date, end: date) -> Iterator[date]:
        """Yield every date from start to end inclusive"""
        current = start
        while current <= end:
            yield current
            current += timedelta(days=1)

    @staticmethod
    def count_fridays(start: date, end: date) -> int:
        return sum(1 for d in DateService.iter_dates(start, end) if DateService.is_friday(d))

    @staticmethod
    def get_month_range(year: int, month: int) -> Tuple[date, date]:
        """First and last day of a calendar month"""
        return date(year, month, 1), date(year, month, DateService.days_in_month(year, month))

    @staticmethod
    def get_period_range(
        period: ReportingPeriod,
        today: date,
        days: int = RECENT_PERIOD_DAYS
    ) -> Tuple[date, date]:
        """
        Get the inclusive date range covered by a reporting period.

        - week: the last 7 days ending today
        - month: the calendar month containing today
        - year: the calendar year containing today
        - recent: the last `days` days ending today
        - all_time: previous and current calendar year

        Args:
            period: Reporting period
            today: Current local date
            days: Window length for the recent period

        Returns:
            Tuple of (start_date, end_date)
        """
        if period == ReportingPeriod.WEEK:
            return today - timedelta(days=WEEK_PERIOD_DAYS - 1), today

        if period == ReportingPeriod.MONTH:
            return DateService.get_month_range(today.year, today.month)

        if period == ReportingPeriod.YEAR:
            return date(today.year, 1, 1), date(today.year, 12, 31)

        if period == ReportingPeriod.RECENT:
            return today - timedelta(days=max(1, days) - 1), today

        return date(today.year - 1, 1, 1), date(today.year, 12, 31)

    @staticmethod
    def get_previous_period_range(
        period: ReportingPeriod,
        today: date
    ) -> Optional[Tuple[date, date]]:
        """
        Get the range a period is compared against for trend direction.

        Only week and month have a previous period; others return None.
        """
        if period == ReportingPeriod.WEEK:
            end = today - timedelta(days=WEEK_PERIOD_DAYS)
            return end - timedelta(days=WEEK_PERIOD_DAYS - 1), end

        if period == ReportingPeriod.MONTH:
            if today.month == 1:
                return DateService.get_month_range(today.year - 1, 12)
            return DateService.get_month_range(today.year, today.month - 1)

        return None

    @staticmethod
    def get_days_tracked_cap(
        period: ReportingPeriod,
        today: date,
        days: int = RECENT_PERIOD_DAYS
    ) -> int:
        """
        Get the days-tracked cap used by the composite score for a period.

        week -> 7, month -> days in that month, recent -> window length,
        year and all_time -> the default cap.
        """
        if period == ReportingPeriod.WEEK:
            return WEEK_PERIOD_DAYS
        if period == ReportingPeriod.MONTH:
            return DateService.days_in_month(today.year, today.month)
        if period == ReportingPeriod.RECENT:
            return max(1, days)
        return DEFAULT_DAYS_TRACKED_CAP


to_local_date_string = DateService.to_local_date_string
parse_date_string = DateService.parse_date_string
is_friday = DateService.is_friday
