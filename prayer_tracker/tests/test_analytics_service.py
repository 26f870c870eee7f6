"""
Tests for AnalyticsService.

Tests cover:
1. Period aggregation over complete days only
2. Best and current streaks, including the in-progress today rule
3. Friday activity statistics
4. Composite ranking score
5. Trend direction, theoretical maximum and insights
6. Date key validation and ordering
"""
import pytest
from datetime import date

from prayer_tracker.constants import ScoringMode, TrendDirection
from prayer_tracker.schemas import FridayActivityStats, PeriodStats
from prayer_tracker.services.analytics_service import AnalyticsService
from prayer_tracker.services.trend_service import TrendService
from prayer_tracker.tests.conftest import complete_days, day_record


def stats_for(records, mode=ScoringMode.STANDARD, today=date(2024, 1, 31)):
    return AnalyticsService.calculate_period_stats(records, mode, today)


class TestAggregation:
    """Tests for calculate_period_stats totals"""

    def test_empty_range_is_all_zero(self):
        stats = stats_for({})
        assert stats.total_days == 0
        assert stats.total_score == 0
        assert stats.average_score == 0
        assert stats.consistency == 0
        assert stats.masjid_percentage == 0
        assert stats.current_streak == 0
        assert stats.best_streak == 0
        assert stats.friday_stats.consistency == 0

    def test_incomplete_days_contribute_nothing(self):
        """A partially marked day adds to no aggregate even though its slots have scores"""
        records = {
            "2024-01-01": day_record("masjid"),
            "2024-01-02": day_record("masjid", isha=None),
        }
        stats = stats_for(records)

        assert stats.tracked_days == 2
        assert stats.total_days == 1
        assert stats.total_score == 135
        assert stats.total_prayers == 5
        assert stats.prayer_breakdown["masjid"] == 5

    def test_average_is_total_over_complete_days(self):
        records = {
            "2024-01-01": day_record("masjid"),
            "2024-01-02": day_record("home"),
            "2024-01-03": day_record("qaza"),
        }
        stats = stats_for(records)

        assert stats.total_score == 142.5
        assert stats.average_score == stats.total_score / stats.total_days

    def test_consistency_and_masjid_percentage(self):
        records = {"2024-01-01": day_record("masjid", fajr="not_prayed")}
        stats = stats_for(records)

        assert stats.consistency == pytest.approx(80.0)
        assert stats.masjid_percentage == pytest.approx(80.0)
        assert stats.average_score == 108

    def test_home_optimized_mode_scores(self):
        stats = stats_for({"2024-01-01": day_record("home")}, mode=ScoringMode.HOME_OPTIMIZED)
        assert stats.total_score == 135

    def test_prayer_type_breakdown(self):
        stats = stats_for({"2024-01-01": day_record("home", fajr="qaza")})

        assert stats.prayer_type_breakdown["fajr"]["qaza"] == 1
        assert stats.prayer_type_breakdown["fajr"]["total"] == 1
        assert stats.prayer_type_breakdown["isha"]["home"] == 1

    def test_malformed_keys_and_null_records(self):
        """Bad date keys are skipped; a null record is an empty, incomplete day"""
        records = {
            "2024-01-01": day_record("masjid"),
            "garbage": day_record("masjid"),
            "2024-01-02": None,
        }
        stats = stats_for(records)

        assert stats.tracked_days == 2
        assert stats.total_days == 1


class TestStreaks:
    """Tests for best and current streak"""

    def test_qaza_day_resets_streak(self, today):
        records = complete_days(date(2024, 1, 1), 3)
        records["2024-01-04"] = day_record("masjid", asr="qaza")

        stats = stats_for(records, today=today)

        assert stats.best_streak == 3
        assert stats.current_streak == 0

    def test_in_progress_today_is_skipped(self, today):
        """Today with fewer than five prayers marked neither counts nor breaks the streak"""
        records = complete_days(date(2024, 1, 7), 3)
        records["2024-01-10"] = {"fajr": "masjid", "dhuhr": "home"}

        stats = stats_for(records, today=today)

        assert stats.current_streak == 3
        assert stats.total_days == 3

    def test_today_fully_marked_with_qaza_breaks_streak(self, today):
        records = complete_days(date(2024, 1, 7), 3)
        records["2024-01-10"] = day_record("home", maghrib="qaza")

        assert stats_for(records, today=today).current_streak == 0

    def test_partial_past_day_stops_current_streak(self, today):
        """Only today gets the in-progress skip"""
        records = complete_days(date(2024, 1, 7), 2)
        records["2024-01-09"] = {"fajr": "masjid"}

        stats = stats_for(records, today=today)

        assert stats.current_streak == 0
        assert stats.best_streak == 2

    def test_best_streak_across_gap(self):
        records = complete_days(date(2024, 1, 1), 2)
        records["2024-01-03"] = day_record("masjid", fajr="not_prayed")
        records.update(complete_days(date(2024, 1, 8), 4))

        stats = stats_for(records)

        assert stats.best_streak == 4
        assert stats.current_streak == 4

    def test_friday_without_activity_keeps_streak(self):
        """Streaks look only at the five prayers"""
        records = {
            "2024-01-04": day_record("masjid"),
            "2024-01-05": day_record("masjid"),
            "2024-01-06": day_record("masjid"),
        }
        stats = stats_for(records)

        assert stats.best_streak == 3
        assert stats.total_days == 2


class TestFridayStats:
    """Tests for Friday activity statistics"""

    def test_recited_missed_and_not_tracked(self):
        records = {
            "2024-01-05": day_record("masjid", friday_activity="recited"),
            "2024-01-12": day_record("home", friday_activity="missed"),
            "2024-01-19": day_record("masjid"),
        }
        stats = stats_for(records)

        assert stats.friday_stats.total_fridays == 2
        assert stats.friday_stats.recited == 1
        assert stats.friday_stats.missed == 1
        assert stats.friday_stats.not_tracked == 1
        assert stats.friday_stats.consistency == 50
        assert stats.total_score == 145 + 5


class TestCompositeScore:
    """Tests for calculate_composite_score"""

    def test_reference_example(self):
        stats = PeriodStats(
            average_score=135,
            consistency=100,
            current_streak=30,
            masjid_percentage=100,
            total_days=60,
        )
        score = AnalyticsService.calculate_composite_score(stats, 60, ScoringMode.STANDARD)
        assert score == pytest.approx(96.90, abs=0.01)

    def test_empty_stats_score_zero(self):
        assert AnalyticsService.calculate_composite_score(PeriodStats(), 60) == 0

    def test_values_are_clamped(self):
        high = PeriodStats(
            average_score=1000, consistency=150, current_streak=500,
            masjid_percentage=-20, total_days=1000,
        )
        low = PeriodStats(
            average_score=-50, consistency=-10, current_streak=-3,
            masjid_percentage=-1, total_days=-2,
        )

        assert 0 <= AnalyticsService.calculate_composite_score(high, 7) <= 100
        assert AnalyticsService.calculate_composite_score(high, 7) == 90
        assert AnalyticsService.calculate_composite_score(low, 7) == 0

    def test_zero_cap_drops_days_component(self):
        stats = PeriodStats(total_days=5)
        assert AnalyticsService.calculate_composite_score(stats, 0) == 0

    def test_home_mode_uses_friday_consistency(self):
        stats = PeriodStats(
            consistency=100,
            friday_stats=FridayActivityStats(total_fridays=2, recited=1, missed=1, consistency=50),
        )
        assert AnalyticsService.calculate_composite_score(stats, 60, ScoringMode.HOME_OPTIMIZED) == 25
        assert AnalyticsService.calculate_composite_score(stats, 60, ScoringMode.STANDARD) == 20

    def test_home_mode_falls_back_to_consistency(self):
        stats = PeriodStats(consistency=100)
        assert AnalyticsService.calculate_composite_score(stats, 60, ScoringMode.HOME_OPTIMIZED) == 30

    def test_rounded_to_two_decimals(self):
        stats = PeriodStats(average_score=100, total_days=1)
        score = AnalyticsService.calculate_composite_score(stats, 7)
        assert score == round(score, 2)


class TestTrendDirection:
    """Tests for determine_trend"""

    @pytest.mark.parametrize("current,expected", [
        (110, TrendDirection.IMPROVING),
        (96, TrendDirection.STABLE),
        (90, TrendDirection.DECLINING),
    ])
    def test_threshold(self, current, expected):
        result = AnalyticsService.determine_trend(
            PeriodStats(average_score=current), PeriodStats(average_score=100)
        )
        assert result == expected

    def test_no_previous_is_stable(self):
        assert AnalyticsService.determine_trend(PeriodStats(average_score=50), None) == TrendDirection.STABLE
        assert AnalyticsService.determine_trend(
            PeriodStats(average_score=50), PeriodStats()
        ) == TrendDirection.STABLE


class TestSupplementaryMetrics:
    """Tests for theoretical maximum, monthly percentage and insights"""

    def test_theoretical_max_average_january(self):
        result = AnalyticsService.calculate_theoretical_max_average(date(2024, 1, 1), date(2024, 1, 31))
        assert result == pytest.approx((31 * 135 + 4 * 10) / 31)

    def test_monthly_percentage(self):
        records = {
            "2024-01-01": day_record("masjid"),
            "2024-01-02": day_record("home"),
            "2024-01-03": None,
        }
        assert AnalyticsService.calculate_monthly_percentage(records) == pytest.approx(140 / 270 * 100)

    def test_insights_for_empty_stats(self):
        insights = AnalyticsService.get_motivational_insights(PeriodStats())
        assert [i.type for i in insights] == ["encouragement"]

    def test_insights_for_strong_stats(self):
        stats = PeriodStats(
            tracked_days=10, total_days=10, consistency=95, masjid_percentage=60, best_streak=10, current_streak=4,
        )
        insights = AnalyticsService.get_motivational_insights(stats)

        assert [i.type for i in insights] == ["praise", "praise", "achievement", "momentum"]
        assert "95.0%" in insights[0].message

    def test_incomplete_days_still_count_as_started(self):
        """Marking anything at all replaces the start-tracking message"""
        stats = stats_for({"2024-01-01": {"fajr": "masjid"}})
        insights = AnalyticsService.get_motivational_insights(stats)

        assert stats.total_days == 0
        assert insights[0].type == "motivation"


class TestRecordOrdering:
    """Date keys are validated and ordered by calendar date"""

    def test_unpadded_duplicate_key_is_skipped(self):
        records = {"2024-01-03": day_record("masjid"), "2024-1-3": day_record("masjid")}
        stats = stats_for(records)

        assert stats.tracked_days == 1
        assert stats.total_days == 1
        assert stats.best_streak == 1

    def test_order_follows_dates_not_insertion(self):
        """The latest day decides the current streak however the mapping is ordered"""
        records = {
            "2024-10-01": day_record("masjid", fajr="qaza"),
            "2024-09-29": day_record("masjid"),
            "2024-09-30": day_record("masjid"),
        }
        stats = stats_for(records, today=date(2024, 10, 5))

        assert stats.current_streak == 0
        assert stats.best_streak == 2

    def test_trend_points_sorted_by_date(self):
        records = {"2024-10-01": day_record("masjid"), "2024-09-30": day_record("home")}
        points = TrendService.build_daily_trend(records)

        assert [p.date for p in points] == ["2024-09-30", "2024-10-01"]
