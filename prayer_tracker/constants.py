"""
Application constants.
Prayer types, statuses, scoring tables and tunable values for the analytics engine.
"""
import os
from enum import Enum


class PrayerType(str, Enum):
    FAJR = "fajr"
    DHUHR = "dhuhr"
    ASR = "asr"
    MAGHRIB = "maghrib"
    ISHA = "isha"


class PrayerStatus(str, Enum):
    NOT_PRAYED = "not_prayed"
    QAZA = "qaza"        # prayed late
    HOME = "home"
    MASJID = "masjid"    # congregation


class FridayActivityStatus(str, Enum):
    RECITED = "recited"
    MISSED = "missed"


class ReportingPeriod(str, Enum):
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"
    RECENT = "recent"
    ALL_TIME = "all_time"


class TrendDirection(str, Enum):
    IMPROVING = "improving"
    DECLINING = "declining"
    STABLE = "stable"


# Fixed iteration order for the five daily prayers
PRAYER_TYPES = tuple(PrayerType)
PRAYERS_PER_DAY = len(PRAYER_TYPES)

# Record key holding the Friday bonus activity (Surah Al-Kahf)
FRIDAY_ACTIVITY_KEY = "surah_alkahf"

# Statuses that break a streak even when marked
STREAK_BREAKING_STATUSES = frozenset({PrayerStatus.NOT_PRAYED, PrayerStatus.QAZA})

# === SCORING TABLES ===

STANDARD_PRAYER_SCORES = {
    PrayerStatus.NOT_PRAYED: 0,
    PrayerStatus.QAZA: 0.5,
    PrayerStatus.HOME: 1,
    PrayerStatus.MASJID: 27,
}

# For users who mostly pray at home; masjid is hidden in the UI and scores like home
HOME_OPTIMIZED_PRAYER_SCORES = {
    PrayerStatus.NOT_PRAYED: 0,
    PrayerStatus.QAZA: 13,
    PrayerStatus.HOME: 27,
    PrayerStatus.MASJID: 27,
}

FRIDAY_ACTIVITY_SCORES = {
    FridayActivityStatus.RECITED: 10,
    FridayActivityStatus.MISSED: 0,
}


class ScoringMode(str, Enum):
    """Scoring variant; each mode carries its own prayer score table."""

    STANDARD = "standard"
    HOME_OPTIMIZED = "home_optimized"   # "masjid mode" in the app settings

    @property
    def prayer_scores(self) -> dict:
        return _PRAYER_SCORE_TABLES[self]

    @classmethod
    def from_masjid_mode(cls, masjid_mode: bool) -> "ScoringMode":
        return cls.HOME_OPTIMIZED if masjid_mode else cls.STANDARD


_PRAYER_SCORE_TABLES = {
    ScoringMode.STANDARD: STANDARD_PRAYER_SCORES,
    ScoringMode.HOME_OPTIMIZED: HOME_OPTIMIZED_PRAYER_SCORES,
}

DAILY_MAX_SCORE = 135           # 5 prayers x 27
FRIDAY_BONUS_SCORE = 10
FRIDAY_MAX_SCORE = DAILY_MAX_SCORE + FRIDAY_BONUS_SCORE

# === PERIOD COMPOSITE (leaderboard / progress) ===

COMPOSITE_AVERAGE_CEILING = FRIDAY_MAX_SCORE
COMPOSITE_STREAK_CAP = 30
DEFAULT_DAYS_TRACKED_CAP = 60

COMPOSITE_WEIGHT_AVERAGE = 0.45
COMPOSITE_WEIGHT_CONSISTENCY = 0.20
COMPOSITE_WEIGHT_STREAK = 0.10
COMPOSITE_WEIGHT_SPECIAL = 0.10
COMPOSITE_WEIGHT_DAYS_TRACKED = 0.15

# === DAY COMPOSITE (calendar / daily trend) ===

DAY_WEIGHT_AVERAGE = 0.50
DAY_WEIGHT_CONSISTENCY = 0.25
DAY_WEIGHT_STREAK = 0.15
DAY_WEIGHT_MASJID = 0.10

# === TREND / INSIGHTS ===

TREND_CHANGE_THRESHOLD = 5.0    # percent change in average score
RECENT_PERIOD_DAYS = 30
WEEK_PERIOD_DAYS = 7

INSIGHT_CONSISTENCY_EXCELLENT = 90
INSIGHT_CONSISTENCY_GOOD = 70
INSIGHT_MASJID_CHAMPION = 50
INSIGHT_MASJID_BUILDING = 25
INSIGHT_BEST_STREAK = 7
INSIGHT_CURRENT_STREAK = 3

# === DEPLOYMENT ===

DATABASE_URL = os.getenv("PRAYER_TRACKER_DATABASE_URL", "sqlite:///./prayer_tracker.db")

DEFAULT_LOG_DIRECTORY_PROD = "/var/log/prayer_tracker"
DEFAULT_LOG_DIRECTORY_DEV = "./logs"

STATS_CACHE_TTL_SECONDS = int(os.getenv("PRAYER_TRACKER_STATS_CACHE_TTL", "60"))
LEADERBOARD_LIMIT = int(os.getenv("PRAYER_TRACKER_LEADERBOARD_LIMIT", "100"))

CORS_ALLOWED_ORIGINS = [
    origin.strip()
    for origin in os.getenv("PRAYER_TRACKER_CORS_ORIGINS", "http://localhost:3000").split(",")
    if origin.strip()
]
