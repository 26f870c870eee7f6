from pydantic import BaseModel, Field
from datetime import date, datetime
from typing import Dict, List, Optional

from prayer_tracker.constants import (
    PRAYERS_PER_DAY,
    FridayActivityStatus,
    PrayerStatus,
    ReportingPeriod,
    ScoringMode,
    TrendDirection,
)


def empty_status_counts() -> Dict[str, int]:
    return {status.value: 0 for status in PrayerStatus}


# Derived analytics types

class DayClassification(BaseModel):
    date: str
    is_friday: bool = False
    is_complete: bool = False
    day_score: float = 0
    marked_count: int = 0
    all_marked_are_good_statuses: bool = False
    statuses: Dict[str, PrayerStatus] = Field(default_factory=dict)  # prayer -> status, marked slots only
    friday_status: Optional[FridayActivityStatus] = None

    @property
    def streak_eligible(self) -> bool:
        # Friday activity does not count toward streak eligibility
        return self.all_marked_are_good_statuses and self.marked_count == PRAYERS_PER_DAY


class FridayActivityStats(BaseModel):
    total_fridays: int = 0
    recited: int = 0
    missed: int = 0
    not_tracked: int = 0
    consistency: float = 0.0


class PeriodStats(BaseModel):
    tracked_days: int = 0           # date keys supplied, complete or not
    total_days: int = 0             # complete days only
    total_score: float = 0
    total_prayers: int = 0
    prayer_breakdown: Dict[str, int] = Field(default_factory=empty_status_counts)
    prayer_type_breakdown: Dict[str, Dict[str, int]] = Field(default_factory=dict)
    average_score: float = 0.0
    consistency: float = 0.0
    masjid_percentage: float = 0.0
    current_streak: int = 0
    best_streak: int = 0
    friday_stats: FridayActivityStats = Field(default_factory=FridayActivityStats)


class TrendPoint(BaseModel):
    date: str
    average_score: float
    composite_score: float


class Insight(BaseModel):
    type: str
    title: str
    message: str


class PeriodSummary(BaseModel):
    user_id: str
    period: ReportingPeriod
    mode: ScoringMode
    start_date: date
    end_date: date
    days_tracked_cap: int
    stats: PeriodStats
    composite_score: float
    trend: TrendDirection = TrendDirection.STABLE
    theoretical_max_average: float
    insights: List[Insight] = []


class LeaderboardEntry(BaseModel):
    rank: int = 0
    user_id: str
    nickname: str
    average_score: float = 0.0
    total_days: int = 0
    total_score: float = 0
    consistency: float = 0.0
    current_streak: int = 0
    best_streak: int = 0
    masjid_percentage: float = 0.0
    composite_score: float = 0.0
    trend: TrendDirection = TrendDirection.STABLE


class LeaderboardResponse(BaseModel):
    period: ReportingPeriod
    entries: List[LeaderboardEntry]
    current_user_rank: Optional[int] = None


# HTTP request/response schemas

class UserCreate(BaseModel):
    id: str = Field(..., min_length=1, max_length=128)
    nickname: str = Field(default="Anonymous", min_length=1, max_length=64)
    masjid_mode: bool = False


class UserResponse(BaseModel):
    id: str
    nickname: str
    masjid_mode: bool
    created_at: datetime

    class Config:
        from_attributes = True


class PrayerStatusUpdate(BaseModel):
    slot: str               # one of the five prayers or the Friday activity key
    status: Optional[str] = None  # None clears the slot


class DayScoreResponse(BaseModel):
    date: str
    score: Optional[float]  # None when the date has no record at all
    max_score: int
    classification: Optional[DayClassification] = None


class CalendarDay(BaseModel):
    date: str
    score: Optional[float] = None   # None when the date has no record
    max_score: int
    is_complete: bool = False


class CalendarSummary(BaseModel):
    user_id: str
    year: int
    month: int
    mode: ScoringMode
    days: List[CalendarDay]
    tracked_days: int = 0
    monthly_percentage: float = 0.0
