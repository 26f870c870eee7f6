from fastapi import FastAPI, Depends, HTTPException, Path, Query, status
from fastapi.middleware.cors import CORSMiddleware
from sqlalchemy.orm import Session
from typing import List, Optional
from datetime import date
import logging
import os
from pathlib import Path as FsPath

from prayer_tracker.constants import (
    CORS_ALLOWED_ORIGINS,
    DEFAULT_DAYS_TRACKED_CAP,
    DEFAULT_LOG_DIRECTORY_DEV,
    DEFAULT_LOG_DIRECTORY_PROD,
    LEADERBOARD_LIMIT,
    RECENT_PERIOD_DAYS,
    ReportingPeriod,
    ScoringMode,
)
from prayer_tracker.database import Base, engine, get_db
from prayer_tracker import models
from prayer_tracker.exceptions import (
    InvalidDateFormatException,
    StorageException,
    UserNotFoundException,
    ValidationException,
)
from prayer_tracker.repositories.prayer_repository import PrayerRecordRepository
from prayer_tracker.repositories.user_repository import UserRepository
from prayer_tracker.schemas import (
    CalendarSummary,
    DayScoreResponse,
    LeaderboardResponse,
    PeriodSummary,
    PrayerStatusUpdate,
    TrendPoint,
    UserCreate,
    UserResponse,
)
from prayer_tracker.services.cache_service import TTLCache
from prayer_tracker.services.date_service import DateService
from prayer_tracker.services.stats_service import StatsService

LOG_DIR = os.getenv("PRAYER_TRACKER_LOG_DIR", DEFAULT_LOG_DIRECTORY_PROD)
LOG_FILE = os.getenv("PRAYER_TRACKER_LOG_FILE", "app.log")

# Create log directory if it doesn't exist (for development)
try:
    FsPath(LOG_DIR).mkdir(parents=True, exist_ok=True)
    log_path = FsPath(LOG_DIR) / LOG_FILE
except PermissionError:
    # Fallback to local directory if no permissions for /var/log
    LOG_DIR = DEFAULT_LOG_DIRECTORY_DEV
    FsPath(LOG_DIR).mkdir(parents=True, exist_ok=True)
    log_path = FsPath(LOG_DIR) / LOG_FILE

logging.basicConfig(
    level=logging.INFO,
    format='%(asctime)s - %(name)s - %(levelname)s - %(message)s',
    handlers=[
        logging.FileHandler(log_path),
        logging.StreamHandler()
    ]
)

logger = logging.getLogger("prayer_tracker")

# Create database tables
Base.metadata.create_all(bind=engine)

app = FastAPI(
    title="Prayer Tracker API",
    description="Daily prayer tracking with streaks, composite scores and leaderboards",
    version="1.0.0"
)

app.add_middleware(
    CORSMiddleware,
    allow_origins=CORS_ALLOWED_ORIGINS,
    allow_credentials=True,
    allow_methods=["*"],
    allow_headers=["*"],
)

_stats_cache = TTLCache()


def get_stats_cache() -> TTLCache:
    return _stats_cache


def get_stats_service(
    db: Session = Depends(get_db),
    cache: TTLCache = Depends(get_stats_cache)
) -> StatsService:
    return StatsService(PrayerRecordRepository(db), cache=cache)


def parse_day(day: str) -> date:
    try:
        return DateService.parse_date_string(day)
    except InvalidDateFormatException as e:
        raise HTTPException(status_code=status.HTTP_400_BAD_REQUEST, detail=str(e))


def resolve_mode(db: Session, user_id: str, mode: Optional[ScoringMode]) -> ScoringMode:
    """Explicit mode wins, otherwise the user's profile setting"""
    if mode is not None:
        return mode
    user = UserRepository(db).get_by_id(user_id)
    return ScoringMode.from_masjid_mode(bool(user.masjid_mode)) if user else ScoringMode.STANDARD


@app.on_event("startup")
async def startup_event():
    logger.info(f"Prayer Tracker API started. Logging to: {log_path}")


@app.get("/")
async def root():
    return {"message": "Prayer Tracker API", "status": "active"}


@app.post("/api/users", response_model=UserResponse, status_code=status.HTTP_201_CREATED)
def create_user(user: UserCreate, db: Session = Depends(get_db)):
    """Create a user profile"""
    repo = UserRepository(db)
    if repo.get_by_id(user.id):
        raise HTTPException(status_code=400, detail=f"User {user.id} already exists")
    try:
        return repo.create(models.UserProfile(**user.model_dump()))
    except StorageException as e:
        logger.error(f"Failed to create user {user.id}: {e}")
        raise HTTPException(status_code=500, detail=str(e))


@app.get("/api/users/{user_id}", response_model=UserResponse)
def get_user(user_id: str, db: Session = Depends(get_db)):
    user = UserRepository(db).get_by_id(user_id)
    if not user:
        raise HTTPException(status_code=404, detail=str(UserNotFoundException(user_id)))
    return user


@app.put("/api/users/{user_id}/prayers/{day}", response_model=DayScoreResponse)
def update_prayer_status(
    user_id: str,
    day: str,
    update: PrayerStatusUpdate,
    mode: Optional[ScoringMode] = None,
    db: Session = Depends(get_db),
    cache: TTLCache = Depends(get_stats_cache),
    stats_service: StatsService = Depends(get_stats_service)
):
    """Set or clear one prayer slot (status=null clears it)"""
    target_date = parse_day(day)
    try:
        PrayerRecordRepository(db).save_status(user_id, target_date, update.slot, update.status)
    except ValidationException as e:
        raise HTTPException(status_code=400, detail=str(e))
    except StorageException as e:
        logger.error(f"Failed to save prayer status: {e}")
        raise HTTPException(status_code=500, detail=str(e))

    cache.invalidate_user(user_id)
    return stats_service.get_day_score(user_id, target_date, resolve_mode(db, user_id, mode))


@app.get("/api/users/{user_id}/prayers/{day}", response_model=DayScoreResponse)
def get_day_score(
    user_id: str,
    day: str,
    mode: Optional[ScoringMode] = None,
    db: Session = Depends(get_db),
    stats_service: StatsService = Depends(get_stats_service)
):
    """Calendar score for a single day"""
    return stats_service.get_day_score(user_id, parse_day(day), resolve_mode(db, user_id, mode))


@app.get("/api/users/{user_id}/calendar/{year}/{month}", response_model=CalendarSummary)
def get_calendar(
    user_id: str,
    year: int = Path(..., ge=1, le=9999),
    month: int = Path(..., ge=1, le=12),
    mode: Optional[ScoringMode] = None,
    db: Session = Depends(get_db),
    stats_service: StatsService = Depends(get_stats_service)
):
    """Month view: per-day scores and monthly percentage"""
    return stats_service.get_calendar_summary(user_id, year, month, resolve_mode(db, user_id, mode))


@app.get("/api/users/{user_id}/stats", response_model=PeriodSummary)
def get_stats(
    user_id: str,
    period: ReportingPeriod = ReportingPeriod.MONTH,
    days: int = Query(RECENT_PERIOD_DAYS, ge=1, le=366),
    mode: Optional[ScoringMode] = None,
    db: Session = Depends(get_db),
    stats_service: StatsService = Depends(get_stats_service)
):
    """Progress stats and composite score for a reporting period"""
    return stats_service.get_period_summary(
        user_id, period, resolve_mode(db, user_id, mode), days=days
    )


@app.get("/api/users/{user_id}/trend", response_model=List[TrendPoint])
def get_trend(
    user_id: str,
    start: str,
    end: str,
    kind: str = Query("daily", pattern="^(daily|cumulative)$"),
    cap: int = Query(DEFAULT_DAYS_TRACKED_CAP, ge=1),
    mode: Optional[ScoringMode] = None,
    db: Session = Depends(get_db),
    stats_service: StatsService = Depends(get_stats_service)
):
    """Chart series over a date range"""
    start_date, end_date = parse_day(start), parse_day(end)
    if start_date > end_date:
        raise HTTPException(status_code=400, detail="start must not be after end")

    scoring_mode = resolve_mode(db, user_id, mode)
    if kind == "cumulative":
        return stats_service.get_cumulative_trend(user_id, start_date, end_date, scoring_mode, cap)
    return stats_service.get_daily_trend(user_id, start_date, end_date, scoring_mode)


@app.get("/api/leaderboard", response_model=LeaderboardResponse)
def get_leaderboard(
    period: ReportingPeriod = ReportingPeriod.WEEK,
    current_user_id: Optional[str] = None,
    user_ids: Optional[List[str]] = Query(None),
    limit: int = Query(LEADERBOARD_LIMIT, ge=1, le=1000),
    db: Session = Depends(get_db),
    stats_service: StatsService = Depends(get_stats_service)
):
    """Global leaderboard, or a friends leaderboard when user_ids is given"""
    repo = UserRepository(db)
    users = repo.get_by_ids(user_ids) if user_ids else repo.get_all()
    return stats_service.build_leaderboard(users, period, current_user_id, limit=limit)
