"""
Shared fixtures for prayer tracker tests.
"""
import os
import tempfile

# Must be set before prayer_tracker.constants is imported
os.environ.setdefault("PRAYER_TRACKER_DATABASE_URL", "sqlite://")
os.environ.setdefault("PRAYER_TRACKER_LOG_DIR", tempfile.gettempdir())

import pytest
from datetime import date, timedelta
from sqlalchemy import create_engine
from sqlalchemy.orm import sessionmaker
from sqlalchemy.pool import StaticPool

from prayer_tracker.constants import FRIDAY_ACTIVITY_KEY, PRAYER_TYPES
from prayer_tracker.database import Base
from prayer_tracker import models  # noqa: F401  register models with Base

# January 2024: Monday the 1st, Thursday the 4th, Friday the 5th
MONDAY = date(2024, 1, 1)
THURSDAY = date(2024, 1, 4)
FRIDAY = date(2024, 1, 5)


def day_record(status="masjid", friday_activity=None, **overrides):
    """Record with all five prayers set to status, optionally overriding single slots"""
    record = {prayer.value: status for prayer in PRAYER_TYPES}
    if friday_activity is not None:
        record[FRIDAY_ACTIVITY_KEY] = friday_activity
    for slot, value in overrides.items():
        if value is None:
            record.pop(slot, None)
        else:
            record[slot] = value
    return record


def date_key(d: date) -> str:
    return f"{d.year:04d}-{d.month:02d}-{d.day:02d}"


def complete_days(start: date, count: int, status="masjid"):
    """Consecutive complete records; Fridays get a recited activity"""
    records = {}
    for offset in range(count):
        d = start + timedelta(days=offset)
        activity = "recited" if d.weekday() == 4 else None
        records[date_key(d)] = day_record(status, friday_activity=activity)
    return records


@pytest.fixture
def engine():
    engine = create_engine(
        "sqlite://",
        connect_args={"check_same_thread": False},
        poolclass=StaticPool,
    )
    Base.metadata.create_all(bind=engine)
    yield engine
    Base.metadata.drop_all(bind=engine)
    engine.dispose()


@pytest.fixture
def session_factory(engine):
    return sessionmaker(autocommit=False, autoflush=False, bind=engine)


@pytest.fixture
def db_session(session_factory):
    session = session_factory()
    try:
        yield session
    finally:
        session.close()


@pytest.fixture
def today():
    return date(2024, 1, 10)


@pytest.fixture
def yesterday(today):
    return today - timedelta(days=1)
