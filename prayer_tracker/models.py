from sqlalchemy import Column, Integer, String, Boolean, DateTime, UniqueConstraint
from datetime import datetime

from prayer_tracker.constants import FRIDAY_ACTIVITY_KEY, PRAYER_TYPES
from prayer_tracker.database import Base

# Record keys stored as columns on PrayerDay
RECORD_SLOTS = tuple(prayer.value for prayer in PRAYER_TYPES) + (FRIDAY_ACTIVITY_KEY,)


class UserProfile(Base):
    __tablename__ = "users"

    id = Column(String, primary_key=True, index=True)
    nickname = Column(String, nullable=False, default="Anonymous")
    masjid_mode = Column(Boolean, default=False)  # home-optimized scoring
    created_at = Column(DateTime, default=datetime.now)


class PrayerDay(Base):
    __tablename__ = "prayer_days"
    __table_args__ = (UniqueConstraint("user_id", "date", name="uq_prayer_day_user_date"),)

    id = Column(Integer, primary_key=True, index=True)
    user_id = Column(String, nullable=False, index=True)
    date = Column(String(10), nullable=False, index=True)  # local YYYY-MM-DD

    # Status per slot; NULL means unmarked
    fajr = Column(String, nullable=True)
    dhuhr = Column(String, nullable=True)
    asr = Column(String, nullable=True)
    maghrib = Column(String, nullable=True)
    isha = Column(String, nullable=True)
    surah_alkahf = Column(String, nullable=True)  # Friday activity

    last_updated = Column(DateTime, default=datetime.now, onupdate=datetime.now)

    def to_record(self) -> dict:
        """Flat slot -> status mapping. Unmarked slots are absent, not None."""
        record = {}
        for slot in RECORD_SLOTS:
            value = getattr(self, slot)
            if value is not None:
                record[slot] = value
        return record
