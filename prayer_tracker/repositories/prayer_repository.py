"""
Prayer repository - Data access layer for day records.
Implements the fetch-range boundary consumed by the stats service.
"""
import logging
from datetime import date
from typing import Dict, Optional

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.orm import Session

from prayer_tracker.constants import (
    FRIDAY_ACTIVITY_KEY,
    FridayActivityStatus,
    PrayerStatus,
)
from prayer_tracker.exceptions import StorageException, ValidationException
from prayer_tracker.models import RECORD_SLOTS, PrayerDay
from prayer_tracker.services.date_service import DateService

logger = logging.getLogger("prayer_tracker.repository")


class PrayerRecordRepository:
    """Repository for PrayerDay data access"""

    def __init__(self, db: Session):
        self.db = db

    def get_by_date(self, user_id: str, target_date: date) -> Optional[PrayerDay]:
        """Get the stored day for a user, if any"""
        date_str = DateService.to_local_date_string(target_date)
        return self.db.query(PrayerDay).filter(
            PrayerDay.user_id == user_id,
            PrayerDay.date == date_str
        ).first()

    def get_record(self, user_id: str, target_date: date) -> Optional[dict]:
        """Raw record for one date, or None when the date was never tracked"""
        try:
            day = self.get_by_date(user_id, target_date)
        except SQLAlchemyError as e:
            raise StorageException("read", str(e))
        return day.to_record() if day else None

    def fetch_range(self, user_id: str, start_date: date, end_date: date) -> Dict[str, dict]:
        """
        Get all records for a user within an inclusive date range.

        Args:
            user_id: Owner of the records
            start_date: First local date
            end_date: Last local date

        Returns:
            Mapping of YYYY-MM-DD -> record, in ascending date order

        Raises:
            StorageException: If the query fails
        """
        start_str = DateService.to_local_date_string(start_date)
        end_str = DateService.to_local_date_string(end_date)

        try:
            days = self.db.query(PrayerDay).filter(
                PrayerDay.user_id == user_id,
                PrayerDay.date >= start_str,
                PrayerDay.date <= end_str
            ).order_by(PrayerDay.date).all()
        except SQLAlchemyError as e:
            raise StorageException("fetch_range", str(e))

        return {day.date: day.to_record() for day in days}

    def save_status(
        self,
        user_id: str,
        target_date: date,
        slot: str,
        status: Optional[str]
    ) -> PrayerDay:
        """
        Set or clear one slot of a day record.

        Passing status=None removes the slot from the record entirely.

        Raises:
            ValidationException: If the slot or status is not recognised
            StorageException: If the write fails
        """
        self._validate(target_date, slot, status)

        try:
            day = self.get_by_date(user_id, target_date)
            if day is None:
                day = PrayerDay(user_id=user_id, date=DateService.to_local_date_string(target_date))
                self.db.add(day)

            setattr(day, slot, status)
            self.db.commit()
            self.db.refresh(day)
        except SQLAlchemyError as e:
            self.db.rollback()
            raise StorageException("save_status", str(e))

        logger.info(f"Saved {slot}={status} for user {user_id} on {day.date}")
        return day

    @staticmethod
    def _validate(target_date: date, slot: str, status: Optional[str]) -> None:
        if slot not in RECORD_SLOTS:
            raise ValidationException("slot", f"unknown slot {slot!r}")

        if slot == FRIDAY_ACTIVITY_KEY:
            if not DateService.is_friday(target_date):
                raise ValidationException("slot", "Friday activity can only be set on a Friday")
            valid = {s.value for s in FridayActivityStatus}
        else:
            valid = {s.value for s in PrayerStatus}

        if status is not None and status not in valid:
            raise ValidationException("status", f"{status!r} is not valid for {slot}")

