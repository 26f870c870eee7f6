"""
Custom exceptions for the prayer tracker application.
The scoring core never raises these; they live at the storage and HTTP boundaries.
"""


class PrayerTrackerException(Exception):
    """Base exception for prayer tracker application"""
    pass


class InvalidDateFormatException(PrayerTrackerException):
    """Raised when a date string is not a valid YYYY-MM-DD calendar date"""
    def __init__(self, date_str):
        self.date_str = date_str
        super().__init__(f"Invalid date format: {date_str!r}. Expected YYYY-MM-DD")


class UserNotFoundException(PrayerTrackerException):
    """Raised when a user profile is not found"""
    def __init__(self, user_id: str):
        self.user_id = user_id
        super().__init__(f"User with ID {user_id} not found")


class StorageException(PrayerTrackerException):
    """Raised when the storage collaborator fails to read or write records"""
    def __init__(self, operation: str, details: str):
        self.operation = operation
        self.details = details
        super().__init__(f"Storage {operation} failed: {details}")


class ValidationException(PrayerTrackerException):
    """Raised when data validation fails"""
    def __init__(self, field: str, message: str):
        self.field = field
        super().__init__(f"Validation error for {field}: {message}")
