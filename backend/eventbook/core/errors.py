"""
Error taxonomy for the booking data-access layer.

Every error raised to callers derives from EventbookError, so handlers can
map the whole family at once while still telling the retryable cases
(DatabaseConnectionError, DependencyError) apart from the ones that need a
different input (ValidationError, ReferentialIntegrityError, UniquenessError).
"""

from typing import Optional


class EventbookError(Exception):
    """Base class for all eventbook errors."""

    retryable = False

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ConfigurationError(EventbookError):
    """Required configuration is missing or invalid. Fatal at startup."""

    def __init__(self, message: str, fields: Optional[list[str]] = None):
        super().__init__(message)
        self.fields = fields or []


class DatabaseConnectionError(EventbookError):
    """The database connection could not be established, or is not established yet."""

    retryable = True


class ValidationError(EventbookError):
    """One or more booking fields are missing or malformed."""

    def __init__(self, errors: dict[str, str]):
        super().__init__("; ".join(f"{field}: {msg}" for field, msg in errors.items()))
        self.errors = errors


class ReferentialIntegrityError(EventbookError):
    def __init__(self, event_id: int):
        super().__init__("Referenced event does not exist")
        self.event_id = event_id


class DependencyError(EventbookError):
    """The event existence check itself failed."""

    retryable = True

    def __init__(self, event_id: int):
        super().__init__("Failed to verify event existence")
        self.event_id = event_id


class UniquenessError(EventbookError):
    def __init__(self, event_id: int, email: str):
        super().__init__("A booking for this email already exists for this event")
        self.event_id = event_id
        self.email = email


class BookingNotFoundError(EventbookError):
    def __init__(self, booking_id: int):
        super().__init__(f"Booking {booking_id} not found")
        self.booking_id = booking_id
