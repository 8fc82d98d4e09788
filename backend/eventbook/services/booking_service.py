"""
Booking service: validation, integrity checks and persistence.

WRITE PIPELINE
==============

  1. validate_booking       required fields, email trimmed + lowercased +
                            shape-checked. Raises ValidationError before
                            any I/O happens.
  2. check_booking_write    asks the EventExistenceChecker whether event_id
                            exists. Skipped on update when event_id is
                            unchanged. Returns a WriteCheckResult carrying
                            ReferentialIntegrityError (no such event) or
                            DependencyError (the check itself failed).
  3. commit                 the unique constraint on (event_id, email)
                            rejects duplicates; IntegrityError becomes
                            UniquenessError.

Steps 2 and 3 are separate statements with no transaction spanning them.
An event deleted in between is not detected; the unique constraint is the
only guard the store enforces at commit time.
"""

from dataclasses import dataclass
from typing import Optional

from pydantic import ValidationError as PydanticValidationError
from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncSession

from eventbook.core.errors import (
    BookingNotFoundError,
    DependencyError,
    EventbookError,
    ReferentialIntegrityError,
    UniquenessError,
    ValidationError,
)
from eventbook.core.logging import get_logger
from eventbook.core.metrics import record_booking_write
from eventbook.models.booking import Booking
from eventbook.schemas.booking import FIELD_MESSAGES, BookingCreate, normalize_email
from eventbook.services.interfaces.event_checker import EventExistenceChecker

logger = get_logger(__name__)

RESULT_LABELS = {
    ValidationError: "invalid",
    ReferentialIntegrityError: "missing_event",
    DependencyError: "dependency_error",
    UniquenessError: "conflict",
}


@dataclass
class WriteCheckResult:
    """Outcome of the pre-write integrity checks."""

    data: BookingCreate
    error: Optional[EventbookError] = None
    event_checked: bool = False

    @property
    def ok(self) -> bool:
        return self.error is None


def validate_booking(**fields) -> BookingCreate:
    """Validate and normalize booking fields, raising ValidationError with per-field messages."""
    try:
        return BookingCreate.model_validate(fields)
    except PydanticValidationError as e:
        raise ValidationError(_field_errors(e)) from e


def _field_errors(exc: PydanticValidationError) -> dict[str, str]:
    errors: dict[str, str] = {}
    for err in exc.errors():
        field = str(err["loc"][0]) if err["loc"] else "booking"
        cause = err.get("ctx", {}).get("error")
        kind = "missing" if err["type"] == "missing" or str(cause) == "missing" else "invalid"
        messages = FIELD_MESSAGES.get(field)
        errors.setdefault(field, messages[kind] if messages else err["msg"])
    return errors


async def check_booking_write(
    checker: EventExistenceChecker,
    data: BookingCreate,
    current: Optional[Booking] = None,
) -> WriteCheckResult:
    """Verify the referenced event exists when event_id is being set or changed."""
    if current is not None and current.event_id == data.event_id:
        return WriteCheckResult(data=data)

    try:
        found = await checker.exists(data.event_id)
    except Exception as e:
        logger.error("event_check_failed", event_id=data.event_id, error=str(e))
        error = DependencyError(data.event_id)
        error.__cause__ = e
        return WriteCheckResult(data=data, error=error, event_checked=True)

    if not found:
        return WriteCheckResult(
            data=data, error=ReferentialIntegrityError(data.event_id), event_checked=True
        )
    return WriteCheckResult(data=data, event_checked=True)


async def create_booking(
    db: AsyncSession,
    checker: EventExistenceChecker,
    event_id: Optional[int],
    email: Optional[str],
) -> Booking:
    """Create a booking for an existing event. Commits on success."""
    data = _validate("create", event_id=event_id, email=email)

    result = await check_booking_write(checker, data)
    if not result.ok:
        await _reject(db, "create", result.error)

    booking = Booking(event_id=data.event_id, email=data.email)
    db.add(booking)
    await _commit(db, "create", data)
    await db.refresh(booking)

    record_booking_write("create", "success")
    logger.info("booking_created", booking_id=booking.id, event_id=booking.event_id)
    return booking


async def update_booking(
    db: AsyncSession,
    checker: EventExistenceChecker,
    booking_id: int,
    event_id: Optional[int] = None,
    email: Optional[str] = None,
) -> Booking:
    """
    Change a booking's event and/or email.
    Fields left as None keep their current value. The event check only runs
    when event_id actually changes.
    """
    booking = await get_booking(db, booking_id)
    if booking is None:
        raise BookingNotFoundError(booking_id)

    data = _validate(
        "update",
        event_id=booking.event_id if event_id is None else event_id,
        email=booking.email if email is None else email,
    )

    result = await check_booking_write(checker, data, current=booking)
    if not result.ok:
        await _reject(db, "update", result.error)

    if data.event_id == booking.event_id and data.email == booking.email:
        return booking

    booking.event_id = data.event_id
    booking.email = data.email
    await _commit(db, "update", data)
    await db.refresh(booking)

    record_booking_write("update", "success")
    logger.info(
        "booking_updated",
        booking_id=booking.id,
        event_id=booking.event_id,
        event_checked=result.event_checked,
    )
    return booking


async def get_booking(db: AsyncSession, booking_id: int) -> Optional[Booking]:
    result = await db.execute(select(Booking).where(Booking.id == booking_id))
    return result.scalar_one_or_none()


async def list_event_bookings(db: AsyncSession, event_id: int) -> list[Booking]:
    """All bookings for an event, oldest first. Served by ix_bookings_event_id."""
    result = await db.execute(
        select(Booking)
        .where(Booking.event_id == event_id)
        .order_by(Booking.created_at.asc(), Booking.id.asc())
    )
    return list(result.scalars().all())


async def find_booking(db: AsyncSession, event_id: int, email: str) -> Optional[Booking]:
    """Look up an attendee's booking for an event. Served by uq_bookings_event_email."""
    result = await db.execute(
        select(Booking).where(
            Booking.event_id == event_id,
            Booking.email == normalize_email(email),
        )
    )
    return result.scalar_one_or_none()


def _validate(operation: str, **fields) -> BookingCreate:
    try:
        return validate_booking(**fields)
    except ValidationError as e:
        record_booking_write(operation, RESULT_LABELS[ValidationError])
        logger.info("booking_rejected", operation=operation, reason="invalid", errors=e.errors)
        raise


async def _reject(db: AsyncSession, operation: str, error: EventbookError) -> None:
    if isinstance(error, DependencyError):
        # The failed check may have left the session's transaction unusable
        await db.rollback()
    record_booking_write(operation, RESULT_LABELS[type(error)])
    logger.warning(
        "booking_rejected",
        operation=operation,
        reason=RESULT_LABELS[type(error)],
        event_id=getattr(error, "event_id", None),
    )
    raise error


async def _commit(db: AsyncSession, operation: str, data: BookingCreate) -> None:
    try:
        await db.commit()
    except IntegrityError as e:
        await db.rollback()
        record_booking_write(operation, RESULT_LABELS[UniquenessError])
        logger.warning("booking_conflict", operation=operation, event_id=data.event_id)
        raise UniquenessError(data.event_id, data.email) from e
