"""
Booking model: one reservation of one attendee email for one event.

Key design decisions:
- Unique constraint on (event_id, email) allows one booking per attendee per event
- Index on event_id serves "list bookings for an event"; the unique
  constraint's index serves "find this attendee's booking for this event"
- event_id carries no foreign key; existence is checked on the write path
  (see services.booking_service.check_booking_write)
- email is stored already trimmed and lowercased
"""

from sqlalchemy import Column, Integer, String, UniqueConstraint, Index

from eventbook.db.base import Base, TimestampMixin

EMAIL_MAX_LENGTH = 320


class Booking(Base, TimestampMixin):
    __tablename__ = "bookings"

    id = Column(Integer, primary_key=True)
    event_id = Column(Integer, nullable=False)
    email = Column(String(EMAIL_MAX_LENGTH), nullable=False)

    __table_args__ = (
        Index("ix_bookings_event_id", "event_id"),
        UniqueConstraint("event_id", "email", name="uq_bookings_event_email"),
    )

    def __repr__(self) -> str:
        return f"<Booking(id={self.id}, event={self.event_id}, email={self.email})>"
