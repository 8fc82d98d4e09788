"""
Event model. Owned by the events side of the application; bookings only
ever ask whether a given id exists.
"""

from sqlalchemy import Column, Integer, String

from eventbook.db.base import Base, TimestampMixin


class Event(Base, TimestampMixin):
    __tablename__ = "events"

    id = Column(Integer, primary_key=True)
    title = Column(String(255), nullable=False)

    def __repr__(self) -> str:
        return f"<Event(id={self.id}, title={self.title})>"
