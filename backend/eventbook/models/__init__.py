from eventbook.models.event import Event
from eventbook.models.booking import Booking

__all__ = ["Event", "Booking"]
