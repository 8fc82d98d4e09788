"""
Event existence interface.
Lets the booking write path verify event references without importing
the events side of the application.
"""

from abc import ABC, abstractmethod


class EventExistenceChecker(ABC):
    """
    Answers whether an event id currently exists.

    Implementations:
    - SqlEventExistenceChecker: EXISTS query against the events table
    """

    @abstractmethod
    async def exists(self, event_id: int) -> bool:
        """
        Args:
            event_id: Event referenced by a booking

        Returns:
            True if the event exists, False otherwise.
            Storage failures propagate as exceptions.
        """
        pass
