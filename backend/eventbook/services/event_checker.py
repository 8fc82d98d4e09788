"""
SQL-backed event existence check.
"""

from sqlalchemy import exists, select
from sqlalchemy.ext.asyncio import AsyncSession

from eventbook.models.event import Event
from eventbook.services.interfaces.event_checker import EventExistenceChecker


class SqlEventExistenceChecker(EventExistenceChecker):

    def __init__(self, db: AsyncSession):
        self.db = db

    async def exists(self, event_id: int) -> bool:
        result = await self.db.execute(select(exists().where(Event.id == event_id)))
        return bool(result.scalar())
