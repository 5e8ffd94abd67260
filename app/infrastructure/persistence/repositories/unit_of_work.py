"""Unit of work over an AsyncSession: savepoints for per-item isolation in batch jobs."""

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession, AsyncSessionTransaction


class SqlAlchemyUnitOfWork:
    """IUnitOfWork. The outer transaction belongs to the caller (request or script)."""

    def __init__(self, db: AsyncSession) -> None:
        self.db = db

    @asynccontextmanager
    async def savepoint(self) -> AsyncIterator[AsyncSessionTransaction]:
        """SAVEPOINT; released on success, rolled back alone if the block raises."""
        async with self.db.begin_nested() as nested:
            yield nested
