from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy.ext.asyncio import AsyncSession

from app.application.interfaces.transaction_manager import TransactionManager


class SQLAlchemyTransactionManager(TransactionManager):
    """Commits the mutation on exit; rolls back when the block raises."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    @asynccontextmanager
    async def start(self) -> AsyncIterator[None]:
        if self._session.in_transaction():
            # Join the caller's transaction; it owns commit/rollback
            yield
            return
        async with self._session.begin():
            yield
