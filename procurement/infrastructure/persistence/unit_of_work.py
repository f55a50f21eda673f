"""SQLAlchemy unit of work: the atomic-mutate primitive.

Each atomic() call opens a session, begins a transaction, hands the
operation a scope of repositories bound to that session and commits when
the operation returns. Any exception rolls everything back.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from typing import TypeVar

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from procurement.domain.exceptions import TransactionFailureException
from procurement.infrastructure.persistence.repositories import (
    CombinedRequestRepository,
    DepartmentRepository,
    IdeaRepository,
    RequestRepository,
    UserRepository,
)
from procurement.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

T = TypeVar("T")


class SqlTransactionScope:
    """Repositories sharing one session (implements TransactionScope)."""

    def __init__(self, session: AsyncSession) -> None:
        self.session = session
        self.requests = RequestRepository(session)
        self.combined_requests = CombinedRequestRepository(session)
        self.ideas = IdeaRepository(session)
        self.users = UserRepository(session)
        self.departments = DepartmentRepository(session)


class SqlAlchemyUnitOfWork:
    """Implements IUnitOfWork over an async session factory."""

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def atomic(self, operation: Callable[[SqlTransactionScope], Awaitable[T]]) -> T:
        """Run operation in one transaction.

        Raises:
            TransactionFailureException: The store rejected or aborted the
                transaction (deadlock, serialization failure, constraint
                violation, lost connection). Nothing was committed.
        """
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    return await operation(SqlTransactionScope(session))
        except SQLAlchemyError as e:
            logger.warning("Transaction rolled back: %s", e, exc_info=True)
            raise TransactionFailureException() from e
