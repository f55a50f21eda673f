"""DB dependencies (composition root)."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from sqlalchemy.ext.asyncio import AsyncSession

from procurement.application.interfaces.services import IUnitOfWork
from procurement.infrastructure.persistence.database import get_db, get_session_factory
from procurement.infrastructure.persistence.repositories import UserRepository
from procurement.infrastructure.persistence.unit_of_work import SqlAlchemyUnitOfWork


def get_unit_of_work() -> IUnitOfWork:
    """Unit of work over the process-wide session factory."""
    return SqlAlchemyUnitOfWork(get_session_factory())


async def get_user_repo(
    db: Annotated[AsyncSession, Depends(get_db)],
) -> UserRepository:
    """User repository for identity lookups (read-only session)."""
    return UserRepository(db)
