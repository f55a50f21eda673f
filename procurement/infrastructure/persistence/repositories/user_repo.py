"""User and department lookups. Interface methods return application DTOs."""

from __future__ import annotations

from collections.abc import Iterable

from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from procurement.application.dtos.request import DepartmentResult, UserResult
from procurement.domain.enums import RoleCode
from procurement.infrastructure.persistence.models.organization import Department, User, UserRole
from procurement.infrastructure.persistence.repositories.base import BaseRepository


def _user_to_result(u: User) -> UserResult:
    """Map ORM User (roles loaded) to UserResult."""
    return UserResult(
        id=u.id,
        email=u.email,
        name=u.name,
        department_id=u.department_id,
        is_active=u.is_active,
        role_codes=tuple(sorted(r.role_code for r in u.roles)),
    )


class UserRepository(BaseRepository[User]):
    """Implements IUserRepository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, User)

    async def get(self, user_id: int) -> UserResult | None:
        row = await self.get_by_id(user_id)
        return _user_to_result(row) if row else None

    async def list_active_with_roles(self, role_codes: Iterable[RoleCode]) -> list[UserResult]:
        codes = [c.value for c in role_codes]
        if not codes:
            return []
        stmt = (
            select(User)
            .join(UserRole, UserRole.user_id == User.id)
            .where(User.is_active.is_(True), UserRole.role_code.in_(codes))
            .distinct()
            .order_by(User.id)
        )
        rows = (await self.db.execute(stmt)).scalars().all()
        return [_user_to_result(u) for u in rows]


class DepartmentRepository(BaseRepository[Department]):
    """Implements IDepartmentRepository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Department)

    async def get(self, department_id: int) -> DepartmentResult | None:
        row = await self.get_by_id(department_id)
        if row is None:
            return None
        return DepartmentResult(id=row.id, code=row.code, name=row.name)
