"""Seed a development database with departments and one user per role.

Creates the departments and users below when missing (matched by code and
email), then prints a bearer token for each user so the API can be tried
without a login service.

Usage:
    python -m scripts.seed_dev_data

Requires: DATABASE_URL and SECRET_KEY (environment or .env), migrated schema
(alembic upgrade head).
"""

from __future__ import annotations

import asyncio
import sys
from pathlib import Path

from dotenv import load_dotenv
from sqlalchemy import select
from sqlalchemy.ext.asyncio import AsyncSession

from procurement.domain.enums import RoleCode
from procurement.infrastructure.persistence.database import dispose_engine, get_session_factory
from procurement.infrastructure.persistence.models import Department, User, UserRole
from procurement.infrastructure.security.jwt import create_access_token

DEPARTMENTS: list[tuple[str, str]] = [
    ("IT", "Information Technology"),
    ("FIN", "Finance"),
    ("OPS", "Operations"),
]

# (email, name, department code or None, role codes)
USERS: list[tuple[str, str, str | None, tuple[RoleCode, ...]]] = [
    ("requester@dev.local", "Rita Requester", "IT", (RoleCode.REQUESTER,)),
    ("ops.requester@dev.local", "Omar Operations", "OPS", (RoleCode.REQUESTER,)),
    ("dept.head@dev.local", "Dana Head", "IT", (RoleCode.DEPARTMENT_HEAD,)),
    ("division.head@dev.local", "Hugo Division", "IT", (RoleCode.HEAD_OF_DIVISION,)),
    ("executive@dev.local", "Eve Executive", None, (RoleCode.EXECUTIVE_DIRECTOR,)),
    ("procurement@dev.local", "Pat Officer", None, (RoleCode.PROCUREMENT_OFFICER,)),
    ("procurement.manager@dev.local", "Max Manager", None, (RoleCode.PROCUREMENT_MANAGER,)),
    ("finance@dev.local", "Fay Finance", "FIN", (RoleCode.FINANCE_OFFICER,)),
    ("finance.manager@dev.local", "Fred Finance", "FIN", (RoleCode.FINANCE_MANAGER,)),
    ("budget@dev.local", "Bea Budget", "FIN", (RoleCode.BUDGET_MANAGER,)),
    ("innovation@dev.local", "Ivy Innovation", None, (RoleCode.INNOVATION_COMMITTEE,)),
    ("admin@dev.local", "Ada Admin", None, (RoleCode.ADMIN,)),
]


def _load_env() -> None:
    """Load .env from project root so get_settings() sees DATABASE_URL when run as script."""
    load_dotenv(Path(__file__).resolve().parent.parent / ".env", override=True)


async def _get_or_create_department(session: AsyncSession, code: str, name: str) -> Department:
    found = (await session.execute(select(Department).where(Department.code == code))).scalar_one_or_none()
    if found:
        return found
    department = Department(code=code, name=name)
    session.add(department)
    await session.flush()
    print(f"  department {code} -> id {department.id}")
    return department


async def _get_or_create_user(
    session: AsyncSession,
    email: str,
    name: str,
    department_id: int | None,
    roles: tuple[RoleCode, ...],
) -> User:
    found = (await session.execute(select(User).where(User.email == email))).scalar_one_or_none()
    if found:
        return found
    user = User(email=email, name=name, department_id=department_id)
    user.roles = [UserRole(role_code=r.value) for r in roles]
    session.add(user)
    await session.flush()
    print(f"  user {email} ({', '.join(r.value for r in roles)}) -> id {user.id}")
    return user


async def seed() -> list[tuple[str, int]]:
    factory = get_session_factory()
    seeded: list[tuple[str, int]] = []
    async with factory() as session:
        async with session.begin():
            departments = {
                code: await _get_or_create_department(session, code, name)
                for code, name in DEPARTMENTS
            }
            for email, name, dept_code, roles in USERS:
                department_id = departments[dept_code].id if dept_code else None
                user = await _get_or_create_user(session, email, name, department_id, roles)
                seeded.append((email, user.id))
    return seeded


async def main() -> None:
    _load_env()
    print("Seeding departments and users...")
    try:
        seeded = await seed()
    finally:
        await dispose_engine()
    print("\nBearer tokens:")
    for email, user_id in seeded:
        print(f"{email:32} {create_access_token(user_id)}")


if __name__ == "__main__":
    try:
        asyncio.run(main())
    except KeyboardInterrupt:
        sys.exit(130)
