"""Department, user and role ORM models."""

from sqlalchemy import Boolean, CheckConstraint, ForeignKey, Integer, String, UniqueConstraint, text
from sqlalchemy.orm import Mapped, mapped_column, relationship

from procurement.domain.enums import RoleCode
from procurement.infrastructure.persistence.database import Base
from procurement.infrastructure.persistence.models.mixins import IntIdMixin, TimestampMixin


class Department(IntIdMixin, TimestampMixin, Base):
    """Department. Table: department. Unique code."""

    __tablename__ = "department"

    code: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String, nullable=False)


class User(IntIdMixin, TimestampMixin, Base):
    """User model. Table: app_user. Unique email."""

    __tablename__ = "app_user"

    email: Mapped[str] = mapped_column(String, nullable=False, unique=True)
    name: Mapped[str] = mapped_column(String, nullable=False)
    department_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("department.id", ondelete="SET NULL"), nullable=True, index=True
    )
    is_active: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("true"), default=True
    )

    roles: Mapped[list["UserRole"]] = relationship(
        back_populates="user", lazy="selectin", cascade="all, delete-orphan"
    )


class UserRole(IntIdMixin, Base):
    """Role code held by a user. Table: user_role. Unique (user_id, role_code)."""

    __tablename__ = "user_role"

    user_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("app_user.id", ondelete="CASCADE"), nullable=False, index=True
    )
    role_code: Mapped[str] = mapped_column(String(32), nullable=False)

    user: Mapped[User] = relationship(back_populates="roles")

    __table_args__ = (
        UniqueConstraint("user_id", "role_code", name="uq_user_role"),
        CheckConstraint(
            "role_code IN (" + ", ".join(f"'{v}'" for v in RoleCode.values()) + ")",
            name="ck_user_role_code",
        ),
    )
