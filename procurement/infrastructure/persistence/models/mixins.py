"""SQLAlchemy mixins for common model patterns (DRY).

Provides: IntIdMixin, TimestampMixin, CreatedAtMixin.
Timestamps default in Python (utc_now) so in-transaction values are known
before flush; the server default covers rows written outside the ORM.
"""

from datetime import datetime

from sqlalchemy import DateTime, Integer
from sqlalchemy.orm import Mapped, declared_attr, mapped_column
from sqlalchemy.sql import func

from procurement.shared.utils.datetime import utc_now


class IntIdMixin:
    """Mixin for an autoincrement integer primary key."""

    @declared_attr
    def id(cls) -> Mapped[int]:
        return mapped_column(Integer, primary_key=True, autoincrement=True)


class CreatedAtMixin:
    """Mixin for created_at only (append-only tables)."""

    @declared_attr
    def created_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            default=utc_now,
            server_default=func.now(),
            nullable=False,
        )


class TimestampMixin(CreatedAtMixin):
    """Mixin for created_at and updated_at (timezone-aware)."""

    @declared_attr
    def updated_at(cls) -> Mapped[datetime]:
        return mapped_column(
            DateTime(timezone=True),
            default=utc_now,
            server_default=func.now(),
            onupdate=utc_now,
            nullable=False,
        )
