"""Procurement request ORM models: request, items, status history, combined request."""

from datetime import datetime
from decimal import Decimal
from typing import Any

from sqlalchemy import (
    Boolean,
    CheckConstraint,
    Connection,
    DateTime,
    ForeignKey,
    Index,
    Integer,
    Numeric,
    String,
    Text,
    UniqueConstraint,
    event,
    text,
)
from sqlalchemy.dialects.postgresql import JSONB
from sqlalchemy.orm import Mapped, Mapper, mapped_column, relationship

from procurement.domain.enums import RequestPriority, RequestStatus
from procurement.infrastructure.persistence.database import Base
from procurement.infrastructure.persistence.models.mixins import (
    CreatedAtMixin,
    IntIdMixin,
    TimestampMixin,
)


def _in_values(column: str, values: list[str]) -> str:
    return f"{column} IN (" + ", ".join(f"'{v}'" for v in values) + ")"


class CombinedRequest(IntIdMixin, TimestampMixin, Base):
    """Multi-lot parent. Table: combined_request. config is stored verbatim."""

    __tablename__ = "combined_request"

    reference: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    title: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    config: Mapped[dict[str, Any] | None] = mapped_column(JSONB, nullable=True)
    created_by_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("app_user.id", ondelete="RESTRICT"), nullable=False, index=True
    )

    lots: Mapped[list["Request"]] = relationship(
        back_populates="combined_request",
        lazy="selectin",
        order_by="Request.lot_number",
    )


class Request(IntIdMixin, TimestampMixin, Base):
    """Procurement request. Table: request.

    version is bumped on every status change. A lot has is_combined set,
    a combined_request_id and a lot_number unique within its parent.
    """

    __tablename__ = "request"

    reference: Mapped[str] = mapped_column(String(32), nullable=False, unique=True)
    title: Mapped[str] = mapped_column(String, nullable=False)
    description: Mapped[str | None] = mapped_column(Text, nullable=True)
    department_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("department.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    requester_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("app_user.id", ondelete="RESTRICT"), nullable=False, index=True
    )
    current_assignee_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("app_user.id", ondelete="SET NULL"), nullable=True, index=True
    )
    status: Mapped[str] = mapped_column(
        String(32), nullable=False, default=RequestStatus.DRAFT.value, index=True
    )
    total_estimated: Mapped[Decimal] = mapped_column(
        Numeric(14, 2), nullable=False, server_default=text("0")
    )
    currency: Mapped[str] = mapped_column(String(3), nullable=False, server_default=text("'JMD'"))
    priority: Mapped[str] = mapped_column(
        String(16), nullable=False, default=RequestPriority.MEDIUM.value
    )
    procurement_types: Mapped[list[str]] = mapped_column(
        JSONB, nullable=False, server_default=text("'[]'::jsonb"), default=list
    )
    submitted_at: Mapped[datetime | None] = mapped_column(DateTime(timezone=True), nullable=True)
    is_combined: Mapped[bool] = mapped_column(
        Boolean, nullable=False, server_default=text("false"), default=False
    )
    combined_request_id: Mapped[int | None] = mapped_column(
        Integer, ForeignKey("combined_request.id", ondelete="SET NULL"), nullable=True, index=True
    )
    lot_number: Mapped[int | None] = mapped_column(Integer, nullable=True)
    version: Mapped[int] = mapped_column(Integer, nullable=False, default=1)

    items: Mapped[list["RequestItem"]] = relationship(
        back_populates="request",
        lazy="selectin",
        cascade="all, delete-orphan",
        order_by="RequestItem.position",
    )
    history: Mapped[list["RequestStatusHistory"]] = relationship(
        back_populates="request",
        lazy="selectin",
        order_by="RequestStatusHistory.id",
    )
    combined_request: Mapped[CombinedRequest | None] = relationship(back_populates="lots", lazy="raise")

    __table_args__ = (
        CheckConstraint(_in_values("status", RequestStatus.values()), name="ck_request_status"),
        CheckConstraint(_in_values("priority", RequestPriority.values()), name="ck_request_priority"),
        CheckConstraint("total_estimated >= 0", name="ck_request_total_non_negative"),
        CheckConstraint("lot_number IS NULL OR lot_number > 0", name="ck_request_lot_positive"),
        UniqueConstraint("combined_request_id", "lot_number", name="uq_request_lot_number"),
        Index("ix_request_created_at", "created_at"),
    )


class RequestItem(IntIdMixin, Base):
    """Line item. Table: request_item. total_price is written from quantity * unit_price."""

    __tablename__ = "request_item"

    request_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("request.id", ondelete="CASCADE"), nullable=False, index=True
    )
    position: Mapped[int] = mapped_column(Integer, nullable=False)
    description: Mapped[str] = mapped_column(Text, nullable=False)
    quantity: Mapped[int] = mapped_column(Integer, nullable=False)
    unit_price: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    total_price: Mapped[Decimal] = mapped_column(Numeric(14, 2), nullable=False)
    unit_of_measure: Mapped[str] = mapped_column(String(32), nullable=False)
    account_code: Mapped[str | None] = mapped_column(String(64), nullable=True)

    request: Mapped[Request] = relationship(back_populates="items")

    __table_args__ = (
        CheckConstraint("quantity > 0", name="ck_request_item_quantity_positive"),
        CheckConstraint("unit_price >= 0", name="ck_request_item_unit_price_non_negative"),
    )


class RequestStatusHistory(IntIdMixin, CreatedAtMixin, Base):
    """Status change entry. Table: request_status_history. Append-only."""

    __tablename__ = "request_status_history"

    request_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("request.id", ondelete="CASCADE"), nullable=False, index=True
    )
    status: Mapped[str] = mapped_column(String(32), nullable=False)
    changed_by_id: Mapped[int] = mapped_column(
        Integer, ForeignKey("app_user.id", ondelete="RESTRICT"), nullable=False
    )
    comment: Mapped[str | None] = mapped_column(Text, nullable=True)

    request: Mapped[Request] = relationship(back_populates="history")

    __table_args__ = (
        CheckConstraint(
            _in_values("status", RequestStatus.values()), name="ck_request_status_history_status"
        ),
    )


class ReferenceSequence(Base):
    """Per-(prefix, period) counter for human-readable references."""

    __tablename__ = "reference_sequence"

    prefix: Mapped[str] = mapped_column(String(8), primary_key=True)
    period: Mapped[str] = mapped_column(String(8), primary_key=True)
    last_value: Mapped[int] = mapped_column(Integer, nullable=False)


@event.listens_for(RequestStatusHistory, "before_update")
def _prevent_history_updates(
    _mapper: Mapper[Any], _connection: Connection, _target: RequestStatusHistory
) -> None:
    """Status history is append-only; updates are forbidden."""
    raise ValueError("Status history entries are immutable and cannot be updated.")


@event.listens_for(RequestStatusHistory, "before_delete")
def _prevent_history_deletes(
    _mapper: Mapper[Any], _connection: Connection, _target: RequestStatusHistory
) -> None:
    raise ValueError("Status history entries cannot be deleted.")
