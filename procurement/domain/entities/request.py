"""Procurement request domain entity.

Represents a request, its line items and its append-only status history,
independent of persistence. Status changes go through RequestStateMachine;
the entity only records them.
"""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import ROUND_HALF_UP, Decimal

from procurement.domain.enums import RequestPriority, RequestStatus
from procurement.domain.exceptions import ValidationException

_CENT = Decimal("0.01")


def to_money(value: Decimal | int | str) -> Decimal:
    """Quantize an amount to two decimal places."""
    return Decimal(value).quantize(_CENT, rounding=ROUND_HALF_UP)


@dataclass
class RequestItem:
    """Line item; total_price is always derived from quantity and unit_price."""

    description: str
    quantity: int
    unit_price: Decimal
    unit_of_measure: str = "EA"
    account_code: str | None = None
    id: int | None = None

    def __post_init__(self) -> None:
        if not self.description or not self.description.strip():
            raise ValidationException("Item description is required", field="description")
        if self.quantity <= 0:
            raise ValidationException("Item quantity must be greater than zero", field="quantity")
        self.unit_price = to_money(self.unit_price)
        if self.unit_price < 0:
            raise ValidationException("Item unit price must not be negative", field="unit_price")

    @property
    def total_price(self) -> Decimal:
        return to_money(self.unit_price * self.quantity)


@dataclass(frozen=True)
class StatusHistoryEntry:
    """One status change (or same-status annotation such as a delegation)."""

    status: RequestStatus
    changed_by_id: int
    comment: str | None
    created_at: datetime
    id: int | None = None


@dataclass
class RequestEntity:
    """Domain entity for a procurement request.

    Entries in history with id None are pending; the repository inserts
    them on save and never rewrites persisted entries.
    """

    id: int | None
    reference: str
    title: str
    description: str | None
    department_id: int
    requester_id: int
    status: RequestStatus = RequestStatus.DRAFT
    total_estimated: Decimal = Decimal("0.00")
    currency: str = "JMD"
    priority: RequestPriority = RequestPriority.MEDIUM
    procurement_types: list[str] = field(default_factory=list)
    items: list[RequestItem] = field(default_factory=list)
    history: list[StatusHistoryEntry] = field(default_factory=list)
    current_assignee_id: int | None = None
    submitted_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    is_combined: bool = False
    combined_request_id: int | None = None
    lot_number: int | None = None
    version: int = 1

    @property
    def is_terminal(self) -> bool:
        return self.status.is_terminal()

    @property
    def is_lot(self) -> bool:
        return self.is_combined and self.combined_request_id is not None

    def replace_items(self, items: list[RequestItem]) -> None:
        """Replace the line items and recompute the estimate."""
        self.items = list(items)
        self.recalculate_total()

    def recalculate_total(self) -> None:
        """Keep total_estimated equal to the item sum whenever items are present."""
        if self.items:
            self.total_estimated = to_money(sum((i.total_price for i in self.items), Decimal("0")))
        else:
            self.total_estimated = to_money(self.total_estimated)

    def record_status(
        self,
        status: RequestStatus,
        changed_by_id: int,
        at: datetime,
        comment: str | None = None,
    ) -> StatusHistoryEntry:
        """Move to status, bump version and append a history entry."""
        self.status = status
        self.version += 1
        self.updated_at = at
        entry = StatusHistoryEntry(
            status=status,
            changed_by_id=changed_by_id,
            comment=comment,
            created_at=at,
        )
        self.history.append(entry)
        return entry

    def annotate(self, changed_by_id: int, at: datetime, comment: str) -> StatusHistoryEntry:
        """Append a history entry that keeps the current status (e.g. delegation)."""
        self.updated_at = at
        entry = StatusHistoryEntry(
            status=self.status,
            changed_by_id=changed_by_id,
            comment=comment,
            created_at=at,
        )
        self.history.append(entry)
        return entry

    def pending_history(self) -> list[StatusHistoryEntry]:
        return [e for e in self.history if e.id is None]
