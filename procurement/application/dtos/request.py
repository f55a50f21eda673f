"""DTOs for procurement requests and their supporting read models."""

from dataclasses import dataclass, field
from datetime import datetime
from decimal import Decimal

from procurement.domain.enums import RequestAction, RequestPriority, RequestStatus


@dataclass(frozen=True)
class RequestItemInput:
    """Line item as supplied by the caller (total is always computed)."""

    description: str
    quantity: int
    unit_price: Decimal
    unit_of_measure: str = "EA"
    account_code: str | None = None


@dataclass(frozen=True)
class CreateRequestCommand:
    """createDraft input. department_id defaults to the actor's department."""

    title: str
    description: str | None = None
    department_id: int | None = None
    items: tuple[RequestItemInput, ...] = ()
    total_estimated: Decimal | None = None
    currency: str | None = None
    priority: RequestPriority = RequestPriority.MEDIUM
    procurement_types: tuple[str, ...] = ()


@dataclass(frozen=True)
class UpdateRequestCommand:
    """updateDraft input; None means unchanged. override requires admin."""

    title: str | None = None
    description: str | None = None
    items: tuple[RequestItemInput, ...] | None = None
    total_estimated: Decimal | None = None
    priority: RequestPriority | None = None
    procurement_types: tuple[str, ...] | None = None
    override: bool = False

    def changed_fields(self) -> list[str]:
        names = ["title", "description", "items", "total_estimated", "priority", "procurement_types"]
        return [n for n in names if getattr(self, n) is not None]


@dataclass(frozen=True)
class ActCommand:
    action: RequestAction
    comment: str | None = None


@dataclass(frozen=True)
class UserResult:
    """User read-model with its role codes."""

    id: int
    email: str
    name: str
    department_id: int | None
    is_active: bool
    role_codes: tuple[str, ...] = field(default_factory=tuple)


@dataclass(frozen=True)
class DepartmentResult:
    id: int
    code: str
    name: str


@dataclass(frozen=True)
class SpendRecord:
    """Earlier in-flight request counted by the splintering check."""

    id: int
    reference: str
    requester_id: int
    department_id: int
    status: RequestStatus
    total_estimated: Decimal
    created_at: datetime
