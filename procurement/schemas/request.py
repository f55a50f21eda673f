"""Procurement request API schemas."""

from datetime import datetime
from decimal import Decimal

from pydantic import AwareDatetime, BaseModel, ConfigDict, Field

from procurement.application.dtos.request import (
    ActCommand,
    CreateRequestCommand,
    RequestItemInput,
    UpdateRequestCommand,
)
from procurement.domain.enums import RequestAction, RequestPriority, RequestStatus


class RequestItemCreate(BaseModel):
    """Line item payload; total_price is computed server-side."""

    description: str = Field(..., min_length=1, max_length=500)
    quantity: int = Field(..., gt=0)
    unit_price: Decimal = Field(..., ge=0, max_digits=15, decimal_places=2)
    unit_of_measure: str = Field(default="EA", max_length=20)
    account_code: str | None = Field(default=None, max_length=50)

    def to_input(self) -> RequestItemInput:
        return RequestItemInput(
            description=self.description,
            quantity=self.quantity,
            unit_price=self.unit_price,
            unit_of_measure=self.unit_of_measure,
            account_code=self.account_code,
        )


class RequestCreate(BaseModel):
    """Payload for creating a draft. department_id defaults to the caller's."""

    title: str = Field(..., min_length=1, max_length=255)
    description: str | None = None
    department_id: int | None = None
    items: list[RequestItemCreate] = Field(default_factory=list)
    total_estimated: Decimal | None = Field(default=None, ge=0, max_digits=15, decimal_places=2)
    currency: str | None = Field(default=None, min_length=3, max_length=3)
    priority: RequestPriority = RequestPriority.MEDIUM
    procurement_types: list[str] = Field(default_factory=list)

    def to_command(self) -> CreateRequestCommand:
        return CreateRequestCommand(
            title=self.title,
            description=self.description,
            department_id=self.department_id,
            items=tuple(i.to_input() for i in self.items),
            total_estimated=self.total_estimated,
            currency=self.currency,
            priority=self.priority,
            procurement_types=tuple(self.procurement_types),
        )


class RequestUpdate(BaseModel):
    """Partial update; omitted fields are unchanged. override is admin only."""

    title: str | None = Field(default=None, min_length=1, max_length=255)
    description: str | None = None
    items: list[RequestItemCreate] | None = None
    total_estimated: Decimal | None = Field(default=None, ge=0, max_digits=15, decimal_places=2)
    priority: RequestPriority | None = None
    procurement_types: list[str] | None = None
    override: bool = False

    def to_command(self) -> UpdateRequestCommand:
        return UpdateRequestCommand(
            title=self.title,
            description=self.description,
            items=tuple(i.to_input() for i in self.items) if self.items is not None else None,
            total_estimated=self.total_estimated,
            priority=self.priority,
            procurement_types=(
                tuple(self.procurement_types) if self.procurement_types is not None else None
            ),
            override=self.override,
        )


class RequestActionBody(BaseModel):
    """Approve / reject / return / escalate with an optional comment."""

    action: RequestAction
    comment: str | None = Field(default=None, max_length=2000)

    def to_command(self) -> ActCommand:
        return ActCommand(action=self.action, comment=self.comment)


class AssignBody(BaseModel):
    """Omit user_id to take the request yourself."""

    user_id: int | None = None
    comment: str | None = Field(default=None, max_length=2000)


class RequestItemResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int | None = None
    description: str
    quantity: int
    unit_price: Decimal
    total_price: Decimal
    unit_of_measure: str
    account_code: str | None = None


class StatusHistoryResponse(BaseModel):
    """One entry of the append-only status history."""

    model_config = ConfigDict(from_attributes=True)

    id: int | None = None
    status: RequestStatus
    changed_by_id: int
    comment: str | None = None
    created_at: AwareDatetime


class RequestResponse(BaseModel):
    """Request detail, including items and history."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    reference: str
    title: str
    description: str | None = None
    department_id: int
    requester_id: int
    status: RequestStatus
    total_estimated: Decimal
    currency: str
    priority: RequestPriority
    procurement_types: list[str]
    current_assignee_id: int | None = None
    submitted_at: datetime | None = None
    created_at: datetime | None = None
    updated_at: datetime | None = None
    is_combined: bool
    combined_request_id: int | None = None
    lot_number: int | None = None
    version: int
    items: list[RequestItemResponse]
    history: list[StatusHistoryResponse]


class RequestListItem(BaseModel):
    """Compact request row (combinable list)."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    reference: str
    title: str
    department_id: int
    requester_id: int
    status: RequestStatus
    total_estimated: Decimal
    currency: str
    procurement_types: list[str]
    created_at: datetime | None = None


class SplinteringMatch(BaseModel):
    """Earlier in-flight request counted towards a splintering total."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    reference: str
    requester_id: int
    department_id: int
    status: RequestStatus
    total_estimated: Decimal
    created_at: datetime


class SplinteringResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    flagged: bool
    threshold: Decimal
    window_days: int
    prior_total: Decimal
    combined_total: Decimal
    matches: list[SplinteringMatch]
