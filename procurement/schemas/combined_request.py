"""Combined request API schemas."""

from datetime import datetime
from decimal import Decimal
from typing import Any

from pydantic import BaseModel, ConfigDict, Field

from procurement.application.dtos.combined_request import CombineCommand, CombineResult
from procurement.domain.enums import ThresholdCategory
from procurement.schemas.request import RequestResponse


class CombineBody(BaseModel):
    """request_ids order decides lot numbers (LOT-1 first)."""

    title: str = Field(..., max_length=255)
    request_ids: list[int]
    description: str | None = None
    config: dict[str, Any] | None = None

    def to_command(self) -> CombineCommand:
        return CombineCommand(
            title=self.title,
            member_request_ids=tuple(self.request_ids),
            description=self.description,
            config=self.config,
        )


class ThresholdDecisionResponse(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    requires_executive_approval: bool
    threshold_amount: Decimal
    category: ThresholdCategory
    reason: str


class CombinedRequestResponse(BaseModel):
    """Combined request with its lots in lot order."""

    model_config = ConfigDict(from_attributes=True)

    id: int
    reference: str
    title: str
    description: str | None = None
    created_by_id: int
    config: dict[str, Any] | None = None
    created_at: datetime | None = None
    lots_count: int
    total_value: Decimal
    total_items: int
    lots: list[RequestResponse]

    @classmethod
    def from_entity(cls, combined: Any) -> "CombinedRequestResponse":
        response = cls.model_validate(combined)
        response.lots = [RequestResponse.model_validate(lot) for lot in combined.ordered_lots()]
        return response


class CombineResponse(BaseModel):
    combined_request: CombinedRequestResponse
    threshold: ThresholdDecisionResponse

    @classmethod
    def from_result(cls, result: CombineResult) -> "CombineResponse":
        return cls(
            combined_request=CombinedRequestResponse.from_entity(result.combined),
            threshold=ThresholdDecisionResponse.model_validate(result.threshold_decision),
        )


class CombinedRequestListItem(BaseModel):
    model_config = ConfigDict(from_attributes=True)

    id: int
    reference: str
    title: str
    created_by_id: int
    created_at: datetime
    lots_count: int
