"""DTOs for request combination."""

from dataclasses import dataclass, field
from datetime import datetime
from typing import Any

from procurement.application.services.threshold_evaluator import ThresholdDecision
from procurement.domain.entities.combined_request import CombinedRequestEntity


@dataclass(frozen=True)
class CombineCommand:
    """combine input; member_request_ids order decides lot numbers."""

    title: str
    member_request_ids: tuple[int, ...]
    description: str | None = None
    config: dict[str, Any] | None = field(default=None, hash=False)


@dataclass(frozen=True)
class CombineResult:
    """Committed combined request plus the threshold decision on its aggregate."""

    combined: CombinedRequestEntity
    threshold_decision: ThresholdDecision


@dataclass(frozen=True)
class CombinedRequestSummary:
    """List row for combined requests (newest first)."""

    id: int
    reference: str
    title: str
    created_by_id: int
    created_at: datetime
    lots_count: int
