"""Combination use cases."""

from procurement.application.use_cases.combination.combine_requests import (
    ELIGIBLE_STATUSES,
    CombinationService,
    is_combinable,
)

__all__ = ["ELIGIBLE_STATUSES", "CombinationService", "is_combinable"]
