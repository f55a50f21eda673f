"""Domain entities and aggregates.

Pure domain models; no ORM or persistence concerns.
"""

from procurement.domain.entities.combined_request import CombinedRequestEntity
from procurement.domain.entities.idea import IdeaEntity, VoteDelta, compute_vote_delta, removal_delta
from procurement.domain.entities.request import (
    RequestEntity,
    RequestItem,
    StatusHistoryEntry,
    to_money,
)

__all__ = [
    "CombinedRequestEntity",
    "IdeaEntity",
    "RequestEntity",
    "RequestItem",
    "StatusHistoryEntry",
    "VoteDelta",
    "compute_vote_delta",
    "removal_delta",
    "to_money",
]
