"""DTOs for innovation ideas and votes."""

from dataclasses import dataclass

from procurement.domain.entities.idea import IdeaEntity
from procurement.domain.enums import VoteType


@dataclass(frozen=True)
class CreateIdeaCommand:
    title: str
    description: str


@dataclass(frozen=True)
class IdeaView:
    """Idea with the caller's current vote (None when not voted)."""

    idea: IdeaEntity
    my_vote: VoteType | None
