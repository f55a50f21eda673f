"""Innovation idea API schemas."""

from datetime import datetime

from pydantic import BaseModel, Field

from procurement.application.dtos.idea import CreateIdeaCommand, IdeaView
from procurement.domain.enums import IdeaStatus, VoteType


class IdeaCreate(BaseModel):
    title: str = Field(..., min_length=1, max_length=255)
    description: str = Field(..., min_length=1)

    def to_command(self) -> CreateIdeaCommand:
        return CreateIdeaCommand(title=self.title, description=self.description)


class VoteBody(BaseModel):
    vote_type: VoteType


class ReviewBody(BaseModel):
    """Optional committee notes for an approve or reject decision."""

    notes: str | None = Field(None, max_length=2000)


class IdeaResponse(BaseModel):
    """Idea with counters and the caller's own vote."""

    id: int
    title: str
    description: str
    submitted_by_id: int
    status: IdeaStatus
    vote_count: int
    upvote_count: int
    downvote_count: int
    created_at: datetime | None = None
    reviewed_by_id: int | None = None
    reviewed_at: datetime | None = None
    review_notes: str | None = None
    my_vote: VoteType | None = None

    @classmethod
    def from_view(cls, view: IdeaView) -> "IdeaResponse":
        idea = view.idea
        return cls(
            id=idea.id,
            title=idea.title,
            description=idea.description,
            submitted_by_id=idea.submitted_by_id,
            status=idea.status,
            vote_count=idea.vote_count,
            upvote_count=idea.upvote_count,
            downvote_count=idea.downvote_count,
            created_at=idea.created_at,
            reviewed_by_id=idea.reviewed_by_id,
            reviewed_at=idea.reviewed_at,
            review_notes=idea.review_notes,
            my_vote=view.my_vote,
        )
