"""Innovation idea entity and the vote counter arithmetic."""

from dataclasses import dataclass
from datetime import datetime

from procurement.domain.enums import IdeaStatus, VoteType
from procurement.domain.exceptions import InvalidStateException, ValidationException


@dataclass(frozen=True)
class VoteDelta:
    """Change applied to (vote_count, upvote_count, downvote_count)."""

    score: int = 0
    upvotes: int = 0
    downvotes: int = 0

    @property
    def is_noop(self) -> bool:
        return self.score == 0 and self.upvotes == 0 and self.downvotes == 0


_NO_CHANGE = VoteDelta()

_CAST: dict[tuple[VoteType | None, VoteType], VoteDelta] = {
    (None, VoteType.UPVOTE): VoteDelta(1, 1, 0),
    (None, VoteType.DOWNVOTE): VoteDelta(-1, 0, 1),
    (VoteType.UPVOTE, VoteType.DOWNVOTE): VoteDelta(-2, -1, 1),
    (VoteType.DOWNVOTE, VoteType.UPVOTE): VoteDelta(2, 1, -1),
    (VoteType.UPVOTE, VoteType.UPVOTE): _NO_CHANGE,
    (VoteType.DOWNVOTE, VoteType.DOWNVOTE): _NO_CHANGE,
}

_REMOVE: dict[VoteType, VoteDelta] = {
    VoteType.UPVOTE: VoteDelta(-1, -1, 0),
    VoteType.DOWNVOTE: VoteDelta(1, 0, -1),
}


def compute_vote_delta(previous: VoteType | None, new: VoteType) -> VoteDelta:
    """Return the counter change for casting new over an optional previous vote."""
    return _CAST[(previous, new)]


def removal_delta(previous: VoteType | None) -> VoteDelta:
    """Return the counter change for withdrawing a vote; no vote is a no-op."""
    if previous is None:
        return _NO_CHANGE
    return _REMOVE[previous]


@dataclass
class IdeaEntity:
    """Idea with denormalized counters. vote_count == upvote_count - downvote_count."""

    id: int | None
    title: str
    description: str
    submitted_by_id: int
    status: IdeaStatus = IdeaStatus.PENDING_REVIEW
    vote_count: int = 0
    upvote_count: int = 0
    downvote_count: int = 0
    created_at: datetime | None = None
    reviewed_by_id: int | None = None
    reviewed_at: datetime | None = None
    review_notes: str | None = None

    def apply(self, delta: VoteDelta) -> None:
        self.vote_count += delta.score
        self.upvote_count += delta.upvotes
        self.downvote_count += delta.downvotes

    def record_review(
        self, decision: IdeaStatus, reviewer_id: int, at: datetime, notes: str | None = None
    ) -> None:
        """Move a pending idea to APPROVED or REJECTED.

        Raises:
            ValidationException: decision is not APPROVED or REJECTED.
            InvalidStateException: The idea was already reviewed.
        """
        if decision not in (IdeaStatus.APPROVED, IdeaStatus.REJECTED):
            raise ValidationException(
                f"Review decision must be APPROVED or REJECTED, got {decision.value}",
                field="status",
            )
        if self.status is not IdeaStatus.PENDING_REVIEW:
            raise InvalidStateException(
                f"Only ideas pending review can be reviewed; idea is {self.status.value}",
                self.status.value,
            )
        self.status = decision
        self.reviewed_by_id = reviewer_id
        self.reviewed_at = at
        self.review_notes = notes.strip() if notes and notes.strip() else None
