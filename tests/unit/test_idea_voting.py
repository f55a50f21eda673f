"""Tests for IdeaVotingService (vote counters, idempotent re-votes, committee review)."""

import pytest

from fakes import ADMIN, COMMITTEE, OTHER_REQUESTER, REQUESTER
from procurement.application.dtos.idea import CreateIdeaCommand
from procurement.domain.enums import IdeaStatus, VoteType
from procurement.domain.exceptions import (
    AuthorizationException,
    InvalidStateException,
    ResourceNotFoundException,
    ValidationException,
)


@pytest.fixture
async def idea(idea_service, store):
    return await idea_service.create_idea(
        store.actor(REQUESTER), CreateIdeaCommand(title=" Solar carports ", description="Shade + power")
    )


def _counts(view) -> tuple[int, int, int]:
    return view.idea.vote_count, view.idea.upvote_count, view.idea.downvote_count


async def test_create_idea(idea, store) -> None:
    assert idea.id is not None
    assert idea.title == "Solar carports"
    assert idea.status is IdeaStatus.PENDING_REVIEW
    assert (idea.vote_count, idea.upvote_count, idea.downvote_count) == (0, 0, 0)
    assert idea.id in store.ideas


@pytest.mark.parametrize(("title", "description"), [("", "text"), ("Title", "   ")])
async def test_create_idea_requires_title_and_description(idea_service, store, title, description) -> None:
    with pytest.raises(ValidationException):
        await idea_service.create_idea(
            store.actor(REQUESTER), CreateIdeaCommand(title=title, description=description)
        )


async def test_upvote_then_same_vote_is_noop(idea_service, idea, store) -> None:
    actor = store.actor(OTHER_REQUESTER)
    first = await idea_service.vote(idea.id, actor, VoteType.UPVOTE)
    again = await idea_service.vote(idea.id, actor, VoteType.UPVOTE)
    assert _counts(first) == (1, 1, 0)
    assert _counts(again) == (1, 1, 0)
    assert again.my_vote is VoteType.UPVOTE


async def test_switching_vote_moves_score_by_two(idea_service, idea, store) -> None:
    actor = store.actor(OTHER_REQUESTER)
    await idea_service.vote(idea.id, actor, VoteType.UPVOTE)
    view = await idea_service.vote(idea.id, actor, VoteType.DOWNVOTE)
    assert _counts(view) == (-1, 0, 1)
    assert view.my_vote is VoteType.DOWNVOTE


async def test_votes_from_several_users(idea_service, idea, store) -> None:
    await idea_service.vote(idea.id, store.actor(REQUESTER), VoteType.UPVOTE)
    await idea_service.vote(idea.id, store.actor(OTHER_REQUESTER), VoteType.UPVOTE)
    view = await idea_service.vote(idea.id, store.actor(ADMIN), VoteType.DOWNVOTE)
    assert _counts(view) == (1, 2, 1)


async def test_remove_vote(idea_service, idea, store) -> None:
    actor = store.actor(OTHER_REQUESTER)
    await idea_service.vote(idea.id, actor, VoteType.DOWNVOTE)
    view = await idea_service.remove_vote(idea.id, actor)
    assert _counts(view) == (0, 0, 0)
    assert view.my_vote is None
    assert (idea.id, OTHER_REQUESTER) not in store.votes


async def test_remove_without_vote_is_noop(idea_service, idea, store) -> None:
    view = await idea_service.remove_vote(idea.id, store.actor(ADMIN))
    assert _counts(view) == (0, 0, 0)


async def test_get_idea_reports_callers_vote(idea_service, idea, store) -> None:
    await idea_service.vote(idea.id, store.actor(REQUESTER), VoteType.UPVOTE)
    mine = await idea_service.get_idea(idea.id, store.actor(REQUESTER))
    theirs = await idea_service.get_idea(idea.id, store.actor(OTHER_REQUESTER))
    assert mine.my_vote is VoteType.UPVOTE
    assert theirs.my_vote is None


async def test_vote_on_missing_idea(idea_service, store) -> None:
    with pytest.raises(ResourceNotFoundException):
        await idea_service.vote(404, store.actor(REQUESTER), VoteType.UPVOTE)


# --- review ---


async def test_committee_approves_pending_idea(idea_service, idea, store) -> None:
    await idea_service.vote(idea.id, store.actor(REQUESTER), VoteType.UPVOTE)
    view = await idea_service.review(idea.id, store.actor(COMMITTEE), approve=True, notes=" Pilot it ")
    reviewed = view.idea
    assert reviewed.status is IdeaStatus.APPROVED
    assert reviewed.reviewed_by_id == COMMITTEE
    assert reviewed.reviewed_at is not None
    assert reviewed.review_notes == "Pilot it"
    assert reviewed.vote_count == 1
    assert store.ideas[idea.id].status is IdeaStatus.APPROVED


async def test_admin_rejects_without_notes(idea_service, idea, store) -> None:
    view = await idea_service.review(idea.id, store.actor(ADMIN), approve=False)
    assert view.idea.status is IdeaStatus.REJECTED
    assert view.idea.review_notes is None


async def test_review_requires_committee(idea_service, idea, store) -> None:
    with pytest.raises(AuthorizationException):
        await idea_service.review(idea.id, store.actor(OTHER_REQUESTER), approve=True)
    assert store.ideas[idea.id].status is IdeaStatus.PENDING_REVIEW


async def test_reviewed_idea_cannot_be_reviewed_again(idea_service, idea, store) -> None:
    committee = store.actor(COMMITTEE)
    await idea_service.review(idea.id, committee, approve=False, notes="Out of budget")
    with pytest.raises(InvalidStateException):
        await idea_service.review(idea.id, committee, approve=True)
    stored = store.ideas[idea.id]
    assert stored.status is IdeaStatus.REJECTED
    assert stored.review_notes == "Out of budget"


async def test_review_missing_idea(idea_service, store) -> None:
    with pytest.raises(ResourceNotFoundException):
        await idea_service.review(404, store.actor(COMMITTEE), approve=True)
