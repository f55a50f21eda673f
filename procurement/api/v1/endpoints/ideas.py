"""Innovation ideas: submission, voting and committee review."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from procurement.api.v1.dependencies import get_current_actor, get_idea_service
from procurement.application.dtos import IdeaView
from procurement.application.use_cases import IdeaVotingService
from procurement.core.limiter import limit_votes, limit_writes
from procurement.domain.value_objects import Actor
from procurement.schemas.idea import IdeaCreate, IdeaResponse, ReviewBody, VoteBody

router = APIRouter()


@router.post("", response_model=IdeaResponse, status_code=201)
@limit_writes
async def create_idea(
    request: Request,
    body: IdeaCreate,
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[IdeaVotingService, Depends(get_idea_service)],
):
    idea = await service.create_idea(actor, body.to_command())
    return IdeaResponse.from_view(IdeaView(idea=idea, my_vote=None))


@router.get("/{idea_id}", response_model=IdeaResponse)
async def get_idea(
    idea_id: int,
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[IdeaVotingService, Depends(get_idea_service)],
):
    return IdeaResponse.from_view(await service.get_idea(idea_id, actor))


@router.post("/{idea_id}/vote", response_model=IdeaResponse)
@limit_votes
async def vote_on_idea(
    request: Request,
    idea_id: int,
    body: VoteBody,
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[IdeaVotingService, Depends(get_idea_service)],
):
    """Cast or change the caller's vote. Repeating the same vote changes nothing."""
    return IdeaResponse.from_view(await service.vote(idea_id, actor, body.vote_type))


@router.delete("/{idea_id}/vote", response_model=IdeaResponse)
@limit_votes
async def remove_idea_vote(
    request: Request,
    idea_id: int,
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[IdeaVotingService, Depends(get_idea_service)],
):
    """Withdraw the caller's vote; a no-op when there is none."""
    return IdeaResponse.from_view(await service.remove_vote(idea_id, actor))


@router.post("/{idea_id}/approve", response_model=IdeaResponse)
@limit_writes
async def approve_idea(
    request: Request,
    idea_id: int,
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[IdeaVotingService, Depends(get_idea_service)],
    body: ReviewBody | None = None,
):
    """Committee approval of a pending idea."""
    notes = body.notes if body else None
    return IdeaResponse.from_view(await service.review(idea_id, actor, approve=True, notes=notes))


@router.post("/{idea_id}/reject", response_model=IdeaResponse)
@limit_writes
async def reject_idea(
    request: Request,
    idea_id: int,
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[IdeaVotingService, Depends(get_idea_service)],
    body: ReviewBody | None = None,
):
    """Committee rejection of a pending idea."""
    notes = body.notes if body else None
    return IdeaResponse.from_view(await service.review(idea_id, actor, approve=False, notes=notes))
