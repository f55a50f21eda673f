"""Idea creation, voting and committee review.

Votes run in one transaction with the idea row locked; counter changes
come from compute_vote_delta and are applied as store-side increments.
A review moves a pending idea to APPROVED or REJECTED exactly once.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime

from procurement.application.dtos.idea import CreateIdeaCommand, IdeaView
from procurement.application.interfaces.services import IUnitOfWork, TransactionScope
from procurement.domain.entities.idea import IdeaEntity, compute_vote_delta, removal_delta
from procurement.domain.enums import Capability, IdeaStatus, VoteType
from procurement.domain.exceptions import (
    AuthorizationException,
    ResourceNotFoundException,
    ValidationException,
)
from procurement.domain.value_objects.core import Actor
from procurement.shared.telemetry.logging import get_logger
from procurement.shared.telemetry.tracing import traced
from procurement.shared.utils.datetime import utc_now

logger = get_logger(__name__)


class IdeaVotingService:
    """create_idea, get_idea, vote, remove_vote and review."""

    def __init__(
        self,
        uow: IUnitOfWork,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow = uow
        self._clock = clock

    @staticmethod
    async def _load_locked(scope: TransactionScope, idea_id: int) -> IdeaEntity:
        idea = await scope.ideas.get_for_update(idea_id)
        if idea is None:
            raise ResourceNotFoundException("idea", idea_id)
        return idea

    async def create_idea(self, actor: Actor, command: CreateIdeaCommand) -> IdeaEntity:
        title = (command.title or "").strip()
        description = (command.description or "").strip()
        if not title:
            raise ValidationException("Title is required", field="title")
        if not description:
            raise ValidationException("Description is required", field="description")
        now = self._clock()

        async def operation(scope: TransactionScope) -> IdeaEntity:
            return await scope.ideas.add(
                IdeaEntity(
                    id=None,
                    title=title,
                    description=description,
                    submitted_by_id=actor.user_id,
                    created_at=now,
                )
            )

        return await self._uow.atomic(operation)

    async def get_idea(self, idea_id: int, actor: Actor) -> IdeaView:
        """Return the idea and the caller's current vote."""

        async def operation(scope: TransactionScope) -> IdeaView:
            idea = await scope.ideas.get(idea_id)
            if idea is None:
                raise ResourceNotFoundException("idea", idea_id)
            return IdeaView(idea=idea, my_vote=await scope.ideas.get_vote(idea_id, actor.user_id))

        return await self._uow.atomic(operation)

    @traced()
    async def vote(self, idea_id: int, actor: Actor, vote_type: VoteType) -> IdeaView:
        """Cast or change the caller's vote. Same vote again changes nothing."""

        async def operation(scope: TransactionScope) -> IdeaView:
            idea = await self._load_locked(scope, idea_id)
            previous = await scope.ideas.get_vote(idea_id, actor.user_id)
            delta = compute_vote_delta(previous, vote_type)
            if delta.is_noop:
                return IdeaView(idea=idea, my_vote=previous)
            await scope.ideas.set_vote(idea_id, actor.user_id, vote_type)
            idea = await scope.ideas.apply_delta(idea_id, delta)
            return IdeaView(idea=idea, my_vote=vote_type)

        view = await self._uow.atomic(operation)
        logger.debug(
            "User %s voted %s on idea %s (score=%s)",
            actor.user_id,
            vote_type.value,
            idea_id,
            view.idea.vote_count,
        )
        return view

    @traced()
    async def remove_vote(self, idea_id: int, actor: Actor) -> IdeaView:
        """Withdraw the caller's vote; no vote is a no-op."""

        async def operation(scope: TransactionScope) -> IdeaView:
            idea = await self._load_locked(scope, idea_id)
            previous = await scope.ideas.get_vote(idea_id, actor.user_id)
            delta = removal_delta(previous)
            if delta.is_noop:
                return IdeaView(idea=idea, my_vote=None)
            await scope.ideas.delete_vote(idea_id, actor.user_id)
            idea = await scope.ideas.apply_delta(idea_id, delta)
            return IdeaView(idea=idea, my_vote=None)

        return await self._uow.atomic(operation)

    @traced()
    async def review(
        self, idea_id: int, actor: Actor, approve: bool, notes: str | None = None
    ) -> IdeaView:
        """Approve or reject a pending idea (innovation committee or admin).

        Raises:
            AuthorizationException: Actor may not review ideas.
            ResourceNotFoundException: Idea does not exist.
            InvalidStateException: Idea was already approved or rejected.
        """
        if not actor.can(Capability.REVIEW_IDEAS):
            raise AuthorizationException("idea", "approve" if approve else "reject")
        decision = IdeaStatus.APPROVED if approve else IdeaStatus.REJECTED
        now = self._clock()

        async def operation(scope: TransactionScope) -> IdeaView:
            idea = await self._load_locked(scope, idea_id)
            idea.record_review(decision, actor.user_id, now, notes)
            saved = await scope.ideas.save_review(idea)
            return IdeaView(idea=saved, my_vote=await scope.ideas.get_vote(idea_id, actor.user_id))

        view = await self._uow.atomic(operation)
        logger.info("Idea %s %s by user %s", idea_id, decision.value.lower(), actor.user_id)
        return view
