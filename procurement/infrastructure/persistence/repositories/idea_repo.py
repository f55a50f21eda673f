"""Idea and vote repository. Counter changes are SQL-side increments."""

from __future__ import annotations

from sqlalchemy import delete, select, update
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from procurement.domain.entities.idea import IdeaEntity, VoteDelta
from procurement.domain.enums import IdeaStatus, VoteType
from procurement.infrastructure.persistence.models.idea import Idea, IdeaVote
from procurement.infrastructure.persistence.repositories.base import BaseRepository
from procurement.shared.utils.datetime import ensure_utc, utc_now


def _to_entity(row: Idea) -> IdeaEntity:
    return IdeaEntity(
        id=row.id,
        title=row.title,
        description=row.description,
        submitted_by_id=row.submitted_by_id,
        status=IdeaStatus(row.status),
        vote_count=row.vote_count,
        upvote_count=row.upvote_count,
        downvote_count=row.downvote_count,
        created_at=ensure_utc(row.created_at),
        reviewed_by_id=row.reviewed_by_id,
        reviewed_at=ensure_utc(row.reviewed_at),
        review_notes=row.review_notes,
    )


class IdeaRepository(BaseRepository[Idea]):
    """Implements IIdeaRepository."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Idea)

    async def add(self, idea: IdeaEntity) -> IdeaEntity:
        row = await self.create(
            Idea(
                title=idea.title,
                description=idea.description,
                submitted_by_id=idea.submitted_by_id,
                status=idea.status.value,
                created_at=idea.created_at,
            )
        )
        return _to_entity(row)

    async def get(self, idea_id: int) -> IdeaEntity | None:
        row = await self.get_by_id(idea_id)
        return _to_entity(row) if row else None

    async def get_for_update(self, idea_id: int) -> IdeaEntity | None:
        row = await self.get_by_id(idea_id, for_update=True)
        return _to_entity(row) if row else None

    async def get_vote(self, idea_id: int, user_id: int) -> VoteType | None:
        stmt = select(IdeaVote.vote_type).where(
            IdeaVote.idea_id == idea_id, IdeaVote.user_id == user_id
        )
        value = (await self.db.execute(stmt)).scalar_one_or_none()
        return VoteType(value) if value else None

    async def set_vote(self, idea_id: int, user_id: int, vote_type: VoteType) -> None:
        now = utc_now()
        stmt = (
            pg_insert(IdeaVote)
            .values(idea_id=idea_id, user_id=user_id, vote_type=vote_type.value, created_at=now, updated_at=now)
            .on_conflict_do_update(
                constraint="uq_idea_vote_user",
                set_={"vote_type": vote_type.value, "updated_at": now},
            )
        )
        await self.db.execute(stmt)

    async def delete_vote(self, idea_id: int, user_id: int) -> None:
        await self.db.execute(
            delete(IdeaVote).where(IdeaVote.idea_id == idea_id, IdeaVote.user_id == user_id)
        )

    async def apply_delta(self, idea_id: int, delta: VoteDelta) -> IdeaEntity:
        stmt = (
            update(Idea)
            .where(Idea.id == idea_id)
            .values(
                vote_count=Idea.vote_count + delta.score,
                upvote_count=Idea.upvote_count + delta.upvotes,
                downvote_count=Idea.downvote_count + delta.downvotes,
                updated_at=utc_now(),
            )
            .returning(Idea)
            .execution_options(populate_existing=True)
        )
        row = (await self.db.execute(stmt)).scalar_one()
        return _to_entity(row)

    async def save_review(self, idea: IdeaEntity) -> IdeaEntity:
        """Persist status and review fields; counters are left untouched."""
        stmt = (
            update(Idea)
            .where(Idea.id == idea.id)
            .values(
                status=idea.status.value,
                reviewed_by_id=idea.reviewed_by_id,
                reviewed_at=idea.reviewed_at,
                review_notes=idea.review_notes,
                updated_at=utc_now(),
            )
            .returning(Idea)
            .execution_options(populate_existing=True)
        )
        row = (await self.db.execute(stmt)).scalar_one()
        return _to_entity(row)
