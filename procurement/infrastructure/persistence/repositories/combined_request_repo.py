"""Combined request repository (implements ICombinedRequestRepository)."""

from __future__ import annotations

from datetime import datetime

from sqlalchemy import func, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from procurement.application.dtos.combined_request import CombinedRequestSummary
from procurement.domain.entities.combined_request import CombinedRequestEntity
from procurement.domain.value_objects.core import CombinedReference
from procurement.infrastructure.persistence.models.request import (
    CombinedRequest,
    ReferenceSequence,
    Request,
)
from procurement.infrastructure.persistence.repositories.base import BaseRepository
from procurement.infrastructure.persistence.repositories.request_repo import request_to_entity
from procurement.shared.utils.datetime import ensure_utc

# Single reference_sequence row used as the allocation lock for CMB references.
_SEQUENCE_PREFIX = "CMB"
_SEQUENCE_PERIOD = "ALL"


def _to_entity(row: CombinedRequest, *, with_lots: bool = True) -> CombinedRequestEntity:
    return CombinedRequestEntity(
        id=row.id,
        reference=row.reference,
        title=row.title,
        description=row.description,
        created_by_id=row.created_by_id,
        config=row.config,
        created_at=ensure_utc(row.created_at),
        updated_at=ensure_utc(row.updated_at),
        lots=[request_to_entity(lot) for lot in row.lots] if with_lots else [],
    )


class CombinedRequestRepository(BaseRepository[CombinedRequest]):
    """Parent rows only; lots are written through RequestRepository.save."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, CombinedRequest)

    async def allocate_reference(self, at: datetime) -> str:
        """Return the first free CMB-<second> reference at or after at.

        Bumping the CMB sequence row locks it until commit, so concurrent
        combiners are serialized and the later one moves to the next free
        second instead of hitting the unique constraint.
        """
        await self.db.execute(
            pg_insert(ReferenceSequence)
            .values(prefix=_SEQUENCE_PREFIX, period=_SEQUENCE_PERIOD, last_value=1)
            .on_conflict_do_update(
                index_elements=[ReferenceSequence.prefix, ReferenceSequence.period],
                set_={"last_value": ReferenceSequence.last_value + 1},
            )
        )
        candidate = CombinedReference.from_timestamp(at)
        stmt = select(func.max(CombinedRequest.reference)).where(
            CombinedRequest.reference >= candidate.value
        )
        latest = (await self.db.execute(stmt)).scalar_one_or_none()
        if latest is None:
            return candidate.value
        return CombinedReference(latest).next().value

    async def add(self, combined: CombinedRequestEntity) -> CombinedRequestEntity:
        row = CombinedRequest(
            reference=combined.reference,
            title=combined.title,
            description=combined.description,
            config=combined.config,
            created_by_id=combined.created_by_id,
            created_at=combined.created_at,
            updated_at=combined.updated_at,
        )
        self.db.add(row)
        await self.db.flush()
        return CombinedRequestEntity(
            id=row.id,
            reference=row.reference,
            title=row.title,
            description=row.description,
            created_by_id=row.created_by_id,
            config=row.config,
            created_at=ensure_utc(row.created_at),
            updated_at=ensure_utc(row.updated_at),
        )

    async def get(self, combined_id: int) -> CombinedRequestEntity | None:
        stmt = (
            select(CombinedRequest)
            .where(CombinedRequest.id == combined_id)
            .execution_options(populate_existing=True)
        )
        row = (await self.db.execute(stmt)).scalar_one_or_none()
        return _to_entity(row) if row else None

    async def list_summaries(self) -> list[CombinedRequestSummary]:
        lots_count = func.count(Request.id).label("lots_count")
        stmt = (
            select(
                CombinedRequest.id,
                CombinedRequest.reference,
                CombinedRequest.title,
                CombinedRequest.created_by_id,
                CombinedRequest.created_at,
                lots_count,
            )
            .outerjoin(Request, Request.combined_request_id == CombinedRequest.id)
            .group_by(CombinedRequest.id)
            .order_by(CombinedRequest.created_at.desc(), CombinedRequest.id.desc())
        )
        rows = (await self.db.execute(stmt)).all()
        return [
            CombinedRequestSummary(
                id=r.id,
                reference=r.reference,
                title=r.title,
                created_by_id=r.created_by_id,
                created_at=ensure_utc(r.created_at),
                lots_count=r.lots_count,
            )
            for r in rows
        ]
