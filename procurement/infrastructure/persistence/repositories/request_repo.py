"""Request repository. Maps ORM rows to RequestEntity and back."""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime

from sqlalchemy import or_, select
from sqlalchemy.dialects.postgresql import insert as pg_insert
from sqlalchemy.ext.asyncio import AsyncSession

from procurement.application.dtos.request import SpendRecord
from procurement.domain.entities.request import RequestEntity, RequestItem, StatusHistoryEntry
from procurement.domain.enums import RequestPriority, RequestStatus
from procurement.domain.exceptions import ResourceNotFoundException
from procurement.domain.value_objects.core import RequestReference
from procurement.infrastructure.persistence.models.request import (
    ReferenceSequence,
    Request,
    RequestStatusHistory,
)
from procurement.infrastructure.persistence.models.request import RequestItem as RequestItemRow
from procurement.infrastructure.persistence.repositories.base import BaseRepository
from procurement.shared.utils.datetime import ensure_utc


def request_to_entity(row: Request) -> RequestEntity:
    """Map ORM Request (items and history loaded) to RequestEntity."""
    return RequestEntity(
        id=row.id,
        reference=row.reference,
        title=row.title,
        description=row.description,
        department_id=row.department_id,
        requester_id=row.requester_id,
        status=RequestStatus(row.status),
        total_estimated=row.total_estimated,
        currency=row.currency,
        priority=RequestPriority(row.priority),
        procurement_types=list(row.procurement_types or []),
        items=[
            RequestItem(
                id=i.id,
                description=i.description,
                quantity=i.quantity,
                unit_price=i.unit_price,
                unit_of_measure=i.unit_of_measure,
                account_code=i.account_code,
            )
            for i in row.items
        ],
        history=[
            StatusHistoryEntry(
                id=h.id,
                status=RequestStatus(h.status),
                changed_by_id=h.changed_by_id,
                comment=h.comment,
                created_at=ensure_utc(h.created_at),
            )
            for h in row.history
        ],
        current_assignee_id=row.current_assignee_id,
        submitted_at=ensure_utc(row.submitted_at),
        created_at=ensure_utc(row.created_at),
        updated_at=ensure_utc(row.updated_at),
        is_combined=row.is_combined,
        combined_request_id=row.combined_request_id,
        lot_number=row.lot_number,
        version=row.version,
    )


def _item_rows(items: list[RequestItem]) -> list[RequestItemRow]:
    return [
        RequestItemRow(
            position=position,
            description=item.description,
            quantity=item.quantity,
            unit_price=item.unit_price,
            total_price=item.total_price,
            unit_of_measure=item.unit_of_measure,
            account_code=item.account_code,
        )
        for position, item in enumerate(items, start=1)
    ]


def _items_changed(row: Request, items: list[RequestItem]) -> bool:
    current = [(i.id, i.description, i.quantity, i.unit_price, i.unit_of_measure, i.account_code) for i in row.items]
    wanted = [(i.id, i.description, i.quantity, i.unit_price, i.unit_of_measure, i.account_code) for i in items]
    return current != wanted


class RequestRepository(BaseRepository[Request]):
    """Request persistence (implements IRequestRepository)."""

    def __init__(self, db: AsyncSession) -> None:
        super().__init__(db, Request)

    async def next_reference(self, at: datetime) -> str:
        """Allocate REQ-YYYYMMDD-NNNN with an upsert on the (prefix, period) row.

        The upsert row lock is held until commit, so concurrent creators on
        the same day are serialized and never share a number.
        """
        period = RequestReference.period_for(at)
        stmt = (
            pg_insert(ReferenceSequence)
            .values(prefix=RequestReference.PREFIX, period=period, last_value=1)
            .on_conflict_do_update(
                index_elements=[ReferenceSequence.prefix, ReferenceSequence.period],
                set_={"last_value": ReferenceSequence.last_value + 1},
            )
            .returning(ReferenceSequence.last_value)
        )
        sequence = (await self.db.execute(stmt)).scalar_one()
        return RequestReference.build(period, sequence).value

    async def add(self, request: RequestEntity) -> RequestEntity:
        row = Request(
            reference=request.reference,
            title=request.title,
            description=request.description,
            department_id=request.department_id,
            requester_id=request.requester_id,
            current_assignee_id=request.current_assignee_id,
            status=request.status.value,
            total_estimated=request.total_estimated,
            currency=request.currency,
            priority=request.priority.value,
            procurement_types=list(request.procurement_types),
            submitted_at=request.submitted_at,
            is_combined=request.is_combined,
            combined_request_id=request.combined_request_id,
            lot_number=request.lot_number,
            version=request.version,
            created_at=request.created_at,
            updated_at=request.updated_at,
        )
        row.items = _item_rows(request.items)
        row.history = [self._history_row(e) for e in request.pending_history()]
        self.db.add(row)
        await self.db.flush()
        return await self._reload(row.id)

    async def get(self, request_id: int) -> RequestEntity | None:
        row = await self.get_by_id(request_id)
        return request_to_entity(row) if row else None

    async def get_for_update(self, request_id: int) -> RequestEntity | None:
        row = await self.get_by_id(request_id, for_update=True)
        return request_to_entity(row) if row else None

    async def get_many_for_update(self, request_ids: Iterable[int]) -> list[RequestEntity]:
        ids = sorted(set(request_ids))
        if not ids:
            return []
        # Lock in id order so concurrent combinations cannot deadlock.
        stmt = (
            select(Request)
            .where(Request.id.in_(ids))
            .order_by(Request.id)
            .with_for_update()
            .execution_options(populate_existing=True)
        )
        rows = (await self.db.execute(stmt)).scalars().all()
        return [request_to_entity(r) for r in rows]

    async def save(self, request: RequestEntity) -> RequestEntity:
        if request.id is None:
            raise ValueError("Cannot save a request without id; use add()")
        row = await self.db.get(Request, request.id)
        if row is None:
            raise ResourceNotFoundException("request", request.id)
        row.title = request.title
        row.description = request.description
        row.current_assignee_id = request.current_assignee_id
        row.status = request.status.value
        row.total_estimated = request.total_estimated
        row.currency = request.currency
        row.priority = request.priority.value
        row.procurement_types = list(request.procurement_types)
        row.submitted_at = request.submitted_at
        row.is_combined = request.is_combined
        row.combined_request_id = request.combined_request_id
        row.lot_number = request.lot_number
        row.version = request.version
        if request.updated_at is not None:
            row.updated_at = request.updated_at
        if _items_changed(row, request.items):
            row.items = _item_rows(request.items)
        for entry in request.pending_history():
            row.history.append(self._history_row(entry))
        await self.db.flush()
        return await self._reload(row.id)

    async def list_combinable(
        self, statuses: Iterable[RequestStatus], limit: int
    ) -> list[RequestEntity]:
        stmt = (
            select(Request)
            .where(
                Request.status.in_([s.value for s in statuses]),
                Request.is_combined.is_(False),
            )
            .order_by(Request.created_at.desc(), Request.id.desc())
            .limit(limit)
        )
        rows = (await self.db.execute(stmt)).scalars().all()
        return [request_to_entity(r) for r in rows]

    async def list_recent_spend(
        self,
        requester_id: int,
        department_id: int,
        since: datetime,
        statuses: Iterable[RequestStatus],
        exclude_id: int | None = None,
    ) -> list[SpendRecord]:
        """Column-only query; items and history are not loaded."""
        stmt = (
            select(
                Request.id,
                Request.reference,
                Request.requester_id,
                Request.department_id,
                Request.status,
                Request.total_estimated,
                Request.created_at,
            )
            .where(
                or_(Request.requester_id == requester_id, Request.department_id == department_id),
                Request.created_at >= since,
                Request.status.in_([s.value for s in statuses]),
            )
            .order_by(Request.created_at, Request.id)
        )
        if exclude_id is not None:
            stmt = stmt.where(Request.id != exclude_id)
        rows = (await self.db.execute(stmt)).all()
        return [
            SpendRecord(
                id=r.id,
                reference=r.reference,
                requester_id=r.requester_id,
                department_id=r.department_id,
                status=RequestStatus(r.status),
                total_estimated=r.total_estimated,
                created_at=ensure_utc(r.created_at),
            )
            for r in rows
        ]

    @staticmethod
    def _history_row(entry: StatusHistoryEntry) -> RequestStatusHistory:
        return RequestStatusHistory(
            status=entry.status.value,
            changed_by_id=entry.changed_by_id,
            comment=entry.comment,
            created_at=entry.created_at,
        )

    async def _reload(self, request_id: int) -> RequestEntity:
        stmt = (
            select(Request)
            .where(Request.id == request_id)
            .execution_options(populate_existing=True)
        )
        row = (await self.db.execute(stmt)).scalar_one()
        return request_to_entity(row)
