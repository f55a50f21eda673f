"""Repository interfaces (ports) for the application layer.

Protocols define contracts that infrastructure implementations must fulfill (DIP).
Repositories are bound to one transaction (see IUnitOfWork); the *_for_update
methods take row locks held until that transaction ends.
"""

from __future__ import annotations

from collections.abc import Iterable
from datetime import datetime
from typing import TYPE_CHECKING, Protocol

if TYPE_CHECKING:
    from procurement.application.dtos.combined_request import CombinedRequestSummary
    from procurement.application.dtos.request import DepartmentResult, SpendRecord, UserResult
    from procurement.domain.entities.combined_request import CombinedRequestEntity
    from procurement.domain.entities.idea import IdeaEntity, VoteDelta
    from procurement.domain.entities.request import RequestEntity
    from procurement.domain.enums import RequestStatus, RoleCode, VoteType


class IRequestRepository(Protocol):
    """Protocol for procurement request repository (DIP)."""

    async def next_reference(self, at: datetime) -> str:
        """Allocate the next REQ-YYYYMMDD-NNNN for the day of at (locked sequence row)."""

    async def add(self, request: RequestEntity) -> RequestEntity:
        """Insert a new request with items and pending history; return it with ids set."""

    async def get(self, request_id: int) -> RequestEntity | None:
        """Return request with items and history, or None."""

    async def get_for_update(self, request_id: int) -> RequestEntity | None:
        """Return request locked FOR UPDATE, or None."""

    async def get_many_for_update(self, request_ids: Iterable[int]) -> list[RequestEntity]:
        """Lock and return the existing requests among request_ids (any order)."""

    async def save(self, request: RequestEntity) -> RequestEntity:
        """Persist scalar fields, items and pending history entries."""

    async def list_combinable(
        self, statuses: Iterable[RequestStatus], limit: int
    ) -> list[RequestEntity]:
        """Return non-combined requests in statuses, newest first."""

    async def list_recent_spend(
        self,
        requester_id: int,
        department_id: int,
        since: datetime,
        statuses: Iterable[RequestStatus],
        exclude_id: int | None = None,
    ) -> list[SpendRecord]:
        """Return requests by the requester or department created at or after since."""


class ICombinedRequestRepository(Protocol):
    """Protocol for combined request repository (DIP)."""

    async def allocate_reference(self, at: datetime) -> str:
        """Return the first free CMB-<second> reference at or after at."""

    async def add(self, combined: CombinedRequestEntity) -> CombinedRequestEntity:
        """Insert the parent row (lots are linked via the request repository)."""

    async def get(self, combined_id: int) -> CombinedRequestEntity | None:
        """Return the combined request with lots ordered by lot number."""

    async def list_summaries(self) -> list[CombinedRequestSummary]:
        """Return all combined requests, newest first, with lot counts."""


class IIdeaRepository(Protocol):
    """Protocol for idea and vote repository (DIP)."""

    async def add(self, idea: IdeaEntity) -> IdeaEntity:
        """Insert a new idea; return it with id set."""

    async def get(self, idea_id: int) -> IdeaEntity | None:
        """Return idea or None."""

    async def get_for_update(self, idea_id: int) -> IdeaEntity | None:
        """Return idea locked FOR UPDATE, or None."""

    async def get_vote(self, idea_id: int, user_id: int) -> VoteType | None:
        """Return the user's current vote on the idea, or None."""

    async def set_vote(self, idea_id: int, user_id: int, vote_type: VoteType) -> None:
        """Create or change the user's vote row."""

    async def delete_vote(self, idea_id: int, user_id: int) -> None:
        """Delete the user's vote row if present."""

    async def apply_delta(self, idea_id: int, delta: VoteDelta) -> IdeaEntity:
        """Increment counters in the store and return the refreshed idea."""

    async def save_review(self, idea: IdeaEntity) -> IdeaEntity:
        """Persist the review decision (status, reviewer, time, notes)."""


class IUserRepository(Protocol):
    """Protocol for user lookups (read-only)."""

    async def get(self, user_id: int) -> UserResult | None:
        """Return user with role codes, or None."""

    async def list_active_with_roles(self, role_codes: Iterable[RoleCode]) -> list[UserResult]:
        """Return active users holding any of role_codes."""


class IDepartmentRepository(Protocol):
    """Protocol for department lookups (read-only)."""

    async def get(self, department_id: int) -> DepartmentResult | None:
        """Return department or None."""
