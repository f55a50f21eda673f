"""Service interfaces (ports) for the application layer.

The unit of work is the single atomic-mutate primitive: every state change
runs inside IUnitOfWork.atomic and either commits entirely or not at all.
Audit and notification ports are fire-and-forget collaborators that run
after commit through ISideEffectDispatcher.
"""

from __future__ import annotations

from collections.abc import Awaitable, Callable
from decimal import Decimal
from typing import TYPE_CHECKING, Any, Protocol, TypeVar

if TYPE_CHECKING:
    from procurement.application.interfaces.repositories import (
        ICombinedRequestRepository,
        IDepartmentRepository,
        IIdeaRepository,
        IRequestRepository,
        IUserRepository,
    )

T = TypeVar("T")


class TransactionScope(Protocol):
    """Repositories bound to one open transaction."""

    requests: IRequestRepository
    combined_requests: ICombinedRequestRepository
    ideas: IIdeaRepository
    users: IUserRepository
    departments: IDepartmentRepository


class IUnitOfWork(Protocol):
    """Runs an operation in one transaction."""

    async def atomic(self, operation: Callable[[TransactionScope], Awaitable[T]]) -> T:
        """Run operation; commit on return, roll back on any exception.

        Domain exceptions raised by operation propagate unchanged after the
        rollback. Store failures surface as TransactionFailureException.
        """


class IAuditRecorder(Protocol):
    """Protocol for the append-only audit log (external collaborator)."""

    async def record(
        self,
        actor_id: int | None,
        action: str,
        entity_type: str,
        entity_id: int | str | None,
        message: str,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        """Append one audit entry."""


class INotificationDispatcher(Protocol):
    """Protocol for in-app notifications (external collaborator)."""

    async def notify_threshold_exceeded(
        self,
        request_ref: str,
        title: str,
        requester_name: str,
        department_name: str,
        total_value: Decimal,
        currency: str,
        threshold_amount: Decimal,
        category: str,
    ) -> int:
        """Notify threshold-alert recipients; return the number of notifications written."""


class ISideEffectDispatcher(Protocol):
    """Schedules post-commit work that must never affect the committed result."""

    def dispatch(self, name: str, effect: Callable[[], Awaitable[Any]]) -> None:
        """Schedule effect; failures are logged and swallowed."""
