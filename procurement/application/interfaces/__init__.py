"""Application ports (Protocols) implemented by infrastructure."""

from procurement.application.interfaces.repositories import (
    ICombinedRequestRepository,
    IDepartmentRepository,
    IIdeaRepository,
    IRequestRepository,
    IUserRepository,
)
from procurement.application.interfaces.services import (
    IAuditRecorder,
    INotificationDispatcher,
    ISideEffectDispatcher,
    IUnitOfWork,
    TransactionScope,
)

__all__ = [
    "IAuditRecorder",
    "ICombinedRequestRepository",
    "IDepartmentRepository",
    "IIdeaRepository",
    "INotificationDispatcher",
    "IRequestRepository",
    "ISideEffectDispatcher",
    "IUnitOfWork",
    "IUserRepository",
    "TransactionScope",
]
