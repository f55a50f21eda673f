"""Persistence models: ORM entities and mixins."""

from procurement.infrastructure.persistence.models.audit_log import AuditLog, Notification
from procurement.infrastructure.persistence.models.idea import Idea, IdeaVote
from procurement.infrastructure.persistence.models.mixins import (
    CreatedAtMixin,
    IntIdMixin,
    TimestampMixin,
)
from procurement.infrastructure.persistence.models.organization import Department, User, UserRole
from procurement.infrastructure.persistence.models.request import (
    CombinedRequest,
    ReferenceSequence,
    Request,
    RequestItem,
    RequestStatusHistory,
)

__all__ = [
    "AuditLog",
    "CombinedRequest",
    "CreatedAtMixin",
    "Department",
    "Idea",
    "IdeaVote",
    "IntIdMixin",
    "Notification",
    "ReferenceSequence",
    "Request",
    "RequestItem",
    "RequestStatusHistory",
    "TimestampMixin",
    "User",
    "UserRole",
]
