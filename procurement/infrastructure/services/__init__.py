"""Infrastructure services: audit, notifications, side-effect dispatch."""

from procurement.infrastructure.services.audit_recorder import SqlAuditRecorder
from procurement.infrastructure.services.notification_dispatcher import SqlNotificationDispatcher
from procurement.infrastructure.services.side_effects import SideEffectDispatcher

__all__ = ["SideEffectDispatcher", "SqlAuditRecorder", "SqlNotificationDispatcher"]
