"""Audit recorder: appends entries to audit_log in its own transaction."""

from __future__ import annotations

from typing import Any

from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from procurement.infrastructure.persistence.models.audit_log import AuditLog
from procurement.shared.context import get_request_id
from procurement.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class SqlAuditRecorder:
    """IAuditRecorder writing to the audit_log table.

    Runs after the business transaction has committed, so a failure here
    can never undo the state change it describes.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

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
        async with self._session_factory() as session:
            async with session.begin():
                session.add(
                    AuditLog(
                        actor_id=actor_id,
                        action=action,
                        entity_type=entity_type,
                        entity_id=str(entity_id) if entity_id is not None else None,
                        message=message,
                        metadata_=metadata,
                        request_id=get_request_id(),
                    )
                )
        logger.debug("Audit %s %s:%s by %s", action, entity_type, entity_id, actor_id)
