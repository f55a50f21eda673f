"""In-app notification dispatcher for threshold alerts."""

from __future__ import annotations

from decimal import Decimal

from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from procurement.application.services.capability_policy import roles_with
from procurement.domain.enums import Capability, NotificationType, ThresholdCategory
from procurement.domain.exceptions import NotificationDispatchFailure
from procurement.infrastructure.persistence.models.audit_log import Notification
from procurement.infrastructure.persistence.repositories.user_repo import UserRepository
from procurement.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


def _category_label(category: str) -> str:
    try:
        return ThresholdCategory(category).display_name
    except ValueError:
        return category


class SqlNotificationDispatcher:
    """INotificationDispatcher writing one notification row per recipient.

    Recipients are active users whose roles grant threshold alerts
    (procurement officers, procurement managers, admins).
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

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
        """Write THRESHOLD_EXCEEDED notifications; return how many were written.

        Raises:
            NotificationDispatchFailure: The notifications could not be stored.
        """
        label = _category_label(category)
        message = (
            f"{request_ref} \"{title}\" from {requester_name} ({department_name}) totals "
            f"{currency} {total_value:,.2f}, over the {label} executive approval "
            f"threshold of {currency} {threshold_amount:,.0f}."
        )
        data = {
            "request_ref": request_ref,
            "title": title,
            "requester_name": requester_name,
            "department_name": department_name,
            "total_value": str(total_value),
            "currency": currency,
            "threshold_amount": str(threshold_amount),
            "category": category,
        }
        try:
            async with self._session_factory() as session:
                async with session.begin():
                    users = await UserRepository(session).list_active_with_roles(
                        roles_with(Capability.RECEIVE_THRESHOLD_ALERTS)
                    )
                    session.add_all(
                        Notification(
                            user_id=u.id,
                            type=NotificationType.THRESHOLD_EXCEEDED.value,
                            message=message,
                            data=data,
                        )
                        for u in users
                    )
        except SQLAlchemyError as e:
            raise NotificationDispatchFailure(
                f"Could not store threshold notifications for {request_ref}",
                NotificationType.THRESHOLD_EXCEEDED.value,
            ) from e
        logger.info("Threshold notification for %s sent to %d users", request_ref, len(users))
        return len(users)
