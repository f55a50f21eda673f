"""Combine standalone requests into one multi-lot combined request.

The whole fold happens in one transaction: member rows are locked,
validated, renumbered as lots and moved to PROCUREMENT_REVIEW. Either
every member becomes a lot or nothing is written. The threshold check on
the aggregate and the resulting notification run after commit.
"""

from __future__ import annotations

from collections import Counter
from collections.abc import Callable
from dataclasses import dataclass
from datetime import datetime

from procurement.application.dtos.combined_request import (
    CombineCommand,
    CombinedRequestSummary,
    CombineResult,
)
from procurement.application.interfaces.services import (
    IAuditRecorder,
    INotificationDispatcher,
    ISideEffectDispatcher,
    IUnitOfWork,
    TransactionScope,
)
from procurement.application.services.threshold_evaluator import ThresholdEvaluator
from procurement.domain.entities.combined_request import CombinedRequestEntity
from procurement.domain.entities.request import RequestEntity
from procurement.domain.enums import AuditAction, Capability, RequestStatus
from procurement.domain.exceptions import (
    AuthorizationException,
    BadRequestException,
    ResourceNotFoundException,
    ValidationException,
)
from procurement.domain.value_objects.core import Actor
from procurement.shared.telemetry.logging import get_logger
from procurement.shared.telemetry.tracing import add_span_attributes, traced
from procurement.shared.utils.datetime import utc_now

logger = get_logger(__name__)

ELIGIBLE_STATUSES: frozenset[RequestStatus] = frozenset(
    {
        RequestStatus.DRAFT,
        RequestStatus.SUBMITTED,
        RequestStatus.DEPARTMENT_REVIEW,
        RequestStatus.PROCUREMENT_REVIEW,
    }
)

MULTIPLE_DEPARTMENTS = "Multiple Departments"


def is_combinable(request: RequestEntity) -> bool:
    return request.status in ELIGIBLE_STATUSES and not request.is_combined


@dataclass(frozen=True)
class _Committed:
    combined: CombinedRequestEntity
    requester_name: str
    department_name: str


class CombinationService:
    """combine, get_combined, list_combined and list_combinable."""

    def __init__(
        self,
        uow: IUnitOfWork,
        evaluator: ThresholdEvaluator,
        audit: IAuditRecorder,
        notifications: INotificationDispatcher,
        side_effects: ISideEffectDispatcher,
        combinable_limit: int = 100,
        clock: Callable[[], datetime] = utc_now,
    ) -> None:
        self._uow = uow
        self._evaluator = evaluator
        self._audit = audit
        self._notifications = notifications
        self._side_effects = side_effects
        self._combinable_limit = combinable_limit
        self._clock = clock

    @staticmethod
    def _require_combine(actor: Actor) -> None:
        if not actor.can(Capability.COMBINE_REQUESTS):
            raise AuthorizationException("combined_request", "combine")

    @staticmethod
    def _validate(command: CombineCommand) -> tuple[str, list[int]]:
        title = (command.title or "").strip()
        if not title:
            raise ValidationException("Title is required", field="title")
        ids = list(command.member_request_ids)
        if not ids:
            raise ValidationException("At least one request is required", field="member_request_ids")
        duplicates = sorted(i for i, n in Counter(ids).items() if n > 1)
        if duplicates:
            raise ValidationException(
                "Duplicate request ids in combination",
                field="member_request_ids",
                details={"duplicate_ids": duplicates},
            )
        return title, ids

    @traced()
    async def combine(self, actor: Actor, command: CombineCommand) -> CombineResult:
        """Fold the member requests into a new combined request.

        Lot numbers follow the order of command.member_request_ids.

        Raises:
            ValidationException: Empty title, empty or duplicate ids.
            AuthorizationException: Missing combine capability, or members span
                departments and the actor may not combine across departments.
            BadRequestException: Missing, ineligible or already combined members.
            TransactionFailureException: The store aborted; nothing was written.
        """
        title, ids = self._validate(command)
        self._require_combine(actor)
        now = self._clock()

        async def operation(scope: TransactionScope) -> _Committed:
            found = {r.id: r for r in await scope.requests.get_many_for_update(ids)}
            missing = [i for i in ids if i not in found]
            ineligible = [i for i in ids if i in found and not is_combinable(found[i])]
            if missing or ineligible:
                raise BadRequestException(
                    "Some requests cannot be combined",
                    invalid_ids=sorted(missing + ineligible),
                    details={"missing_ids": missing, "ineligible_ids": ineligible},
                )
            members = [found[i] for i in ids]
            departments = {m.department_id for m in members}
            if len(departments) > 1 and not actor.can(Capability.COMBINE_ACROSS_DEPARTMENTS):
                raise AuthorizationException(
                    message="Combining requests from multiple departments is not permitted"
                )

            reference = await scope.combined_requests.allocate_reference(now)
            combined = await scope.combined_requests.add(
                CombinedRequestEntity(
                    id=None,
                    reference=reference,
                    title=title,
                    description=command.description,
                    created_by_id=actor.user_id,
                    config=command.config,
                    created_at=now,
                    updated_at=now,
                )
            )
            for lot_number, member in enumerate(members, start=1):
                original_ref = member.reference
                member.is_combined = True
                member.combined_request_id = combined.id
                member.lot_number = lot_number
                member.title = f"LOT-{lot_number}: {member.title}"
                member.submitted_at = member.submitted_at or now
                member.record_status(
                    RequestStatus.PROCUREMENT_REVIEW,
                    actor.user_id,
                    now,
                    f"Converted to LOT-{lot_number} in combined request {reference}",
                )
                member.current_assignee_id = None
                logger.debug("Request %s becomes LOT-%s of %s", original_ref, lot_number, reference)
            listing = ", ".join(f"LOT-{m.lot_number} ({m.reference})" for m in members)
            members[0].annotate(
                actor.user_id,
                now,
                f"Created combined request {reference} with {len(members)} lots: {listing}",
            )
            members = [await scope.requests.save(member) for member in members]
            combined.lots = members

            first = members[0]
            requester = await scope.users.get(first.requester_id)
            if len(departments) > 1:
                department_name = MULTIPLE_DEPARTMENTS
            else:
                department = await scope.departments.get(first.department_id)
                department_name = department.name if department else MULTIPLE_DEPARTMENTS
            return _Committed(
                combined=combined,
                requester_name=requester.name if requester else "Unknown",
                department_name=department_name,
            )

        committed = await self._uow.atomic(operation)
        combined = committed.combined
        lots = combined.ordered_lots()
        tags = sorted({t for lot in lots for t in lot.procurement_types})
        currency = lots[0].currency
        decision = self._evaluator.evaluate(combined.total_value, tags, currency)
        add_span_attributes(
            combined_reference=combined.reference,
            lots_count=combined.lots_count,
            requires_executive_approval=decision.requires_executive_approval,
        )
        logger.info(
            "Combined %s requests into %s (total %s %s, executive approval: %s)",
            combined.lots_count,
            combined.reference,
            currency,
            combined.total_value,
            decision.requires_executive_approval,
        )

        if decision.requires_executive_approval:
            self._side_effects.dispatch(
                "notify:threshold_exceeded",
                lambda: self._notifications.notify_threshold_exceeded(
                    request_ref=combined.reference,
                    title=combined.title,
                    requester_name=committed.requester_name,
                    department_name=committed.department_name,
                    total_value=combined.total_value,
                    currency=currency,
                    threshold_amount=decision.threshold_amount,
                    category=decision.category.value,
                ),
            )
        self._side_effects.dispatch(
            "audit:combined",
            lambda: self._audit.record(
                actor.user_id,
                AuditAction.COMBINED.value,
                "combined_request",
                combined.id,
                f"Created combined request {combined.reference} with {combined.lots_count} lots",
                {
                    "reference": combined.reference,
                    "lots": [
                        {"lot_number": lot.lot_number, "request_id": lot.id, "reference": lot.reference}
                        for lot in lots
                    ],
                    "total_value": str(combined.total_value),
                    "currency": currency,
                    "threshold": {
                        "category": decision.category.value,
                        "amount": str(decision.threshold_amount),
                        "requires_executive_approval": decision.requires_executive_approval,
                    },
                },
            ),
        )
        return CombineResult(combined=combined, threshold_decision=decision)

    async def get_combined(self, combined_id: int) -> CombinedRequestEntity:
        """Return the combined request with lots ordered by lot number."""

        async def operation(scope: TransactionScope) -> CombinedRequestEntity | None:
            return await scope.combined_requests.get(combined_id)

        combined = await self._uow.atomic(operation)
        if combined is None:
            raise ResourceNotFoundException("combined_request", combined_id)
        combined.lots = combined.ordered_lots()
        return combined

    async def list_combined(self, actor: Actor) -> list[CombinedRequestSummary]:
        """Return combined requests newest first with their lot counts."""
        self._require_combine(actor)

        async def operation(scope: TransactionScope) -> list[CombinedRequestSummary]:
            return await scope.combined_requests.list_summaries()

        return await self._uow.atomic(operation)

    async def list_combinable(self, actor: Actor) -> list[RequestEntity]:
        """Return requests that may still be combined, newest first."""
        self._require_combine(actor)

        async def operation(scope: TransactionScope) -> list[RequestEntity]:
            return await scope.requests.list_combinable(
                ELIGIBLE_STATUSES, self._combinable_limit
            )

        return await self._uow.atomic(operation)
