"""Request operations: create and edit drafts, submit, act, assign, read, splintering checks.

Each mutating operation runs in one IUnitOfWork.atomic call with the
request row locked. Audit entries are scheduled only after the commit.
"""

from __future__ import annotations

from collections.abc import Callable
from datetime import datetime
from decimal import Decimal
from typing import Any

from procurement.application.dtos.request import (
    ActCommand,
    CreateRequestCommand,
    RequestItemInput,
    UpdateRequestCommand,
)
from procurement.application.interfaces.services import (
    IAuditRecorder,
    ISideEffectDispatcher,
    IUnitOfWork,
    TransactionScope,
)
from procurement.application.services.request_state_machine import (
    RequestStateMachine,
    Transition,
)
from procurement.application.services.splintering_detector import (
    ACTIVE_SPEND_STATUSES,
    SplinteringCheck,
    SplinteringDetector,
)
from procurement.domain.entities.request import (
    RequestEntity,
    RequestItem,
    StatusHistoryEntry,
    to_money,
)
from procurement.domain.enums import AuditAction, Capability, RequestStatus
from procurement.domain.exceptions import (
    AuthorizationException,
    ResourceNotFoundException,
    ValidationException,
)
from procurement.domain.value_objects.core import Actor
from procurement.shared.telemetry.logging import get_logger
from procurement.shared.telemetry.tracing import traced
from procurement.shared.utils.datetime import utc_now

logger = get_logger(__name__)

ENTITY_TYPE = "request"


def _build_items(items: tuple[RequestItemInput, ...]) -> list[RequestItem]:
    return [
        RequestItem(
            description=i.description,
            quantity=i.quantity,
            unit_price=i.unit_price,
            unit_of_measure=i.unit_of_measure,
            account_code=i.account_code,
        )
        for i in items
    ]


def _normalize_types(types: tuple[str, ...]) -> list[str]:
    seen: list[str] = []
    for tag in types:
        value = tag.strip().lower()
        if value and value not in seen:
            seen.append(value)
    return seen


def _validate_estimate(value: Decimal) -> Decimal:
    amount = to_money(value)
    if amount < 0:
        raise ValidationException("Estimated total must not be negative", field="total_estimated")
    return amount


class RequestService:
    """Lifecycle operations on a single procurement request."""

    def __init__(
        self,
        uow: IUnitOfWork,
        state_machine: RequestStateMachine,
        audit: IAuditRecorder,
        side_effects: ISideEffectDispatcher,
        default_currency: str = "JMD",
        clock: Callable[[], datetime] = utc_now,
        splintering: SplinteringDetector | None = None,
    ) -> None:
        self._uow = uow
        self._machine = state_machine
        self._audit = audit
        self._side_effects = side_effects
        self._default_currency = default_currency
        self._clock = clock
        self._splintering = splintering or SplinteringDetector()

    def _record_audit(
        self,
        actor: Actor,
        action: AuditAction,
        request: RequestEntity,
        message: str,
        metadata: dict[str, Any] | None = None,
    ) -> None:
        payload = {"reference": request.reference, **(metadata or {})}
        self._side_effects.dispatch(
            f"audit:{action.value}",
            lambda: self._audit.record(
                actor.user_id, action.value, ENTITY_TYPE, request.id, message, payload
            ),
        )

    async def _check_splintering(
        self, scope: TransactionScope, request: RequestEntity, now: datetime
    ) -> SplinteringCheck:
        prior = await scope.requests.list_recent_spend(
            requester_id=request.requester_id,
            department_id=request.department_id,
            since=self._splintering.window_start(now),
            statuses=ACTIVE_SPEND_STATUSES,
            exclude_id=request.id,
        )
        return self._splintering.check(request.total_estimated, prior)

    @staticmethod
    async def _load_locked(scope: TransactionScope, request_id: int) -> RequestEntity:
        request = await scope.requests.get_for_update(request_id)
        if request is None:
            raise ResourceNotFoundException(ENTITY_TYPE, request_id)
        return request

    @traced()
    async def create_draft(self, actor: Actor, command: CreateRequestCommand) -> RequestEntity:
        """Create a DRAFT request owned by actor.

        Raises:
            ValidationException: Missing title or department, invalid items or estimate.
            ResourceNotFoundException: Department does not exist.
        """
        title = (command.title or "").strip()
        if not title:
            raise ValidationException("Title is required", field="title")
        department_id = command.department_id or actor.department_id
        if department_id is None:
            raise ValidationException("A department is required", field="department_id")
        currency = (command.currency or self._default_currency).upper()
        if len(currency) != 3:
            raise ValidationException("Currency must be a 3-letter code", field="currency")
        items = _build_items(command.items)
        estimate = _validate_estimate(command.total_estimated or Decimal("0"))
        now = self._clock()

        async def operation(scope: TransactionScope) -> RequestEntity:
            if await scope.departments.get(department_id) is None:
                raise ResourceNotFoundException("department", department_id)
            request = RequestEntity(
                id=None,
                reference=await scope.requests.next_reference(now),
                title=title,
                description=command.description,
                department_id=department_id,
                requester_id=actor.user_id,
                total_estimated=estimate,
                currency=currency,
                priority=command.priority,
                procurement_types=_normalize_types(command.procurement_types),
                created_at=now,
                updated_at=now,
            )
            request.replace_items(items)
            request.history.append(
                StatusHistoryEntry(
                    status=RequestStatus.DRAFT,
                    changed_by_id=actor.user_id,
                    comment="Request created",
                    created_at=now,
                )
            )
            return await scope.requests.add(request)

        request = await self._uow.atomic(operation)
        logger.info("Created request %s (id=%s) by user %s", request.reference, request.id, actor.user_id)
        self._record_audit(
            actor,
            AuditAction.CREATED,
            request,
            f"Created request {request.reference}",
            {"total_estimated": str(request.total_estimated), "currency": request.currency},
        )
        return request

    @traced()
    async def update_draft(
        self, request_id: int, actor: Actor, command: UpdateRequestCommand
    ) -> RequestEntity:
        """Edit a draft (owner) or, with override, any open request (admin).

        Raises:
            ResourceNotFoundException: Request does not exist.
            AuthorizationException: Not the owner, or override without capability.
            InvalidStateException: Request is not editable in its status.
            ValidationException: Invalid field values.
        """
        if command.title is not None and not command.title.strip():
            raise ValidationException("Title must not be empty", field="title")
        new_items = _build_items(command.items) if command.items is not None else None
        changed = command.changed_fields()
        now = self._clock()

        async def operation(scope: TransactionScope) -> RequestEntity:
            request = await self._load_locked(scope, request_id)
            self._machine.ensure_editable(request, actor, override=command.override)
            if command.title is not None:
                request.title = command.title.strip()
            if command.description is not None:
                request.description = command.description
            if command.priority is not None:
                request.priority = command.priority
            if command.procurement_types is not None:
                request.procurement_types = _normalize_types(command.procurement_types)
            if new_items is not None:
                request.replace_items(new_items)
            if command.total_estimated is not None:
                if request.items:
                    raise ValidationException(
                        "Estimated total is derived from items and cannot be set directly",
                        field="total_estimated",
                    )
                request.total_estimated = _validate_estimate(command.total_estimated)
            request.updated_at = now
            return await scope.requests.save(request)

        request = await self._uow.atomic(operation)
        if command.override:
            logger.warning(
                "Administrative override edit on request %s by user %s (fields=%s)",
                request.reference,
                actor.user_id,
                changed,
            )
            self._record_audit(
                actor,
                AuditAction.OVERRIDE_EDIT,
                request,
                f"Override edit of request {request.reference} in {request.status.value}",
                {"fields": changed, "status": request.status.value},
            )
        else:
            self._record_audit(
                actor,
                AuditAction.UPDATED,
                request,
                f"Updated draft {request.reference}",
                {"fields": changed},
            )
        return request

    @traced()
    async def submit(self, request_id: int, actor: Actor) -> RequestEntity:
        """Submit a draft.

        A splintering check runs against the requester's and department's
        recent in-flight requests. A hit is logged and audited but does not
        block the submission.

        Raises:
            ResourceNotFoundException: Request does not exist.
            InvalidStateException: Request is not in DRAFT.
            AuthorizationException: Actor is not the owner (or admin).
        """
        now = self._clock()
        result: dict[str, SplinteringCheck] = {}

        async def operation(scope: TransactionScope) -> RequestEntity:
            request = await self._load_locked(scope, request_id)
            self._machine.submit(request, actor, now)
            result["splintering"] = await self._check_splintering(scope, request, now)
            return await scope.requests.save(request)

        request = await self._uow.atomic(operation)
        logger.info("Request %s submitted by user %s", request.reference, actor.user_id)
        self._record_audit(
            actor,
            AuditAction.SUBMITTED,
            request,
            f"Submitted request {request.reference}",
            {"before": RequestStatus.DRAFT.value, "after": request.status.value},
        )
        check = result["splintering"]
        if check.flagged:
            logger.warning(
                "Possible splintering on %s: %s combined with %s within %s days (threshold %s)",
                request.reference,
                check.combined_total,
                check.matching_references,
                check.window_days,
                check.threshold,
            )
            self._record_audit(
                actor,
                AuditAction.SPLINTERING_FLAGGED,
                request,
                f"Possible splintering: {request.reference} brings recent spend to "
                f"{request.currency} {check.combined_total:,.2f}",
                {
                    "threshold": str(check.threshold),
                    "window_days": check.window_days,
                    "prior_total": str(check.prior_total),
                    "combined_total": str(check.combined_total),
                    "matches": check.matching_references,
                },
            )
        return request

    async def check_splintering(self, request_id: int) -> SplinteringCheck:
        """Run the splintering check for a request as of now (read-only)."""
        now = self._clock()

        async def operation(scope: TransactionScope) -> SplinteringCheck:
            request = await scope.requests.get(request_id)
            if request is None:
                raise ResourceNotFoundException(ENTITY_TYPE, request_id)
            return await self._check_splintering(scope, request, now)

        return await self._uow.atomic(operation)

    @traced()
    async def act(self, request_id: int, actor: Actor, command: ActCommand) -> RequestEntity:
        """Apply a reviewer action (APPROVE, REJECT, RETURN, ESCALATE).

        Raises:
            ResourceNotFoundException: Request does not exist.
            AuthorizationException: Combined lot or missing capability.
            IllegalTransitionException: No edge for (status, action).
        """
        now = self._clock()
        result: dict[str, Transition] = {}

        async def operation(scope: TransactionScope) -> RequestEntity:
            request = await self._load_locked(scope, request_id)
            result["transition"] = self._machine.transition(
                request, command.action, actor, now, command.comment
            )
            return await scope.requests.save(request)

        request = await self._uow.atomic(operation)
        transition = result["transition"]
        logger.info(
            "Request %s %s -> %s (%s) by user %s",
            request.reference,
            transition.previous_status.value,
            transition.new_status.value,
            command.action.value,
            actor.user_id,
        )
        metadata: dict[str, Any] = {
            "action": command.action.value,
            "before": transition.previous_status.value,
            "after": transition.new_status.value,
            "steps": [s.to_status.value for s in transition.steps],
        }
        if command.comment:
            metadata["comment"] = command.comment
        decision = transition.threshold_decision
        if decision is not None:
            metadata["threshold"] = {
                "category": decision.category.value,
                "amount": str(decision.threshold_amount),
                "requires_executive_approval": decision.requires_executive_approval,
                "reason": decision.reason,
            }
        self._record_audit(
            actor,
            AuditAction.STATUS_CHANGED,
            request,
            f"{command.action.value} moved {request.reference} from "
            f"{transition.previous_status.value} to {transition.new_status.value}",
            metadata,
        )
        return request

    @traced()
    async def assign(
        self,
        request_id: int,
        actor: Actor,
        target_user_id: int | None = None,
        comment: str | None = None,
    ) -> RequestEntity:
        """Delegate a finance-stage request; target None means assign to self.

        Raises:
            AuthorizationException: Actor lacks the finance-manager capability.
            ResourceNotFoundException: Request or active target user not found.
            InvalidStateException: Request is not in a finance review status.
        """
        if not actor.can(Capability.ACT_AS_FINANCE_MANAGER):
            raise AuthorizationException("request", "assign")
        target = actor.user_id if target_user_id is None else target_user_id
        now = self._clock()
        previous: dict[str, int | None] = {}

        async def operation(scope: TransactionScope) -> RequestEntity:
            request = await self._load_locked(scope, request_id)
            user = await scope.users.get(target)
            if user is None or not user.is_active:
                raise ResourceNotFoundException("user", target)
            previous["assignee"] = request.current_assignee_id
            self._machine.assign(request, target, actor, now, comment)
            return await scope.requests.save(request)

        request = await self._uow.atomic(operation)
        self._record_audit(
            actor,
            AuditAction.ASSIGNED,
            request,
            f"Assigned {request.reference} to user {target}",
            {
                "previous_assignee_id": previous.get("assignee"),
                "assignee_id": target,
                "status": request.status.value,
            },
        )
        return request

    async def get(self, request_id: int) -> RequestEntity:
        """Return request with items and history; raise ResourceNotFoundException if missing."""

        async def operation(scope: TransactionScope) -> RequestEntity | None:
            return await scope.requests.get(request_id)

        request = await self._uow.atomic(operation)
        if request is None:
            raise ResourceNotFoundException(ENTITY_TYPE, request_id)
        return request

    async def history(self, request_id: int) -> list[StatusHistoryEntry]:
        """Return the status history oldest first."""
        request = await self.get(request_id)
        return sorted(request.history, key=lambda e: (e.created_at, e.id or 0))
