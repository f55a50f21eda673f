"""Request lifecycle state machine.

One declarative table maps (status, action) to an edge. An edge is either
a fixed target or a guard that picks the target (the threshold routing
out of DEPARTMENT_APPROVED). DEPARTMENT_APPROVED is a pass-through: a
request that lands there is routed immediately, producing two status
changes for one action.

The machine mutates the in-memory RequestEntity only; loading, locking
and persisting belong to the use cases.
"""

from __future__ import annotations

from collections.abc import Callable, Mapping
from dataclasses import dataclass
from datetime import datetime
from types import MappingProxyType

from procurement.application.services.threshold_evaluator import (
    ThresholdDecision,
    ThresholdEvaluator,
)
from procurement.domain.entities.request import RequestEntity
from procurement.domain.enums import Capability, RequestAction, RequestStatus
from procurement.domain.exceptions import (
    AuthorizationException,
    IllegalTransitionException,
    InvalidStateException,
    ValidationException,
)
from procurement.domain.value_objects.core import Actor

S = RequestStatus
A = RequestAction

# A guard receives the request being routed and returns (target, decision).
Guard = Callable[[RequestEntity, ThresholdEvaluator], tuple[RequestStatus, ThresholdDecision]]


def route_by_threshold(
    request: RequestEntity, evaluator: ThresholdEvaluator
) -> tuple[RequestStatus, ThresholdDecision]:
    """EXECUTIVE_REVIEW when the executive threshold is met, else HOD_REVIEW."""
    decision = evaluator.evaluate(
        request.total_estimated, request.procurement_types, request.currency
    )
    target = S.EXECUTIVE_REVIEW if decision.requires_executive_approval else S.HOD_REVIEW
    return target, decision


@dataclass(frozen=True)
class TransitionEdge:
    """Fixed target or guard; exactly one is set."""

    target: RequestStatus | None = None
    guard: Guard | None = None

    def __post_init__(self) -> None:
        if (self.target is None) == (self.guard is None):
            raise ValueError("TransitionEdge needs exactly one of target or guard")


_PRE_APPROVAL_REVIEW = (
    S.SUBMITTED,
    S.DEPARTMENT_REVIEW,
    S.DEPARTMENT_APPROVED,
    S.HOD_REVIEW,
    S.EXECUTIVE_REVIEW,
    S.PROCUREMENT_REVIEW,
    S.FINANCE_REVIEW,
    S.BUDGET_MANAGER_REVIEW,
)

_table: dict[tuple[RequestStatus, RequestAction], TransitionEdge] = {
    (S.SUBMITTED, A.APPROVE): TransitionEdge(S.DEPARTMENT_REVIEW),
    (S.DEPARTMENT_REVIEW, A.APPROVE): TransitionEdge(S.DEPARTMENT_APPROVED),
    (S.DEPARTMENT_REVIEW, A.RETURN): TransitionEdge(S.DEPARTMENT_RETURNED),
    (S.DEPARTMENT_APPROVED, A.APPROVE): TransitionEdge(guard=route_by_threshold),
    (S.HOD_REVIEW, A.APPROVE): TransitionEdge(S.PROCUREMENT_REVIEW),
    (S.EXECUTIVE_REVIEW, A.APPROVE): TransitionEdge(S.FINANCE_REVIEW),
    (S.PROCUREMENT_REVIEW, A.APPROVE): TransitionEdge(S.FINANCE_REVIEW),
    (S.FINANCE_REVIEW, A.APPROVE): TransitionEdge(S.FINANCE_APPROVED),
    (S.FINANCE_REVIEW, A.RETURN): TransitionEdge(S.FINANCE_RETURNED),
    (S.FINANCE_REVIEW, A.ESCALATE): TransitionEdge(S.BUDGET_MANAGER_REVIEW),
    (S.BUDGET_MANAGER_REVIEW, A.APPROVE): TransitionEdge(S.FINANCE_APPROVED),
    (S.BUDGET_MANAGER_REVIEW, A.RETURN): TransitionEdge(S.FINANCE_RETURNED),
    (S.FINANCE_APPROVED, A.APPROVE): TransitionEdge(S.SENT_TO_VENDOR),
    (S.SENT_TO_VENDOR, A.APPROVE): TransitionEdge(S.CLOSED),
}
for _status in _PRE_APPROVAL_REVIEW:
    _table[(_status, A.REJECT)] = TransitionEdge(S.REJECTED)

TRANSITIONS: Mapping[tuple[RequestStatus, RequestAction], TransitionEdge] = MappingProxyType(_table)

# Statuses that are routed onward with APPROVE as soon as they are entered.
PASS_THROUGH: frozenset[RequestStatus] = frozenset({S.DEPARTMENT_APPROVED})

REQUIRED_CAPABILITY: Mapping[RequestStatus, Capability] = MappingProxyType(
    {
        S.SUBMITTED: Capability.REVIEW_DEPARTMENT,
        S.DEPARTMENT_REVIEW: Capability.REVIEW_DEPARTMENT,
        S.DEPARTMENT_APPROVED: Capability.REVIEW_DEPARTMENT,
        S.HOD_REVIEW: Capability.REVIEW_DIVISION,
        S.EXECUTIVE_REVIEW: Capability.REVIEW_EXECUTIVE,
        S.PROCUREMENT_REVIEW: Capability.REVIEW_PROCUREMENT,
        S.FINANCE_APPROVED: Capability.REVIEW_PROCUREMENT,
        S.SENT_TO_VENDOR: Capability.REVIEW_PROCUREMENT,
        S.FINANCE_REVIEW: Capability.REVIEW_FINANCE,
        S.BUDGET_MANAGER_REVIEW: Capability.ACT_AS_FINANCE_MANAGER,
    }
)

ASSIGNABLE_STATUSES: frozenset[RequestStatus] = frozenset(
    {S.FINANCE_REVIEW, S.BUDGET_MANAGER_REVIEW}
)

# Reviewers at these statuses may only act on their own department's requests.
DEPARTMENT_SCOPED_STATUSES: frozenset[RequestStatus] = frozenset(
    {S.SUBMITTED, S.DEPARTMENT_REVIEW, S.DEPARTMENT_APPROVED}
)


@dataclass(frozen=True)
class TransitionStep:
    """One recorded status change."""

    from_status: RequestStatus
    to_status: RequestStatus
    comment: str | None


@dataclass(frozen=True)
class Transition:
    """Result of applying an action: ordered steps and any routing decision."""

    action: RequestAction
    previous_status: RequestStatus
    new_status: RequestStatus
    steps: tuple[TransitionStep, ...]
    threshold_decision: ThresholdDecision | None = None


class RequestStateMachine:
    """Applies lifecycle operations to a RequestEntity."""

    def __init__(
        self,
        evaluator: ThresholdEvaluator | None = None,
        transitions: Mapping[tuple[RequestStatus, RequestAction], TransitionEdge] = TRANSITIONS,
    ) -> None:
        self._evaluator = evaluator or ThresholdEvaluator()
        self._transitions = transitions

    @property
    def evaluator(self) -> ThresholdEvaluator:
        return self._evaluator

    def allowed_actions(self, status: RequestStatus) -> list[RequestAction]:
        """Actions that have an edge from status, in enum order."""
        return [a for a in RequestAction if (status, a) in self._transitions]

    def required_capability(self, status: RequestStatus) -> Capability | None:
        return REQUIRED_CAPABILITY.get(status)

    def plan(
        self,
        request: RequestEntity,
        action: RequestAction,
        comment: str | None = None,
    ) -> Transition:
        """Compute the steps for action without mutating the request.

        Raises:
            IllegalTransitionException: No edge for (status, action).
        """
        current = request.status
        edge = self._transitions.get((current, action))
        if edge is None:
            raise IllegalTransitionException(
                current_status=current.value,
                action=action.value,
                allowed_actions=[a.value for a in self.allowed_actions(current)],
            )
        steps: list[TransitionStep] = []
        decision: ThresholdDecision | None = None
        target, routed = self._resolve(edge, request)
        if routed is not None:
            decision = routed
        steps.append(TransitionStep(current, target, comment or (routed.reason if routed else None)))
        while target in PASS_THROUGH:
            follow = self._transitions[(target, A.APPROVE)]
            next_target, routed = self._resolve(follow, request)
            if routed is not None:
                decision = routed
            steps.append(TransitionStep(target, next_target, routed.reason if routed else None))
            target = next_target
        return Transition(
            action=action,
            previous_status=current,
            new_status=target,
            steps=tuple(steps),
            threshold_decision=decision,
        )

    def _resolve(
        self, edge: TransitionEdge, request: RequestEntity
    ) -> tuple[RequestStatus, ThresholdDecision | None]:
        if edge.guard is not None:
            return edge.guard(request, self._evaluator)
        assert edge.target is not None
        return edge.target, None

    def transition(
        self,
        request: RequestEntity,
        action: RequestAction,
        actor: Actor,
        at: datetime,
        comment: str | None = None,
    ) -> Transition:
        """Authorize and apply a reviewer action to the request.

        Raises:
            AuthorizationException: Request is a combined lot, actor lacks
                the capability for the current status, or a department-stage
                reviewer belongs to another department.
            IllegalTransitionException: No edge for (status, action).
        """
        if request.is_lot:
            raise AuthorizationException(
                message=(
                    "Combined lots are managed through their combined request "
                    f"and cannot be acted on individually (lot {request.lot_number})"
                )
            )
        planned = self.plan(request, action, comment)
        capability = self.required_capability(request.status)
        if capability is None or not actor.can(capability):
            raise AuthorizationException("request", action.value.lower())
        self._check_department_scope(request, actor)
        for step in planned.steps:
            request.record_status(step.to_status, actor.user_id, at, step.comment)
            self._update_assignee(request)
        return planned

    @staticmethod
    def _check_department_scope(request: RequestEntity, actor: Actor) -> None:
        if request.status not in DEPARTMENT_SCOPED_STATUSES or actor.is_admin:
            return
        if actor.department_id is None or actor.department_id != request.department_id:
            raise AuthorizationException(
                message=(
                    "Department reviewers may only act on requests from their own department "
                    f"(request department {request.department_id})"
                )
            )

    @staticmethod
    def _update_assignee(request: RequestEntity) -> None:
        if request.status.is_returned():
            request.current_assignee_id = request.requester_id
        else:
            request.current_assignee_id = None

    def submit(self, request: RequestEntity, actor: Actor, at: datetime) -> Transition:
        """Move a draft to SUBMITTED.

        Raises:
            InvalidStateException: Request is not in DRAFT.
            AuthorizationException: Actor is neither the owner nor an admin.
            ValidationException: Request has no title.
        """
        if request.status is not S.DRAFT:
            raise InvalidStateException(
                f"Only draft requests can be submitted; request is {request.status.value}",
                request.status.value,
            )
        if request.requester_id != actor.user_id and not actor.is_admin:
            raise AuthorizationException("request", "submit")
        if not request.title or not request.title.strip():
            raise ValidationException("A title is required before submission", field="title")
        request.submitted_at = at
        request.record_status(S.SUBMITTED, actor.user_id, at, "Request submitted")
        request.current_assignee_id = None
        return Transition(
            action=A.APPROVE,
            previous_status=S.DRAFT,
            new_status=S.SUBMITTED,
            steps=(TransitionStep(S.DRAFT, S.SUBMITTED, "Request submitted"),),
        )

    def assign(
        self,
        request: RequestEntity,
        target_user_id: int,
        actor: Actor,
        at: datetime,
        comment: str | None = None,
    ) -> None:
        """Delegate a finance-stage request to target_user_id.

        The status is unchanged; a history entry records the delegation.

        Raises:
            AuthorizationException: Actor lacks the finance-manager capability
                or the request is a combined lot.
            InvalidStateException: Status is not a finance review status.
        """
        if not actor.can(Capability.ACT_AS_FINANCE_MANAGER):
            raise AuthorizationException("request", "assign")
        if request.is_lot:
            raise AuthorizationException(
                message="Combined lots cannot be assigned individually"
            )
        if request.status not in ASSIGNABLE_STATUSES:
            raise InvalidStateException(
                f"Requests can only be assigned during finance review; request is {request.status.value}",
                request.status.value,
            )
        if target_user_id == actor.user_id:
            note = f"Self-assigned by user {actor.user_id}"
        else:
            note = f"Assigned to user {target_user_id} by user {actor.user_id}"
        if comment:
            note = f"{note}: {comment}"
        request.current_assignee_id = target_user_id
        request.annotate(actor.user_id, at, note)

    def ensure_editable(self, request: RequestEntity, actor: Actor, override: bool = False) -> None:
        """Check that actor may change title, description or items.

        Owners edit drafts. Past DRAFT only an administrative override on a
        non-terminal, non-lot request is accepted.

        Raises:
            AuthorizationException: Not the owner, or override without capability.
            InvalidStateException: Request has left DRAFT and no valid override.
        """
        if override:
            if not actor.can(Capability.OVERRIDE_EDITS):
                raise AuthorizationException("request", "override_edit")
            if request.is_terminal or request.is_lot:
                raise InvalidStateException(
                    f"Request in {request.status.value} cannot be edited",
                    request.status.value,
                )
            return
        if request.requester_id != actor.user_id:
            raise AuthorizationException("request", "edit")
        if request.status is not S.DRAFT:
            raise InvalidStateException(
                f"Only draft requests can be edited; request is {request.status.value}",
                request.status.value,
            )
