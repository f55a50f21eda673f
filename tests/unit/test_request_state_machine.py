"""Tests for RequestStateMachine (transition table, guards, authorization)."""

from datetime import datetime, timezone
from decimal import Decimal

import pytest

from procurement.application.services.capability_policy import build_actor
from procurement.application.services.request_state_machine import (
    TRANSITIONS,
    RequestStateMachine,
    TransitionEdge,
)
from procurement.domain.entities.request import RequestEntity
from procurement.domain.enums import RequestAction, RequestStatus
from procurement.domain.exceptions import (
    AuthorizationException,
    IllegalTransitionException,
    InvalidStateException,
    ValidationException,
)

S = RequestStatus
A = RequestAction
AT = datetime(2026, 3, 14, 9, 0, tzinfo=timezone.utc)

OWNER = build_actor(10, 1, ["REQUESTER"])
DEPT_HEAD = build_actor(20, 1, ["DEPARTMENT_HEAD"])
DIVISION_HEAD = build_actor(21, 1, ["HEAD_OF_DIVISION"])
EXECUTIVE = build_actor(22, 1, ["EXECUTIVE_DIRECTOR"])
PROCUREMENT = build_actor(30, None, ["PROCUREMENT_OFFICER"])
FINANCE = build_actor(40, None, ["FINANCE_OFFICER"])
FINANCE_MANAGER = build_actor(41, None, ["FINANCE_MANAGER"])
ADMIN = build_actor(50, None, ["ADMIN"])


def _request(
    status: RequestStatus = S.DRAFT,
    total: str = "100000.00",
    types: list[str] | None = None,
    department_id: int = 1,
    **kwargs,
) -> RequestEntity:
    return RequestEntity(
        id=1,
        reference="REQ-20260314-0001",
        title="Laptops",
        description=None,
        department_id=department_id,
        requester_id=OWNER.user_id,
        status=status,
        total_estimated=Decimal(total),
        procurement_types=types if types is not None else ["goods"],
        **kwargs,
    )


@pytest.fixture
def machine() -> RequestStateMachine:
    return RequestStateMachine()


# --- table ---


def test_edge_requires_exactly_one_of_target_or_guard() -> None:
    with pytest.raises(ValueError):
        TransitionEdge()
    with pytest.raises(ValueError):
        TransitionEdge(S.CLOSED, guard=lambda r, e: (S.CLOSED, None))


def test_table_is_read_only() -> None:
    with pytest.raises(TypeError):
        TRANSITIONS[(S.DRAFT, A.APPROVE)] = TransitionEdge(S.SUBMITTED)  # type: ignore[index]


def test_terminal_and_returned_statuses_have_no_actions(machine: RequestStateMachine) -> None:
    for status in (S.CLOSED, S.REJECTED, S.DEPARTMENT_RETURNED, S.FINANCE_RETURNED, S.DRAFT):
        assert machine.allowed_actions(status) == []


def test_finance_review_allows_approve_reject_return_escalate(machine: RequestStateMachine) -> None:
    assert machine.allowed_actions(S.FINANCE_REVIEW) == [A.APPROVE, A.REJECT, A.RETURN, A.ESCALATE]


@pytest.mark.parametrize(
    ("status", "action", "actor", "expected"),
    [
        (S.SUBMITTED, A.APPROVE, DEPT_HEAD, S.DEPARTMENT_REVIEW),
        (S.DEPARTMENT_REVIEW, A.RETURN, DEPT_HEAD, S.DEPARTMENT_RETURNED),
        (S.HOD_REVIEW, A.APPROVE, DIVISION_HEAD, S.PROCUREMENT_REVIEW),
        (S.EXECUTIVE_REVIEW, A.APPROVE, EXECUTIVE, S.FINANCE_REVIEW),
        (S.PROCUREMENT_REVIEW, A.APPROVE, PROCUREMENT, S.FINANCE_REVIEW),
        (S.FINANCE_REVIEW, A.APPROVE, FINANCE, S.FINANCE_APPROVED),
        (S.FINANCE_REVIEW, A.RETURN, FINANCE, S.FINANCE_RETURNED),
        (S.FINANCE_REVIEW, A.ESCALATE, FINANCE, S.BUDGET_MANAGER_REVIEW),
        (S.BUDGET_MANAGER_REVIEW, A.APPROVE, FINANCE_MANAGER, S.FINANCE_APPROVED),
        (S.BUDGET_MANAGER_REVIEW, A.RETURN, FINANCE_MANAGER, S.FINANCE_RETURNED),
        (S.FINANCE_APPROVED, A.APPROVE, PROCUREMENT, S.SENT_TO_VENDOR),
        (S.SENT_TO_VENDOR, A.APPROVE, PROCUREMENT, S.CLOSED),
        (S.PROCUREMENT_REVIEW, A.REJECT, PROCUREMENT, S.REJECTED),
        (S.SUBMITTED, A.REJECT, DEPT_HEAD, S.REJECTED),
    ],
)
def test_single_step_transitions(machine, status, action, actor, expected) -> None:
    request = _request(status)
    result = machine.transition(request, action, actor, AT, comment="ok")
    assert request.status is expected
    assert result.previous_status is status
    assert result.new_status is expected
    assert len(result.steps) == 1
    assert request.history[-1].status is expected
    assert request.history[-1].comment == "ok"
    assert request.history[-1].changed_by_id == actor.user_id


def test_transition_bumps_version_and_timestamp(machine: RequestStateMachine) -> None:
    request = _request(S.SUBMITTED)
    machine.transition(request, A.APPROVE, DEPT_HEAD, AT)
    assert request.version == 2
    assert request.updated_at == AT


# --- pass-through routing ---


def test_department_approval_below_threshold_routes_to_hod(machine: RequestStateMachine) -> None:
    request = _request(S.DEPARTMENT_REVIEW, total="250000.00", types=["goods"])
    result = machine.transition(request, A.APPROVE, DEPT_HEAD, AT, comment="fine")
    assert request.status is S.HOD_REVIEW
    assert [step.to_status for step in result.steps] == [S.DEPARTMENT_APPROVED, S.HOD_REVIEW]
    assert [e.status for e in request.history] == [S.DEPARTMENT_APPROVED, S.HOD_REVIEW]
    assert request.history[0].comment == "fine"
    assert request.history[1].comment == "Below executive approval threshold"
    assert result.threshold_decision is not None
    assert result.threshold_decision.requires_executive_approval is False


def test_department_approval_over_works_threshold_routes_to_executive(
    machine: RequestStateMachine,
) -> None:
    request = _request(S.DEPARTMENT_REVIEW, total="5000000.00", types=["construction"])
    result = machine.transition(request, A.APPROVE, DEPT_HEAD, AT)
    assert request.status is S.EXECUTIVE_REVIEW
    assert request.version == 3
    assert request.history[1].comment == "Works procurement over JMD 5,000,000"
    assert result.new_status is S.EXECUTIVE_REVIEW


def test_plan_does_not_mutate(machine: RequestStateMachine) -> None:
    request = _request(S.DEPARTMENT_REVIEW)
    planned = machine.plan(request, A.APPROVE)
    assert planned.new_status is S.HOD_REVIEW
    assert request.status is S.DEPARTMENT_REVIEW
    assert request.history == []


# --- rejections ---


def test_illegal_transition_lists_allowed_actions(machine: RequestStateMachine) -> None:
    request = _request(S.HOD_REVIEW)
    with pytest.raises(IllegalTransitionException) as exc_info:
        machine.transition(request, A.ESCALATE, DIVISION_HEAD, AT)
    exc = exc_info.value
    assert exc.error_code == "ILLEGAL_TRANSITION"
    assert exc.details["current_status"] == "HOD_REVIEW"
    assert exc.details["action"] == "ESCALATE"
    assert exc.details["allowed_actions"] == ["APPROVE", "REJECT"]
    assert request.status is S.HOD_REVIEW


def test_terminal_request_rejects_every_action(machine: RequestStateMachine) -> None:
    request = _request(S.CLOSED)
    for action in A:
        with pytest.raises(IllegalTransitionException):
            machine.transition(request, action, ADMIN, AT)


def test_missing_capability_is_forbidden(machine: RequestStateMachine) -> None:
    request = _request(S.FINANCE_REVIEW)
    with pytest.raises(AuthorizationException):
        machine.transition(request, A.APPROVE, DEPT_HEAD, AT)
    assert request.status is S.FINANCE_REVIEW
    assert request.history == []


def test_budget_review_needs_finance_manager(machine: RequestStateMachine) -> None:
    request = _request(S.BUDGET_MANAGER_REVIEW)
    with pytest.raises(AuthorizationException):
        machine.transition(request, A.APPROVE, FINANCE, AT)


def test_department_head_is_limited_to_own_department(machine: RequestStateMachine) -> None:
    other_department_head = build_actor(23, 2, ["DEPARTMENT_HEAD"])
    for status in (S.SUBMITTED, S.DEPARTMENT_REVIEW):
        request = _request(status)
        for action in (A.APPROVE, A.REJECT):
            with pytest.raises(AuthorizationException):
                machine.transition(request, action, other_department_head, AT)
        assert request.status is status
        assert request.history == []


def test_department_head_without_department_cannot_review(machine: RequestStateMachine) -> None:
    unassigned_head = build_actor(24, None, ["DEPARTMENT_HEAD"])
    with pytest.raises(AuthorizationException):
        machine.transition(_request(S.SUBMITTED), A.APPROVE, unassigned_head, AT)


def test_admin_reviews_any_department(machine: RequestStateMachine) -> None:
    request = _request(S.SUBMITTED, department_id=2)
    machine.transition(request, A.APPROVE, ADMIN, AT)
    assert request.status is S.DEPARTMENT_REVIEW


def test_admin_may_act_at_any_stage(machine: RequestStateMachine) -> None:
    request = _request(S.EXECUTIVE_REVIEW)
    machine.transition(request, A.APPROVE, ADMIN, AT)
    assert request.status is S.FINANCE_REVIEW


def test_lot_cannot_be_acted_on(machine: RequestStateMachine) -> None:
    request = _request(
        S.PROCUREMENT_REVIEW, is_combined=True, combined_request_id=5, lot_number=2
    )
    with pytest.raises(AuthorizationException) as exc_info:
        machine.transition(request, A.APPROVE, ADMIN, AT)
    assert "lot 2" in exc_info.value.message


# --- assignee tracking ---


def test_return_hands_request_back_to_requester(machine: RequestStateMachine) -> None:
    request = _request(S.FINANCE_REVIEW, current_assignee_id=41)
    machine.transition(request, A.RETURN, FINANCE, AT)
    assert request.current_assignee_id == OWNER.user_id


def test_forward_transition_clears_assignee(machine: RequestStateMachine) -> None:
    request = _request(S.FINANCE_REVIEW, current_assignee_id=40)
    machine.transition(request, A.APPROVE, FINANCE, AT)
    assert request.current_assignee_id is None


# --- submit ---


def test_submit_moves_draft_to_submitted(machine: RequestStateMachine) -> None:
    request = _request()
    result = machine.submit(request, OWNER, AT)
    assert request.status is S.SUBMITTED
    assert request.submitted_at == AT
    assert request.history[-1].comment == "Request submitted"
    assert result.new_status is S.SUBMITTED


def test_submit_twice_is_invalid_state(machine: RequestStateMachine) -> None:
    request = _request(S.SUBMITTED)
    with pytest.raises(InvalidStateException) as exc_info:
        machine.submit(request, OWNER, AT)
    assert exc_info.value.details["current_status"] == "SUBMITTED"


def test_submit_by_non_owner_is_forbidden(machine: RequestStateMachine) -> None:
    with pytest.raises(AuthorizationException):
        machine.submit(_request(), DEPT_HEAD, AT)


def test_admin_may_submit_for_owner(machine: RequestStateMachine) -> None:
    request = _request()
    machine.submit(request, ADMIN, AT)
    assert request.history[-1].changed_by_id == ADMIN.user_id


def test_submit_requires_title(machine: RequestStateMachine) -> None:
    request = _request()
    request.title = "   "
    with pytest.raises(ValidationException):
        machine.submit(request, OWNER, AT)


# --- assign ---


def test_self_assignment_note(machine: RequestStateMachine) -> None:
    request = _request(S.FINANCE_REVIEW)
    machine.assign(request, FINANCE_MANAGER.user_id, FINANCE_MANAGER, AT)
    assert request.status is S.FINANCE_REVIEW
    assert request.current_assignee_id == FINANCE_MANAGER.user_id
    assert request.history[-1].comment == "Self-assigned by user 41"
    assert request.version == 1


def test_delegation_note_includes_comment(machine: RequestStateMachine) -> None:
    request = _request(S.BUDGET_MANAGER_REVIEW)
    machine.assign(request, 40, FINANCE_MANAGER, AT, comment="please check")
    assert request.history[-1].comment == "Assigned to user 40 by user 41: please check"
    assert request.history[-1].status is S.BUDGET_MANAGER_REVIEW


def test_assign_outside_finance_review_is_invalid_state(machine: RequestStateMachine) -> None:
    with pytest.raises(InvalidStateException):
        machine.assign(_request(S.PROCUREMENT_REVIEW), 40, FINANCE_MANAGER, AT)


def test_assign_requires_finance_manager(machine: RequestStateMachine) -> None:
    with pytest.raises(AuthorizationException):
        machine.assign(_request(S.FINANCE_REVIEW), 40, FINANCE, AT)


# --- ensure_editable ---


def test_owner_edits_draft(machine: RequestStateMachine) -> None:
    machine.ensure_editable(_request(), OWNER)


def test_owner_cannot_edit_after_submission(machine: RequestStateMachine) -> None:
    with pytest.raises(InvalidStateException):
        machine.ensure_editable(_request(S.SUBMITTED), OWNER)


def test_non_owner_cannot_edit_draft(machine: RequestStateMachine) -> None:
    with pytest.raises(AuthorizationException):
        machine.ensure_editable(_request(), DEPT_HEAD)


def test_admin_override_on_in_flight_request(machine: RequestStateMachine) -> None:
    machine.ensure_editable(_request(S.FINANCE_REVIEW), ADMIN, override=True)


def test_override_requires_capability(machine: RequestStateMachine) -> None:
    with pytest.raises(AuthorizationException):
        machine.ensure_editable(_request(S.FINANCE_REVIEW), OWNER, override=True)


def test_override_refused_on_terminal_or_lot(machine: RequestStateMachine) -> None:
    with pytest.raises(InvalidStateException):
        machine.ensure_editable(_request(S.REJECTED), ADMIN, override=True)
    lot = _request(S.PROCUREMENT_REVIEW, is_combined=True, combined_request_id=3, lot_number=1)
    with pytest.raises(InvalidStateException):
        machine.ensure_editable(lot, ADMIN, override=True)


def test_every_table_entry_is_reachable_from_draft() -> None:
    reachable = {S.SUBMITTED}
    frontier = [S.SUBMITTED]
    while frontier:
        status = frontier.pop()
        for (source, _), edge in TRANSITIONS.items():
            if source is not status:
                continue
            targets = [edge.target] if edge.target else [S.HOD_REVIEW, S.EXECUTIVE_REVIEW]
            for target in targets:
                if target not in reachable:
                    reachable.add(target)
                    frontier.append(target)
    assert {source for source, _ in TRANSITIONS} <= reachable
    assert {S.CLOSED, S.REJECTED, S.DEPARTMENT_RETURNED, S.FINANCE_RETURNED} <= reachable
