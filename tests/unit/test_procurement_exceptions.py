"""Tests for domain exceptions (error_code, details) and their HTTP status."""

import pytest

from procurement.core.exception_handlers import status_for
from procurement.domain.exceptions import (
    AuthenticationException,
    AuthorizationException,
    BadRequestException,
    IllegalTransitionException,
    InvalidStateException,
    NotificationDispatchFailure,
    ProcurementException,
    ResourceNotFoundException,
    TransactionFailureException,
    ValidationException,
)


def test_base_exception_defaults_error_code_to_class_name() -> None:
    exc = ProcurementException("Something failed")
    assert exc.error_code == "ProcurementException"
    assert exc.to_dict() == {
        "error": "ProcurementException",
        "message": "Something failed",
        "details": {},
    }


def test_validation_exception_carries_field() -> None:
    exc = ValidationException("Title is required", field="title")
    assert exc.error_code == "VALIDATION_ERROR"
    assert exc.details == {"field": "title"}


def test_bad_request_lists_invalid_ids() -> None:
    exc = BadRequestException("Requests cannot be combined", invalid_ids=[3, 4])
    assert isinstance(exc, ValidationException)
    assert exc.error_code == "BAD_REQUEST"
    assert exc.details == {"invalid_ids": [3, 4]}


def test_illegal_transition_is_an_invalid_state() -> None:
    exc = IllegalTransitionException("CLOSED", "APPROVE", [])
    assert isinstance(exc, InvalidStateException)
    assert exc.message == "Action APPROVE is not allowed from status CLOSED"
    assert exc.details == {"current_status": "CLOSED", "action": "APPROVE", "allowed_actions": []}


def test_authorization_message_names_action_and_resource() -> None:
    exc = AuthorizationException("combined_request", "combine")
    assert exc.message == "Permission denied: combine on combined_request"
    assert exc.details == {"resource": "combined_request", "action": "combine"}
    assert AuthorizationException().message == "Permission denied"


def test_not_found_details() -> None:
    exc = ResourceNotFoundException("request", 42)
    assert exc.message == "request not found: 42"
    assert exc.details == {"resource_type": "request", "resource_id": 42}


def test_transaction_failure_is_retryable() -> None:
    assert TransactionFailureException().details == {"retryable": True}


@pytest.mark.parametrize(
    ("exc", "status"),
    [
        (ValidationException("bad"), 400),
        (BadRequestException("bad"), 400),
        (AuthenticationException(), 401),
        (AuthorizationException(), 403),
        (ResourceNotFoundException("idea", 1), 404),
        (InvalidStateException("no"), 409),
        (IllegalTransitionException("DRAFT", "APPROVE", []), 409),
        (TransactionFailureException(), 503),
        (NotificationDispatchFailure("smtp down"), 400),
    ],
)
def test_http_status_mapping(exc: ProcurementException, status: int) -> None:
    assert status_for(exc) == status
