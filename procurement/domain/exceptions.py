"""Domain exceptions for the procurement tracker.

Defines domain-level exceptions that represent business rule violations.
These exceptions are independent of infrastructure concerns. Presentation
layer maps them to HTTP responses in exception handlers.
"""

from typing import Any


class ProcurementException(Exception):
    """Base exception for all procurement tracker errors.

    All custom exceptions should inherit from this class to allow
    consistent error handling and logging. Presentation layer maps
    these to HTTP responses using message, error_code, and details.

    Attributes:
        message: Human-readable error description.
        error_code: Machine-readable error code.
        details: Additional error context (e.g. field, resource_id).
    """

    def __init__(
        self,
        message: str,
        error_code: str | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize the exception.

        Args:
            message: Human-readable error description.
            error_code: Optional machine-readable code; defaults to class name.
            details: Optional dict of extra context.
        """
        self.message = message
        self.error_code = error_code or self.__class__.__name__
        self.details = details or {}
        super().__init__(self.message)

    def to_dict(self) -> dict[str, Any]:
        """Return the JSON error body used by the exception handlers."""
        return {
            "error": self.error_code,
            "message": self.message,
            "details": self.details,
        }


class ValidationException(ProcurementException):
    """Raised when input validation fails (e.g. empty title, duplicate ids)."""

    def __init__(
        self,
        message: str,
        field: str | None = None,
        *,
        error_code: str = "VALIDATION_ERROR",
        details: dict[str, Any] | None = None,
    ) -> None:
        """Initialize with message and optional field name.

        Args:
            message: Description of the validation failure.
            field: Optional field or attribute that failed validation.
            error_code: Override for subclasses.
            details: Optional extra context merged with the field.
        """
        merged: dict[str, Any] = dict(details or {})
        if field:
            merged["field"] = field
        super().__init__(message, error_code, merged)


class BadRequestException(ValidationException):
    """Raised when referenced rows exist in the wrong shape (e.g. ineligible members)."""

    def __init__(
        self,
        message: str,
        *,
        invalid_ids: list[int] | None = None,
        details: dict[str, Any] | None = None,
    ) -> None:
        merged: dict[str, Any] = dict(details or {})
        if invalid_ids is not None:
            merged["invalid_ids"] = invalid_ids
        super().__init__(message, error_code="BAD_REQUEST", details=merged)


class InvalidStateException(ProcurementException):
    """Raised when an operation is not legal in the entity's current status."""

    def __init__(
        self,
        message: str,
        current_status: str | None = None,
        *,
        error_code: str = "INVALID_STATE",
        details: dict[str, Any] | None = None,
    ) -> None:
        merged: dict[str, Any] = dict(details or {})
        if current_status is not None:
            merged["current_status"] = current_status
        super().__init__(message, error_code, merged)


class IllegalTransitionException(InvalidStateException):
    """Raised when (status, action) has no edge in the transition table."""

    def __init__(
        self,
        current_status: str,
        action: str,
        allowed_actions: list[str],
    ) -> None:
        """Initialize with the rejected transition.

        Args:
            current_status: Status the request is in.
            action: Action that was attempted.
            allowed_actions: Actions that would have been legal.
        """
        super().__init__(
            f"Action {action} is not allowed from status {current_status}",
            current_status,
            error_code="ILLEGAL_TRANSITION",
            details={"action": action, "allowed_actions": allowed_actions},
        )


class AuthenticationException(ProcurementException):
    """Raised when authentication fails (e.g. invalid credentials or token)."""

    def __init__(self, message: str = "Authentication failed") -> None:
        """Initialize with optional message.

        Args:
            message: Description of the authentication failure.
        """
        super().__init__(message, "AUTHENTICATION_ERROR")


class AuthorizationException(ProcurementException):
    """Raised when the actor lacks the capability required for the operation."""

    def __init__(
        self,
        resource: str | None = None,
        action: str | None = None,
        message: str = "Permission denied",
    ) -> None:
        """Initialize with optional resource, action, and message.

        Args:
            resource: Optional resource type (e.g. 'request', 'combined_request').
            action: Optional action that was attempted (e.g. 'combine', 'approve').
            message: Human-readable message; default used when resource/action omitted.
        """
        if resource and action:
            message = f"Permission denied: {action} on {resource}"
        details: dict[str, Any] = {}
        if resource:
            details["resource"] = resource
        if action:
            details["action"] = action
        super().__init__(message, "PERMISSION_DENIED", details)


class ResourceNotFoundException(ProcurementException):
    """Raised when a requested resource is not found."""

    def __init__(self, resource_type: str, resource_id: int | str) -> None:
        """Initialize with resource type and id.

        Args:
            resource_type: Type of resource (e.g. 'request', 'idea').
            resource_id: The ID that was not found.
        """
        super().__init__(
            f"{resource_type} not found: {resource_id}",
            "RESOURCE_NOT_FOUND",
            {"resource_type": resource_type, "resource_id": resource_id},
        )


class TransactionFailureException(ProcurementException):
    """Raised when the store aborts a transaction; the whole operation may be retried."""

    def __init__(self, message: str = "Transaction failed; retry the operation") -> None:
        super().__init__(message, "TRANSACTION_FAILURE", {"retryable": True})


class NotificationDispatchFailure(ProcurementException):
    """Raised inside notification dispatch. Logged by the side-effect runner, never surfaced."""

    def __init__(self, message: str, notification_type: str | None = None) -> None:
        details = {"notification_type": notification_type} if notification_type else {}
        super().__init__(message, "NOTIFICATION_DISPATCH_FAILURE", details)


# Short names used by callers that think in terms of the error taxonomy.
ValidationError = ValidationException
BadRequestError = BadRequestException
InvalidStateError = InvalidStateException
IllegalTransitionError = IllegalTransitionException
ForbiddenError = AuthorizationException
NotFoundError = ResourceNotFoundException
TransactionFailure = TransactionFailureException
