"""Domain enumerations for the procurement tracker.

Enums represent fixed sets of domain values (request status, actions,
role codes, threshold categories, vote types). String values are the
persisted and wire representation and are case-sensitive.
"""

from enum import Enum


class _ValuesMixin:
    """Mixin that adds a values() classmethod to str Enums."""

    @classmethod
    def values(cls) -> list[str]:
        """Return all valid values as strings."""
        return [member.value for member in cls]


class RequestStatus(_ValuesMixin, str, Enum):
    """Procurement request lifecycle status.

    DRAFT is the only status in which the requester edits the request.
    CLOSED and REJECTED are terminal.
    """

    DRAFT = "DRAFT"
    SUBMITTED = "SUBMITTED"
    DEPARTMENT_REVIEW = "DEPARTMENT_REVIEW"
    DEPARTMENT_APPROVED = "DEPARTMENT_APPROVED"
    DEPARTMENT_RETURNED = "DEPARTMENT_RETURNED"
    HOD_REVIEW = "HOD_REVIEW"
    EXECUTIVE_REVIEW = "EXECUTIVE_REVIEW"
    PROCUREMENT_REVIEW = "PROCUREMENT_REVIEW"
    FINANCE_REVIEW = "FINANCE_REVIEW"
    BUDGET_MANAGER_REVIEW = "BUDGET_MANAGER_REVIEW"
    FINANCE_APPROVED = "FINANCE_APPROVED"
    FINANCE_RETURNED = "FINANCE_RETURNED"
    SENT_TO_VENDOR = "SENT_TO_VENDOR"
    CLOSED = "CLOSED"
    REJECTED = "REJECTED"

    def is_terminal(self) -> bool:
        """Return whether no further change is allowed (CLOSED, REJECTED)."""
        return self in (RequestStatus.CLOSED, RequestStatus.REJECTED)

    def is_returned(self) -> bool:
        """Return whether this is a dead-end *_RETURNED status."""
        return self in (
            RequestStatus.DEPARTMENT_RETURNED,
            RequestStatus.FINANCE_RETURNED,
        )


class RequestAction(_ValuesMixin, str, Enum):
    """Reviewer action applied to a request by the state machine."""

    APPROVE = "APPROVE"
    REJECT = "REJECT"
    RETURN = "RETURN"
    ESCALATE = "ESCALATE"


class RequestPriority(_ValuesMixin, str, Enum):
    """Request priority (informational, no routing effect)."""

    LOW = "LOW"
    MEDIUM = "MEDIUM"
    HIGH = "HIGH"
    URGENT = "URGENT"


class ThresholdCategory(_ValuesMixin, str, Enum):
    """Procurement category used to pick the executive threshold."""

    WORKS = "works"
    GOODS_SERVICES = "goods_services"
    OTHER = "other"

    @property
    def display_name(self) -> str:
        """Human-readable label used in notifications and reasons."""
        return {
            ThresholdCategory.WORKS: "Works",
            ThresholdCategory.GOODS_SERVICES: "Goods/Services",
            ThresholdCategory.OTHER: "Procurement",
        }[self]


class RoleCode(_ValuesMixin, str, Enum):
    """Role codes assigned to users. Capabilities derive from these."""

    ADMIN = "ADMIN"
    REQUESTER = "REQUESTER"
    DEPARTMENT_HEAD = "DEPARTMENT_HEAD"
    HEAD_OF_DIVISION = "HEAD_OF_DIVISION"
    EXECUTIVE_DIRECTOR = "EXECUTIVE_DIRECTOR"
    PROCUREMENT_OFFICER = "PROCUREMENT_OFFICER"
    PROCUREMENT_MANAGER = "PROCUREMENT_MANAGER"
    FINANCE_OFFICER = "FINANCE_OFFICER"
    FINANCE_MANAGER = "FINANCE_MANAGER"
    BUDGET_MANAGER = "BUDGET_MANAGER"
    INNOVATION_COMMITTEE = "INNOVATION_COMMITTEE"


class Capability(_ValuesMixin, str, Enum):
    """Typed capability resolved once from role codes (see capability_policy)."""

    REVIEW_DEPARTMENT = "can_review_department"
    REVIEW_DIVISION = "can_review_division"
    REVIEW_EXECUTIVE = "can_review_executive"
    REVIEW_PROCUREMENT = "can_review_procurement"
    REVIEW_FINANCE = "can_review_finance"
    ACT_AS_FINANCE_MANAGER = "can_act_as_finance_manager"
    COMBINE_REQUESTS = "can_combine_requests"
    COMBINE_ACROSS_DEPARTMENTS = "can_combine_across_departments"
    OVERRIDE_EDITS = "can_override_edits"
    RECEIVE_THRESHOLD_ALERTS = "can_receive_threshold_alerts"
    REVIEW_IDEAS = "can_review_ideas"


class VoteType(_ValuesMixin, str, Enum):
    """Idea vote direction."""

    UPVOTE = "UPVOTE"
    DOWNVOTE = "DOWNVOTE"


class IdeaStatus(_ValuesMixin, str, Enum):
    """Innovation idea review status."""

    PENDING_REVIEW = "PENDING_REVIEW"
    APPROVED = "APPROVED"
    REJECTED = "REJECTED"


class NotificationType(_ValuesMixin, str, Enum):
    """In-app notification type."""

    THRESHOLD_EXCEEDED = "THRESHOLD_EXCEEDED"


class AuditAction(_ValuesMixin, str, Enum):
    """Audit action types recorded by the audit recorder."""

    CREATED = "created"
    UPDATED = "updated"
    SUBMITTED = "submitted"
    STATUS_CHANGED = "status_changed"
    ASSIGNED = "assigned"
    COMBINED = "combined"
    OVERRIDE_EDIT = "override_edit"
    SPLINTERING_FLAGGED = "splintering_flagged"
