"""Presentation-layer dependency injection (composition root).

Provides FastAPI Depends() for the caller's Actor and the application
services. Tests override these via app.dependency_overrides.
"""

from procurement.api.v1.dependencies.auth import get_current_actor
from procurement.api.v1.dependencies.db import get_unit_of_work, get_user_repo
from procurement.api.v1.dependencies.services import (
    get_audit_recorder,
    get_combination_service,
    get_idea_service,
    get_notification_dispatcher,
    get_request_service,
    get_side_effects,
    get_state_machine,
    get_threshold_evaluator,
)

__all__ = [
    "get_audit_recorder",
    "get_combination_service",
    "get_current_actor",
    "get_idea_service",
    "get_notification_dispatcher",
    "get_request_service",
    "get_side_effects",
    "get_state_machine",
    "get_threshold_evaluator",
    "get_unit_of_work",
    "get_user_repo",
]
