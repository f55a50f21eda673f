"""Application services: pure policies used by the use cases."""

from procurement.application.services.capability_policy import build_actor, resolve_capabilities
from procurement.application.services.request_state_machine import (
    TRANSITIONS,
    RequestStateMachine,
    Transition,
)
from procurement.application.services.splintering_detector import (
    ACTIVE_SPEND_STATUSES,
    SplinteringCheck,
    SplinteringDetector,
)
from procurement.application.services.threshold_evaluator import (
    ThresholdDecision,
    ThresholdEvaluator,
    evaluate,
)

__all__ = [
    "ACTIVE_SPEND_STATUSES",
    "TRANSITIONS",
    "RequestStateMachine",
    "SplinteringCheck",
    "SplinteringDetector",
    "ThresholdDecision",
    "ThresholdEvaluator",
    "Transition",
    "build_actor",
    "evaluate",
    "resolve_capabilities",
]
