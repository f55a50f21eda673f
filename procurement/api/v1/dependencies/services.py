"""Use-case dependencies (composition root).

Routes depend only on these; no repository or service construction in
endpoint modules.
"""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends, Request

from procurement.api.v1.dependencies.db import get_unit_of_work
from procurement.application.interfaces.services import (
    IAuditRecorder,
    INotificationDispatcher,
    ISideEffectDispatcher,
    IUnitOfWork,
)
from procurement.application.services import (
    RequestStateMachine,
    SplinteringDetector,
    ThresholdEvaluator,
)
from procurement.application.use_cases import (
    CombinationService,
    IdeaVotingService,
    RequestService,
)
from procurement.core.config import get_settings
from procurement.infrastructure.persistence.database import get_session_factory
from procurement.infrastructure.services import (
    SideEffectDispatcher,
    SqlAuditRecorder,
    SqlNotificationDispatcher,
)


def get_threshold_evaluator() -> ThresholdEvaluator:
    settings = get_settings()
    return ThresholdEvaluator(
        works_amount=settings.threshold_works_amount,
        goods_services_amount=settings.threshold_goods_services_amount,
    )


def get_splintering_detector() -> SplinteringDetector:
    settings = get_settings()
    return SplinteringDetector(
        threshold=settings.splinter_threshold_amount,
        window_days=settings.splinter_window_days,
    )


def get_state_machine(
    evaluator: Annotated[ThresholdEvaluator, Depends(get_threshold_evaluator)],
) -> RequestStateMachine:
    return RequestStateMachine(evaluator)


def get_side_effects(request: Request) -> ISideEffectDispatcher:
    """Process-wide dispatcher created by the lifespan."""
    dispatcher = getattr(request.app.state, "side_effects", None)
    if dispatcher is None:
        dispatcher = SideEffectDispatcher()
        request.app.state.side_effects = dispatcher
    return dispatcher


def get_audit_recorder() -> IAuditRecorder:
    return SqlAuditRecorder(get_session_factory())


def get_notification_dispatcher() -> INotificationDispatcher:
    return SqlNotificationDispatcher(get_session_factory())


def get_request_service(
    uow: Annotated[IUnitOfWork, Depends(get_unit_of_work)],
    machine: Annotated[RequestStateMachine, Depends(get_state_machine)],
    audit: Annotated[IAuditRecorder, Depends(get_audit_recorder)],
    side_effects: Annotated[ISideEffectDispatcher, Depends(get_side_effects)],
    splintering: Annotated[SplinteringDetector, Depends(get_splintering_detector)],
) -> RequestService:
    """Request lifecycle service (composition root)."""
    return RequestService(
        uow=uow,
        state_machine=machine,
        audit=audit,
        side_effects=side_effects,
        default_currency=get_settings().default_currency,
        splintering=splintering,
    )


def get_combination_service(
    uow: Annotated[IUnitOfWork, Depends(get_unit_of_work)],
    evaluator: Annotated[ThresholdEvaluator, Depends(get_threshold_evaluator)],
    audit: Annotated[IAuditRecorder, Depends(get_audit_recorder)],
    notifications: Annotated[INotificationDispatcher, Depends(get_notification_dispatcher)],
    side_effects: Annotated[ISideEffectDispatcher, Depends(get_side_effects)],
) -> CombinationService:
    """Combination service (composition root)."""
    return CombinationService(
        uow=uow,
        evaluator=evaluator,
        audit=audit,
        notifications=notifications,
        side_effects=side_effects,
        combinable_limit=get_settings().combinable_list_limit,
    )


def get_idea_service(
    uow: Annotated[IUnitOfWork, Depends(get_unit_of_work)],
) -> IdeaVotingService:
    return IdeaVotingService(uow=uow)
