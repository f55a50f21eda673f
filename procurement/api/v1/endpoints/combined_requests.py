"""Combined request API: combine eligible requests into multi-lot submissions."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from procurement.api.v1.dependencies import get_combination_service, get_current_actor
from procurement.application.use_cases import CombinationService
from procurement.core.limiter import limit_writes
from procurement.domain.value_objects import Actor
from procurement.schemas.combined_request import (
    CombineBody,
    CombinedRequestListItem,
    CombinedRequestResponse,
    CombineResponse,
)
from procurement.schemas.request import RequestListItem

router = APIRouter()


@router.post("", response_model=CombineResponse, status_code=201)
@limit_writes
async def combine_requests(
    request: Request,
    body: CombineBody,
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[CombinationService, Depends(get_combination_service)],
):
    """Combine requests into lots; reports whether the total needs executive approval."""
    result = await service.combine(actor, body.to_command())
    return CombineResponse.from_result(result)


@router.get("", response_model=list[CombinedRequestListItem])
async def list_combined_requests(
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[CombinationService, Depends(get_combination_service)],
):
    """Combined requests, newest first."""
    rows = await service.list_combined(actor)
    return [CombinedRequestListItem.model_validate(r) for r in rows]


@router.get("/combinable", response_model=list[RequestListItem])
async def list_combinable_requests(
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[CombinationService, Depends(get_combination_service)],
):
    """Requests eligible for combination, newest first."""
    rows = await service.list_combinable(actor)
    return [RequestListItem.model_validate(r) for r in rows]


@router.get("/{combined_id}", response_model=CombinedRequestResponse)
async def get_combined_request(
    combined_id: int,
    _: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[CombinationService, Depends(get_combination_service)],
):
    combined = await service.get_combined(combined_id)
    return CombinedRequestResponse.from_entity(combined)
