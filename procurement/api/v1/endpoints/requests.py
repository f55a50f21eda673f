"""Procurement request API: thin routes delegating to RequestService."""

from typing import Annotated

from fastapi import APIRouter, Depends, Request

from procurement.api.v1.dependencies import get_current_actor, get_request_service
from procurement.application.use_cases import RequestService
from procurement.core.limiter import limit_writes
from procurement.domain.value_objects import Actor
from procurement.schemas.request import (
    AssignBody,
    RequestActionBody,
    RequestCreate,
    RequestResponse,
    RequestUpdate,
    SplinteringResponse,
    StatusHistoryResponse,
)

router = APIRouter()


@router.post("", response_model=RequestResponse, status_code=201)
@limit_writes
async def create_request(
    request: Request,
    body: RequestCreate,
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[RequestService, Depends(get_request_service)],
):
    """Create a DRAFT request owned by the caller."""
    created = await service.create_draft(actor, body.to_command())
    return RequestResponse.model_validate(created)


@router.get("/{request_id}", response_model=RequestResponse)
async def get_request(
    request_id: int,
    _: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[RequestService, Depends(get_request_service)],
):
    return RequestResponse.model_validate(await service.get(request_id))


@router.patch("/{request_id}", response_model=RequestResponse)
@limit_writes
async def update_request(
    request: Request,
    request_id: int,
    body: RequestUpdate,
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[RequestService, Depends(get_request_service)],
):
    """Edit a draft. Admins may set override=true to edit later stages (audited)."""
    updated = await service.update_draft(request_id, actor, body.to_command())
    return RequestResponse.model_validate(updated)


@router.post("/{request_id}/submit", response_model=RequestResponse)
@limit_writes
async def submit_request(
    request: Request,
    request_id: int,
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[RequestService, Depends(get_request_service)],
):
    """Submit a draft for department review."""
    return RequestResponse.model_validate(await service.submit(request_id, actor))


@router.post("/{request_id}/actions", response_model=RequestResponse)
@limit_writes
async def act_on_request(
    request: Request,
    request_id: int,
    body: RequestActionBody,
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[RequestService, Depends(get_request_service)],
):
    """Approve, reject, return or escalate at the current review stage."""
    acted = await service.act(request_id, actor, body.to_command())
    return RequestResponse.model_validate(acted)


@router.post("/{request_id}/assign", response_model=RequestResponse)
@limit_writes
async def assign_request(
    request: Request,
    request_id: int,
    body: AssignBody,
    actor: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[RequestService, Depends(get_request_service)],
):
    """Assign to the caller (no user_id) or delegate to another user."""
    assigned = await service.assign(
        request_id, actor, target_user_id=body.user_id, comment=body.comment
    )
    return RequestResponse.model_validate(assigned)


@router.get("/{request_id}/history", response_model=list[StatusHistoryResponse])
async def get_request_history(
    request_id: int,
    _: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[RequestService, Depends(get_request_service)],
):
    """Status history, oldest first."""
    entries = await service.history(request_id)
    return [StatusHistoryResponse.model_validate(e) for e in entries]


@router.get("/{request_id}/splintering", response_model=SplinteringResponse)
async def get_request_splintering(
    request_id: int,
    _: Annotated[Actor, Depends(get_current_actor)],
    service: Annotated[RequestService, Depends(get_request_service)],
):
    """Recent in-flight spend by the same requester or department, against the splintering threshold."""
    check = await service.check_splintering(request_id)
    return SplinteringResponse.model_validate(check)
