"""API v1 router aggregation.

Includes all endpoint modules with consistent prefix and tags.
"""

from typing import Any

from fastapi import APIRouter

from procurement.api.v1.endpoints import combined_requests, health, ideas, requests
from procurement.schemas.error import ErrorResponse

# Documented error bodies for authenticated routes (see core.exception_handlers)
_ERROR_RESPONSES: dict[int | str, dict[str, Any]] = {
    400: {"description": "Invalid input", "model": ErrorResponse},
    401: {"description": "Missing or invalid bearer token", "model": ErrorResponse},
    403: {"description": "Caller lacks the required capability", "model": ErrorResponse},
    404: {"description": "Resource not found", "model": ErrorResponse},
    409: {"description": "Not allowed in the current status", "model": ErrorResponse},
    503: {"description": "Transaction aborted; retry", "model": ErrorResponse},
}

api_router = APIRouter()

api_router.include_router(health.router, prefix="/health", tags=["health"])
api_router.include_router(
    requests.router, prefix="/requests", tags=["requests"], responses=_ERROR_RESPONSES
)
api_router.include_router(
    combined_requests.router,
    prefix="/combined-requests",
    tags=["combined-requests"],
    responses=_ERROR_RESPONSES,
)
api_router.include_router(
    ideas.router, prefix="/ideas", tags=["ideas"], responses=_ERROR_RESPONSES
)
