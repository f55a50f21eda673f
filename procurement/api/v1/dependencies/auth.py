"""Caller identity: bearer JWT -> user -> Actor."""

from __future__ import annotations

from typing import Annotated

from fastapi import Depends
from fastapi.security import HTTPAuthorizationCredentials, HTTPBearer

from procurement.api.v1.dependencies.db import get_user_repo
from procurement.application.services.capability_policy import build_actor
from procurement.domain.exceptions import AuthenticationException
from procurement.domain.value_objects import Actor
from procurement.infrastructure.persistence.repositories import UserRepository
from procurement.infrastructure.security.jwt import user_id_from_token
from procurement.shared.telemetry.logging import get_logger

logger = get_logger(__name__)

_http_bearer = HTTPBearer(auto_error=False)


async def get_current_actor(
    credentials: Annotated[HTTPAuthorizationCredentials | None, Depends(_http_bearer)],
    user_repo: Annotated[UserRepository, Depends(get_user_repo)],
) -> Actor:
    """Resolve the caller once per request; raise 401 if missing, invalid or inactive."""
    if credentials is None:
        raise AuthenticationException("Not authenticated")
    try:
        user_id = user_id_from_token(credentials.credentials)
    except ValueError as e:
        logger.info("Rejected bearer token: %s", e)
        raise AuthenticationException("Invalid or expired token") from e
    user = await user_repo.get(user_id)
    if user is None or not user.is_active:
        raise AuthenticationException("User not found or inactive")
    return build_actor(user.id, user.department_id, user.role_codes)
