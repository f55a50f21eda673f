"""JWT access tokens. The subject claim carries the user id.

Token issuance (login) lives outside this service; create_access_token is
used by tooling and tests to mint tokens the API will accept.
"""

from datetime import UTC, datetime, timedelta
from typing import Any, cast

from jose import JWTError, jwt

from procurement.core.config import get_settings


def create_access_token(
    user_id: int,
    extra_claims: dict[str, Any] | None = None,
    expires_delta: timedelta | None = None,
) -> str:
    """Create a signed access token for user_id.

    Args:
        user_id: Subject of the token.
        extra_claims: Additional claims to encode.
        expires_delta: Optional TTL; else settings.access_token_expire_minutes.
    """
    settings = get_settings()
    to_encode: dict[str, Any] = dict(extra_claims or {})
    to_encode["sub"] = str(user_id)
    if expires_delta is not None:
        expire = datetime.now(UTC) + expires_delta
    else:
        expire = datetime.now(UTC) + timedelta(minutes=settings.access_token_expire_minutes)
    to_encode["exp"] = expire
    encoded = jwt.encode(
        to_encode,
        settings.secret_key.get_secret_value(),
        algorithm=settings.algorithm,
    )
    return cast(str, encoded)


def verify_token(token: str) -> dict[str, Any]:
    """Verify and decode a JWT. Returns the payload.

    Raises:
        ValueError: If the token is invalid, expired, or missing exp/sub.
    """
    settings = get_settings()
    try:
        payload = jwt.decode(
            token,
            settings.secret_key.get_secret_value(),
            algorithms=[settings.algorithm],
            options={"require_exp": True, "require_sub": True},
        )
    except JWTError as e:
        raise ValueError(f"Invalid token: {e!s}") from e
    if "sub" not in payload:
        raise ValueError("Token missing required claim: sub")
    return payload


def user_id_from_token(token: str) -> int:
    """Decode token and return its subject as an integer user id."""
    payload = verify_token(token)
    try:
        return int(payload["sub"])
    except (TypeError, ValueError) as e:
        raise ValueError("Token subject is not a user id") from e
