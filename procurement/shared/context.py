"""Request context using contextvars.

The request id is set by RequestIDMiddleware. Tasks created with
asyncio.create_task copy the current context, so post-commit side effects
still see the id of the request that scheduled them.
"""

from contextvars import ContextVar

_current_request_id: ContextVar[str | None] = ContextVar("current_request_id", default=None)


def set_request_id(request_id: str | None) -> None:
    _current_request_id.set(request_id)


def get_request_id() -> str | None:
    """Return the current request id, or None outside a request."""
    return _current_request_id.get()
