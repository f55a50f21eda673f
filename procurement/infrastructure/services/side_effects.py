"""Fire-and-forget runner for post-commit side effects.

Effects run as asyncio tasks. A failing effect is logged at WARNING and
dropped; it never reaches the caller that scheduled it. Strong references
to pending tasks are kept until they finish so they are not collected
mid-flight, and drain() lets shutdown wait for them.
"""

from __future__ import annotations

import asyncio
from collections.abc import Awaitable, Callable
from typing import Any

from procurement.shared.telemetry.logging import get_logger

logger = get_logger(__name__)


class SideEffectDispatcher:
    """Implements ISideEffectDispatcher on the running event loop."""

    def __init__(self) -> None:
        self._tasks: set[asyncio.Task[Any]] = set()

    @property
    def pending(self) -> int:
        return len(self._tasks)

    def dispatch(self, name: str, effect: Callable[[], Awaitable[Any]]) -> None:
        """Schedule effect() on the loop and return immediately."""
        task = asyncio.create_task(self._run(name, effect), name=f"side-effect:{name}")
        self._tasks.add(task)
        task.add_done_callback(self._tasks.discard)

    async def _run(self, name: str, effect: Callable[[], Awaitable[Any]]) -> None:
        try:
            await effect()
        except asyncio.CancelledError:
            logger.warning("Side effect %s cancelled", name)
            raise
        except Exception as e:
            logger.warning("Side effect %s failed: %s", name, e, exc_info=True)

    async def drain(self, timeout: float = 5.0) -> None:
        """Wait for pending effects; cancel whatever is still running after timeout."""
        if not self._tasks:
            return
        pending = set(self._tasks)
        _, still_running = await asyncio.wait(pending, timeout=timeout)
        for task in still_running:
            task.cancel()
        if still_running:
            await asyncio.gather(*still_running, return_exceptions=True)
            logger.warning("Cancelled %d side effects still running at shutdown", len(still_running))
