"""Tests for SideEffectDispatcher (fire-and-forget, failures logged)."""

import asyncio
import logging

from procurement.infrastructure.services import SideEffectDispatcher


async def test_dispatch_returns_before_effect_runs() -> None:
    dispatcher = SideEffectDispatcher()
    ran: list[str] = []

    async def effect() -> None:
        ran.append("audit")

    dispatcher.dispatch("audit:created", effect)
    assert ran == []
    assert dispatcher.pending == 1
    await dispatcher.drain()
    assert ran == ["audit"]
    assert dispatcher.pending == 0


async def test_failing_effect_is_logged_not_raised(caplog) -> None:
    dispatcher = SideEffectDispatcher()

    async def boom() -> None:
        raise RuntimeError("store down")

    with caplog.at_level(logging.WARNING):
        dispatcher.dispatch("notify:threshold_exceeded", boom)
        await dispatcher.drain()
    assert "notify:threshold_exceeded failed" in caplog.text
    assert dispatcher.pending == 0


async def test_drain_cancels_effects_past_timeout() -> None:
    dispatcher = SideEffectDispatcher()
    started = asyncio.Event()

    async def slow() -> None:
        started.set()
        await asyncio.sleep(10)

    dispatcher.dispatch("slow", slow)
    await started.wait()
    await dispatcher.drain(timeout=0.01)
    assert dispatcher.pending == 0


async def test_drain_without_effects() -> None:
    await SideEffectDispatcher().drain()
