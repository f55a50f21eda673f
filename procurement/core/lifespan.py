"""Application lifespan: startup and shutdown.

Only wiring of infrastructure here: the side-effect dispatcher, telemetry
shutdown and DB engine dispose.
"""

import logging
from contextlib import asynccontextmanager
from typing import AsyncIterator

from fastapi import FastAPI

from procurement.infrastructure.persistence.database import dispose_engine
from procurement.infrastructure.services.side_effects import SideEffectDispatcher

logger = logging.getLogger(__name__)


@asynccontextmanager
async def create_lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Run startup then yield; on exit run shutdown.

    Shutdown order: drain pending side effects (audit, notifications),
    flush telemetry, dispose the SQL engine.
    """
    if getattr(app.state, "side_effects", None) is None:
        app.state.side_effects = SideEffectDispatcher()
    logger.info("Application startup complete")

    yield

    await app.state.side_effects.drain()
    logger.info("Side effects drained")

    telemetry = getattr(app.state, "telemetry", None)
    if telemetry is not None:
        telemetry.shutdown()
        logger.info("Telemetry shutdown complete")

    await dispose_engine()
    logger.info("Database engine disposed")
