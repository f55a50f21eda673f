"""FastAPI application entry point.

Wiring only: logging, telemetry, exception handlers, middleware, routers.
Settings are loaded inside create_app() so tests can set env before
importing or calling it.
"""

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from procurement.api.v1 import api_router
from procurement.core.config import get_settings
from procurement.core.exception_handlers import register_exception_handlers
from procurement.core.lifespan import create_lifespan
from procurement.core.limiter import limiter
from procurement.infrastructure.services.side_effects import SideEffectDispatcher
from procurement.middleware import RequestIDMiddleware, TimeoutMiddleware
from procurement.shared.telemetry import get_logger, setup_logging

logger = get_logger(__name__)


def _setup_telemetry(app: FastAPI) -> None:
    from procurement.infrastructure.persistence.database import get_engine
    from procurement.shared.telemetry.telemetry import TelemetryConfig

    settings = get_settings()
    telemetry = TelemetryConfig(
        service_name=settings.app_name,
        service_version=settings.app_version,
        environment=settings.telemetry_environment,
    )
    telemetry.setup(
        exporter_type=settings.telemetry_exporter,
        otlp_endpoint=settings.telemetry_otlp_endpoint,
        sample_rate=settings.telemetry_sample_rate,
    )
    # Instrumentation adds middleware, which must happen before the app starts.
    telemetry.instrument_fastapi(app)
    telemetry.instrument_sqlalchemy(get_engine())
    app.state.telemetry = telemetry
    logger.info("Telemetry initialized")


def create_app() -> FastAPI:
    """Build and return the FastAPI application."""
    settings = get_settings()
    setup_logging()
    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=create_lifespan,
    )

    app.state.limiter = limiter
    app.state.side_effects = SideEffectDispatcher()
    app.state.telemetry = None
    register_exception_handlers(app)

    # last added = outermost: timeout -> request ID -> CORS
    app.add_middleware(
        CORSMiddleware,
        allow_origins=[o.strip() for o in settings.allowed_origins.split(",") if o.strip()],
        allow_credentials=True,
        allow_methods=["*"],
        allow_headers=["*"],
    )
    app.add_middleware(RequestIDMiddleware, header_name=settings.request_id_header)
    app.add_middleware(TimeoutMiddleware, timeout_seconds=settings.request_timeout_seconds)

    if settings.telemetry_enabled:
        _setup_telemetry(app)

    app.include_router(api_router, prefix=settings.api_prefix)
    return app


app = create_app()
