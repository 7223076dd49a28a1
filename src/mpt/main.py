"""
MPT Guide FastAPI Application Entry Point

``create_application`` assembles the ASGI app; ``lifespan`` wires the
model gateway, the session store and the orchestrator onto
``app.state`` at startup. Tests may install their own orchestrator on
``app.state`` before the app starts; it is left in place.

Run locally with ``uvicorn mpt.main:app``.
"""

from contextlib import asynccontextmanager
from typing import AsyncGenerator, Optional

from fastapi import FastAPI
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware

from mpt import __version__
from mpt.api.middleware import ErrorHandlerMiddleware, validation_exception_handler
from mpt.api.v1.router import api_router
from mpt.config import Settings, get_settings
from mpt.config.logging_config import configure_logging, get_logger
from mpt.infrastructure.llm import ProviderGateway, build_providers
from mpt.infrastructure.metrics import metrics_router, update_system_info
from mpt.infrastructure.storage import InMemorySessionStore
from mpt.services.orchestration import SessionOrchestrator

settings = get_settings()
configure_logging(settings)
logger = get_logger(__name__)


def build_orchestrator(settings: Settings) -> SessionOrchestrator:
    """Wire the gateway, session store and orchestrator from settings."""
    primary, secondary = build_providers(settings)
    if secondary is None:
        logger.warning("No secondary provider configured; rate limits will surface as errors")

    gateway = ProviderGateway(
        primary,
        secondary,
        retry_interval_seconds=settings.gateway.fallback_retry_interval_seconds,
        rate_limit_markers=settings.gateway.rate_limit_markers,
    )
    store = InMemorySessionStore(
        ttl_seconds=settings.session.ttl_seconds,
        max_sessions=settings.session.max_sessions,
    )
    return SessionOrchestrator(store, gateway, history_limit=settings.session.history_limit)


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncGenerator[None, None]:
    app_settings: Settings = app.state.settings
    logger.info("MPT Guide starting", env=app_settings.env, version=__version__)

    if getattr(app.state, "orchestrator", None) is None:
        app.state.orchestrator = build_orchestrator(app_settings)
    orchestrator: SessionOrchestrator = app.state.orchestrator
    logger.info(
        "Orchestrator ready",
        primary=orchestrator.gateway.primary.provider_name,
        secondary_configured=orchestrator.gateway.has_secondary,
    )
    update_system_info(app_settings.env)

    try:
        yield
    finally:
        logger.info("MPT Guide stopping", sessions=len(orchestrator.store))


def create_application(app_settings: Optional[Settings] = None) -> FastAPI:
    """
    Create and configure the FastAPI application.

    Args:
        app_settings: Settings override (defaults to the cached settings)
    """
    app_settings = app_settings or settings
    expose_docs = not app_settings.is_production()

    app = FastAPI(
        title="MPT Guide API",
        description="Stage-guided MPT conversation backend",
        version=__version__,
        docs_url="/docs" if expose_docs else None,
        redoc_url="/redoc" if expose_docs else None,
        lifespan=lifespan,
    )
    app.state.settings = app_settings

    app.add_middleware(
        CORSMiddleware,
        allow_origins=app_settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST"],
        allow_headers=["*"],
        expose_headers=["X-Correlation-ID"],
    )
    app.add_middleware(ErrorHandlerMiddleware)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)

    app.include_router(api_router, prefix=app_settings.api_prefix)
    if app_settings.metrics_enabled:
        app.include_router(metrics_router, tags=["Metrics"])

    @app.get("/", include_in_schema=False)
    async def root() -> dict:
        return {"name": "MPT Guide API", "version": __version__, "docs": app.docs_url}

    return app


app = create_application()


if __name__ == "__main__":
    import uvicorn

    uvicorn.run(
        "mpt.main:app",
        host="0.0.0.0",
        port=8000,
        reload=settings.env == "development",
        log_level=settings.log_level.lower(),
    )
