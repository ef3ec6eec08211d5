# =============================================================================
# FastAPI Application Factory
# =============================================================================
#
# `create_app(settings)` wires configuration, logging, middleware, routers
# and exception handlers. The module-level `app` is what uvicorn serves:
#
#   uvicorn app.main:app --reload
#
# LIFESPAN:
#   startup  → build engine + session factory, create tables if configured
#   shutdown → dispose the engine's connection pool
#
# Tests build their own app with create_app(Settings(database_url=...)).
# =============================================================================

from __future__ import annotations

import logging
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from app.api.errors import register_exception_handlers
from app.api.logging_middleware import RequestLoggingMiddleware
from app.api.users import router as users_router
from app.config import Settings, get_settings
from app.db.engine import build_engine, build_session_factory, create_tables
from app.models.responses import HealthResponse

logger = logging.getLogger(__name__)


def configure_logging(level: str) -> None:
    logging.basicConfig(
        level=level.upper(),
        format="%(asctime)s %(levelname)s [%(name)s] %(message)s",
    )


def create_app(settings: Settings | None = None) -> FastAPI:
    settings = settings or get_settings()
    configure_logging(settings.log_level)

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        engine = build_engine(settings)
        app.state.engine = engine
        app.state.session_factory = build_session_factory(engine)
        if settings.create_tables_on_startup:
            await create_tables(engine)
        logger.info("%s %s started", settings.app_name, settings.app_version)
        try:
            yield
        finally:
            await engine.dispose()

    app = FastAPI(
        title=settings.app_name,
        version=settings.app_version,
        debug=settings.debug,
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(RequestLoggingMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["Content-Type", "Authorization"],
    )

    register_exception_handlers(app)
    app.include_router(users_router)

    @app.get("/api/health", response_model=HealthResponse, tags=["Health"])
    async def health() -> HealthResponse:
        return HealthResponse(version=settings.app_version, service=settings.app_name)

    return app


app = create_app()
