"""
identity_admin.api.app

FastAPI app factory for the Identity Admin service.

Responsibilities:
- Build the FastAPI application and register routers/middleware/exception handlers.
- Initialize and dispose shared infrastructure (DB engine, service graph).
- Provide a single composition root where cross-cutting concerns live.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from identity_admin import __version__
from identity_admin.api.errors import register_exception_handlers
from identity_admin.api.routers.admin import router as admin_router
from identity_admin.api.routers.dev_auth import router as dev_auth_router
from identity_admin.api.routers.health import router as health_router
from identity_admin.api.routers.session import router as session_router
from identity_admin.container import build_services
from identity_admin.db.init_db import init_db
from identity_admin.db.session import create_engine, create_sessionmaker
from identity_admin.observability.logging import configure_logging, get_logger
from identity_admin.observability.middleware import RequestContextMiddleware
from identity_admin.settings import Settings

log = get_logger(__name__)


def create_app(*, settings: Settings) -> FastAPI:
    # Configure structured logging once at process startup (before app serves requests).
    configure_logging(
        service_name=settings.service_name,
        level=settings.log_level,
        json_logs=settings.log_json,
    )

    @asynccontextmanager
    async def lifespan(app: FastAPI) -> AsyncIterator[None]:
        log.info("startup", env=settings.env, admins=len(settings.admin_emails))
        engine = create_engine(settings)
        app.state.engine = engine
        app.state.sessionmaker = create_sessionmaker(engine)
        if settings.env in ("dev", "test"):
            # Dev/test convenience: create tables automatically. Prod uses Alembic migrations.
            await init_db(engine)
        app.state.services = build_services(
            settings=settings, session_factory=app.state.sessionmaker
        )
        try:
            yield
        finally:
            await engine.dispose()
            log.info("shutdown")

    app = FastAPI(
        title="Identity Admin Service",
        version=__version__,
        docs_url="/docs",
        openapi_url="/openapi.json",
        lifespan=lifespan,
    )
    app.state.settings = settings

    app.add_middleware(RequestContextMiddleware)
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.cors_origins,
        allow_credentials=True,
        allow_methods=["GET", "POST", "OPTIONS"],
        allow_headers=["Authorization", "Content-Type", "X-Request-ID"],
    )
    register_exception_handlers(app)

    app.include_router(health_router, tags=["health"])
    app.include_router(session_router)
    app.include_router(admin_router)
    if settings.env != "prod":
        app.include_router(dev_auth_router)

    return app


# --- Module Notes -----------------------------------------------------------
# Business logic stays in `services`; this module only composes.
