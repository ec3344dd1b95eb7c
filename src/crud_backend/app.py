"""
CRUD Backend API Server
Core functionality: items and users over HTTP, backed by a pooled PostgreSQL connection set
"""

import logging
from contextlib import asynccontextmanager
from typing import Optional

from fastapi import FastAPI
from fastapi.middleware.cors import CORSMiddleware

from crud_backend import __version__
from crud_backend.api.routes import health, items, users
from crud_backend.config.settings import Settings, load_settings, settings_summary
from crud_backend.database.connection import init_database, close_database
from crud_backend.database.migrator import Migrator
from crud_backend.database.registry import Repositories, memory_repositories, postgres_repositories
from crud_backend.models.http import ErrorResponse
from crud_backend.services.registry import build_services
from crud_backend.utils.error_handling import setup_error_handling

logger = logging.getLogger(__name__)

ERROR_RESPONSES = {
    status: {"model": ErrorResponse}
    for status in (400, 404, 409, 500, 503)
}


def attach_repositories(app: FastAPI, repositories: Repositories):
    app.state.repositories = repositories
    app.state.services = build_services(repositories)


async def verify_migrations(pool, settings: Settings):
    """Refuse to serve traffic when the schema is behind the packaged migrations"""
    async with pool.acquire(timeout=settings.pool_timeout) as conn:
        await Migrator(conn).ensure_up_to_date()
    logger.info("Database schema is up to date")


@asynccontextmanager
async def lifespan(app: FastAPI):
    """Application lifespan manager; owns the connection pool"""
    settings: Settings = app.state.settings
    pool = None

    # Repositories injected by create_app (tests) are used as they are
    if app.state.repositories is None:
        if settings.uses_memory_backend:
            attach_repositories(app, memory_repositories())
        else:
            pool = await init_database(settings)
            try:
                if settings.require_migrations:
                    await verify_migrations(pool, settings)
            except Exception:
                await close_database(pool)
                raise
            attach_repositories(app, postgres_repositories(pool, settings))

    logger.info(f"Starting {settings.app_name}: {settings_summary(settings)}")
    try:
        yield
    finally:
        if pool is not None:
            await close_database(pool)


def create_app(settings: Optional[Settings] = None, repositories: Optional[Repositories] = None) -> FastAPI:
    """
    Build the FastAPI application

    Args:
        settings: Runtime configuration (read from the environment when omitted)
        repositories: Pre-built repositories; skips pool creation in the lifespan

    Returns:
        Configured FastAPI app
    """
    if settings is None:
        settings = load_settings()

    app = FastAPI(
        title="CRUD Backend",
        description="Backend API for item and user management",
        version=__version__,
        lifespan=lifespan
    )
    app.state.settings = settings
    app.state.repositories = None
    if repositories is not None:
        attach_repositories(app, repositories)

    # CORS middleware
    app.add_middleware(
        CORSMiddleware,
        allow_origins=settings.allowed_origins,
        allow_credentials="*" not in settings.allowed_origins,
        allow_methods=["GET", "POST", "PUT", "DELETE", "OPTIONS"],
        allow_headers=["*"],
        expose_headers=["X-Correlation-Id"],
    )

    # Setup centralized error handling
    setup_error_handling(app)

    # Include API routes
    app.include_router(health.router, tags=["Health"])
    for prefix, schema in (("/api", True), ("", False)):
        app.include_router(
            items.router,
            prefix=f"{prefix}/items",
            tags=["Items"],
            responses=ERROR_RESPONSES,
            include_in_schema=schema,
        )
        app.include_router(
            users.router,
            prefix=f"{prefix}/users",
            tags=["Users"],
            responses=ERROR_RESPONSES,
            include_in_schema=schema,
        )

    return app
