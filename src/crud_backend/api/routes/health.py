"""
Index and health check API routes
"""

from datetime import datetime, timezone

from fastapi import APIRouter, Request

from crud_backend.database.connection import check_database
from crud_backend.database.errors import classify_database_error
from crud_backend.models.http import HealthResponse, MessageResponse
from crud_backend.utils.error_handling import ServiceError, get_correlation_id

router = APIRouter()


@router.get("/", response_model=MessageResponse)
async def index(request: Request):
    settings = request.app.state.settings
    return MessageResponse(
        message=f"Welcome to {settings.app_name}!",
        correlation_id=get_correlation_id(request),
    )


@router.get("/api/healthcheck", response_model=HealthResponse)
async def health_check(request: Request):
    """
    Health check

    Reports healthy when a pooled connection can run SELECT 1 within the
    pool timeout; 503 otherwise.
    """
    settings = request.app.state.settings
    db_pool = request.app.state.repositories.pool

    if db_pool is None:
        database = "memory"
    else:
        try:
            await check_database(db_pool, settings.pool_timeout)
        except Exception as e:
            error = classify_database_error(e, "database", "check")
            raise ServiceError(error.kind, f"Health check failed: {error.message}") from e
        database = "connected"

    return HealthResponse(
        status="ok",
        database=database,
        timestamp=datetime.now(timezone.utc).isoformat(),
    )
