"""
Database connection and pool management
"""

import logging
from typing import Optional

import asyncpg

from crud_backend.config.settings import Settings

logger = logging.getLogger(__name__)


async def init_database(settings: Settings) -> asyncpg.Pool:
    """
    Initialize database connection pool

    The pool is owned by the caller (the application lifespan) and must be
    closed with close_database.
    """
    db_pool = await asyncpg.create_pool(
        settings.database_url,
        min_size=settings.pool_min_size,
        max_size=settings.pool_max_size,
        command_timeout=settings.command_timeout,
        timeout=settings.pool_timeout,
        statement_cache_size=0  # Fix for pgbouncer compatibility
    )

    # Test connection
    try:
        async with db_pool.acquire(timeout=settings.pool_timeout) as conn:
            await conn.fetchval("SELECT 1")
    except Exception:
        await db_pool.close()
        raise

    logger.info(
        f"Database initialized successfully (pool size {settings.pool_min_size}-{settings.pool_max_size})"
    )
    return db_pool


async def close_database(db_pool: Optional[asyncpg.Pool]):
    """Close database connection pool"""
    if db_pool is not None:
        await db_pool.close()
    logger.info("Database connections closed")


async def check_database(db_pool: asyncpg.Pool, timeout: float) -> None:
    """Run a trivial statement on a pooled connection; raises on failure"""
    async with db_pool.acquire(timeout=timeout) as conn:
        await conn.fetchval("SELECT 1", timeout=timeout)
