"""
Repository bundle handed to the service layer
"""

from dataclasses import dataclass
from typing import Optional

import asyncpg

from crud_backend.config.settings import Settings
from crud_backend.database.memory import InMemoryItemRepository, InMemoryUserRepository
from crud_backend.database.repositories import ItemRepository, UserRepository


@dataclass
class Repositories:
    items: object
    users: object
    # None when the memory backend is in use
    pool: Optional[asyncpg.Pool] = None


def postgres_repositories(pool: asyncpg.Pool, settings: Settings) -> Repositories:
    return Repositories(
        items=ItemRepository(pool, settings.pool_timeout),
        users=UserRepository(pool, settings.pool_timeout),
        pool=pool,
    )


def memory_repositories() -> Repositories:
    return Repositories(items=InMemoryItemRepository(), users=InMemoryUserRepository())
