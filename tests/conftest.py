"""
pytest configuration and fixtures for the CRUD backend test suite
Everything runs against the in-memory backend or asyncpg test doubles;
no PostgreSQL server is needed.
"""

import httpx
import pytest
import pytest_asyncio

from crud_backend.app import create_app
from crud_backend.config.settings import Settings, MEMORY_DATABASE_URL
from crud_backend.database.memory import InMemoryItemRepository, InMemoryUserRepository
from crud_backend.database.registry import Repositories, memory_repositories
from crud_backend.services.items_service import ItemsService
from crud_backend.services.users_service import UsersService


@pytest.fixture
def settings() -> Settings:
    return Settings(database_url=MEMORY_DATABASE_URL, app_name="crud-test")


@pytest.fixture
def repositories() -> Repositories:
    return memory_repositories()


@pytest.fixture
def items_service() -> ItemsService:
    return ItemsService(InMemoryItemRepository())


@pytest.fixture
def users_service() -> UsersService:
    return UsersService(InMemoryUserRepository())


@pytest.fixture
def app(settings, repositories):
    return create_app(settings, repositories=repositories)


@pytest_asyncio.fixture
async def client(app):
    """HTTP client bound to the ASGI app (lifespan is not run)"""
    transport = httpx.ASGITransport(app=app)
    async with httpx.AsyncClient(transport=transport, base_url="http://testserver") as http_client:
        yield http_client
