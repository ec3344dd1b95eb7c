"""
Application lifespan: backend selection, startup migration check, pool shutdown
"""

import pytest

import crud_backend.app as app_module
from crud_backend.app import create_app
from crud_backend.config.settings import Settings
from crud_backend.database.memory import InMemoryItemRepository
from crud_backend.database.migrator import MigrationError, Migrator
from crud_backend.database.repositories import ItemRepository

from fakes import FakeMigrationConnection, FakePool


def postgres_settings(**overrides) -> Settings:
    return Settings(database_url="postgres://db/crud", **overrides)


def patch_database(monkeypatch, pool):
    async def fake_init_database(settings):
        return pool

    async def fake_close_database(db_pool):
        await db_pool.close()

    monkeypatch.setattr(app_module, "init_database", fake_init_database)
    monkeypatch.setattr(app_module, "close_database", fake_close_database)


@pytest.mark.asyncio
async def test_memory_backend_is_built_in_lifespan(settings):
    app = create_app(settings)
    assert app.state.repositories is None

    async with app.router.lifespan_context(app):
        assert isinstance(app.state.repositories.items, InMemoryItemRepository)
        assert app.state.services.items.repository is app.state.repositories.items


@pytest.mark.asyncio
async def test_startup_refused_when_migrations_pending(monkeypatch):
    pool = FakePool(FakeMigrationConnection())
    patch_database(monkeypatch, pool)
    app = create_app(postgres_settings())

    with pytest.raises(MigrationError, match="pending migration"):
        async with app.router.lifespan_context(app):
            pass

    assert pool.closed
    assert app.state.repositories is None
    assert not pool.conn.has_ledger


@pytest.mark.asyncio
async def test_startup_with_migrated_schema(monkeypatch):
    conn = FakeMigrationConnection()
    await Migrator(conn).upgrade()
    pool = FakePool(conn)
    patch_database(monkeypatch, pool)
    app = create_app(postgres_settings())

    async with app.router.lifespan_context(app):
        assert isinstance(app.state.repositories.items, ItemRepository)
        assert app.state.repositories.pool is pool
        assert not pool.closed

    assert pool.closed


@pytest.mark.asyncio
async def test_migration_check_can_be_disabled(monkeypatch):
    pool = FakePool(FakeMigrationConnection())
    patch_database(monkeypatch, pool)
    app = create_app(postgres_settings(require_migrations=False))

    async with app.router.lifespan_context(app):
        assert app.state.repositories.pool is pool
