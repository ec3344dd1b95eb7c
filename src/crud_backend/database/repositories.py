"""
PostgreSQL repositories for items and users
"""

import logging
from typing import Any, Awaitable, Callable, Dict, Generic, List, Tuple, Type, TypeVar

import asyncpg
from pydantic import BaseModel

from crud_backend.database.errors import classify_database_error
from crud_backend.models.errors import NotFoundError
from crud_backend.models.item import Item
from crud_backend.models.user import User

logger = logging.getLogger(__name__)

EntityT = TypeVar("EntityT", bound=BaseModel)


class PostgresRepository(Generic[EntityT]):
    """
    CRUD statements for a single table with a VARCHAR primary key named id.

    Every public method acquires one pooled connection, runs its statements
    (inside a transaction when there is more than one) and releases the
    connection on all exit paths. Driver errors are classified into domain
    errors; unique constraints in the database are the only uniqueness guard.
    """

    table_name: str = ""
    entity_name: str = ""
    model: Type[BaseModel] = BaseModel
    fields: Tuple[str, ...] = ("id",)

    def __init__(self, pool: asyncpg.Pool, acquire_timeout: float):
        self.pool = pool
        self.acquire_timeout = acquire_timeout

    @property
    def columns(self) -> str:
        return ", ".join(self.fields)

    async def _run(self, action: str, operation: Callable[[asyncpg.Connection], Awaitable[Any]]) -> Any:
        try:
            async with self.pool.acquire(timeout=self.acquire_timeout) as conn:
                return await operation(conn)
        except Exception as e:
            raise classify_database_error(e, self.table_name, action) from e

    def _to_entity(self, row) -> EntityT:
        return self.model(**dict(row))

    def _not_found(self, record_id: str) -> NotFoundError:
        return NotFoundError(f"{self.entity_name} with id {record_id} not found")

    async def create(self, entity: EntityT) -> EntityT:
        """Insert a new row; ConflictError on a unique violation"""
        values = entity.model_dump()
        params = [values[f] for f in self.fields]
        placeholders = ", ".join(f"${i}" for i in range(1, len(self.fields) + 1))
        query = (
            f"INSERT INTO {self.table_name} ({self.columns}) "
            f"VALUES ({placeholders}) RETURNING {self.columns}"
        )

        async def operation(conn):
            logger.debug(f"Executing INSERT: {query}")
            async with conn.transaction():
                return await conn.fetchrow(query, *params)

        row = await self._run("create", operation)
        if not row:
            raise classify_database_error(
                RuntimeError("Insert operation failed - no data returned"), self.table_name, "create"
            )
        created = self._to_entity(row)
        logger.info(f"Created {self.entity_name} {created.id}")
        return created

    async def get(self, record_id: str) -> EntityT:
        query = f"SELECT {self.columns} FROM {self.table_name} WHERE id = $1"

        async def operation(conn):
            logger.debug(f"Executing READ: {query}")
            return await conn.fetchrow(query, record_id)

        row = await self._run("get", operation)
        if row is None:
            raise self._not_found(record_id)
        return self._to_entity(row)

    async def list(self, limit: int = 100, offset: int = 0) -> List[EntityT]:
        """Rows ordered by primary key; empty list when nothing matches"""
        query = f"SELECT {self.columns} FROM {self.table_name} ORDER BY id ASC LIMIT $1 OFFSET $2"

        async def operation(conn):
            logger.debug(f"Executing READ: {query}")
            return await conn.fetch(query, limit, offset)

        rows = await self._run("list", operation)
        return [self._to_entity(row) for row in rows]

    async def update(self, record_id: str, patch: Dict[str, Any]) -> EntityT:
        """
        Replace mutable fields of an existing row

        The row is locked with SELECT ... FOR UPDATE so concurrent writers on
        the same id are serialised by the database.
        """
        unknown = set(patch) - set(self.fields[1:])
        if unknown:
            raise ValueError(f"Cannot update fields {sorted(unknown)} on {self.table_name}")

        lock_query = f"SELECT {self.columns} FROM {self.table_name} WHERE id = $1 FOR UPDATE"
        assignments = ", ".join(f"{name} = ${i}" for i, name in enumerate(patch, start=2))
        update_query = (
            f"UPDATE {self.table_name} SET {assignments} "
            f"WHERE id = $1 RETURNING {self.columns}"
        )

        async def operation(conn):
            async with conn.transaction():
                current = await conn.fetchrow(lock_query, record_id)
                if current is None:
                    return None
                if not patch:
                    return current
                logger.debug(f"Executing UPDATE: {update_query}")
                return await conn.fetchrow(update_query, record_id, *patch.values())

        row = await self._run("update", operation)
        if row is None:
            raise self._not_found(record_id)
        logger.info(f"Updated {self.entity_name} {record_id}")
        return self._to_entity(row)

    async def delete(self, record_id: str) -> None:
        query = f"DELETE FROM {self.table_name} WHERE id = $1"

        async def operation(conn):
            logger.debug(f"Executing DELETE: {query}")
            return await conn.execute(query, record_id)

        result = await self._run("delete", operation)

        # asyncpg returns "DELETE N" where N is the number of rows
        deleted_count = int(result.split()[-1]) if result else 0
        if deleted_count == 0:
            raise self._not_found(record_id)
        logger.info(f"Deleted {self.entity_name} {record_id}")


class ItemRepository(PostgresRepository[Item]):
    table_name = "items"
    entity_name = "Item"
    model = Item
    fields = ("id", "name")


class UserRepository(PostgresRepository[User]):
    table_name = "users"
    entity_name = "User"
    model = User
    fields = ("id", "email")
