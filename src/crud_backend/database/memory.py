"""
In-memory repositories with the same contract as the PostgreSQL ones.

Selected with DATABASE_URL=memory://; used for local runs and tests.
"""

import asyncio
import logging
from typing import Any, Dict, Generic, List, Tuple, Type

from crud_backend.database.repositories import EntityT
from crud_backend.models.errors import ConflictError, NotFoundError
from crud_backend.models.item import Item
from crud_backend.models.user import User

logger = logging.getLogger(__name__)


class InMemoryRepository(Generic[EntityT]):
    table_name: str = ""
    entity_name: str = ""
    model: Type[EntityT]
    fields: Tuple[str, ...] = ("id",)
    unique_fields: Tuple[str, ...] = ()

    def __init__(self):
        self.rows: Dict[str, Dict[str, Any]] = {}
        self._lock = asyncio.Lock()

    def _check_unique(self, values: Dict[str, Any], exclude_id: str = None):
        for name in self.unique_fields:
            for row_id, row in self.rows.items():
                if row_id != exclude_id and row[name] == values[name]:
                    raise ConflictError(
                        f"A record with the same unique value already exists in {self.table_name}"
                    )

    def _not_found(self, record_id: str) -> NotFoundError:
        return NotFoundError(f"{self.entity_name} with id {record_id} not found")

    async def create(self, entity: EntityT) -> EntityT:
        values = entity.model_dump()
        async with self._lock:
            if values["id"] in self.rows:
                raise ConflictError(f"A record with this id already exists in {self.table_name}")
            self._check_unique(values)
            self.rows[values["id"]] = {f: values[f] for f in self.fields}
        logger.info(f"Created {self.entity_name} {values['id']}")
        return self.model(**values)

    async def get(self, record_id: str) -> EntityT:
        row = self.rows.get(record_id)
        if row is None:
            raise self._not_found(record_id)
        return self.model(**row)

    async def list(self, limit: int = 100, offset: int = 0) -> List[EntityT]:
        ordered = sorted(self.rows)[offset:offset + limit]
        return [self.model(**self.rows[row_id]) for row_id in ordered]

    async def update(self, record_id: str, patch: Dict[str, Any]) -> EntityT:
        unknown = set(patch) - set(self.fields[1:])
        if unknown:
            raise ValueError(f"Cannot update fields {sorted(unknown)} on {self.table_name}")
        async with self._lock:
            current = self.rows.get(record_id)
            if current is None:
                raise self._not_found(record_id)
            updated = {**current, **patch}
            self._check_unique(updated, exclude_id=record_id)
            self.rows[record_id] = updated
        logger.info(f"Updated {self.entity_name} {record_id}")
        return self.model(**updated)

    async def delete(self, record_id: str) -> None:
        async with self._lock:
            if self.rows.pop(record_id, None) is None:
                raise self._not_found(record_id)
        logger.info(f"Deleted {self.entity_name} {record_id}")


class InMemoryItemRepository(InMemoryRepository[Item]):
    table_name = "items"
    entity_name = "Item"
    model = Item
    fields = ("id", "name")
    unique_fields = ("name",)


class InMemoryUserRepository(InMemoryRepository[User]):
    table_name = "users"
    entity_name = "User"
    model = User
    fields = ("id", "email")
