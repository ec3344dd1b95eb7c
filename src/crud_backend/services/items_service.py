"""
Items service - validation and normalisation for item records
"""

import logging
from typing import Any, Dict, Optional

from crud_backend.models.item import Item
from crud_backend.services.base_service import BaseService, ServiceResult, DEFAULT_PAGE_SIZE, validate_text

logger = logging.getLogger(__name__)


class ItemsService(BaseService):
    """Service for item operations"""

    model = Item
    mutable_fields = ("name",)

    def __init__(self, repository):
        super().__init__("items", repository)

    def normalize(self, values: Dict[str, Any]) -> Dict[str, Any]:
        # Names are stored lower-cased, so uniqueness ignores case.
        # Lower-casing can lengthen the UTF-8 encoding, so the limit is checked again.
        fields = super().normalize(values)
        if "name" in fields:
            fields["name"] = validate_text("name", fields["name"].lower())
        return fields

    async def list_items(self, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0) -> ServiceResult:
        return await self.list(limit=limit, offset=offset)

    async def create_item(self, name: Optional[str], item_id: Optional[str] = None) -> ServiceResult:
        """
        Create a new item

        Args:
            name: Item name; must be unique after trimming and lower-casing
            item_id: Optional caller-supplied id

        Returns:
            ServiceResult with the created Item
        """
        logger.info(f"Creating new item: {name!r}")
        return await self.create({"name": name}, record_id=item_id)

    async def get_item(self, item_id: str) -> ServiceResult:
        return await self.get_by_id(item_id)

    async def update_item(self, item_id: str, name: Optional[str]) -> ServiceResult:
        return await self.update(item_id, {"name": name})

    async def delete_item(self, item_id: str) -> ServiceResult:
        return await self.delete(item_id)
