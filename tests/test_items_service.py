"""
Item service behaviour against the in-memory backend
"""

import asyncio

import pytest

from crud_backend.models.enums import ErrorKind
from crud_backend.models.errors import UnavailableError
from crud_backend.services.items_service import ItemsService


class TestItemsService:

    @pytest.mark.asyncio
    async def test_created_item_can_be_read_back(self, items_service):
        created = await items_service.create_item("widget")
        assert created.success
        assert created.data.id

        fetched = await items_service.get_item(created.data.id)
        assert fetched.success
        assert fetched.data.name == created.data.name == "widget"

    @pytest.mark.asyncio
    async def test_name_is_trimmed_and_lower_cased(self, items_service):
        result = await items_service.create_item("  Big Widget ")
        assert result.data.name == "big widget"

        duplicate = await items_service.create_item("BIG WIDGET")
        assert not duplicate.success
        assert duplicate.error_type == ErrorKind.CONFLICT

    @pytest.mark.asyncio
    async def test_generated_ids_are_unique(self, items_service):
        first = await items_service.create_item("a")
        second = await items_service.create_item("b")
        assert first.data.id != second.data.id

    @pytest.mark.asyncio
    async def test_concurrent_duplicate_names_yield_one_conflict(self, items_service):
        results = await asyncio.gather(
            items_service.create_item("gadget"),
            items_service.create_item("gadget"),
        )

        successes = [r for r in results if r.success]
        failures = [r for r in results if not r.success]
        assert len(successes) == 1
        assert len(failures) == 1
        assert failures[0].error_type == ErrorKind.CONFLICT

    @pytest.mark.asyncio
    async def test_caller_supplied_id(self, items_service):
        result = await items_service.create_item("bolt", item_id="item-1")
        assert result.data.id == "item-1"

        again = await items_service.create_item("nut", item_id="item-1")
        assert again.error_type == ErrorKind.CONFLICT

    @pytest.mark.asyncio
    @pytest.mark.parametrize("name,message", [
        (None, "name is required"),
        ("", "name cannot be empty"),
        ("   ", "name cannot be empty"),
        (42, "name must be a string"),
        ("x" * 256, "name cannot be longer than 255 bytes"),
        # 128 two-byte characters: 128 characters but 256 bytes
        ("é" * 128, "name cannot be longer than 255 bytes"),
    ])
    async def test_invalid_names_are_rejected(self, items_service, name, message):
        result = await items_service.create_item(name)
        assert not result.success
        assert result.error_type == ErrorKind.INVALID
        assert result.error == message
        assert items_service.repository.rows == {}

    @pytest.mark.asyncio
    async def test_name_at_byte_limit_is_accepted(self, items_service):
        result = await items_service.create_item("x" * 255)
        assert result.success

    @pytest.mark.asyncio
    async def test_byte_limit_applies_after_lower_casing(self, items_service):
        # "İ" is 2 bytes but lower-cases to "i" plus a combining dot, 3 bytes
        too_long = await items_service.create_item("İ" * 127)
        assert not too_long.success
        assert too_long.error_type == ErrorKind.INVALID

        at_limit = await items_service.create_item("İ" * 85)
        assert at_limit.success
        assert len(at_limit.data.name.encode("utf-8")) == 255

    @pytest.mark.asyncio
    async def test_update_byte_limit_applies_after_lower_casing(self, items_service):
        created = await items_service.create_item("plain")

        result = await items_service.update_item(created.data.id, "İ" * 127)
        assert result.error_type == ErrorKind.INVALID

        unchanged = await items_service.get_item(created.data.id)
        assert unchanged.data.name == "plain"

    @pytest.mark.asyncio
    async def test_delete_then_get_is_not_found(self, items_service):
        created = await items_service.create_item("temp")
        assert (await items_service.delete_item(created.data.id)).success

        fetched = await items_service.get_item(created.data.id)
        assert fetched.error_type == ErrorKind.NOT_FOUND

        second_delete = await items_service.delete_item(created.data.id)
        assert second_delete.error_type == ErrorKind.NOT_FOUND

    @pytest.mark.asyncio
    async def test_update_missing_id_does_not_mutate(self, items_service):
        await items_service.create_item("keep")
        before = dict(items_service.repository.rows)

        result = await items_service.update_item("missing", "other")
        assert result.error_type == ErrorKind.NOT_FOUND
        assert items_service.repository.rows == before

    @pytest.mark.asyncio
    async def test_update_to_existing_name_conflicts(self, items_service):
        await items_service.create_item("first")
        second = await items_service.create_item("second")

        result = await items_service.update_item(second.data.id, "FIRST")
        assert result.error_type == ErrorKind.CONFLICT
        assert (await items_service.get_item(second.data.id)).data.name == "second"

    @pytest.mark.asyncio
    async def test_update_to_own_name_succeeds(self, items_service):
        created = await items_service.create_item("same")
        result = await items_service.update_item(created.data.id, "Same")
        assert result.success
        assert result.data.name == "same"

    @pytest.mark.asyncio
    async def test_update_without_fields_is_invalid(self, items_service):
        created = await items_service.create_item("thing")
        result = await items_service.update_item(created.data.id, None)
        assert result.error_type == ErrorKind.INVALID
        assert result.error == "No fields provided for update"

    @pytest.mark.asyncio
    async def test_list_is_ordered_by_id_and_empty_when_no_rows(self, items_service):
        empty = await items_service.list_items()
        assert empty.success
        assert empty.data == []
        assert empty.count == 0

        for item_id, name in (("c", "gamma"), ("a", "alpha"), ("b", "beta")):
            await items_service.create_item(name, item_id=item_id)

        listed = await items_service.list_items()
        assert [item.id for item in listed.data] == ["a", "b", "c"]

        page = await items_service.list_items(limit=1, offset=1)
        assert [item.id for item in page.data] == ["b"]

    @pytest.mark.asyncio
    @pytest.mark.parametrize("limit,offset", [(0, 0), (1001, 0), (10, -1)])
    async def test_bad_pagination_is_invalid(self, items_service, limit, offset):
        result = await items_service.list_items(limit=limit, offset=offset)
        assert result.error_type == ErrorKind.INVALID

    @pytest.mark.asyncio
    async def test_repository_errors_keep_their_kind(self):
        class DownRepository:
            async def get(self, record_id):
                raise UnavailableError("Database is temporarily unavailable")

        result = await ItemsService(DownRepository()).get_item("x")
        assert result.error_type == ErrorKind.UNAVAILABLE
        assert result.error == "Database is temporarily unavailable"

    @pytest.mark.asyncio
    async def test_unexpected_errors_become_internal(self):
        class BrokenRepository:
            async def list(self, limit, offset):
                raise RuntimeError("driver exploded")

        result = await ItemsService(BrokenRepository()).list_items()
        assert result.error_type == ErrorKind.INTERNAL
        assert "driver exploded" not in result.error
