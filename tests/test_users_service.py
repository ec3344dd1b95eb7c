"""
User service behaviour against the in-memory backend
"""

import pytest

from crud_backend.models.enums import ErrorKind


@pytest.mark.asyncio
async def test_user_lifecycle(users_service):
    created = await users_service.create_user("  ada@example.com ")
    assert created.success
    assert created.data.email == "ada@example.com"

    updated = await users_service.update_user(created.data.id, "ada@lovelace.dev")
    assert updated.data.email == "ada@lovelace.dev"
    assert updated.data.id == created.data.id

    assert (await users_service.delete_user(created.data.id)).success
    assert (await users_service.get_user(created.data.id)).error_type == ErrorKind.NOT_FOUND


@pytest.mark.asyncio
async def test_email_case_is_preserved_and_not_unique(users_service):
    first = await users_service.create_user("Same@Example.com")
    second = await users_service.create_user("Same@Example.com")
    assert first.success and second.success
    assert first.data.email == "Same@Example.com"
    assert (await users_service.list_users()).count == 2


@pytest.mark.asyncio
async def test_empty_email_rejected(users_service):
    result = await users_service.create_user("")
    assert result.error_type == ErrorKind.INVALID
    assert result.error == "email cannot be empty"


@pytest.mark.asyncio
async def test_update_missing_user(users_service):
    result = await users_service.update_user("nope", "x@example.com")
    assert result.error_type == ErrorKind.NOT_FOUND
