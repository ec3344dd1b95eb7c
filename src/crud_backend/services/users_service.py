"""
Users service
"""

from typing import Optional

from crud_backend.models.user import User
from crud_backend.services.base_service import BaseService, ServiceResult, DEFAULT_PAGE_SIZE


class UsersService(BaseService):
    """Service for user operations; emails are trimmed but not required to be unique"""

    model = User
    mutable_fields = ("email",)

    def __init__(self, repository):
        super().__init__("users", repository)

    async def list_users(self, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0) -> ServiceResult:
        return await self.list(limit=limit, offset=offset)

    async def create_user(self, email: Optional[str], user_id: Optional[str] = None) -> ServiceResult:
        return await self.create({"email": email}, record_id=user_id)

    async def get_user(self, user_id: str) -> ServiceResult:
        return await self.get_by_id(user_id)

    async def update_user(self, user_id: str, email: Optional[str]) -> ServiceResult:
        return await self.update(user_id, {"email": email})

    async def delete_user(self, user_id: str) -> ServiceResult:
        return await self.delete(user_id)
