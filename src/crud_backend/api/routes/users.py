"""
User API routes
"""

from typing import List

from fastapi import APIRouter, Depends, Query, Response

from crud_backend.api.dependencies import get_users_service
from crud_backend.models.user import User, UserCreateRequest, UserUpdateRequest
from crud_backend.services.base_service import DEFAULT_PAGE_SIZE
from crud_backend.services.users_service import UsersService
from crud_backend.utils.error_handling import raise_for_result

router = APIRouter()


@router.get("", response_model=List[User])
async def list_users(
    limit: int = Query(DEFAULT_PAGE_SIZE, description="Maximum number of users to return"),
    offset: int = Query(0, description="Number of users to skip"),
    service: UsersService = Depends(get_users_service),
):
    result = raise_for_result(await service.list_users(limit=limit, offset=offset))
    return result.data


@router.post("", response_model=User, status_code=201)
async def create_user(
    request: UserCreateRequest,
    service: UsersService = Depends(get_users_service),
):
    result = raise_for_result(await service.create_user(request.email, user_id=request.id))
    return result.data


@router.get("/{user_id}", response_model=User)
async def get_user(user_id: str, service: UsersService = Depends(get_users_service)):
    result = raise_for_result(await service.get_user(user_id))
    return result.data


@router.put("/{user_id}", response_model=User)
async def update_user(
    user_id: str,
    request: UserUpdateRequest,
    service: UsersService = Depends(get_users_service),
):
    result = raise_for_result(await service.update_user(user_id, request.email))
    return result.data


@router.delete("/{user_id}", status_code=204, response_class=Response)
async def delete_user(user_id: str, service: UsersService = Depends(get_users_service)):
    raise_for_result(await service.delete_user(user_id))
    return Response(status_code=204)
