"""
Item API routes
All data access goes through ItemsService; failures are raised as
ServiceError and rendered by the central error handlers.
"""

from typing import List

from fastapi import APIRouter, Depends, Query, Response

from crud_backend.api.dependencies import get_items_service
from crud_backend.models.item import Item, ItemCreateRequest, ItemUpdateRequest
from crud_backend.services.base_service import DEFAULT_PAGE_SIZE
from crud_backend.services.items_service import ItemsService
from crud_backend.utils.error_handling import raise_for_result

router = APIRouter()


@router.get("", response_model=List[Item])
async def list_items(
    limit: int = Query(DEFAULT_PAGE_SIZE, description="Maximum number of items to return"),
    offset: int = Query(0, description="Number of items to skip"),
    service: ItemsService = Depends(get_items_service),
):
    """List items ordered by id"""
    result = raise_for_result(await service.list_items(limit=limit, offset=offset))
    return result.data


@router.post("", response_model=Item, status_code=201)
async def create_item(
    request: ItemCreateRequest,
    service: ItemsService = Depends(get_items_service),
):
    """Create a new item"""
    result = raise_for_result(await service.create_item(request.name, item_id=request.id))
    return result.data


@router.get("/{item_id}", response_model=Item)
async def get_item(item_id: str, service: ItemsService = Depends(get_items_service)):
    result = raise_for_result(await service.get_item(item_id))
    return result.data


@router.put("/{item_id}", response_model=Item)
async def update_item(
    item_id: str,
    request: ItemUpdateRequest,
    service: ItemsService = Depends(get_items_service),
):
    """Update item name"""
    result = raise_for_result(await service.update_item(item_id, request.name))
    return result.data


@router.delete("/{item_id}", status_code=204, response_class=Response)
async def delete_item(item_id: str, service: ItemsService = Depends(get_items_service)):
    raise_for_result(await service.delete_item(item_id))
    return Response(status_code=204)
