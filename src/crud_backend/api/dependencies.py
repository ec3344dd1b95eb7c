"""
FastAPI dependencies resolving per-application resources from app.state
"""

from fastapi import Request

from crud_backend.services.items_service import ItemsService
from crud_backend.services.users_service import UsersService


def get_items_service(request: Request) -> ItemsService:
    return request.app.state.services.items


def get_users_service(request: Request) -> UsersService:
    return request.app.state.services.users
