"""
Service container built once per application from the repository bundle
"""

from dataclasses import dataclass

from crud_backend.database.registry import Repositories
from crud_backend.services.items_service import ItemsService
from crud_backend.services.users_service import UsersService


@dataclass
class Services:
    items: ItemsService
    users: UsersService


def build_services(repositories: Repositories) -> Services:
    return Services(
        items=ItemsService(repositories.items),
        users=UsersService(repositories.users),
    )
