from crud_backend.database.registry import Repositories, postgres_repositories, memory_repositories

__all__ = ["Repositories", "postgres_repositories", "memory_repositories"]
