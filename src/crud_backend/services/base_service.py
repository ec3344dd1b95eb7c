"""
Base service layer shared by the entity services
"""

import logging
import uuid
from dataclasses import dataclass
from typing import Any, Awaitable, Callable, Dict, Optional, Tuple

from crud_backend.models.enums import ErrorKind
from crud_backend.models.errors import DomainError, InvalidError

logger = logging.getLogger(__name__)

MAX_FIELD_BYTES = 255
DEFAULT_PAGE_SIZE = 100
MAX_PAGE_SIZE = 1000


@dataclass
class ServiceResult:
    """Result from service operation"""
    success: bool
    data: Optional[Any] = None
    count: int = 0
    error: Optional[str] = None
    error_type: Optional[ErrorKind] = None

    @classmethod
    def ok(cls, data: Any = None) -> "ServiceResult":
        count = len(data) if isinstance(data, list) else (0 if data is None else 1)
        return cls(success=True, data=data, count=count)

    @classmethod
    def fail(cls, error: DomainError) -> "ServiceResult":
        return cls(success=False, error=error.message, error_type=error.kind)


def generate_id() -> str:
    """Server-side identifier for new records"""
    return str(uuid.uuid4())


def validate_text(field_name: str, value: Any) -> str:
    """
    Validate a required string field

    The value is trimmed; the result must be 1-255 bytes of UTF-8.
    """
    if value is None:
        raise InvalidError(f"{field_name} is required")
    if not isinstance(value, str):
        raise InvalidError(f"{field_name} must be a string")
    value = value.strip()
    if not value:
        raise InvalidError(f"{field_name} cannot be empty")
    if len(value.encode("utf-8")) > MAX_FIELD_BYTES:
        raise InvalidError(f"{field_name} cannot be longer than {MAX_FIELD_BYTES} bytes")
    return value


def validate_id(value: Any) -> str:
    """Validate a record id; ids are opaque and are not trimmed"""
    if not isinstance(value, str) or not value.strip():
        raise InvalidError("id cannot be empty")
    if len(value.encode("utf-8")) > MAX_FIELD_BYTES:
        raise InvalidError(f"id cannot be longer than {MAX_FIELD_BYTES} bytes")
    return value


def validate_pagination(limit: int, offset: int):
    if limit < 1 or limit > MAX_PAGE_SIZE:
        raise InvalidError(f"limit must be between 1 and {MAX_PAGE_SIZE}")
    if offset < 0:
        raise InvalidError("offset cannot be negative")


class BaseService:
    """
    Validates input and delegates to a repository.

    Errors raised by the repository keep their kind; anything unexpected is
    reported as an internal error.
    """

    model: type = None
    mutable_fields: Tuple[str, ...] = ()

    def __init__(self, resource_name: str, repository):
        self.resource_name = resource_name
        self.repository = repository
        logger.info(f"BaseService initialized for resource: {resource_name}")

    def normalize(self, values: Dict[str, Any]) -> Dict[str, Any]:
        """Validate mutable fields; subclasses may add normalisation"""
        return {name: validate_text(name, values.get(name)) for name in values}

    async def _execute(self, action: str, operation: Callable[[], Awaitable[Any]]) -> ServiceResult:
        try:
            data = await operation()
        except DomainError as e:
            if e.kind == ErrorKind.INVALID:
                logger.info(f"Rejected {action} on {self.resource_name}: {e.message}")
            return ServiceResult.fail(e)
        except Exception as e:
            logger.error(f"{action} operation failed for {self.resource_name}: {e}", exc_info=True)
            return ServiceResult(
                success=False,
                error=f"Failed to {action} {self.resource_name}",
                error_type=ErrorKind.INTERNAL,
            )
        return ServiceResult.ok(data)

    async def list(self, limit: int = DEFAULT_PAGE_SIZE, offset: int = 0) -> ServiceResult:
        async def operation():
            validate_pagination(limit, offset)
            return await self.repository.list(limit=limit, offset=offset)

        return await self._execute("list", operation)

    async def get_by_id(self, record_id: str) -> ServiceResult:
        async def operation():
            return await self.repository.get(validate_id(record_id))

        return await self._execute("get", operation)

    async def create(self, values: Dict[str, Any], record_id: Optional[str] = None) -> ServiceResult:
        """
        Create a new record

        Args:
            values: Raw mutable field values from the request
            record_id: Caller-supplied id; a random one is generated when omitted

        Returns:
            ServiceResult with the created entity
        """
        async def operation():
            fields = self.normalize({name: values.get(name) for name in self.mutable_fields})
            new_id = generate_id() if record_id is None else validate_id(record_id)
            return await self.repository.create(self.model(id=new_id, **fields))

        return await self._execute("create", operation)

    async def update(self, record_id: str, values: Dict[str, Any]) -> ServiceResult:
        """Replace the provided mutable fields; None values count as not provided"""
        async def operation():
            provided = {k: v for k, v in values.items() if k in self.mutable_fields and v is not None}
            if not provided:
                raise InvalidError("No fields provided for update")
            return await self.repository.update(validate_id(record_id), self.normalize(provided))

        return await self._execute("update", operation)

    async def delete(self, record_id: str) -> ServiceResult:
        async def operation():
            await self.repository.delete(validate_id(record_id))

        return await self._execute("delete", operation)
