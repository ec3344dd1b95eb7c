"""
Translation of asyncpg / connection failures into domain errors
"""

import asyncio
import logging

import asyncpg

from crud_backend.models.errors import (
    DomainError,
    InvalidError,
    ConflictError,
    UnavailableError,
    InternalError,
)

logger = logging.getLogger(__name__)

INVALID_DATA_ERRORS = (
    asyncpg.NotNullViolationError,
    asyncpg.CheckViolationError,
    asyncpg.StringDataRightTruncationError,
)

# Client-side misuse such as a bad argument type; subclasses InterfaceError
PROGRAMMING_ERRORS = (
    asyncpg.exceptions.DataError,
)

UNAVAILABLE_ERRORS = (
    asyncpg.TooManyConnectionsError,
    asyncpg.CannotConnectNowError,
    asyncpg.QueryCanceledError,
    asyncpg.ConnectionDoesNotExistError,
    asyncpg.InterfaceError,
    asyncio.TimeoutError,
    OSError,
)


def classify_database_error(exc: BaseException, resource: str, action: str) -> DomainError:
    """
    Map a driver exception to the domain error taxonomy

    Args:
        exc: Exception raised while acquiring a connection or running a statement
        resource: Table name, used in messages
        action: Operation name (create, get, list, update, delete)

    Returns:
        DomainError subclass instance; the driver text is kept out of the message
    """
    if isinstance(exc, DomainError):
        return exc

    if isinstance(exc, asyncpg.UniqueViolationError):
        constraint = getattr(exc, "constraint_name", None)
        logger.warning(f"Unique constraint violation on {resource} during {action}: {constraint}")
        if constraint and constraint.endswith("_pkey"):
            return ConflictError(f"A record with this id already exists in {resource}")
        return ConflictError(f"A record with the same unique value already exists in {resource}")

    if isinstance(exc, INVALID_DATA_ERRORS):
        logger.warning(f"Data constraint violation on {resource} during {action}: {type(exc).__name__}")
        return InvalidError(f"Invalid value for {resource}")

    if isinstance(exc, PROGRAMMING_ERRORS):
        logger.error(f"Invalid query input during {action} on {resource}: {exc}", exc_info=exc)
        return InternalError(f"Failed to {action} {resource}")

    if isinstance(exc, UNAVAILABLE_ERRORS):
        logger.error(f"Database unavailable during {action} on {resource}: {type(exc).__name__}: {exc}")
        return UnavailableError("Database is temporarily unavailable")

    logger.error(f"Unexpected database error during {action} on {resource}: {exc}", exc_info=exc)
    return InternalError(f"Failed to {action} {resource}")
