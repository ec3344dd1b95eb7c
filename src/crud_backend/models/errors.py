"""
Domain exceptions raised by the persistence layer and input validation
"""

from crud_backend.models.enums import ErrorKind


class DomainError(Exception):
    """Base class for errors that carry an ErrorKind"""

    kind: ErrorKind = ErrorKind.INTERNAL

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class InvalidError(DomainError):
    kind = ErrorKind.INVALID


class ConflictError(DomainError):
    kind = ErrorKind.CONFLICT


class NotFoundError(DomainError):
    kind = ErrorKind.NOT_FOUND


class UnavailableError(DomainError):
    kind = ErrorKind.UNAVAILABLE


class InternalError(DomainError):
    kind = ErrorKind.INTERNAL
