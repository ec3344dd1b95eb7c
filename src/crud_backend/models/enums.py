"""
Enum definitions for the CRUD Backend
"""

from enum import Enum

class ErrorKind(str, Enum):
    """
    Error taxonomy shared by the persistence, service and API layers.

    - INVALID: malformed, missing or oversized field
    - CONFLICT: uniqueness violation
    - NOT_FOUND: no row for the given id
    - UNAVAILABLE: pool exhausted, statement timed out or database unreachable
    - INTERNAL: unexpected persistence failure
    """
    INVALID = "invalid"
    CONFLICT = "conflict"
    NOT_FOUND = "not_found"
    UNAVAILABLE = "unavailable"
    INTERNAL = "internal"

    @property
    def status_code(self) -> int:
        return ERROR_STATUS_CODES[self]

ERROR_STATUS_CODES = {
    ErrorKind.INVALID: 400,
    ErrorKind.CONFLICT: 409,
    ErrorKind.NOT_FOUND: 404,
    ErrorKind.UNAVAILABLE: 503,
    ErrorKind.INTERNAL: 500,
}
