"""
Response envelopes shared by all routes
"""

from pydantic import BaseModel

from crud_backend.models.enums import ErrorKind


class ErrorResponse(BaseModel):
    """Body of every non-2xx response"""
    error: ErrorKind
    message: str
    correlation_id: str
    timestamp: str


class MessageResponse(BaseModel):
    message: str
    correlation_id: str


class HealthResponse(BaseModel):
    status: str
    database: str
    timestamp: str
