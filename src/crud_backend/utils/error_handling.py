"""
Centralized Error Handling and Logging System
Maps domain error kinds to HTTP responses, tags every request with a
correlation id and logs server-side failures as structured JSON.
"""

import json
import logging
import traceback
import uuid
from datetime import datetime, timezone
from typing import Any, Dict, Optional, Union

from fastapi import Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException
from starlette.middleware.base import BaseHTTPMiddleware

from crud_backend.config.logging_config import correlation_id_var, NO_CORRELATION_ID
from crud_backend.models.enums import ErrorKind
from crud_backend.services.base_service import ServiceResult

CORRELATION_ID_HEADER = "X-Correlation-Id"
INTERNAL_ERROR_MESSAGE = "An unexpected error occurred"

logger = logging.getLogger(__name__)


class ErrorHandlingConfig:
    """Centralized configuration for error handling behavior"""

    SANITIZE_SENSITIVE_FIELDS = True
    SENSITIVE_FIELD_PATTERNS = [
        'password', 'token', 'key', 'secret', 'authorization',
        'auth', 'cookie', 'credential', 'dsn'
    ]

    LOG_HEADERS = True
    MAX_BODY_LOG_SIZE = 5000  # Truncate large values

    @classmethod
    def is_sensitive_field(cls, field_name: str) -> bool:
        """Check if a field contains sensitive data"""
        field_lower = field_name.lower()
        return any(pattern in field_lower for pattern in cls.SENSITIVE_FIELD_PATTERNS)

    @classmethod
    def sanitize_data(cls, data: Union[Dict, str, Any]) -> Any:
        """Recursively sanitize sensitive data from logs"""
        if not cls.SANITIZE_SENSITIVE_FIELDS:
            return data

        if isinstance(data, dict):
            return {
                key: "***REDACTED***" if cls.is_sensitive_field(key) else cls.sanitize_data(value)
                for key, value in data.items()
            }
        elif isinstance(data, list):
            return [cls.sanitize_data(item) for item in data]
        elif isinstance(data, str) and len(data) > cls.MAX_BODY_LOG_SIZE:
            return data[:cls.MAX_BODY_LOG_SIZE] + "...[TRUNCATED]"
        else:
            return data


class ServiceError(Exception):
    """Raised by routes for a failed ServiceResult; rendered by service_error_handler"""

    def __init__(self, kind: ErrorKind, message: str):
        super().__init__(message)
        self.kind = kind
        self.message = message


def raise_for_result(result: ServiceResult) -> ServiceResult:
    """Return the result unchanged when successful, otherwise raise ServiceError"""
    if not result.success:
        raise ServiceError(result.error_type or ErrorKind.INTERNAL, result.error or INTERNAL_ERROR_MESSAGE)
    return result


def get_correlation_id(request: Optional[Request] = None) -> str:
    if request is not None:
        correlation_id = getattr(request.state, "correlation_id", None)
        if correlation_id:
            return correlation_id
    return correlation_id_var.get()


def _utcnow() -> str:
    return datetime.now(timezone.utc).isoformat()


class StructuredLogger:
    """Structured logging with consistent format and context"""

    @staticmethod
    def log_error(
        error_type: str,
        message: str,
        request: Optional[Request] = None,
        exception: Optional[BaseException] = None,
        include_traceback: bool = True
    ) -> str:
        """Log structured error with full context; returns the trace id"""

        trace_id = get_correlation_id(request)
        if trace_id == NO_CORRELATION_ID:
            trace_id = str(uuid.uuid4())

        log_entry = {
            "timestamp": _utcnow(),
            "trace_id": trace_id,
            "error_type": error_type,
            "message": message,
            "level": "ERROR"
        }

        if request:
            headers = dict(request.headers)
            log_entry["request"] = {
                "method": request.method,
                "path": request.url.path,
                "query_params": dict(request.query_params),
                "headers": ErrorHandlingConfig.sanitize_data(headers) if ErrorHandlingConfig.LOG_HEADERS else {},
                "client_ip": request.client.host if request.client else None,
            }

        if exception is not None:
            log_entry["exception"] = {
                "type": type(exception).__name__,
                "details": str(exception),
                "module": getattr(exception, '__module__', 'unknown')
            }
            if include_traceback:
                log_entry["exception"]["traceback"] = "".join(
                    traceback.format_exception(type(exception), exception, exception.__traceback__)
                )

        logger.error(json.dumps(log_entry, indent=2, default=str))
        return trace_id


def error_response(kind: ErrorKind, message: str, correlation_id: str, status_code: Optional[int] = None) -> JSONResponse:
    """Build the JSON body shared by every error response"""
    return JSONResponse(
        status_code=status_code or kind.status_code,
        content={
            "error": kind.value,
            "message": message,
            "correlation_id": correlation_id,
            "timestamp": _utcnow(),
        },
        headers={CORRELATION_ID_HEADER: correlation_id},
    )


class RequestContextMiddleware(BaseHTTPMiddleware):
    """Middleware to capture request context and propagate the correlation id"""

    async def dispatch(self, request: Request, call_next):
        correlation_id = request.headers.get(CORRELATION_ID_HEADER) or str(uuid.uuid4())
        correlation_id_var.set(correlation_id)
        request.state.correlation_id = correlation_id

        response = await call_next(request)
        # Add correlation ID to response headers for client-side debugging
        response.headers[CORRELATION_ID_HEADER] = correlation_id
        return response


# Global Exception Handlers
async def service_error_handler(request: Request, exc: ServiceError) -> JSONResponse:
    """Render domain errors; internal details never reach the client"""
    correlation_id = get_correlation_id(request)
    message = exc.message

    if exc.kind == ErrorKind.INTERNAL:
        StructuredLogger.log_error(
            "internal_error",
            exc.message,
            request=request,
            include_traceback=False
        )
        message = INTERNAL_ERROR_MESSAGE
    elif exc.kind == ErrorKind.UNAVAILABLE:
        logger.warning(f"{request.method} {request.url.path} -> unavailable: {exc.message}")
    else:
        logger.info(f"{request.method} {request.url.path} -> {exc.kind.value}: {exc.message}")

    return error_response(exc.kind, message, correlation_id)


def _kind_for_status(status_code: int) -> ErrorKind:
    if status_code == 404:
        return ErrorKind.NOT_FOUND
    if status_code == 409:
        return ErrorKind.CONFLICT
    if status_code == 503:
        return ErrorKind.UNAVAILABLE
    if status_code >= 500:
        return ErrorKind.INTERNAL
    return ErrorKind.INVALID


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Handle HTTP exceptions (unknown routes, wrong methods, explicit aborts)"""
    kind = _kind_for_status(exc.status_code)
    correlation_id = get_correlation_id(request)
    message = str(exc.detail)

    if exc.status_code >= 500:
        StructuredLogger.log_error(
            f"http_{exc.status_code}",
            f"HTTP {exc.status_code}: {exc.detail}",
            request=request,
            include_traceback=False
        )
        if kind == ErrorKind.INTERNAL:
            message = INTERNAL_ERROR_MESSAGE

    return error_response(kind, message, correlation_id, status_code=exc.status_code)


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Malformed bodies and parameters are invalid input (HTTP 400)"""
    details = []
    for error in exc.errors():
        location = " -> ".join(str(loc) for loc in error.get("loc", []))
        details.append(f"{location}: {error.get('msg', 'invalid value')}")

    message = "; ".join(details) if details else "Request validation failed"
    logger.info(f"{request.method} {request.url.path} -> invalid: {message}")
    return error_response(ErrorKind.INVALID, message, get_correlation_id(request))


async def general_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Handle all other exceptions"""
    trace_id = StructuredLogger.log_error(
        "internal_server_error",
        f"Unhandled exception: {str(exc)}",
        request=request,
        exception=exc,
        include_traceback=True
    )

    # Build safe response (don't expose internal details)
    return error_response(ErrorKind.INTERNAL, INTERNAL_ERROR_MESSAGE, trace_id)


def setup_error_handling(app):
    """Setup comprehensive error handling for FastAPI app"""

    app.add_middleware(RequestContextMiddleware)

    app.add_exception_handler(ServiceError, service_error_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(StarletteHTTPException, http_exception_handler)
    app.add_exception_handler(Exception, general_exception_handler)

    logger.info("Centralized error handling system initialized")
