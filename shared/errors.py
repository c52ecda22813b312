"""
Shared error handling for the CRUD services.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel, Field

from shared.tracing import current_trace_id


class ErrorResponse(BaseModel):
    """Standard error response format."""

    trace_id: Optional[str] = None
    code: str
    message: str
    details: Dict[str, Any] = Field(default_factory=dict)


class ServiceException(Exception):
    """Base exception for the CRUD services."""

    status_code = 400

    def __init__(self, code: str, message: str, details: Optional[Dict[str, Any]] = None,
                 status_code: Optional[int] = None):
        self.code = code
        self.message = message
        self.details = details or {}
        if status_code is not None:
            self.status_code = status_code
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            trace_id=current_trace_id(),
            code=self.code,
            message=self.message,
            details=self.details
        )


class NotFoundError(ServiceException):
    """Requested record does not exist."""

    status_code = 404

    def __init__(self, message: str = "Not found", details: Optional[Dict[str, Any]] = None):
        super().__init__("NOT_FOUND", message, details)


class PersistenceError(ServiceException):
    """System-of-record failure; the message is the driver's own."""

    status_code = 500

    def __init__(self, message: str = "Database error", details: Optional[Dict[str, Any]] = None):
        super().__init__("DATABASE_ERROR", message, details)


class CacheError(ServiceException):
    """Cache store failure. Never leaves the cache layer."""

    status_code = 503

    def __init__(self, operation: str, message: str = "Cache error", details: Optional[Dict[str, Any]] = None):
        self.operation = operation
        super().__init__("CACHE_ERROR", f"{operation}: {message}", details)
