"""
Shared error handling for the Musij backend.

Every failure that reaches a route boundary is one of the exceptions below
and is rendered as the ``{success: false, ...}`` envelope.
"""

from typing import Dict, Any, Optional
from pydantic import BaseModel


class ErrorResponse(BaseModel):
    """Standard error response format."""

    success: bool = False
    code: str
    message: str
    error: Optional[str] = None
    details: Dict[str, Any] = {}


class MusijException(Exception):
    """Base exception for Musij backend services."""

    status_code: int = 500

    def __init__(
        self,
        code: str,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        error: Optional[str] = None,
    ):
        self.code = code
        self.message = message
        self.details = details or {}
        self.error = error
        super().__init__(message)

    def to_response(self) -> ErrorResponse:
        """Convert to error response."""
        return ErrorResponse(
            code=self.code,
            message=self.message,
            error=self.error,
            details=self.details
        )


class NotFoundError(MusijException):
    """Upstream has no such resource."""

    status_code = 404

    def __init__(self, message: str = "Resource not found", details: Optional[Dict[str, Any]] = None):
        super().__init__("NOT_FOUND", message, details)


class ValidationError(MusijException):
    """Missing or malformed required input; raised before any network call."""

    status_code = 400

    def __init__(self, message: str = "Validation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VALIDATION_ERROR", message, details)


class UpstreamServiceError(MusijException):
    """Upstream returned a non not-found failure or a malformed payload."""

    status_code = 500

    def __init__(
        self,
        service: str,
        message: str = "Upstream service error",
        details: Optional[Dict[str, Any]] = None,
        error: Optional[str] = None,
    ):
        self.service = service
        super().__init__("UPSTREAM_SERVICE_ERROR", message, details, error=error)


class AuthError(MusijException):
    """Bearer token acquisition for an upstream failed."""

    status_code = 500

    def __init__(
        self,
        message: str = "Failed to get access token",
        details: Optional[Dict[str, Any]] = None,
        error: Optional[str] = None,
    ):
        super().__init__("AUTH_ERROR", message, details, error=error)


class VerificationError(MusijException):
    """Webhook signature could not be verified."""

    status_code = 400

    def __init__(self, message: str = "Webhook verification failed", details: Optional[Dict[str, Any]] = None):
        super().__init__("VERIFICATION_ERROR", message, details, error=message)


class ProviderError(MusijException):
    """Payment provider call failed."""

    status_code = 500

    def __init__(
        self,
        message: str = "Payment provider error",
        details: Optional[Dict[str, Any]] = None,
        error: Optional[str] = None,
    ):
        super().__init__("PROVIDER_ERROR", message, details, error=error)
