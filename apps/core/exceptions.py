"""
Standardized error handling for the Newskoop API.

Provides consistent error codes, exception classes, and response formatting.
Every error leaves the API as:

    {"error": {"code": ..., "message": ..., "details": ...}, "request_id": ...}
"""

import logging
import uuid
from enum import Enum
from typing import Any, Dict, Optional
from dataclasses import dataclass, field

from django.core.exceptions import ObjectDoesNotExist
from django.core.exceptions import ValidationError as DjangoValidationError
from django.http import Http404
from rest_framework import status
from rest_framework.exceptions import APIException
from rest_framework.response import Response
from rest_framework.views import exception_handler as drf_exception_handler

logger = logging.getLogger(__name__)


# =============================================================================
# Error Codes
# =============================================================================

class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Validation errors (400)
    VALIDATION_ERROR = "VALIDATION_ERROR"
    MISSING_FIELD = "MISSING_FIELD"
    INVALID_VALUE = "INVALID_VALUE"
    INVALID_FILE = "INVALID_FILE"
    WORKFLOW_ERROR = "WORKFLOW_ERROR"

    # Authentication/Authorization (401/403)
    AUTHENTICATION_REQUIRED = "AUTHENTICATION_REQUIRED"
    INVALID_CREDENTIALS = "INVALID_CREDENTIALS"
    INVALID_TOKEN = "INVALID_TOKEN"
    PERMISSION_DENIED = "PERMISSION_DENIED"
    RATE_LIMITED = "RATE_LIMITED"

    # Resource errors (404/409)
    NOT_FOUND = "NOT_FOUND"
    DUPLICATE = "DUPLICATE"
    CONFLICT = "CONFLICT"

    # External service errors
    EMAIL_DELIVERY_FAILED = "EMAIL_DELIVERY_FAILED"
    STORAGE_ERROR = "STORAGE_ERROR"

    # Server errors
    INTERNAL_ERROR = "INTERNAL_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"


# =============================================================================
# Error Response Schema
# =============================================================================

@dataclass
class ErrorDetail:
    """Detailed error information."""
    code: ErrorCode
    message: str
    field: Optional[str] = None
    details: Optional[Any] = None

    def to_dict(self) -> Dict[str, Any]:
        result = {
            "code": self.code.value if isinstance(self.code, ErrorCode) else self.code,
            "message": self.message,
        }
        if self.field:
            result["field"] = self.field
        if self.details:
            result["details"] = self.details
        return result


@dataclass
class ErrorResponse:
    """Standardized error response."""
    error: ErrorDetail
    request_id: str = field(default_factory=lambda: str(uuid.uuid4()))

    def to_dict(self) -> Dict[str, Any]:
        return {
            "error": self.error.to_dict(),
            "request_id": self.request_id,
        }

    def to_response(self, status_code: int = 400) -> Response:
        return Response(self.to_dict(), status=status_code)


# =============================================================================
# Custom Exceptions
# =============================================================================

class NewskoopException(APIException):
    """Base exception for Newskoop API errors."""

    status_code = status.HTTP_400_BAD_REQUEST
    error_code = ErrorCode.INTERNAL_ERROR
    default_detail = "An error occurred"

    def __init__(
        self,
        message: Optional[str] = None,
        code: Optional[ErrorCode] = None,
        field: Optional[str] = None,
        details: Optional[Any] = None,
        status_code: Optional[int] = None,
    ):
        self.message = message or self.default_detail
        self.error_code = code or self.error_code
        self.field = field
        self.error_details = details or {}

        if status_code:
            self.status_code = status_code

        super().__init__(detail=self.message)

    def get_error_response(self, request_id: Optional[str] = None) -> ErrorResponse:
        return ErrorResponse(
            error=ErrorDetail(
                code=self.error_code,
                message=self.message,
                field=self.field,
                details=self.error_details if self.error_details else None,
            ),
            request_id=request_id or str(uuid.uuid4()),
        )


class ValidationError(NewskoopException):
    """Validation error."""
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = ErrorCode.VALIDATION_ERROR
    default_detail = "Validation error"


class WorkflowError(NewskoopException):
    """A stage or status transition that the current state does not allow."""
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = ErrorCode.WORKFLOW_ERROR
    default_detail = "Invalid workflow transition"


class NotFoundError(NewskoopException):
    """Resource not found."""
    status_code = status.HTTP_404_NOT_FOUND
    error_code = ErrorCode.NOT_FOUND
    default_detail = "Resource not found"


class DuplicateError(NewskoopException):
    """Duplicate resource (unique email, name or slot)."""
    status_code = status.HTTP_400_BAD_REQUEST
    error_code = ErrorCode.DUPLICATE
    default_detail = "Resource already exists"


class ConflictError(NewskoopException):
    """Resource is in a state that conflicts with the request."""
    status_code = status.HTTP_409_CONFLICT
    error_code = ErrorCode.CONFLICT
    default_detail = "Conflict with current state"


class PermissionDeniedError(NewskoopException):
    """Permission denied."""
    status_code = status.HTTP_403_FORBIDDEN
    error_code = ErrorCode.PERMISSION_DENIED
    default_detail = "Insufficient permissions"


class AuthenticationFailedError(NewskoopException):
    """Bad credentials or inactive account."""
    status_code = status.HTTP_401_UNAUTHORIZED
    error_code = ErrorCode.INVALID_CREDENTIALS
    default_detail = "Invalid email or password"


class ServiceUnavailableError(NewskoopException):
    """An external collaborator (mail, storage, realtime) is unavailable."""
    status_code = status.HTTP_503_SERVICE_UNAVAILABLE
    error_code = ErrorCode.SERVICE_UNAVAILABLE
    default_detail = "Service temporarily unavailable"


# =============================================================================
# Exception Handler
# =============================================================================

# Codes for exceptions DRF renders itself; anything else 4xx is validation
DRF_STATUS_CODES = {
    status.HTTP_401_UNAUTHORIZED: ErrorCode.AUTHENTICATION_REQUIRED,
    status.HTTP_403_FORBIDDEN: ErrorCode.PERMISSION_DENIED,
    status.HTTP_404_NOT_FOUND: ErrorCode.NOT_FOUND,
    status.HTTP_429_TOO_MANY_REQUESTS: ErrorCode.RATE_LIMITED,
}


def get_request_id(request) -> str:
    """Get or generate request ID from request."""
    if hasattr(request, 'request_id'):
        return request.request_id
    return str(uuid.uuid4())


def _render(code: ErrorCode, message: str, status_code: int, request_id: str, details: Any = None) -> Response:
    body = ErrorResponse(
        error=ErrorDetail(code=code, message=message, details=details),
        request_id=request_id,
    )
    return body.to_response(status_code)


def _drf_code(status_code: int) -> ErrorCode:
    if status_code >= 500:
        return ErrorCode.INTERNAL_ERROR
    return DRF_STATUS_CODES.get(status_code, ErrorCode.VALIDATION_ERROR)


def _drf_message(data):
    """Split DRF's error payload into (message, details)."""
    if isinstance(data, dict):
        if 'detail' in data:
            return str(data['detail']), None
        return "Validation error", data
    if isinstance(data, list):
        return (str(data[0]) if data else "Error"), {"errors": data}
    return str(data), None


def newskoop_exception_handler(exc, context):
    """
    DRF ``EXCEPTION_HANDLER`` for the Newskoop API.

    Domain exceptions carry their own code. Django's 404/validation errors
    and DRF's APIException family are mapped onto the same envelope; any
    other exception is logged and becomes a bare 500.
    """
    request = context.get('request')
    request_id = get_request_id(request) if request else str(uuid.uuid4())

    if isinstance(exc, NewskoopException):
        logger.warning(
            "API error %s: %s",
            exc.error_code.value,
            exc.message,
            extra={
                "request_id": request_id,
                "error_code": exc.error_code.value,
                "status_code": exc.status_code,
            }
        )
        return exc.get_error_response(request_id).to_response(exc.status_code)

    if isinstance(exc, DjangoValidationError):
        if hasattr(exc, 'message_dict'):
            message, details = "Validation error", exc.message_dict
        else:
            message = exc.messages[0] if exc.messages else "Validation error"
            details = {"errors": exc.messages}
        return _render(ErrorCode.VALIDATION_ERROR, message, status.HTTP_400_BAD_REQUEST, request_id, details)

    if isinstance(exc, (Http404, ObjectDoesNotExist)):
        message = str(exc) if isinstance(exc, Http404) and str(exc) else "Resource not found"
        return _render(ErrorCode.NOT_FOUND, message, status.HTTP_404_NOT_FOUND, request_id)

    response = drf_exception_handler(exc, context)
    if response is not None:
        message, details = _drf_message(response.data)
        result = _render(_drf_code(response.status_code), message, response.status_code, request_id, details)
        # Keep Retry-After / WWW-Authenticate
        for header, value in response.items():
            result[header] = value
        return result

    logger.exception(
        "Unhandled %s",
        type(exc).__name__,
        extra={"request_id": request_id},
    )
    return _render(
        ErrorCode.INTERNAL_ERROR,
        "Internal server error",
        status.HTTP_500_INTERNAL_SERVER_ERROR,
        request_id,
    )
