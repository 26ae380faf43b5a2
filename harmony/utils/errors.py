"""
Standardized error response utilities for the progress API.

Provides consistent error response format across all endpoints:
{
    "error": {
        "message": "User-friendly error message",
        "code": "ERROR_CODE"
    }
}

Usage:
    from harmony.utils.errors import error_response, ErrorCode

    return error_response("Route not found", ErrorCode.NOT_FOUND, 404)
"""
import logging
from enum import Enum
from flask import jsonify
from typing import Optional

from .exceptions import (
    HarmonyError,
    InvalidInputError,
    NotFoundError,
    TransientStorageError,
)

logger = logging.getLogger(__name__)


class ErrorCode(str, Enum):
    """Standardized error codes for API responses."""

    # Validation Errors (400)
    INVALID_REQUEST = "INVALID_REQUEST"

    # Not Found (404)
    NOT_FOUND = "NOT_FOUND"

    # Storage (503)
    STORAGE_UNAVAILABLE = "STORAGE_UNAVAILABLE"

    # Server Errors (500)
    INTERNAL_ERROR = "INTERNAL_ERROR"


def error_response(
    message: str,
    code: ErrorCode = ErrorCode.INTERNAL_ERROR,
    status_code: int = 500,
    log_error: bool = True,
    details: Optional[dict] = None
) -> tuple:
    """
    Create a standardized error response.

    Args:
        message: User-friendly error message
        code: Error code from ErrorCode enum (or a raw code string)
        status_code: HTTP status code
        log_error: Whether to log the error
        details: Optional additional details (only logged, not returned to user)

    Returns:
        Tuple of (response, status_code) for Flask
    """
    if log_error and status_code >= 500:
        logger.error(f"API Error [{code}]: {message}", extra={"details": details})
    elif log_error and status_code >= 400:
        logger.warning(f"API Error [{code}]: {message}", extra={"details": details})

    response = {
        "error": {
            "message": message,
            "code": code.value if isinstance(code, ErrorCode) else code
        }
    }

    return jsonify(response), status_code


def bad_request(message: str, code=ErrorCode.INVALID_REQUEST) -> tuple:
    """400 Bad Request error."""
    return error_response(message, code, 400, log_error=False)


def not_found(message: str, code=ErrorCode.NOT_FOUND) -> tuple:
    """404 Not Found error."""
    return error_response(message, code, 404, log_error=False)


def storage_unavailable(message: str = "Progress storage is temporarily unavailable") -> tuple:
    """503 Service Unavailable error. Clients may retry."""
    return error_response(message, ErrorCode.STORAGE_UNAVAILABLE, 503, log_error=True)


def internal_error(message: str = "An unexpected error occurred", details: Optional[dict] = None) -> tuple:
    """500 Internal Server Error."""
    return error_response(message, ErrorCode.INTERNAL_ERROR, 500, log_error=True, details=details)


def harmony_error_response(error: HarmonyError) -> tuple:
    """Map a progress engine exception to its HTTP response."""
    if isinstance(error, InvalidInputError):
        return bad_request(error.message, error.code)
    if isinstance(error, NotFoundError):
        return not_found(error.message, error.code)
    if isinstance(error, TransientStorageError):
        return storage_unavailable()
    return internal_error(error.message, details={'code': error.code})
