"""
Custom Exceptions for the room-rental listing service

Every failure raised by the service layer derives from BaseAppException so
the API layer can render it as a user-visible message without knowing the
concrete type.
"""

from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCode(str, Enum):
    """Standard error codes for the application"""
    INTERNAL_ERROR = "INTERNAL_ERROR"

    # Identity & authorization
    AUTH_UNAVAILABLE = "AUTH_UNAVAILABLE"
    TOKEN_INVALID = "TOKEN_INVALID"
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"

    # Validation
    VALIDATION_ERROR = "VALIDATION_ERROR"
    MISSING_REQUIRED_FIELD = "MISSING_REQUIRED_FIELD"

    # Store
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    WRITE_FAILURE = "WRITE_FAILURE"

    # Moderation
    INVALID_TRANSITION = "INVALID_TRANSITION"


class BaseAppException(Exception):
    """
    Base exception class for all application exceptions.

    Provides consistent error handling across the application with
    structured error information.
    """

    def __init__(
        self,
        message: str,
        error_code: ErrorCode = ErrorCode.INTERNAL_ERROR,
        details: Optional[Dict[str, Any]] = None,
        status_code: int = 500
    ):
        self.message = message
        self.error_code = error_code
        self.details = details or {}
        self.status_code = status_code
        super().__init__(self.message)

    def to_dict(self) -> Dict[str, Any]:
        """Convert exception to dictionary format"""
        return {
            "error": {
                "message": self.message,
                "code": self.error_code.value,
                "details": self.details,
                "type": self.__class__.__name__
            }
        }

    def __str__(self) -> str:
        return f"{self.error_code.value}: {self.message}"

    def __repr__(self) -> str:
        return f"{self.__class__.__name__}(message='{self.message}', error_code='{self.error_code.value}')"


class AuthUnavailableError(BaseAppException):
    """Raised when an operation needs a user identifier and none is present"""

    def __init__(
        self,
        message: str = "Authentication required",
        error_code: ErrorCode = ErrorCode.AUTH_UNAVAILABLE,
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, error_code, details, status_code=401)


class PermissionDeniedError(BaseAppException):
    """Raised when the caller lacks the capability an operation needs"""

    def __init__(
        self,
        message: str = "Permission denied. You are not authorized to perform this action.",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, ErrorCode.INSUFFICIENT_PERMISSIONS, details, status_code=403)


class ValidationError(BaseAppException):
    """Exception raised when data validation fails"""

    def __init__(
        self,
        message: str = "Validation failed",
        field_errors: Optional[Dict[str, List[str]]] = None,
        error_code: ErrorCode = ErrorCode.VALIDATION_ERROR,
    ):
        details = {"field_errors": field_errors} if field_errors else {}
        super().__init__(message, error_code, details, status_code=422)


class NotFoundError(BaseAppException):
    """Exception raised when a requested resource is not found"""

    def __init__(
        self,
        resource_type: str = "Resource",
        resource_id: Optional[str] = None,
    ):
        message = f"{resource_type} not found"
        if resource_id:
            message = f"{resource_type} '{resource_id}' not found"
        details = {"resource_type": resource_type, "resource_id": resource_id}
        super().__init__(message, ErrorCode.RESOURCE_NOT_FOUND, details, status_code=404)


class InvalidTransitionError(BaseAppException):
    """Raised when a moderation status change is not allowed"""

    def __init__(self, current: str, target: str):
        super().__init__(
            f"Cannot move listing from '{current}' to '{target}'",
            ErrorCode.INVALID_TRANSITION,
            {"current_status": current, "target_status": target},
            status_code=409,
        )


class WriteFailureError(BaseAppException):
    """
    Raised when a store write fails.

    Nothing is retried; the caller decides whether to repeat the operation.
    """

    def __init__(
        self,
        message: str = "Write to the listing store failed",
        details: Optional[Dict[str, Any]] = None,
    ):
        super().__init__(message, ErrorCode.WRITE_FAILURE, details, status_code=500)


__all__ = [
    "ErrorCode",
    "BaseAppException",
    "AuthUnavailableError",
    "PermissionDeniedError",
    "ValidationError",
    "NotFoundError",
    "InvalidTransitionError",
    "WriteFailureError",
]
