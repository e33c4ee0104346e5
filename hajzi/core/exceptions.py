"""
Application exceptions.

Repositories and domain helpers raise these. Services turn them into
ServiceResult failures, and whatever reaches the HTTP layer is rendered by
``hajzi.api.exception_handlers``. Each class carries its own default
``error_code`` and ``status_code``.
"""

from enum import Enum
from typing import Any, Dict, List, Optional


class ErrorCode(str, Enum):
    INTERNAL_ERROR = "INTERNAL_ERROR"
    INVALID_REQUEST = "INVALID_REQUEST"
    RESOURCE_NOT_FOUND = "RESOURCE_NOT_FOUND"
    VALIDATION_ERROR = "VALIDATION_ERROR"

    AUTHENTICATION_FAILED = "AUTHENTICATION_FAILED"
    TOKEN_EXPIRED = "TOKEN_EXPIRED"
    TOKEN_INVALID = "TOKEN_INVALID"
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"

    DATABASE_ERROR = "DATABASE_ERROR"
    DUPLICATE_ENTRY = "DUPLICATE_ENTRY"

    BOOKING_CONFLICT = "BOOKING_CONFLICT"
    INVALID_STATE = "INVALID_STATE"
    INVALID_TRANSITION = "INVALID_TRANSITION"


class BaseAppException(Exception):
    error_code: ErrorCode = ErrorCode.INTERNAL_ERROR
    status_code: int = 500

    def __init__(
        self,
        message: str,
        error_code: Optional[ErrorCode] = None,
        details: Optional[Dict[str, Any]] = None,
        status_code: Optional[int] = None,
    ):
        super().__init__(message)
        self.message = message
        self.details = details or {}
        if error_code is not None:
            self.error_code = error_code
        if status_code is not None:
            self.status_code = status_code

    def to_dict(self) -> Dict[str, Any]:
        """Body of the HTTP error response."""
        return {
            "error": {
                "message": self.message,
                "code": self.error_code.value,
                "details": self.details,
                "type": type(self).__name__,
            }
        }

    def __str__(self) -> str:
        return f"{self.error_code.value}: {self.message}"


class ValidationError(BaseAppException):
    """Input rejected by a business rule; ``field_errors`` maps field to messages."""

    error_code = ErrorCode.VALIDATION_ERROR
    status_code = 422

    def __init__(self, message: str = "Validation failed", field_errors: Optional[Dict[str, List[str]]] = None):
        super().__init__(message, details={"field_errors": field_errors} if field_errors else None)


class ResourceNotFoundError(BaseAppException):
    error_code = ErrorCode.RESOURCE_NOT_FOUND
    status_code = 404

    def __init__(self, resource_type: str = "Resource", resource_id: Optional[Any] = None):
        details = {"resource_type": resource_type}
        message = f"{resource_type} not found"
        if resource_id is not None:
            details["resource_id"] = str(resource_id)
            message = f"{message} (ID: {resource_id})"
        super().__init__(message, details=details)


# ---- auth ----

class AuthenticationError(BaseAppException):
    error_code = ErrorCode.AUTHENTICATION_FAILED
    status_code = 401

    def __init__(self, message: str = "Authentication failed"):
        super().__init__(message)


class TokenExpiredError(AuthenticationError):
    error_code = ErrorCode.TOKEN_EXPIRED

    def __init__(self, message: str = "Token has expired"):
        super().__init__(message)


class InvalidTokenError(AuthenticationError):
    error_code = ErrorCode.TOKEN_INVALID

    def __init__(self, message: str = "Invalid token"):
        super().__init__(message)


class AuthorizationError(BaseAppException):
    """The caller's role or scope does not allow the action."""

    error_code = ErrorCode.INSUFFICIENT_PERMISSIONS
    status_code = 403

    def __init__(self, message: str = "Insufficient permissions", required_roles: Optional[List[str]] = None):
        super().__init__(message, details={"required_roles": required_roles} if required_roles else None)


# ---- persistence ----

class RepositoryError(BaseAppException):
    error_code = ErrorCode.DATABASE_ERROR

    def __init__(self, message: str = "Database operation failed", details: Optional[Dict[str, Any]] = None):
        super().__init__(message, details=details)


class EntityNotFoundError(RepositoryError):
    error_code = ErrorCode.RESOURCE_NOT_FOUND
    status_code = 404

    def __init__(self, entity: str, entity_id: Any):
        self.entity = entity
        self.entity_id = entity_id
        super().__init__(
            f"{entity} not found (ID: {entity_id})",
            {"resource_type": entity, "resource_id": str(entity_id)},
        )


class EntityAlreadyExistsError(RepositoryError):
    """An insert or update hit a uniqueness constraint."""

    error_code = ErrorCode.DUPLICATE_ENTRY
    status_code = 409

    def __init__(self, entity: str, message: Optional[str] = None):
        self.entity = entity
        super().__init__(message or f"{entity} already exists", {"resource_type": entity})


# ---- bookings ----

class BookingError(BaseAppException):
    error_code = ErrorCode.INVALID_STATE
    status_code = 400


class BookingConflictError(BookingError):
    """Requested nights overlap an active booking of the same room."""

    error_code = ErrorCode.BOOKING_CONFLICT
    status_code = 409

    def __init__(
        self,
        room_id: Optional[str] = None,
        conflicts: Optional[List[Dict[str, Any]]] = None,
        message: str = "Room is not available for the selected dates",
    ):
        details: Dict[str, Any] = {}
        if room_id:
            details["room_id"] = room_id
        if conflicts:
            details["conflicts"] = conflicts
        super().__init__(message, details=details)


class InvalidTransitionError(BookingError):
    error_code = ErrorCode.INVALID_TRANSITION
    status_code = 409

    def __init__(self, from_status: str, to_status: str, reason: Optional[str] = None):
        message = f"Cannot change booking from '{from_status}' to '{to_status}'"
        if reason:
            message = f"{message}: {reason}"
        super().__init__(message, details={"from_status": from_status, "to_status": to_status})
