"""
Outcome of a service call.

Services never raise for expected business failures; they return a
ServiceResult whose ``error`` says what went wrong. The API layer turns a
failed result into an HTTP error response.
"""

from dataclasses import dataclass, field as dc_field
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Dict, Generic, Optional, TypeVar


class ErrorCode(str, Enum):
    """Failure kinds a service reports."""

    INTERNAL_ERROR = "INTERNAL_ERROR"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    NOT_FOUND = "NOT_FOUND"
    INVALID_STATE = "INVALID_STATE"
    INVALID_TRANSITION = "INVALID_TRANSITION"
    CONFLICT = "CONFLICT"
    UNAUTHORIZED = "UNAUTHORIZED"
    INSUFFICIENT_PERMISSIONS = "INSUFFICIENT_PERMISSIONS"


class ErrorSeverity(str, Enum):
    WARNING = "WARNING"
    ERROR = "ERROR"
    CRITICAL = "CRITICAL"


@dataclass
class ServiceError:
    """
    A failed operation.

    ``field`` names the offending input for validation failures;
    ``details`` carries structured context such as conflicting stays.
    """

    code: ErrorCode
    message: str
    severity: ErrorSeverity = ErrorSeverity.ERROR
    details: Optional[Dict[str, Any]] = None
    field: Optional[str] = None
    occurred_at: datetime = dc_field(default_factory=lambda: datetime.now(timezone.utc))


TData = TypeVar("TData")


@dataclass
class ServiceResult(Generic[TData]):
    is_success: bool
    data: Optional[TData] = None
    error: Optional[ServiceError] = None
    message: Optional[str] = None

    @classmethod
    def success(cls, data: Optional[TData] = None, message: Optional[str] = None) -> "ServiceResult[TData]":
        return cls(is_success=True, data=data, message=message)

    @classmethod
    def failure(cls, error: ServiceError) -> "ServiceResult[TData]":
        return cls(is_success=False, error=error, message=error.message)

    @classmethod
    def _expected_failure(
        cls,
        code: ErrorCode,
        message: str,
        details: Optional[Dict[str, Any]] = None,
        field: Optional[str] = None,
    ) -> "ServiceResult[TData]":
        return cls.failure(
            ServiceError(code=code, message=message, severity=ErrorSeverity.WARNING, details=details, field=field)
        )

    @classmethod
    def validation_failure(
        cls,
        message: str,
        field: Optional[str] = None,
        details: Optional[Dict[str, Any]] = None,
    ) -> "ServiceResult[TData]":
        return cls._expected_failure(ErrorCode.VALIDATION_ERROR, message, details, field)

    @classmethod
    def not_found(cls, resource_type: str, resource_id: Optional[str] = None) -> "ServiceResult[TData]":
        message = f"{resource_type} not found" + (f" (ID: {resource_id})" if resource_id else "")
        return cls._expected_failure(
            ErrorCode.NOT_FOUND,
            message,
            {"resource_type": resource_type, "resource_id": resource_id},
        )

    @classmethod
    def conflict(cls, message: str, details: Optional[Dict[str, Any]] = None) -> "ServiceResult[TData]":
        return cls._expected_failure(ErrorCode.CONFLICT, message, details)

    @classmethod
    def invalid_state(cls, message: str, details: Optional[Dict[str, Any]] = None) -> "ServiceResult[TData]":
        return cls._expected_failure(ErrorCode.INVALID_STATE, message, details)

    @property
    def error_code(self) -> Optional[ErrorCode]:
        return self.error.code if self.error else None

    def unwrap(self) -> TData:
        """
        Data of a successful result.

        Raises:
            ValueError: If the result is a failure
        """
        if not self.is_success:
            reason = self.error.message if self.error else "unknown error"
            raise ValueError(f"Cannot unwrap failed result: {reason}")
        return self.data
