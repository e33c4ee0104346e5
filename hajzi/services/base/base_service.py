"""
Common plumbing for services: the session, a TransactionManager, a
per-class logger, and translation of raised exceptions into
ServiceResult failures.
"""

import time
from functools import wraps
from typing import Any, Dict, Generic, Optional, TypeVar

from sqlalchemy.orm import Session

from hajzi.core.exceptions import (
    AuthenticationError,
    AuthorizationError,
    BaseAppException,
    BookingConflictError,
    EntityAlreadyExistsError,
    EntityNotFoundError,
    ErrorCode as AppErrorCode,
    InvalidTransitionError,
    ResourceNotFoundError,
    ValidationError,
)
from hajzi.core.logging import get_logger
from hajzi.repositories.base.base_repository import BaseRepository
from hajzi.services.base.service_result import ErrorCode, ErrorSeverity, ServiceError, ServiceResult
from hajzi.services.base.transaction_manager import TransactionManager

logger = get_logger(__name__)

TModel = TypeVar("TModel")
TRepo = TypeVar("TRepo", bound=BaseRepository)

# Checked in order, so subclasses come before their bases
_EXCEPTION_CODES = (
    (InvalidTransitionError, ErrorCode.INVALID_TRANSITION),
    (BookingConflictError, ErrorCode.CONFLICT),
    (EntityAlreadyExistsError, ErrorCode.CONFLICT),
    (EntityNotFoundError, ErrorCode.NOT_FOUND),
    (ResourceNotFoundError, ErrorCode.NOT_FOUND),
    (AuthorizationError, ErrorCode.INSUFFICIENT_PERMISSIONS),
    (AuthenticationError, ErrorCode.UNAUTHORIZED),
    (ValidationError, ErrorCode.VALIDATION_ERROR),
    (ValueError, ErrorCode.VALIDATION_ERROR),
)

_APP_CODES = {
    AppErrorCode.INVALID_STATE: ErrorCode.INVALID_STATE,
    AppErrorCode.INSUFFICIENT_PERMISSIONS: ErrorCode.INSUFFICIENT_PERMISSIONS,
}


def error_code_for(exception: Exception) -> ErrorCode:
    for exc_type, code in _EXCEPTION_CODES:
        if isinstance(exception, exc_type):
            return code
    if isinstance(exception, BaseAppException):
        return _APP_CODES.get(exception.error_code, ErrorCode.INTERNAL_ERROR)
    return ErrorCode.INTERNAL_ERROR


def track_performance(operation_name: str):
    """Log how long the wrapped service method took and whether it succeeded."""

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            started = time.perf_counter()
            result = func(*args, **kwargs)
            elapsed = time.perf_counter() - started
            logger.info(
                f"{operation_name} finished in {elapsed * 1000:.1f} ms",
                extra={
                    "operation": operation_name,
                    "duration_ms": round(elapsed * 1000, 2),
                    "success": getattr(result, "is_success", True),
                },
            )
            return result

        return wrapper

    return decorator


class BaseService(Generic[TModel, TRepo]):

    def __init__(self, repository: TRepo, db_session: Session):
        self.repository: TRepo = repository
        self.db: Session = db_session
        self.transactions = TransactionManager(db_session)
        self._logger = get_logger(f"{__name__}.{type(self).__name__}")

    def _handle_exception(
        self,
        exception: Exception,
        operation: str,
        entity_ref: Optional[Any] = None,
        additional_context: Optional[Dict[str, Any]] = None,
    ) -> ServiceResult:
        """
        Turn an exception raised during ``operation`` into a failed result.

        Business exceptions keep their message and details and are logged
        as warnings. Everything else is logged with a traceback and reported
        as a generic internal error so database text never reaches callers.
        """
        code = error_code_for(exception)
        context = {
            "operation": operation,
            "entity_ref": None if entity_ref is None else str(entity_ref),
            "exception_type": type(exception).__name__,
            **(additional_context or {}),
        }

        if code == ErrorCode.INTERNAL_ERROR:
            self._logger.error(f"Failed to {operation}: {exception}", exc_info=True, extra=context)
            return ServiceResult.failure(
                ServiceError(
                    code=code,
                    message=f"Failed to {operation}",
                    severity=ErrorSeverity.CRITICAL,
                    details={"entity_ref": context["entity_ref"]},
                )
            )

        self._logger.warning(f"{operation} rejected: {exception}", extra=context)
        details = getattr(exception, "details", None) or None
        field_errors = (details or {}).get("field_errors") if isinstance(exception, ValidationError) else None
        return ServiceResult.failure(
            ServiceError(
                code=code,
                message=getattr(exception, "message", None) or str(exception),
                severity=ErrorSeverity.WARNING,
                details=details,
                field=next(iter(field_errors)) if field_errors else None,
            )
        )
