"""
Exception handlers and service-result translation for the HTTP layer.

Every error leaves the API as ``{"error": {"message", "code", "details", "type"}}``.
"""

from typing import Any, Dict, List, TypeVar

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from hajzi.core.exceptions import BaseAppException
from hajzi.core.logging import get_logger
from hajzi.services.base.service_result import ErrorCode, ServiceResult

logger = get_logger(__name__)

T = TypeVar("T")

HTTP_STATUS_BY_CODE = {
    ErrorCode.VALIDATION_ERROR: 422,
    ErrorCode.NOT_FOUND: 404,
    ErrorCode.INVALID_STATE: 400,
    ErrorCode.CONFLICT: 409,
    ErrorCode.INSUFFICIENT_PERMISSIONS: 403,
    ErrorCode.INVALID_TRANSITION: 409,
    ErrorCode.UNAUTHORIZED: 401,
    ErrorCode.INTERNAL_ERROR: 500,
}


class ServiceFailure(BaseAppException):
    """A failed ServiceResult surfaced as an HTTP error."""


def unwrap_result(result: ServiceResult[T]) -> T:
    """
    Return the result data, or raise the failure as an HTTP error.

    Raises:
        ServiceFailure: With the status code mapped from the error code
    """
    if result.is_success:
        return result.data

    error = result.error
    details: Dict[str, Any] = dict(error.details or {})
    if error.field:
        details.setdefault("field", error.field)
    raise ServiceFailure(
        message=error.message,
        error_code=error.code,
        details=details,
        status_code=HTTP_STATUS_BY_CODE.get(error.code, 500),
    )


def _field_errors(exc: RequestValidationError) -> Dict[str, List[str]]:
    field_errors: Dict[str, List[str]] = {}
    for err in exc.errors():
        loc = [str(part) for part in err.get("loc", ()) if part not in ("body", "query", "path")]
        key = ".".join(loc) or "__root__"
        field_errors.setdefault(key, []).append(err.get("msg", "Invalid value"))
    return field_errors


async def app_exception_handler(request: Request, exc: BaseAppException) -> JSONResponse:
    log = logger.error if exc.status_code >= 500 else logger.warning
    log(
        f"{exc.__class__.__name__}: {exc.message}",
        extra={
            "path": request.url.path,
            "method": request.method,
            "status_code": exc.status_code,
            "error_code": exc.error_code.value,
        },
    )
    return JSONResponse(status_code=exc.status_code, content=exc.to_dict())


async def validation_exception_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    field_errors = _field_errors(exc)
    logger.info(
        "Request validation failed",
        extra={"path": request.url.path, "method": request.method, "fields": sorted(field_errors)},
    )
    return JSONResponse(
        status_code=422,
        content={
            "error": {
                "message": "Validation failed",
                "code": ErrorCode.VALIDATION_ERROR.value,
                "details": {"field_errors": field_errors},
                "type": "RequestValidationError",
            }
        },
    )


async def unhandled_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        f"Unhandled error: {exc}",
        extra={"path": request.url.path, "method": request.method},
        exc_info=True,
    )
    return JSONResponse(
        status_code=500,
        content={
            "error": {
                "message": "Internal server error",
                "code": ErrorCode.INTERNAL_ERROR.value,
                "details": {},
                "type": "InternalServerError",
            }
        },
    )


def register_exception_handlers(app: FastAPI) -> None:
    app.add_exception_handler(BaseAppException, app_exception_handler)
    app.add_exception_handler(RequestValidationError, validation_exception_handler)
    app.add_exception_handler(Exception, unhandled_exception_handler)
