"""
HTTP middlewares: request correlation ids, access logging with timings,
and a last-chance log of exceptions that escape the exception handlers.
"""

import time
import uuid
from typing import Any, Callable, Dict

from fastapi import FastAPI, Request, Response
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.types import ASGIApp

from hajzi.core.constants import HEADER_PROCESS_TIME, HEADER_REQUEST_ID
from hajzi.core.logging import get_logger, request_id as request_id_var

logger = get_logger(__name__)


def _request_fields(request: Request) -> Dict[str, Any]:
    return {
        "request_id": getattr(request.state, "request_id", None),
        "method": request.method,
        "path": request.url.path,
    }


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Tag each request with an id, honouring one sent by a proxy, and echo it back."""

    def __init__(self, app: ASGIApp, header_name: str = HEADER_REQUEST_ID):
        super().__init__(app)
        self.header_name = header_name

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        rid = request.headers.get(self.header_name) or uuid.uuid4().hex
        request.state.request_id = rid
        token = request_id_var.set(rid)
        try:
            response = await call_next(request)
        finally:
            request_id_var.reset(token)
        response.headers[self.header_name] = rid
        return response


class TimingMiddleware(BaseHTTPMiddleware):
    """One access-log line per request, plus an X-Process-Time header."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        started = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - started

        response.headers[HEADER_PROCESS_TIME] = f"{elapsed:.4f}"
        fields = _request_fields(request)
        fields.update(status_code=response.status_code, duration_ms=round(elapsed * 1000, 2))
        logger.info(f"{request.method} {request.url.path} -> {response.status_code}", extra=fields)
        return response


class ErrorLoggingMiddleware(BaseHTTPMiddleware):

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        try:
            return await call_next(request)
        except Exception as exc:
            fields = _request_fields(request)
            fields["error_type"] = type(exc).__name__
            logger.error(f"Unhandled error while serving request: {exc}", extra=fields, exc_info=True)
            raise


def register_middlewares(app: FastAPI) -> None:
    """
    Install the middlewares; the last one added runs outermost, so a
    request meets RequestID, then Timing, then ErrorLogging.
    """
    for middleware in (ErrorLoggingMiddleware, TimingMiddleware, RequestIDMiddleware):
        app.add_middleware(middleware)
    logger.debug("HTTP middlewares registered")
