"""Error normalization and handlers."""

import logging
import builtins
from typing import Optional
from uuid import uuid4

from fastapi import HTTPException
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.requests import Request

from salespath_admin.core.logging import get_request_id


class AppError(Exception):
    code = "app_error"
    status_code = 500

    def __init__(self, message: str, *, code: Optional[str] = None, status_code: Optional[int] = None, request_id: Optional[str] = None):
        super().__init__(message)
        self.message = message
        if code:
            self.code = code
        if status_code:
            self.status_code = status_code
        self.request_id = request_id


class ValidationError(AppError, ValueError):
    code = "validation_error"
    status_code = 400


class NotFoundError(AppError, ValueError):
    code = "not_found"
    status_code = 404


class PermissionError(AppError, builtins.PermissionError):
    code = "forbidden"
    status_code = 403


class ConnectionError(AppError, builtins.ConnectionError):
    """The data store could not be reached. Retryable by the caller."""
    code = "connection_error"
    status_code = 503


class TimeoutError(AppError, builtins.TimeoutError):
    """A store operation exceeded its deadline. Retryable by the caller."""
    code = "timeout_error"
    status_code = 504


class AggregationError(AppError):
    """Unexpected fault while computing a derived view. Not assumed retryable."""
    code = "server_error"
    status_code = 500


class EmailDeliveryError(AppError):
    code = "email_delivery_failed"
    status_code = 502


def _extract_request_id(request: Request, fallback: Optional[str] = None) -> str:
    return (
        getattr(request.state, "request_id", None)
        or get_request_id()
        or fallback
        or str(uuid4())
    )


def _error_payload(code: str, message, request_id: str) -> dict:
    return {"error": message, "type": code, "request_id": request_id}


def _respond(status_code: int, payload: dict, rid: str) -> JSONResponse:
    response = JSONResponse(status_code=status_code, content=payload)
    response.headers["x-request-id"] = rid
    return response


async def app_error_handler(request: Request, exc: AppError):
    rid = exc.request_id or _extract_request_id(request)
    payload = _error_payload(exc.code, exc.message, rid)
    logger = logging.getLogger("salespath")
    log_level = logging.ERROR if exc.status_code >= 500 else logging.WARNING
    logger.log(
        log_level,
        "app.error",
        extra={"request_id": rid, "error_code": exc.code, "error_message": exc.message, "status": exc.status_code},
    )
    return _respond(exc.status_code, payload, rid)


async def http_error_handler(request: Request, exc: HTTPException):
    rid = _extract_request_id(request)
    code = "not_found" if exc.status_code == 404 else "http_error"
    message = exc.detail if exc.detail else "HTTP error"
    payload = _error_payload(code, message, rid)
    logger = logging.getLogger("salespath")
    logger.warning("http.error", extra={"request_id": rid, "error_code": code, "status": exc.status_code})
    return _respond(exc.status_code, payload, rid)


async def request_validation_handler(request: Request, exc: RequestValidationError):
    rid = _extract_request_id(request)
    payload = _error_payload("validation_error", "Invalid request", rid)
    payload["details"] = exc.errors()
    logging.getLogger("salespath").warning(
        "request.invalid", extra={"request_id": rid, "error_code": "validation_error", "status": 422}
    )
    return _respond(422, payload, rid)


async def unhandled_exception_handler(request: Request, exc: Exception):
    rid = _extract_request_id(request)
    logger = logging.getLogger("salespath")
    logger.error("unhandled.exception", exc_info=True, extra={"request_id": rid, "error_code": "server_error"})
    payload = _error_payload("server_error", "Unexpected error", rid)
    return _respond(500, payload, rid)
