"""
Error envelope shared by every endpoint.

Failures leave the API as ``{"error": {"code": ..., "message": ..., "details": ...}}``
where ``details`` is present only when there is something to add.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from enum import StrEnum
from http import HTTPStatus
from typing import Any, Awaitable, Callable, cast

from fastapi import FastAPI, Request, Response, status
from fastapi.encoders import jsonable_encoder
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse
from starlette.exceptions import HTTPException as StarletteHTTPException

logger = logging.getLogger("purple_shop.errors")

ExceptionHandler = Callable[[Request, Exception], Awaitable[Response]]


class ErrorCode(StrEnum):
    """Machine-readable codes the storefront switches on."""

    INVALID_INIT_DATA = "INVALID_INIT_DATA"
    USER_DATA_MISSING = "USER_DATA_MISSING"
    AUTH_FAILED = "AUTH_FAILED"
    FORBIDDEN = "FORBIDDEN"
    VALIDATION_ERROR = "VALIDATION_ERROR"
    PROJECT_NOT_FOUND = "PROJECT_NOT_FOUND"
    NOT_FOUND = "NOT_FOUND"
    METHOD_NOT_ALLOWED = "METHOD_NOT_ALLOWED"
    CONFLICT = "CONFLICT"
    PAYLOAD_TOO_LARGE = "PAYLOAD_TOO_LARGE"
    INTERNAL_ERROR = "INTERNAL_ERROR"
    SERVICE_UNAVAILABLE = "SERVICE_UNAVAILABLE"


_CODE_BY_STATUS: dict[int, ErrorCode] = {
    400: ErrorCode.VALIDATION_ERROR,
    401: ErrorCode.AUTH_FAILED,
    403: ErrorCode.FORBIDDEN,
    404: ErrorCode.NOT_FOUND,
    405: ErrorCode.METHOD_NOT_ALLOWED,
    409: ErrorCode.CONFLICT,
    413: ErrorCode.PAYLOAD_TOO_LARGE,
    503: ErrorCode.SERVICE_UNAVAILABLE,
}


class ApplicationError(Exception):
    """Error raised by route handlers and rendered as the envelope."""

    status_code: int = status.HTTP_400_BAD_REQUEST

    def __init__(
        self,
        code: ErrorCode | str,
        message: str,
        *,
        status_code: int | None = None,
        details: object | None = None,
    ) -> None:
        super().__init__(message)
        self.code = str(code)
        self.message = message
        self.details = details
        if status_code is not None:
            self.status_code = status_code


class NotFoundError(ApplicationError):
    status_code = status.HTTP_404_NOT_FOUND


class AuthenticationError(ApplicationError):
    """The Mini-App launch payload cannot be trusted."""

    status_code = status.HTTP_401_UNAUTHORIZED


def build_error_payload(
    *,
    code: ErrorCode | str,
    message: str,
    details: object | None = None,
) -> dict[str, dict[str, object]]:
    body: dict[str, object] = {"code": str(code), "message": message}
    if details is not None:
        body["details"] = details
    return {"error": body}


def error_response(
    *,
    status_code: int,
    code: ErrorCode | str,
    message: str,
    details: object | None = None,
) -> JSONResponse:
    payload = build_error_payload(code=code, message=message, details=details)
    return JSONResponse(status_code=status_code, content=jsonable_encoder(payload))


async def application_error_handler(request: Request, exc: ApplicationError) -> JSONResponse:
    return error_response(
        status_code=exc.status_code,
        code=exc.code,
        message=exc.message,
        details=exc.details,
    )


async def request_validation_exception_handler(
    request: Request,
    exc: RequestValidationError,
) -> JSONResponse:
    fields: dict[str, str] = {}
    for error in exc.errors():
        field = _field_name(error.get("loc") or ())
        message = error.get("msg", "Invalid value")
        fields[field] = f"{fields[field]}; {message}" if field in fields else message

    return error_response(
        status_code=status.HTTP_422_UNPROCESSABLE_ENTITY,
        code=ErrorCode.VALIDATION_ERROR,
        message="Request validation failed",
        details=fields or None,
    )


async def http_exception_handler(request: Request, exc: StarletteHTTPException) -> JSONResponse:
    """Render framework HTTP errors; a mapping ``detail`` may carry its own code."""
    default_message = HTTPStatus(exc.status_code).phrase
    detail: Any = exc.detail

    if isinstance(detail, Mapping):
        return error_response(
            status_code=exc.status_code,
            code=detail.get("code") or ErrorCode.INTERNAL_ERROR,
            message=str(detail.get("message") or default_message),
            details=detail.get("details"),
        )

    return error_response(
        status_code=exc.status_code,
        code=_CODE_BY_STATUS.get(exc.status_code, ErrorCode.INTERNAL_ERROR),
        message=str(detail or default_message),
    )


async def unexpected_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    logger.error(
        "Unhandled error on %s %s",
        request.method,
        request.url.path,
        exc_info=(type(exc), exc, exc.__traceback__),
    )
    return error_response(
        status_code=status.HTTP_500_INTERNAL_SERVER_ERROR,
        code=ErrorCode.INTERNAL_ERROR,
        message="Internal server error. Please try again later.",
    )


def register_exception_handlers(app: FastAPI) -> None:
    handlers: dict[type[Exception], Callable[..., Awaitable[Response]]] = {
        ApplicationError: application_error_handler,
        RequestValidationError: request_validation_exception_handler,
        StarletteHTTPException: http_exception_handler,
        Exception: unexpected_exception_handler,
    }
    for exc_class, handler in handlers.items():
        app.add_exception_handler(exc_class, cast(ExceptionHandler, handler))


def _field_name(location: tuple[object, ...] | list[object]) -> str:
    parts = [str(part) for part in location if part not in ("body", "query", "path")]
    return ".".join(parts or [str(part) for part in location]) or "_schema"


__all__ = [
    "ApplicationError",
    "AuthenticationError",
    "ErrorCode",
    "NotFoundError",
    "application_error_handler",
    "build_error_payload",
    "error_response",
    "http_exception_handler",
    "register_exception_handlers",
    "request_validation_exception_handler",
    "unexpected_exception_handler",
]
