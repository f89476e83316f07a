"""HTTP middlewares: request correlation, access log, response hardening, body limits."""

from __future__ import annotations

import logging
import time
from typing import Final
from uuid import uuid4

from fastapi import Request, Response, status
from starlette.middleware.base import BaseHTTPMiddleware, RequestResponseEndpoint
from starlette.types import ASGIApp

from purple_shop.core.errors import ErrorCode, error_response
from purple_shop.core.logging import bind_request_id, reset_request_id

REQUEST_ID_HEADER: Final[str] = "X-Request-ID"
MAX_REQUEST_ID_LENGTH: Final[int] = 128

# Embedding is limited to Telegram's web clients.
TELEGRAM_FRAME_ANCESTORS: Final[str] = (
    "frame-ancestors 'self' https://web.telegram.org https://webapp.telegram.org"
)

access_logger = logging.getLogger("purple_shop.access")


class RequestIDMiddleware(BaseHTTPMiddleware):
    """Reuse the caller's X-Request-ID or mint one, and expose it to logging."""

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        incoming = request.headers.get(REQUEST_ID_HEADER, "")
        request_id = incoming if 0 < len(incoming) <= MAX_REQUEST_ID_LENGTH else uuid4().hex
        request.state.request_id = request_id

        token = bind_request_id(request_id)
        try:
            response = await call_next(request)
        finally:
            reset_request_id(token)

        response.headers[REQUEST_ID_HEADER] = request_id
        return response


class AccessLogMiddleware(BaseHTTPMiddleware):
    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        started = time.perf_counter()
        response: Response | None = None
        try:
            response = await call_next(request)
            return response
        finally:
            status_code = response.status_code if response is not None else 500
            elapsed_ms = round((time.perf_counter() - started) * 1000, 2)
            access_logger.info(
                "%s %s -> %s",
                request.method,
                request.url.path,
                status_code,
                extra={
                    "event": "access",
                    "http_method": request.method,
                    "http_path": request.url.path,
                    "status_code": status_code,
                    "duration_ms": elapsed_ms,
                    "client_ip": request.client.host if request.client else None,
                },
            )


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add hardening headers unless the endpoint already set them.

    No X-Frame-Options header is sent; ``frame-ancestors`` in the CSP governs
    embedding. HSTS is opt-in for deployed environments.
    """

    def __init__(self, app: ASGIApp, enable_hsts: bool = False) -> None:
        super().__init__(app)
        self.headers: dict[str, str] = {
            "X-Content-Type-Options": "nosniff",
            "Referrer-Policy": "same-origin",
            "Permissions-Policy": "camera=(), microphone=()",
            "Content-Security-Policy": TELEGRAM_FRAME_ANCESTORS,
        }
        if enable_hsts:
            self.headers["Strict-Transport-Security"] = "max-age=31536000; includeSubDomains"

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        response = await call_next(request)
        for name, value in self.headers.items():
            response.headers.setdefault(name, value)
        return response


class RequestSizeLimitMiddleware(BaseHTTPMiddleware):
    """Answer 413 when the declared or actual body exceeds ``max_request_bytes``."""

    def __init__(self, app: ASGIApp, max_request_bytes: int) -> None:
        if max_request_bytes <= 0:
            raise ValueError("max_request_bytes must be greater than zero.")
        super().__init__(app)
        self.max_request_bytes = max_request_bytes

    async def dispatch(self, request: Request, call_next: RequestResponseEndpoint) -> Response:
        declared = request.headers.get("content-length", "")
        if declared.isdigit() and int(declared) > self.max_request_bytes:
            return self._too_large()

        if len(await request.body()) > self.max_request_bytes:
            return self._too_large()

        return await call_next(request)

    def _too_large(self) -> Response:
        return error_response(
            status_code=status.HTTP_413_REQUEST_ENTITY_TOO_LARGE,
            code=ErrorCode.PAYLOAD_TOO_LARGE,
            message=f"Request body exceeds MAX_REQUEST_BYTES limit ({self.max_request_bytes}).",
        )


__all__ = [
    "AccessLogMiddleware",
    "REQUEST_ID_HEADER",
    "RequestIDMiddleware",
    "RequestSizeLimitMiddleware",
    "SecurityHeadersMiddleware",
]
