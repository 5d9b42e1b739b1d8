"""HTTP middleware: security headers, access logging and rate limiting."""

from __future__ import annotations

import logging
import time
from typing import Callable

from fastapi.responses import JSONResponse
from starlette.middleware.base import BaseHTTPMiddleware
from starlette.requests import Request
from starlette.responses import Response
from starlette.types import ASGIApp

from app.core.exceptions import RateLimitError

logger = logging.getLogger("app.access")

_SECURITY_HEADERS = {
    "X-Content-Type-Options": "nosniff",
    "X-Frame-Options": "SAMEORIGIN",
    "X-DNS-Prefetch-Control": "off",
    "X-Download-Options": "noopen",
    "X-Permitted-Cross-Domain-Policies": "none",
    "Referrer-Policy": "no-referrer",
    "Cross-Origin-Opener-Policy": "same-origin",
    "Cross-Origin-Resource-Policy": "same-origin",
}


def apply_security_headers(response: Response, hsts: bool = False) -> Response:
    """Set the security headers on ``response`` without overriding existing ones."""
    for key, value in _SECURITY_HEADERS.items():
        response.headers.setdefault(key, value)
    if hsts:
        response.headers.setdefault(
            "Strict-Transport-Security", "max-age=15552000; includeSubDomains"
        )
    return response


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Add conservative security headers to every response."""

    def __init__(self, app: ASGIApp, hsts: bool = False) -> None:
        super().__init__(app)
        self.hsts = hsts

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        response = await call_next(request)
        return apply_security_headers(response, self.hsts)


class RequestLoggingMiddleware(BaseHTTPMiddleware):
    """One access-log line per request."""

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        start = time.monotonic()
        response = await call_next(request)
        duration_ms = round((time.monotonic() - start) * 1000, 2)
        logger.info(
            '%s "%s %s" %d %.2fms',
            request.client.host if request.client else "-",
            request.method,
            request.url.path,
            response.status_code,
            duration_ms,
        )
        return response


class RateLimitMiddleware(BaseHTTPMiddleware):
    """Fixed-window request limit per client IP, held in process memory.

    Counters are per worker process. Paths starting with any of
    ``exempt_prefixes`` are never counted.
    """

    def __init__(
        self,
        app: ASGIApp,
        max_requests: int = 100,
        window_seconds: int = 15 * 60,
        exempt_prefixes: tuple[str, ...] = (),
    ) -> None:
        super().__init__(app)
        self.max_requests = max_requests
        self.window_seconds = window_seconds
        self.exempt_prefixes = exempt_prefixes
        self._windows: dict[str, tuple[float, int]] = {}

    def hit(self, client: str, now: float | None = None) -> tuple[bool, int]:
        """Count one request for ``client``; return (allowed, remaining)."""
        now = time.monotonic() if now is None else now
        started, count = self._windows.get(client, (now, 0))
        if now - started >= self.window_seconds:
            started, count = now, 0
        count += 1
        self._windows[client] = (started, count)
        if len(self._windows) > 10_000:
            self._evict(now)
        return count <= self.max_requests, max(self.max_requests - count, 0)

    def _evict(self, now: float) -> None:
        expired = [k for k, (s, _) in self._windows.items() if now - s >= self.window_seconds]
        for key in expired:
            del self._windows[key]

    async def dispatch(self, request: Request, call_next: Callable) -> Response:
        if request.url.path.startswith(self.exempt_prefixes):
            return await call_next(request)

        client = request.client.host if request.client else "unknown"
        allowed, remaining = self.hit(client)
        if not allowed:
            logger.warning("Rate limit exceeded for %s", client)
            return JSONResponse(
                status_code=RateLimitError.status_code,
                content={"success": False, "message": RateLimitError.default_message},
                headers={"Retry-After": str(self.window_seconds)},
            )

        response = await call_next(request)
        response.headers["X-RateLimit-Limit"] = str(self.max_requests)
        response.headers["X-RateLimit-Remaining"] = str(remaining)
        return response
