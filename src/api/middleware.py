"""Response middleware: security headers and per-request timing log."""

from __future__ import annotations

import time

from fastapi import Request, Response
from loguru import logger
from starlette.middleware.base import BaseHTTPMiddleware


class SecurityHeadersMiddleware(BaseHTTPMiddleware):
    """Inject security headers on every response; log cron-triggered calls."""

    async def dispatch(self, request: Request, call_next) -> Response:  # type: ignore[override]
        started = time.monotonic()
        response: Response = await call_next(request)
        elapsed_ms = (time.monotonic() - started) * 1000

        logger.debug(
            f"[HTTP] {request.method} {request.url.path} -> "
            f"{response.status_code} in {elapsed_ms:.0f}ms"
        )

        response.headers["X-Content-Type-Options"] = "nosniff"
        response.headers["X-Frame-Options"] = "DENY"
        response.headers["Referrer-Policy"] = "strict-origin-when-cross-origin"
        response.headers["Content-Security-Policy"] = "default-src 'none'"
        return response
