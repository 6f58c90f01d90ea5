"""
Global middleware.
"""

from __future__ import annotations

import logging
import time

from fastapi import FastAPI, Request

logger = logging.getLogger(__name__)


def register_middleware(app: FastAPI) -> None:
    """Attach any app-level middleware."""

    @app.middleware("http")
    async def request_timer(request: Request, call_next):
        start = time.perf_counter()
        response = await call_next(request)
        elapsed = time.perf_counter() - start
        response.headers["X-Process-Time"] = f"{elapsed:.4f}"

        # Set by api.errors when an AuthError was rendered for this request.
        error_kind = getattr(request.state, "error_kind", None)
        if error_kind:
            logger.info(
                "%s %s %d %s — %.3fs",
                request.method,
                request.url.path,
                response.status_code,
                error_kind,
                elapsed,
            )
        else:
            logger.debug(
                "%s %s %d — %.3fs",
                request.method,
                request.url.path,
                response.status_code,
                elapsed,
            )
        return response
