"""
Exception handlers — map core errors to HTTP responses.

Every ``AuthError`` renders as::

    {"success": false, "error": <kind>, "message": <public message>}

Internal detail (``exc.detail``) only goes to the log.
"""

from __future__ import annotations

import logging

from fastapi import FastAPI, Request
from fastapi.exceptions import RequestValidationError
from fastapi.responses import JSONResponse

from auth.errors import AuthError, ErrorKind, ValidationError, is_configuration_fault

logger = logging.getLogger(__name__)


def _envelope(status_code: int, kind: ErrorKind, message: str) -> JSONResponse:
    return JSONResponse(
        status_code=status_code,
        content={"success": False, "error": kind.value, "message": message},
    )


def register_exception_handlers(app: FastAPI) -> None:
    """Attach handlers for the credential error taxonomy."""

    @app.exception_handler(AuthError)
    async def auth_error_handler(request: Request, exc: AuthError):
        request.state.error_kind = exc.kind.value
        if is_configuration_fault(exc):
            logger.error(
                "%s on %s %s: %s", exc.kind.value, request.method, request.url.path, exc.detail
            )
        else:
            logger.debug(
                "%s on %s %s: %s", exc.kind.value, request.method, request.url.path, exc.detail
            )
        return _envelope(exc.status_code, exc.kind, exc.public_message)

    @app.exception_handler(RequestValidationError)
    async def request_validation_handler(request: Request, exc: RequestValidationError):
        request.state.error_kind = ValidationError.kind.value
        logger.debug("Validation failed on %s: %s", request.url.path, exc.errors())
        return _envelope(
            ValidationError.status_code,
            ValidationError.kind,
            ValidationError.public_message,
        )
