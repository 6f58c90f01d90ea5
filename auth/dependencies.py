"""
FastAPI dependencies for authentication.

Provides ``get_auth_service``, ``get_notifier`` and ``require_identity``,
used across the auth routes and any protected route.  The collaborators
themselves are built once in ``main.create_app`` and live on ``app.state``.
"""

from __future__ import annotations

from fastapi import Request

from auth.middleware import AuthGuard
from auth.models import AuthenticatedIdentity
from auth.notifier import Notifier
from auth.service import AuthService


def get_auth_service(request: Request) -> AuthService:
    return request.app.state.auth_service


def get_notifier(request: Request) -> Notifier:
    return request.app.state.notifier


async def require_identity(request: Request) -> AuthenticatedIdentity:
    """
    Verify the request's bearer token and attach the identity to
    ``request.state.identity``.

    Raises ``MissingToken`` (401) or ``InvalidToken`` / ``TokenExpired``
    (403); ``api.errors`` renders them.
    """
    guard: AuthGuard = request.app.state.auth_guard
    identity = guard.check(request.headers.get(guard.header_name))
    request.state.identity = identity
    return identity
