"""
Bearer-token guard for protected operations.

The guard only reads the request header and verifies the token; it never
touches persisted state.  ``MissingToken`` means no usable bearer token was
sent; verifier errors (``InvalidToken`` / ``TokenExpired``) pass through
unchanged so callers can tell them apart.
"""

from __future__ import annotations

from typing import Optional

from auth.errors import MissingToken
from auth.jwt import TokenVerifier
from auth.models import AuthenticatedIdentity

BEARER_SCHEME = "bearer"


def extract_bearer_token(header_value: Optional[str]) -> str:
    """Pull the token out of an ``Authorization: Bearer <token>`` value."""
    if not header_value:
        raise MissingToken("no authorization header")
    scheme, _, token = header_value.strip().partition(" ")
    token = token.strip()
    if scheme.lower() != BEARER_SCHEME or not token:
        raise MissingToken("no bearer token")
    return token


class AuthGuard:
    def __init__(self, verifier: TokenVerifier, header_name: str = "Authorization") -> None:
        self.verifier = verifier
        self.header_name = header_name

    def check(self, header_value: Optional[str]) -> AuthenticatedIdentity:
        return self.verifier.verify(extract_bearer_token(header_value))
