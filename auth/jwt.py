"""
JWT-style token creation and verification.

Tokens are base64url-encoded JSON claims signed with HMAC-SHA256::

    <base64url({"sub": ..., "iat": ..., "exp": ...})>.<hex signature>

Claims are readable by anyone but tamper-evident.  The secret key comes
from ``config.signing_secret`` (env var: ``SIGNING_SECRET``).
"""

from __future__ import annotations

import binascii
import hashlib
import hmac
import json
import time
from base64 import b64decode, urlsafe_b64encode
from datetime import timedelta
from typing import Callable, Union

from auth.errors import InvalidToken, SigningFailure, TokenExpired
from auth.models import AuthenticatedIdentity

Clock = Callable[[], float]
TTL = Union[int, float, timedelta]


def _require_secret(secret: str) -> bytes:
    if not secret or not secret.strip():
        raise SigningFailure("signing secret is not configured")
    return secret.encode()


def _sign(secret: bytes, segment: bytes) -> str:
    return hmac.new(secret, segment, hashlib.sha256).hexdigest()


def _ttl_seconds(ttl: TTL) -> float:
    if isinstance(ttl, timedelta):
        return ttl.total_seconds()
    return float(ttl)


class TokenIssuer:
    def __init__(self, secret: str, *, clock: Clock = time.time) -> None:
        self._secret = secret
        self._clock = clock

    def check(self) -> None:
        """Raise ``SigningFailure`` now if the secret is unusable."""
        _require_secret(self._secret)

    def issue(self, identity_id: str, ttl: TTL) -> str:
        """Create a signed token for ``identity_id`` expiring ``ttl`` from now."""
        key = _require_secret(self._secret)
        now = self._clock()
        claims = {
            "sub": identity_id,
            "iat": now,
            "exp": now + _ttl_seconds(ttl),
        }
        raw = json.dumps(claims, separators=(",", ":")).encode()
        payload = urlsafe_b64encode(raw)
        return payload.decode() + "." + _sign(key, payload)


class TokenVerifier:
    def __init__(self, secret: str, *, clock: Clock = time.time) -> None:
        self._secret = secret
        self._clock = clock

    def verify(self, token: str) -> AuthenticatedIdentity:
        """
        Verify ``token`` and return the identity it carries.

        Raises ``InvalidToken`` for anything that was never valid (bad shape,
        bad signature, foreign key) and ``TokenExpired`` for a genuine token
        whose ``exp`` has passed.
        """
        key = _require_secret(self._secret)

        parts = token.split(".") if isinstance(token, str) else []
        if len(parts) != 2 or not parts[0] or not parts[1]:
            raise InvalidToken("bad format")

        # The signature covers the payload segment exactly as transmitted.
        payload = parts[0].encode()
        if not hmac.compare_digest(parts[1].encode(), _sign(key, payload).encode()):
            raise InvalidToken("bad signature")

        try:
            raw = b64decode(payload, altchars=b"-_", validate=True)
            claims = json.loads(raw)
        except (binascii.Error, ValueError) as exc:
            raise InvalidToken("bad payload") from exc
        if not isinstance(claims, dict):
            raise InvalidToken("bad payload")

        identity_id = claims.get("sub")
        exp = claims.get("exp")
        if not isinstance(identity_id, str) or not identity_id:
            raise InvalidToken("missing subject")
        if not isinstance(exp, (int, float)) or isinstance(exp, bool):
            raise InvalidToken("missing expiry")

        if exp <= self._clock():
            raise TokenExpired("token expired")
        return AuthenticatedIdentity(identity_id=identity_id)
