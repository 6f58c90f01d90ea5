"""
AuthService — registration, login and token authentication.

    Anonymous --register--> Registered --login (correct password)--> holds token

Each operation is atomic from the caller's point of view.  Registration's
existence check is a fast path only; the store's atomic ``insert`` is what
guarantees one record per email under concurrent registrations.
"""

from __future__ import annotations

import logging
import uuid
from datetime import timedelta
from typing import Any, Mapping, Union

from auth.errors import DuplicateKey, InvalidCredentials, UserAlreadyExists
from auth.jwt import TTL, TokenIssuer, TokenVerifier
from auth.models import AuthenticatedIdentity, Credentials, SessionToken, UserRecord
from auth.password import PasswordHasher
from auth.store import CredentialStore

logger = logging.getLogger(__name__)

DEFAULT_TOKEN_TTL = timedelta(hours=1)

CredentialsInput = Union[Credentials, Mapping[str, Any]]


class AuthService:
    def __init__(
        self,
        store: CredentialStore,
        hasher: PasswordHasher,
        issuer: TokenIssuer,
        verifier: TokenVerifier,
        *,
        token_ttl: TTL = DEFAULT_TOKEN_TTL,
    ) -> None:
        self.store = store
        self.hasher = hasher
        self.issuer = issuer
        self.verifier = verifier
        self.token_ttl = token_ttl

    async def register(self, credentials: CredentialsInput) -> UserRecord:
        """
        Create a user for ``credentials.email``.

        Raises ``UserAlreadyExists`` if the email is taken, including when a
        concurrent registration wins the insert.
        """
        creds = Credentials.coerce(credentials)

        if await self.store.find_by_email(creds.email) is not None:
            raise UserAlreadyExists()

        password_hash = await self.hasher.hash_async(creds.password)
        record = UserRecord(
            email=creds.email,
            identity_id=str(uuid.uuid4()),
            password_hash=password_hash,
        )
        try:
            stored = await self.store.insert(record)
        except DuplicateKey as exc:
            raise UserAlreadyExists() from exc

        logger.info("Registered identity %s", stored.identity_id)
        return stored

    async def login(self, credentials: CredentialsInput) -> SessionToken:
        """Return a session token, or raise ``InvalidCredentials``."""
        creds = Credentials.coerce(credentials)

        user = await self.store.find_by_email(creds.email)
        if user is None:
            raise InvalidCredentials()
        if not await self.hasher.verify_async(creds.password, user.password_hash):
            raise InvalidCredentials()

        token = self.issuer.issue(user.identity_id, self.token_ttl)
        logger.info("Login: identity %s", user.identity_id)
        return token

    def authenticate(self, token: str) -> AuthenticatedIdentity:
        return self.verifier.verify(token)
