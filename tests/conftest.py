"""
Shared fixtures: a cheap bcrypt work factor and a controllable clock.
"""

import time

import pytest

from auth.jwt import TokenIssuer, TokenVerifier
from auth.password import PasswordHasher
from auth.service import AuthService
from auth.store import InMemoryCredentialStore

SECRET = "test-signing-secret"


class FakeClock:
    def __init__(self, now: float | None = None):
        self.now = now if now is not None else time.time()

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


@pytest.fixture()
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture()
def hasher() -> PasswordHasher:
    return PasswordHasher(work_factor=4)


@pytest.fixture()
def issuer(clock) -> TokenIssuer:
    return TokenIssuer(SECRET, clock=clock)


@pytest.fixture()
def verifier(clock) -> TokenVerifier:
    return TokenVerifier(SECRET, clock=clock)


@pytest.fixture()
def store() -> InMemoryCredentialStore:
    return InMemoryCredentialStore()


@pytest.fixture()
def service(store, hasher, issuer, verifier) -> AuthService:
    return AuthService(store, hasher, issuer, verifier)
