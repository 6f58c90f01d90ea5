"""
Password hashing and verification.

Uses bcrypt for password hashing with automatic
salting and configurable work factor.
"""

from __future__ import annotations

import asyncio

import bcrypt

from auth.errors import HashingFailure

DEFAULT_WORK_FACTOR = 10


def _encode(plaintext: str) -> bytes:
    # bcrypt only consumes the first 72 bytes of a password.
    return plaintext.encode()[:72]


class PasswordHasher:
    def __init__(self, work_factor: int = DEFAULT_WORK_FACTOR) -> None:
        if not 4 <= work_factor <= 31:
            raise ValueError(f"bcrypt work factor must be in 4..31, got {work_factor}")
        self.work_factor = work_factor

    def hash(self, plaintext: str) -> str:
        """Hash a password with bcrypt (fresh salt embedded in the result)."""
        salt = bcrypt.gensalt(rounds=self.work_factor)
        return bcrypt.hashpw(_encode(plaintext), salt).decode()

    def verify(self, plaintext: str, hashed: str) -> bool:
        """
        Constant-time comparison against a bcrypt hash.

        Returns ``False`` on mismatch.  Raises ``HashingFailure`` only when
        ``hashed`` is not a usable bcrypt hash.
        """
        try:
            return bcrypt.checkpw(_encode(plaintext), hashed.encode())
        except (ValueError, TypeError, AttributeError) as exc:
            raise HashingFailure(f"malformed stored hash: {exc}") from exc

    # bcrypt is CPU-bound; keep it off the event loop.

    async def hash_async(self, plaintext: str) -> str:
        return await asyncio.to_thread(self.hash, plaintext)

    async def verify_async(self, plaintext: str, hashed: str) -> bool:
        return await asyncio.to_thread(self.verify, plaintext, hashed)
