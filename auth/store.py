"""
CredentialStore — abstract email → UserRecord mapping used by AuthService.

Contract: ``insert`` is atomic with respect to the email key.  If the email
is already present (including under a concurrent insert), it raises
``DuplicateKey`` and leaves the existing record untouched.
"""

from __future__ import annotations

import asyncio
from abc import ABC, abstractmethod
from typing import Dict, Optional

from auth.errors import DuplicateKey
from auth.models import UserRecord


class CredentialStore(ABC):
    """Abstract base for credential stores."""

    @abstractmethod
    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        """Return the record stored under ``email`` (case-sensitive) or ``None``."""
        ...

    @abstractmethod
    async def insert(self, record: UserRecord) -> UserRecord:
        """Store ``record``; raise ``DuplicateKey`` if its email is taken."""
        ...


class InMemoryCredentialStore(CredentialStore):
    """Process-local store.  A lock makes check-then-insert one step."""

    def __init__(self) -> None:
        self._users: Dict[str, UserRecord] = {}
        self._lock = asyncio.Lock()

    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        return self._users.get(email)

    async def insert(self, record: UserRecord) -> UserRecord:
        async with self._lock:
            if record.email in self._users:
                raise DuplicateKey("email already stored")
            self._users[record.email] = record
        return record

    def __len__(self) -> int:
        return len(self._users)
