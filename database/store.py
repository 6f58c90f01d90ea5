"""
SqlCredentialStore — CredentialStore backed by the ``users`` table.

Uniqueness of ``email`` is enforced by the table's unique constraint, so
concurrent inserts for one email resolve inside the database: the loser's
commit fails with ``IntegrityError`` and surfaces as ``DuplicateKey``.
"""

from __future__ import annotations

import logging
from typing import Optional

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError
from sqlalchemy.ext.asyncio import AsyncEngine

from auth.errors import DuplicateKey
from auth.models import UserRecord
from auth.store import CredentialStore
from database.models import User
from database.session import create_engine, create_session_factory, create_tables

logger = logging.getLogger(__name__)


def _to_record(row: User) -> UserRecord:
    return UserRecord(
        email=row.email,
        identity_id=row.identity_id,
        password_hash=row.password_hash,
    )


class SqlCredentialStore(CredentialStore):
    def __init__(self, engine: AsyncEngine) -> None:
        self._engine = engine
        self._session_factory = create_session_factory(engine)

    @classmethod
    def from_url(cls, database_url: Optional[str] = None) -> "SqlCredentialStore":
        return cls(create_engine(database_url))

    async def setup(self) -> None:
        await create_tables(self._engine)

    async def close(self) -> None:
        await self._engine.dispose()

    async def find_by_email(self, email: str) -> Optional[UserRecord]:
        async with self._session_factory() as session:
            result = await session.execute(select(User).where(User.email == email))
            row = result.scalar_one_or_none()
            return _to_record(row) if row is not None else None

    async def insert(self, record: UserRecord) -> UserRecord:
        async with self._session_factory() as session:
            session.add(
                User(
                    identity_id=record.identity_id,
                    email=record.email,
                    password_hash=record.password_hash,
                )
            )
            try:
                await session.commit()
            except IntegrityError as exc:
                await session.rollback()
                logger.debug("Insert rejected for existing email (identity %s)", record.identity_id)
                raise DuplicateKey("email already stored") from exc
        return record
