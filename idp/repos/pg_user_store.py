"""PostgreSQL implementation of UserStore."""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from sqlalchemy import select
from sqlalchemy.exc import IntegrityError, SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from idp.db.tables import UserRow
from idp.models.user import User
from idp.services.errors import DuplicateUser, InternalError


class PgUserTxn:
    """Satisfies the UserTxn Protocol on one open SQLAlchemy transaction."""

    def __init__(self, session: AsyncSession) -> None:
        self._session = session

    async def get_by_email(self, tenant_id: str, email: str) -> User | None:
        stmt = select(UserRow).where(
            UserRow.tenant_id == tenant_id,
            UserRow.email == email,
        )
        row = (await self._session.execute(stmt)).scalar_one_or_none()
        if row is None:
            return None
        return _row_to_user(row)

    async def add(self, user: User) -> None:
        row = UserRow(
            id=user.id,
            tenant_id=user.tenant_id,
            email=user.email,
            email_verified=user.email_verified,
            password_hash=user.password_hash,
            created_at=user.created_at,
            updated_at=user.updated_at,
        )
        self._session.add(row)
        # Flush now so a uniqueness violation surfaces inside the block.
        await self._session.flush()


class PgUserStore:
    """Satisfies the UserStore Protocol using PostgreSQL via SQLAlchemy.

    ``session.begin()`` commits when the block exits cleanly and rolls back
    on any exception, cancellation included. The (tenant_id, email) unique
    constraint settles concurrent registrations; the loser gets DuplicateUser.
    Any other database error surfaces as InternalError.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[PgUserTxn]:
        try:
            async with self._session_factory() as session, session.begin():
                yield PgUserTxn(session)
        except IntegrityError as e:
            raise DuplicateUser() from e
        except SQLAlchemyError as e:
            # Already rolled back; the caller re-renders with a generic error
            raise InternalError() from e


def _row_to_user(row: UserRow) -> User:
    return User(
        id=row.id,
        tenant_id=row.tenant_id,
        email=row.email,
        email_verified=row.email_verified,
        password_hash=row.password_hash,
        created_at=row.created_at,
        updated_at=row.updated_at,
    )
