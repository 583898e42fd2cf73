"""PostgreSQL implementation of ClientRepo."""

from __future__ import annotations

from sqlalchemy import select
from sqlalchemy.exc import SQLAlchemyError
from sqlalchemy.ext.asyncio import AsyncSession, async_sessionmaker

from idp.db.tables import ClientRow
from idp.models.oauth_client import OAuthClient
from idp.services.errors import InternalError


class PgClientRepo:
    """Satisfies the ClientRepo Protocol using PostgreSQL via SQLAlchemy.

    Lookups are read-only and run outside the user transaction, each on a
    short-lived session of their own. Database errors surface as
    InternalError.
    """

    def __init__(self, session_factory: async_sessionmaker[AsyncSession]) -> None:
        self._session_factory = session_factory

    async def get(self, client_id: str) -> OAuthClient | None:
        stmt = select(ClientRow).where(ClientRow.id == client_id)
        try:
            async with self._session_factory() as session:
                row = (await session.execute(stmt)).scalar_one_or_none()
        except SQLAlchemyError as e:
            raise InternalError() from e
        if row is None:
            return None
        return _row_to_client(row)


def _row_to_client(row: ClientRow) -> OAuthClient:
    return OAuthClient(
        id=row.id,
        authorized_domains=(
            tuple(row.authorized_domains) if row.authorized_domains else ()
        ),
    )
