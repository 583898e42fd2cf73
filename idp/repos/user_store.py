"""User persistence behind a transaction boundary.

A UserStore hands out UserTxn objects through ``transaction()``, an async
context manager: leaving the block normally commits, leaving it with any
exception (including task cancellation) rolls back. Nothing written inside
a failed block is ever visible to other requests.
"""

from __future__ import annotations

from collections.abc import AsyncIterator
from contextlib import AbstractAsyncContextManager, asynccontextmanager
from typing import Protocol

from idp.models.user import User
from idp.services.errors import DuplicateUser

_Key = tuple[str, str]  # (tenant_id, email)


class UserTxn(Protocol):
    async def get_by_email(self, tenant_id: str, email: str) -> User | None: ...
    async def add(self, user: User) -> None: ...


class UserStore(Protocol):
    def transaction(self) -> AbstractAsyncContextManager[UserTxn]: ...


class InMemoryUserTxn:
    """Buffers inserts until commit; reads see committed rows plus its own."""

    def __init__(self, committed: dict[_Key, User]) -> None:
        self._committed = committed
        self._pending: dict[_Key, User] = {}

    async def get_by_email(self, tenant_id: str, email: str) -> User | None:
        key = (tenant_id, email)
        return self._pending.get(key) or self._committed.get(key)

    async def add(self, user: User) -> None:
        key = (user.tenant_id, user.email)
        if key in self._pending or key in self._committed:
            raise DuplicateUser()
        self._pending[key] = user

    def commit(self) -> None:
        # Re-check at commit: another transaction may have committed the
        # same (tenant, email) since this one read it as absent.
        for key in self._pending:
            if key in self._committed:
                raise DuplicateUser()
        self._committed.update(self._pending)
        self._pending.clear()

    def rollback(self) -> None:
        self._pending.clear()


class InMemoryUserStore:
    def __init__(self) -> None:
        self._by_key: dict[_Key, User] = {}

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[InMemoryUserTxn]:
        txn = InMemoryUserTxn(self._by_key)
        try:
            yield txn
        except BaseException:
            # BaseException so a cancelled request discards its writes too.
            txn.rollback()
            raise
        txn.commit()

    def add(self, user: User) -> None:
        """Insert outside any transaction (dev and test seeding)."""
        key = (user.tenant_id, user.email)
        if key in self._by_key:
            raise DuplicateUser()
        self._by_key[key] = user

    def get(self, tenant_id: str, email: str) -> User | None:
        return self._by_key.get((tenant_id, email))
