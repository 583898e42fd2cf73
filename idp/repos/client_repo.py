from __future__ import annotations

from typing import Protocol

from idp.models.oauth_client import OAuthClient


class ClientRepo(Protocol):
    async def get(self, client_id: str) -> OAuthClient | None: ...


class InMemoryClientRepo:
    def __init__(self) -> None:
        self._by_id: dict[str, OAuthClient] = {}

    async def get(self, client_id: str) -> OAuthClient | None:
        return self._by_id.get(client_id)

    def register(self, client: OAuthClient) -> None:
        # Clients are managed elsewhere; this only seeds dev and test data.
        self._by_id[client.id] = client
