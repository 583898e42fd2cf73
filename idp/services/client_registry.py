from __future__ import annotations

import logging

from idp.models.oauth_client import OAuthClient
from idp.repos.client_repo import ClientRepo
from idp.services.errors import ClientNotFound

logger = logging.getLogger(__name__)

CLIENT_ID_MAX_LEN = 128


def is_well_formed_client_id(client_id: str) -> bool:
    if not client_id or len(client_id) > CLIENT_ID_MAX_LEN:
        return False
    return client_id.isprintable() and not any(c.isspace() for c in client_id)


async def lookup_client(repo: ClientRepo, client_id: str | None) -> OAuthClient:
    """Resolve a client identifier to its registered client.

    Malformed identifiers are rejected without touching the store.
    """
    if client_id is None or not is_well_formed_client_id(client_id):
        logger.debug("Malformed client_id rejected")
        raise ClientNotFound()

    client = await repo.get(client_id)
    if client is None:
        logger.debug("Unknown client_id=%s", client_id)
        raise ClientNotFound()
    return client
