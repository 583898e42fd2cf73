from __future__ import annotations

import logging
from dataclasses import dataclass

from idp.models.authorization_request import AuthorizationRequest
from idp.models.oauth_client import OAuthClient
from idp.repos.client_repo import ClientRepo
from idp.services.client_registry import lookup_client
from idp.services.errors import ClientNotFound, InvalidClient, InvalidRedirect

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class ValidatedRequest:
    """The registered client and the redirect URI it is allowed to receive."""

    client: OAuthClient
    redirect_uri: str


async def validate_authorization_request(
    repo: ClientRepo, request: AuthorizationRequest
) -> ValidatedRequest:
    """Reject requests that cannot be processed safely.

    Runs before any user data is read or written. An invalid redirect_uri
    is reported on our own error page, never redirected to.
    """
    try:
        client = await lookup_client(repo, request.client_id)
    except ClientNotFound:
        logger.warning("Authorization request rejected: invalid client_id")
        raise InvalidClient() from None

    redirect_uri = request.redirect_uri
    if redirect_uri is None or not client.allows_redirect(redirect_uri):
        logger.warning(
            "Authorization request rejected: redirect_uri not registered  "
            "client_id=%s",
            client.id,
        )
        raise InvalidRedirect()

    return ValidatedRequest(client=client, redirect_uri=redirect_uri)
