"""Authorization code minting (HS256 JWT).

The code is self-contained: nothing is stored server side. The token
endpoint verifies signature and expiry with the same secret and is
responsible for single-use enforcement (the sessions.claimed_at marker).
"""

from __future__ import annotations

import logging
import uuid
from datetime import UTC, datetime, timedelta

import jwt

from idp.services.errors import SigningFailed

logger = logging.getLogger(__name__)

ALGORITHM = "HS256"
AUTH_CODE_TTL_SEC = 30


class CodeIssuer:
    def __init__(self, secret: str, *, ttl_seconds: int = AUTH_CODE_TTL_SEC) -> None:
        self._secret = secret
        self.ttl_seconds = ttl_seconds

    def issue(self, *, client_id: str, redirect_uri: str, user_id: str) -> str:
        if not self._secret:
            raise SigningFailed("signing secret is not configured")

        now = datetime.now(UTC)
        payload = {
            "jti": str(uuid.uuid4()),
            "client_id": client_id,
            "redirect_uri": redirect_uri,
            "user_id": user_id,
            "iat": now,
            "exp": now + timedelta(seconds=self.ttl_seconds),
        }
        try:
            return jwt.encode(payload, self._secret, algorithm=ALGORITHM)
        except jwt.PyJWTError as e:
            logger.error("Authorization code signing failed: %s", type(e).__name__)
            raise SigningFailed(f"could not sign authorization code: {e}") from e

    def decode(self, code: str) -> dict:
        """Verify signature and expiry, return the claims.

        Pins the algorithm to HS256 to prevent alg:none and alg-switching.
        Raises jwt.ExpiredSignatureError, jwt.InvalidTokenError on failure.
        """
        return jwt.decode(
            code,
            self._secret,
            algorithms=[ALGORITHM],
            options={
                "require": ["jti", "client_id", "redirect_uri", "user_id", "exp"]
            },
        )
