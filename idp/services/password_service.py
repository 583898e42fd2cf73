from __future__ import annotations

import logging

from argon2 import PasswordHasher
from argon2.exceptions import (
    HashingError,
    InvalidHashError,
    VerificationError,
    VerifyMismatchError,
)

from idp.services.errors import HashingFailed

logger = logging.getLogger(__name__)

# Library defaults (Argon2id, RFC 9106 low-memory profile). The encoded hash
# carries salt and parameters, so tuning later does not break old hashes.
_ph = PasswordHasher()


def hash_password(plain_password: str) -> str:
    if not plain_password:
        raise HashingFailed("password must be non-empty")
    try:
        return _ph.hash(plain_password)
    except HashingError as e:
        raise HashingFailed(f"argon2 hashing failed: {e}") from e


def verify_password(password_hash: str, plain_password: str) -> bool:
    """Check a password against a stored hash.

    A mismatch is a normal outcome and returns False. A stored hash that
    argon2 cannot parse means corrupt data, so it raises HashingFailed.
    """
    if not plain_password:
        return False
    try:
        return _ph.verify(password_hash, plain_password)
    except VerifyMismatchError:
        return False
    except InvalidHashError as e:
        logger.error("Stored password hash is malformed")
        raise HashingFailed("stored password hash is malformed") from e
    except VerificationError:
        return False
