from __future__ import annotations

import secrets
import string
from dataclasses import dataclass
from datetime import UTC, datetime

USER_ID_LEN = 40
_ID_ALPHABET = string.ascii_letters + string.digits


def new_user_id() -> str:
    return "".join(secrets.choice(_ID_ALPHABET) for _ in range(USER_ID_LEN))


@dataclass(frozen=True, slots=True)
class User:
    id: str
    tenant_id: str
    email: str
    email_verified: bool | None
    password_hash: str | None  # None until a password is set
    created_at: datetime
    updated_at: datetime

    @property
    def is_pending_verification(self) -> bool:
        """No password on record: the account cannot authenticate yet."""
        return self.password_hash is None

    @staticmethod
    def new(*, tenant_id: str, email: str, password_hash: str | None) -> User:
        now = datetime.now(UTC)
        return User(
            id=new_user_id(),
            tenant_id=tenant_id,
            email=email,
            email_verified=False,
            password_hash=password_hash,
            created_at=now,
            updated_at=now,
        )
