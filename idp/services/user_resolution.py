from __future__ import annotations

import logging

from idp.models.authorization_request import AuthorizeForm
from idp.models.user import User
from idp.repos.user_store import UserTxn
from idp.services import password_service
from idp.services.errors import (
    InvalidCredentials,
    PasswordMismatch,
    PasswordRequired,
    PendingVerification,
)

logger = logging.getLogger(__name__)


async def resolve_user(
    txn: UserTxn,
    *,
    tenant_id: str,
    form: AuthorizeForm,
    is_sign_up: bool,
) -> tuple[User, bool]:
    """Register or authenticate the submitting user inside ``txn``.

    Exactly one of the two happens; the returned flag is True for a
    registration. Unknown email on sign-in and wrong password produce the
    same InvalidCredentials message.
    """
    user = await txn.get_by_email(tenant_id, form.email)

    if user is None:
        if not is_sign_up:
            logger.warning("Sign-in failed: unknown email=%s", form.email)
            raise InvalidCredentials()
        return await register_user(txn, tenant_id=tenant_id, form=form), True

    authenticate_user(user, form)
    return user, False


async def register_user(txn: UserTxn, *, tenant_id: str, form: AuthorizeForm) -> User:
    if (
        form.password is not None
        and form.confirm_password is not None
        and form.password != form.confirm_password
    ):
        raise PasswordMismatch()

    password_hash = (
        password_service.hash_password(form.password)
        if form.password is not None
        else None
    )
    user = User.new(tenant_id=tenant_id, email=form.email, password_hash=password_hash)
    await txn.add(user)
    logger.info("User registered  user_id=%s email=%s", user.id, user.email)
    return user


def authenticate_user(user: User, form: AuthorizeForm) -> None:
    password_hash = user.password_hash
    if password_hash is None:
        # No password to check against: refuse until the address is verified.
        logger.warning(
            "Sign-in refused: account pending verification  user_id=%s", user.id
        )
        raise PendingVerification()

    if form.password is None:
        raise PasswordRequired()

    if not password_service.verify_password(password_hash, form.password):
        logger.warning("Sign-in failed: wrong password  user_id=%s", user.id)
        raise InvalidCredentials()

    logger.info("User authenticated  user_id=%s", user.id)
