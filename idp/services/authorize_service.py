"""Authorization endpoint orchestration.

One /authorize exchange moves through:

  Received → Validated → FormRendered                     (GET, other methods)
  Received → Validated → Processing → Redirected           (POST, success)
  Received → Validated → Processing → FormRenderedWithError (POST, failure)

Validation failures stop at Received and never reach the user store.
The HTTP layer turns the returned FormView or Redirect into a response;
this module knows nothing about HTML.
"""

from __future__ import annotations

import logging
from collections.abc import Mapping
from dataclasses import dataclass
from urllib.parse import urlencode

from idp.core.metrics import AUTHORIZE_OUTCOMES, USERS_REGISTERED
from idp.models.authorization_request import (
    AuthorizationRequest,
    AuthorizeForm,
    FormParseError,
    parse_form,
)
from idp.repos.client_repo import ClientRepo
from idp.repos.user_store import UserStore
from idp.services.code_issuer import CodeIssuer
from idp.services.errors import (
    AuthenticationError,
    InternalError,
    InvalidRequest,
)
from idp.services.request_validator import (
    ValidatedRequest,
    validate_authorization_request,
)
from idp.services.user_resolution import resolve_user

logger = logging.getLogger(__name__)


@dataclass(frozen=True, slots=True)
class FormView:
    """Sign-in or sign-up form to render, optionally pre-filled."""

    sign_up: bool
    email: str | None = None
    password: str | None = None
    error: str | None = None
    status_code: int = 200


@dataclass(frozen=True, slots=True)
class Redirect:
    location: str


def build_redirect_url(redirect_uri: str, code: str, state: str | None) -> str:
    params = {"code": code}
    if state is not None:
        params["state"] = state
    separator = "&" if "?" in redirect_uri else "?"
    return f"{redirect_uri}{separator}{urlencode(params)}"


class AuthorizeService:
    """Sequences validation, user resolution and code issuance.

    Every collaborator is injected; the service holds no per-request state
    and is shared by all concurrent requests.
    """

    def __init__(
        self,
        *,
        client_repo: ClientRepo,
        user_store: UserStore,
        code_issuer: CodeIssuer,
        tenant_id: str,
    ) -> None:
        self._client_repo = client_repo
        self._user_store = user_store
        self._code_issuer = code_issuer
        self._tenant_id = tenant_id

    async def validate(self, request: AuthorizationRequest) -> ValidatedRequest:
        try:
            return await validate_authorization_request(self._client_repo, request)
        except InvalidRequest:
            AUTHORIZE_OUTCOMES.labels(outcome="rejected").inc()
            raise
        except InternalError:
            AUTHORIZE_OUTCOMES.labels(outcome="internal_error").inc()
            logger.exception("Client lookup failed  client_id=%s", request.client_id)
            raise

    def show_form(self, request: AuthorizationRequest) -> FormView:
        AUTHORIZE_OUTCOMES.labels(outcome="form").inc()
        return FormView(sign_up=request.is_sign_up)

    async def submit(
        self,
        request: AuthorizationRequest,
        target: ValidatedRequest,
        form_data: Mapping[str, object],
    ) -> FormView | Redirect:
        """Process a submitted form for an already validated request."""
        try:
            form = parse_form(form_data)
        except FormParseError as e:
            AUTHORIZE_OUTCOMES.labels(outcome="auth_failed").inc()
            return FormView(sign_up=request.is_sign_up, error=str(e))

        try:
            async with self._user_store.transaction() as txn:
                user, registered = await resolve_user(
                    txn,
                    tenant_id=self._tenant_id,
                    form=form,
                    is_sign_up=request.is_sign_up,
                )
                # Minted before commit: a signing failure aborts a registration.
                code = self._code_issuer.issue(
                    client_id=target.client.id,
                    redirect_uri=target.redirect_uri,
                    user_id=user.id,
                )
        except AuthenticationError as e:
            AUTHORIZE_OUTCOMES.labels(outcome="auth_failed").inc()
            logger.info(
                "Authorization form rejected: %s  client_id=%s",
                type(e).__name__,
                target.client.id,
            )
            return self._form_with_error(request, form, e.message)
        except InternalError:
            AUTHORIZE_OUTCOMES.labels(outcome="internal_error").inc()
            logger.exception(
                "Authorization failed internally  client_id=%s", target.client.id
            )
            return self._form_with_error(
                request, form, InternalError.default_message, status_code=500
            )

        if registered:
            USERS_REGISTERED.inc()
        AUTHORIZE_OUTCOMES.labels(outcome="redirected").inc()
        logger.info(
            "Authorization code issued  client_id=%s user_id=%s",
            target.client.id,
            user.id,
        )
        return Redirect(build_redirect_url(target.redirect_uri, code, request.state))

    @staticmethod
    def _form_with_error(
        request: AuthorizationRequest,
        form: AuthorizeForm,
        message: str,
        *,
        status_code: int = 200,
    ) -> FormView:
        return FormView(
            sign_up=request.is_sign_up,
            email=form.email,
            password=form.password,
            error=message,
            status_code=status_code,
        )
