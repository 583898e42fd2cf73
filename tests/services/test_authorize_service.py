"""AuthorizeService orchestration — transaction boundaries and error mapping."""

from __future__ import annotations

import asyncio
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

import pytest

from idp.models.authorization_request import AuthorizationRequest
from idp.models.user import User
from idp.repos.client_repo import InMemoryClientRepo
from idp.repos.user_store import InMemoryUserStore, InMemoryUserTxn
from idp.services.authorize_service import (
    AuthorizeService,
    FormView,
    Redirect,
    build_redirect_url,
)
from idp.services.code_issuer import CodeIssuer
from idp.services.errors import InvalidClient, InvalidRedirect, SigningFailed
from tests.conftest import CLIENT_ID, REDIRECT_URI, TENANT_ID


class _FailingIssuer(CodeIssuer):
    def issue(self, *, client_id: str, redirect_uri: str, user_id: str) -> str:
        raise SigningFailed("no key")


class _RacingStore(InMemoryUserStore):
    """Commits a competing registration while the transaction is open."""

    def __init__(self, competitor: User) -> None:
        super().__init__()
        self._competitor = competitor

    @asynccontextmanager
    async def transaction(self) -> AsyncIterator[InMemoryUserTxn]:
        async with super().transaction() as txn:
            yield txn
            self.add(self._competitor)


def _service(
    client_repo: InMemoryClientRepo,
    user_store: InMemoryUserStore,
    code_issuer: CodeIssuer,
) -> AuthorizeService:
    return AuthorizeService(
        client_repo=client_repo,
        user_store=user_store,
        code_issuer=code_issuer,
        tenant_id=TENANT_ID,
    )


def _submit(
    service: AuthorizeService, form_data: dict, **params: str
) -> FormView | Redirect:
    request = AuthorizationRequest(
        client_id=CLIENT_ID, redirect_uri=REDIRECT_URI, **params
    )

    async def _run() -> FormView | Redirect:
        target = await service.validate(request)
        return await service.submit(request, target, form_data)

    return asyncio.run(_run())


def test_validate_maps_unknown_client(
    client_repo: InMemoryClientRepo,
    user_store: InMemoryUserStore,
    code_issuer: CodeIssuer,
) -> None:
    service = _service(client_repo, user_store, code_issuer)
    with pytest.raises(InvalidClient):
        asyncio.run(service.validate(AuthorizationRequest(client_id="nope")))


def test_validate_maps_bad_redirect(
    client_repo: InMemoryClientRepo,
    user_store: InMemoryUserStore,
    code_issuer: CodeIssuer,
) -> None:
    service = _service(client_repo, user_store, code_issuer)
    with pytest.raises(InvalidRedirect):
        asyncio.run(
            service.validate(
                AuthorizationRequest(client_id=CLIENT_ID, redirect_uri="https://x/")
            )
        )


def test_show_form_follows_sign_up_flag(
    client_repo: InMemoryClientRepo,
    user_store: InMemoryUserStore,
    code_issuer: CodeIssuer,
) -> None:
    service = _service(client_repo, user_store, code_issuer)
    view = service.show_form(AuthorizationRequest(prompt="create"))
    assert view == FormView(sign_up=True)


def test_sign_up_redirects_and_commits(
    client_repo: InMemoryClientRepo,
    user_store: InMemoryUserStore,
    code_issuer: CodeIssuer,
) -> None:
    service = _service(client_repo, user_store, code_issuer)
    outcome = _submit(
        service, {"email": "new@example.com", "password": "p"}, prompt="create"
    )
    assert isinstance(outcome, Redirect)
    assert outcome.location.startswith(REDIRECT_URI + "?code=")
    assert user_store.get(TENANT_ID, "new@example.com") is not None


def test_signing_failure_aborts_registration(
    client_repo: InMemoryClientRepo, user_store: InMemoryUserStore
) -> None:
    service = _service(client_repo, user_store, _FailingIssuer("secret"))
    outcome = _submit(
        service, {"email": "new@example.com", "password": "p"}, prompt="create"
    )
    assert isinstance(outcome, FormView)
    assert outcome.status_code == 500
    assert outcome.error == "Something went wrong, please try again"
    assert outcome.email == "new@example.com"
    assert user_store.get(TENANT_ID, "new@example.com") is None


def test_losing_registration_race_gets_generic_error(
    client_repo: InMemoryClientRepo, code_issuer: CodeIssuer
) -> None:
    competitor = User.new(
        tenant_id=TENANT_ID, email="race@example.com", password_hash=None
    )
    store = _RacingStore(competitor)
    service = _service(client_repo, store, code_issuer)

    outcome = _submit(
        service, {"email": "race@example.com", "password": "p"}, prompt="create"
    )
    assert isinstance(outcome, FormView)
    assert outcome.status_code == 200
    assert outcome.error == "Incorrect email or password"
    assert store.get(TENANT_ID, "race@example.com") == competitor


def test_parse_error_keeps_sign_up_view(
    client_repo: InMemoryClientRepo,
    user_store: InMemoryUserStore,
    code_issuer: CodeIssuer,
) -> None:
    service = _service(client_repo, user_store, code_issuer)
    outcome = _submit(service, {"password": "p"}, prompt="create")
    assert outcome == FormView(sign_up=True, error="'email' is required")


@pytest.mark.parametrize(
    ("redirect_uri", "state", "expected"),
    [
        ("https://c/cb", None, "https://c/cb?code=abc"),
        ("https://c/cb", "s1", "https://c/cb?code=abc&state=s1"),
        ("https://c/cb?x=1", "s 1", "https://c/cb?x=1&code=abc&state=s+1"),
        ("https://c/cb", "a b&c=d", "https://c/cb?code=abc&state=a+b%26c%3Dd"),
    ],
)
def test_build_redirect_url(
    redirect_uri: str, state: str | None, expected: str
) -> None:
    assert build_redirect_url(redirect_uri, "abc", state) == expected
