from __future__ import annotations

import sys
from pathlib import Path

import pytest
from fastapi import FastAPI
from fastapi.testclient import TestClient
from sqlalchemy.exc import OperationalError

# Ensure repo root is on sys.path so `import idp` works under pytest.
ROOT = Path(__file__).resolve().parents[1]
if str(ROOT) not in sys.path:
    sys.path.insert(0, str(ROOT))

from idp.core.config import Settings  # noqa: E402
from idp.main import create_app  # noqa: E402
from idp.models.oauth_client import OAuthClient  # noqa: E402
from idp.models.user import User  # noqa: E402
from idp.repos.client_repo import InMemoryClientRepo  # noqa: E402
from idp.repos.user_store import InMemoryUserStore  # noqa: E402
from idp.services import password_service  # noqa: E402
from idp.services.code_issuer import CodeIssuer  # noqa: E402

TENANT_ID = "test-tenant"
SIGNING_SECRET = "test-signing-secret-with-enough-bytes-for-hs256"

CLIENT_ID = "test-client-id"
REDIRECT_URI = "https://client.example.com/callback"

TEST_EMAIL = "owner@example.com"
TEST_PASSWORD = "s3cure-pass"


def make_settings(**overrides: object) -> Settings:
    values: dict[str, object] = {
        "app_env": "test",
        "log_level": "info",
        "log_json": False,
        "port": 8000,
        "database_url": None,
        "tenant_id": TENANT_ID,
        "signing_secret": SIGNING_SECRET,
        "auth_code_ttl_sec": 30,
    }
    values.update(overrides)
    return Settings(**values)  # type: ignore[arg-type]


@pytest.fixture
def settings() -> Settings:
    return make_settings()


@pytest.fixture
def client_repo() -> InMemoryClientRepo:
    repo = InMemoryClientRepo()
    repo.register(OAuthClient(id=CLIENT_ID, authorized_domains=(REDIRECT_URI,)))
    return repo


@pytest.fixture
def user_store() -> InMemoryUserStore:
    return InMemoryUserStore()


@pytest.fixture
def code_issuer() -> CodeIssuer:
    return CodeIssuer(SIGNING_SECRET)


@pytest.fixture
def app(
    settings: Settings,
    client_repo: InMemoryClientRepo,
    user_store: InMemoryUserStore,
) -> FastAPI:
    return create_app(settings, client_repo=client_repo, user_store=user_store)


@pytest.fixture
def client(app: FastAPI) -> TestClient:
    return TestClient(app, follow_redirects=False)


def seed_user(
    store: InMemoryUserStore,
    email: str = TEST_EMAIL,
    password: str | None = TEST_PASSWORD,
) -> User:
    """Persist a user directly, bypassing the form."""
    password_hash = (
        password_service.hash_password(password) if password is not None else None
    )
    user = User.new(tenant_id=TENANT_ID, email=email, password_hash=password_hash)
    store.add(user)
    return user


@pytest.fixture
def existing_user(user_store: InMemoryUserStore) -> User:
    return seed_user(user_store)


def connection_refused() -> OperationalError:
    return OperationalError("SELECT 1", None, ConnectionRefusedError("refused"))


class UnreachableDatabase:
    """Stands in for an async_sessionmaker whose sessions cannot connect."""

    def __call__(self) -> UnreachableDatabase:
        return self

    async def __aenter__(self) -> None:
        raise connection_refused()

    async def __aexit__(self, *exc: object) -> bool:
        return False
