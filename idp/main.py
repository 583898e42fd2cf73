from __future__ import annotations

import logging
from collections.abc import AsyncGenerator
from contextlib import asynccontextmanager

from fastapi import FastAPI

from idp.api.authorize import router as authorize_router
from idp.api.health import router as health_router
from idp.api.metrics_endpoint import router as metrics_router
from idp.core.config import SETTINGS, Settings
from idp.core.logging import setup_logging
from idp.db.engine import build_engine, build_session_factory, lifespan_db
from idp.middleware.metrics import MetricsMiddleware
from idp.middleware.request_context import RequestContextMiddleware
from idp.models.oauth_client import OAuthClient
from idp.repos.client_repo import ClientRepo, InMemoryClientRepo
from idp.repos.pg_client_repo import PgClientRepo
from idp.repos.pg_user_store import PgUserStore
from idp.repos.user_store import InMemoryUserStore, UserStore
from idp.services.authorize_service import AuthorizeService
from idp.services.code_issuer import CodeIssuer

logger = logging.getLogger(__name__)

DEV_CLIENT_ID = "dev-client"
DEV_REDIRECT_URI = "http://localhost:5173/callback"


def _seed_dev_client(repo: InMemoryClientRepo) -> None:
    """Register a local client so the form can be tried without a database."""
    repo.register(
        OAuthClient(id=DEV_CLIENT_ID, authorized_domains=(DEV_REDIRECT_URI,))
    )


def create_app(
    settings: Settings,
    *,
    client_repo: ClientRepo | None = None,
    user_store: UserStore | None = None,
) -> FastAPI:
    """Build the application with its collaborators injected.

    Stores not passed in are built from settings: PostgreSQL when
    DATABASE_URL is set, in-memory otherwise.
    """
    engine = None
    if client_repo is None or user_store is None:
        if settings.database_url:
            engine = build_engine(settings)
            session_factory = build_session_factory(engine)
            client_repo = client_repo or PgClientRepo(session_factory)
            user_store = user_store or PgUserStore(session_factory)
        else:
            if client_repo is None:
                memory_clients = InMemoryClientRepo()
                if settings.is_dev:
                    _seed_dev_client(memory_clients)
                client_repo = memory_clients
            user_store = user_store or InMemoryUserStore()

    @asynccontextmanager
    async def lifespan(_app: FastAPI) -> AsyncGenerator[None, None]:
        async with lifespan_db(engine):
            yield

    app = FastAPI(
        title="idp-authorize",
        lifespan=lifespan,
        docs_url="/docs" if settings.is_dev else None,
        redoc_url="/redoc" if settings.is_dev else None,
    )

    app.state.settings = settings
    app.state.engine = engine
    app.state.authorize_service = AuthorizeService(
        client_repo=client_repo,
        user_store=user_store,
        code_issuer=CodeIssuer(
            settings.signing_secret, ttl_seconds=settings.auth_code_ttl_sec
        ),
        tenant_id=settings.tenant_id,
    )

    # Last-added runs first: RequestContext → Metrics → route handler,
    # so metrics and handler logs already carry the request ID.
    app.add_middleware(MetricsMiddleware)
    app.add_middleware(RequestContextMiddleware)

    app.include_router(metrics_router)
    app.include_router(health_router)
    app.include_router(authorize_router)

    return app


# Configure logging before anything else runs.
setup_logging(SETTINGS.log_level, json_format=SETTINGS.log_json)

app = create_app(SETTINGS)

logger.info(
    "idp-authorize started  env=%s log_level=%s port=%d tenant=%s storage=%s",
    SETTINGS.app_env,
    SETTINGS.log_level,
    SETTINGS.port,
    SETTINGS.tenant_id,
    "postgres" if SETTINGS.database_url else "memory",
)
