from __future__ import annotations

import os
from dataclasses import dataclass
from typing import Literal

AppEnv = Literal["dev", "test", "prod"]
LogLevel = Literal["debug", "info", "warning", "error"]

# Only usable outside prod; load_settings() refuses to start prod without
# an explicit TOKEN_SIGNING_SECRET.
DEV_SIGNING_SECRET = "dev-only-secret-change-me"


def _getenv(name: str, default: str) -> str:
    return os.environ.get(name, default).strip()


def _getbool(name: str, default: str) -> bool:
    raw = _getenv(name, default).lower()
    if raw in ("1", "true", "yes", "on"):
        return True
    if raw in ("0", "false", "no", "off", ""):
        return False
    raise ValueError(f"{name} must be a boolean (got {raw!r})")


def _getint(name: str, default: str) -> int:
    raw = _getenv(name, default)
    try:
        return int(raw)
    except ValueError:
        raise ValueError(f"{name} must be an integer (got {raw!r})") from None


@dataclass(frozen=True)
class Settings:
    app_env: AppEnv
    log_level: LogLevel
    log_json: bool
    port: int
    database_url: str | None
    tenant_id: str
    signing_secret: str
    auth_code_ttl_sec: int = 30

    @property
    def is_dev(self) -> bool:
        return self.app_env == "dev"

    @property
    def is_test(self) -> bool:
        return self.app_env == "test"

    @property
    def is_prod(self) -> bool:
        return self.app_env == "prod"


def load_settings() -> Settings:
    app_env_raw = _getenv("APP_ENV", "dev").lower()
    log_level_raw = _getenv("LOG_LEVEL", "info").lower()

    if app_env_raw not in ("dev", "test", "prod"):
        raise ValueError(f"APP_ENV must be dev|test|prod (got {app_env_raw!r})")

    if log_level_raw not in ("debug", "info", "warning", "error"):
        raise ValueError(
            f"LOG_LEVEL must be debug|info|warning|error (got {log_level_raw!r})"
        )

    port = _getint("PORT", "8000")
    auth_code_ttl_sec = _getint("AUTH_CODE_TTL_SEC", "30")
    if auth_code_ttl_sec <= 0:
        raise ValueError(
            f"AUTH_CODE_TTL_SEC must be positive (got {auth_code_ttl_sec!r})"
        )

    tenant_id = _getenv("TENANT_ID", "default")
    if not tenant_id:
        raise ValueError("TENANT_ID must be non-empty")

    signing_secret = _getenv("TOKEN_SIGNING_SECRET", "")
    if not signing_secret:
        if app_env_raw == "prod":
            raise ValueError("TOKEN_SIGNING_SECRET is required when APP_ENV=prod")
        signing_secret = DEV_SIGNING_SECRET

    return Settings(  # type: ignore[arg-type]
        app_env=app_env_raw,
        log_level=log_level_raw,
        log_json=_getbool("LOG_JSON", "false"),
        port=port,
        database_url=_getenv("DATABASE_URL", "") or None,
        tenant_id=tenant_id,
        signing_secret=signing_secret,
        auth_code_ttl_sec=auth_code_ttl_sec,
    )


# Entry-point singleton; the app factory takes Settings explicitly.
SETTINGS = load_settings()
