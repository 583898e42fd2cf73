"""Transient inputs of one /authorize exchange.

Neither model is persisted: the request lives in the query string and the
form in the POST body of the same URL.
"""

from __future__ import annotations

from collections.abc import Mapping

from pydantic import BaseModel, ConfigDict, Field, ValidationError, field_validator


class AuthorizationRequest(BaseModel):
    model_config = ConfigDict(frozen=True)

    response_type: str | None = None
    client_id: str | None = None
    redirect_uri: str | None = None
    scope: str | None = None
    state: str | None = None
    nonce: str | None = None
    # OIDC prompt; "create" asks for the registration form.
    prompt: str | None = None

    @property
    def is_sign_up(self) -> bool:
        return self.prompt is not None and "create" in self.prompt.split()

    @classmethod
    def from_query(cls, query: Mapping[str, str]) -> AuthorizationRequest:
        return cls(**{name: query.get(name) for name in cls.model_fields})


class AuthorizeForm(BaseModel):
    model_config = ConfigDict(frozen=True)

    email: str = Field(min_length=1)
    password: str | None = None
    confirm_password: str | None = None

    @field_validator("password", "confirm_password", mode="before")
    @classmethod
    def _blank_is_absent(cls, value: object) -> object:
        # Browsers submit untouched inputs as empty strings.
        return value or None


class FormParseError(ValueError):
    """The submitted form could not be bound to AuthorizeForm."""


def parse_form(data: Mapping[str, object]) -> AuthorizeForm:
    """Bind a POST body to AuthorizeForm.

    Raises FormParseError with a message fit for display above the form.
    """
    try:
        return AuthorizeForm(
            email=data.get("email"),  # type: ignore[arg-type]
            password=data.get("password"),  # type: ignore[arg-type]
            confirm_password=data.get("confirm_password"),  # type: ignore[arg-type]
        )
    except ValidationError as e:
        first = e.errors()[0]
        field = str(first["loc"][0]) if first["loc"] else "form"
        if first["type"] in ("missing", "string_type", "string_too_short") and (
            field == "email"
        ):
            raise FormParseError("'email' is required") from None
        raise FormParseError(f"'{field}' is invalid") from None
