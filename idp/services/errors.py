"""Errors raised while processing an authorization request.

The message of each error is what the resource owner sees, either on the
error page (request-shape errors) or above the re-rendered form
(authentication errors). Internal errors are shown as a generic message.
"""

from __future__ import annotations

INCORRECT_CREDENTIALS = "Incorrect email or password"


class AuthorizeError(Exception):
    """Base class for every error the /authorize endpoint can surface."""

    default_message = "Authorization failed"

    def __init__(self, message: str | None = None) -> None:
        super().__init__(message or self.default_message)

    @property
    def message(self) -> str:
        return str(self.args[0])


# --- Client registry ---


class ClientNotFound(AuthorizeError):
    default_message = "client not found"


# --- Request shape: rejected before any side effect ---


class InvalidRequest(AuthorizeError):
    pass


class InvalidClient(InvalidRequest):
    default_message = "'client_id' is invalid"


class InvalidRedirect(InvalidRequest):
    default_message = "'redirect_uri' is invalid"


# --- Authentication: shown above the re-rendered form ---


class AuthenticationError(AuthorizeError):
    pass


class InvalidCredentials(AuthenticationError):
    default_message = INCORRECT_CREDENTIALS


class PendingVerification(InvalidCredentials):
    """Account exists without a password; same message as a wrong password."""


class DuplicateUser(InvalidCredentials):
    """A concurrent registration won the (tenant, email) uniqueness race."""


class PasswordRequired(AuthenticationError):
    default_message = "Password required"


class PasswordMismatch(AuthenticationError):
    default_message = "Passwords do not match"


# --- Internal ---


class InternalError(AuthorizeError):
    default_message = "Something went wrong, please try again"


class HashingFailed(InternalError):
    pass


class SigningFailed(InternalError):
    pass
