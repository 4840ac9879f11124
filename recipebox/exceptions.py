"""
Error taxonomy shared by every module.

Each error carries the HTTP status the API layer reports it with. Handlers
in ``recipebox.main`` turn them into ``{"error": message}`` responses.
"""


class RecipeBoxError(Exception):
    """Base class for errors reported to the caller."""

    status_code = 500

    def __init__(self, message: str):
        super().__init__(message)
        self.message = message


class ValidationError(RecipeBoxError):
    """Malformed input. Nothing was written."""

    status_code = 400


class RefreshTooEarlyError(ValidationError):
    """A signed token was presented for renewal while still far from expiry."""


class AuthenticationError(RecipeBoxError):
    """Bad credentials, expired or forged token, or missing session."""

    status_code = 401


class ConflictError(RecipeBoxError):
    """The identity being created already exists."""

    status_code = 409


class DependencyError(RecipeBoxError):
    """A backing store or required dependency is unavailable."""

    status_code = 503


class PasswordHashingError(DependencyError):
    """The password hasher failed; signup is aborted before any write."""


__all__ = [
    "RecipeBoxError",
    "ValidationError",
    "RefreshTooEarlyError",
    "AuthenticationError",
    "ConflictError",
    "DependencyError",
    "PasswordHashingError",
]
