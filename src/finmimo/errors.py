"""Domain exceptions, translated to HTTP responses by the global error handlers."""

from __future__ import annotations


class FinmimoError(Exception):
    """Base class for errors surfaced to API clients."""

    status_code = 500

    def __init__(self, message: str) -> None:
        super().__init__(message)
        self.message = message


class NotFoundError(FinmimoError):
    """Referenced content or record does not exist."""

    status_code = 404


class ValidationFailureError(FinmimoError):
    """Submitted payload is malformed."""

    status_code = 400


class AuthenticationError(FinmimoError):
    """Caller identity is missing or invalid."""

    status_code = 401


class ConflictError(FinmimoError):
    """Write would violate a uniqueness rule (e.g. email already registered)."""

    status_code = 409
