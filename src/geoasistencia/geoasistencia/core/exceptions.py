from __future__ import annotations

from typing import Optional


class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when the backend rejects the API token (HTTP 401)."""


class GatewayError(DomainError):
    """Raised when the attendance backend cannot be reached or refuses a request."""

    def __init__(self, message: str, *, status_code: Optional[int] = None):
        super().__init__(message)
        self.status_code = status_code


class SessionBusyError(DomainError):
    """Raised when another request is already using the user's attendance session."""


class SessionNotStartedError(DomainError):
    """Raised when a user's attendance session is used before it was opened."""
