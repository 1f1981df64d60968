"""Domain-level error types translated to HTTP statuses by the API layer."""

from __future__ import annotations


class DomainError(ValueError):
    """Base class for expected failures raised by domain services."""


class InvalidInputError(DomainError):
    """Input passed type validation but violates a domain rule."""


class ConflictError(DomainError):
    """The requested resource already exists."""


class AuthenticationError(DomainError):
    """Credentials did not match a known user."""
