"""Domain-level exceptions.

Services raise these errors to express business rule violations.
The API layer maps them to HTTP status codes in one place (api/errors.py).
"""


class DomainError(Exception):
    """Base class for all domain errors."""


class NotFoundError(DomainError):
    """Requested entity does not exist."""


class DuplicateError(DomainError):
    """Entity with the same unique key already exists."""

    def __init__(self, field: str, message: str | None = None):
        self.field = field
        super().__init__(message or f"{field.replace('_', ' ').capitalize()} is already registered.")


class PermissionDeniedError(DomainError):
    """Caller lacks permission for the requested action."""


class AuthenticationError(DomainError):
    """Caller could not be identified (missing, invalid or revoked credentials).

    ``clear_cookies`` tells the API layer to drop the client's auth cookies;
    it is off for re-authentication checks inside an otherwise valid session.
    """

    def __init__(self, message: str, clear_cookies: bool = True):
        self.clear_cookies = clear_cookies
        super().__init__(message)


class ValidationError(DomainError):
    """Input violates a business validation rule."""


class RepositoryError(DomainError):
    """The store could not answer (connection lost, timeout). Never means "not found"."""
