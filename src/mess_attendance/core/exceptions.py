class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when the record or student an operation targets does not exist."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class PermissionDeniedError(DomainError):
    """Raised when the notification service refuses permission."""


class TransientError(DomainError):
    """Raised when a store or network call fails; the caller may try again later."""
