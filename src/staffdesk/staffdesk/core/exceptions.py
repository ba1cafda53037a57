class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class NotFoundError(DomainError):
    """Raised when a requested record does not exist."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class InvalidTokenError(DomainError):
    """Raised when a clock-out link token is unknown, used or expired."""


class StorageError(DomainError):
    """Raised when a profile photo cannot be stored."""


class EmailDeliveryError(DomainError):
    """Raised when the mail API rejects or cannot send a message."""
