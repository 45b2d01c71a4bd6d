class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid or no session is active."""


class AuthorizationError(DomainError):
    """Raised when a user lacks permission for an action."""


class StorageNotOpenError(RuntimeError):
    """Raised when the storage service is used outside its open/close lifecycle."""
