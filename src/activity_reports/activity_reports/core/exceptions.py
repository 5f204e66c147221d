class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid or violates domain rules."""


class AuthenticationError(DomainError):
    """Raised when login credentials are invalid."""


class PermissionDeniedError(DomainError):
    """Raised when a user lacks permission for an action."""


class NotFoundError(DomainError):
    """Raised when a referenced user, report or attachment does not exist."""


class InvalidStateError(DomainError):
    """Raised when a report lifecycle transition is not allowed."""


class ConflictError(DomainError):
    """Raised when a unique value (username, email) is already taken."""
