class DomainError(Exception):
    """Base exception for business rule violations."""

    category = "DOMAIN"


class ValidationError(DomainError):
    """Raised when input data is malformed or missing."""

    category = "VALIDATION"


class NotFoundError(DomainError):
    """Raised when a referenced entity does not exist."""

    category = "NOT_FOUND"


class ForbiddenError(DomainError):
    """Raised when an authenticated user is not allowed to act on an entity."""

    category = "FORBIDDEN"


class ConflictError(DomainError):
    """Raised when a request is incompatible with the entity's current state."""

    category = "CONFLICT"


class AuthenticationError(DomainError):
    """Raised when the caller's identity cannot be established."""

    category = "UNAUTHENTICATED"
