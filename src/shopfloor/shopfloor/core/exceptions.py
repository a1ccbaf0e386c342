class DomainError(Exception):
    """Base exception for business rule violations."""


class ValidationError(DomainError):
    """Raised when input data is invalid (negative quantities, timestamps out of order)."""


class ConflictError(DomainError):
    """Raised when an at-most-one-open invariant would be violated."""


class InvalidStateError(DomainError):
    """Raised when an operation is not legal in the record's current state."""


class NotFoundError(DomainError):
    """Raised for unknown shifts, work logs, tasks or QR tokens."""


class AuthorizationError(DomainError):
    """Raised when an actor lacks permission for an action."""


class DataIntegrityError(DomainError):
    """Raised when stored data violates an invariant (e.g. pauses longer than the session)."""
