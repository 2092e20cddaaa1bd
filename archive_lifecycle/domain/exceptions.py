"""Domain-specific exceptions. Pure domain layer; no infrastructure."""


class DomainError(Exception):
    """Base for all domain-layer errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class DomainValidationError(DomainError):
    """Raised when domain validation rules are violated."""


class UnknownRecordKindError(DomainError):
    """Raised when a record kind is not one of the registered kinds."""


class InvalidLifecycleTransitionError(DomainError):
    """Raised when a lifecycle state transition is not allowed."""
