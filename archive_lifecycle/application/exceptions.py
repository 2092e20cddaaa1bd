"""Application-layer exceptions. Do not reuse domain exceptions."""

from typing import Optional

from archive_lifecycle.domain.models.record import RecordKind


class ApplicationError(Exception):
    """Base for all application-layer errors."""

    def __init__(self, message: str) -> None:
        self.message = message
        super().__init__(message)


class StoreTransportError(ApplicationError):
    """Raised by the record store adapter when the underlying store call fails."""

    def __init__(self, message: str, *, operation: str, collection: str) -> None:
        self.operation = operation
        self.collection = collection
        super().__init__(message)


class LifecycleError(ApplicationError):
    """Failure of an archive or restore, named by record kind and attempted action."""

    def __init__(
        self,
        message: str,
        *,
        kind: RecordKind,
        action: str,
        record_id: str,
        cause: Optional[BaseException] = None,
    ) -> None:
        self.kind = kind
        self.action = action
        self.record_id = record_id
        self.cause = cause
        super().__init__(message)


class RecordNotFoundError(LifecycleError):
    """Source record absent at read time. Nothing was mutated."""


class TransportFailureError(LifecycleError):
    """Store or network failure before any write landed. Safe to retry the whole operation."""


class PartialFailureError(LifecycleError):
    """Destination write succeeded but the source delete failed. A duplicate may exist."""


class OperationInProgressError(LifecycleError):
    """Another archive/restore of the same record is still in flight."""
