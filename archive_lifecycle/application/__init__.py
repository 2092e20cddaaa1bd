# Application layer: the lifecycle engine and the adapter, resolver and projector it drives.

from archive_lifecycle.application.document_store import (
    DocumentStore,
    DocumentStoreError,
    QueryIndexUnavailableError,
    StoredDocument,
)
from archive_lifecycle.application.exceptions import (
    ApplicationError,
    LifecycleError,
    OperationInProgressError,
    PartialFailureError,
    RecordNotFoundError,
    StoreTransportError,
    TransportFailureError,
)
from archive_lifecycle.application.lifecycle_result import (
    LifecycleAction,
    LifecycleOutcome,
    LifecycleResult,
)
from archive_lifecycle.application.lifecycle_service import LifecycleEngine
from archive_lifecycle.application.name_resolver import ActorNameResolver
from archive_lifecycle.application.record_adapter import OrderedListing, RecordStoreAdapter

__all__ = [
    "ActorNameResolver",
    "ApplicationError",
    "DocumentStore",
    "DocumentStoreError",
    "LifecycleAction",
    "LifecycleEngine",
    "LifecycleError",
    "LifecycleOutcome",
    "LifecycleResult",
    "OperationInProgressError",
    "OrderedListing",
    "PartialFailureError",
    "QueryIndexUnavailableError",
    "RecordNotFoundError",
    "RecordStoreAdapter",
    "StoreTransportError",
    "StoredDocument",
]
