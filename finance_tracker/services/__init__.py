"""Services package."""

from finance_tracker.services.persistence import (
    PersistedState,
    PersistenceSync,
    StorageKey,
)
from finance_tracker.services.storage import (
    InMemoryStorage,
    JsonFileStorage,
    KeyValueStorageInterface,
    PersistenceReadFailure,
    PersistenceWriteFailure,
    StorageError,
)

__all__ = [
    # Persistence
    "PersistedState",
    "PersistenceSync",
    "StorageKey",
    # Storage services
    "InMemoryStorage",
    "JsonFileStorage",
    "KeyValueStorageInterface",
    "PersistenceReadFailure",
    "PersistenceWriteFailure",
    "StorageError",
]
