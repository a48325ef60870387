"""
Storage Services Package

Provides the abstract key-value interface and its implementations.
Local JSON files are the default backend; the in-memory one backs tests.
"""

from finance_tracker.services.storage.interface import (
    KeyValueStorageInterface,
    PersistenceReadFailure,
    PersistenceWriteFailure,
    StorageError,
)
from finance_tracker.services.storage.json_file import (
    InMemoryStorage,
    JsonFileStorage,
)

__all__ = [
    # Interfaces
    "KeyValueStorageInterface",
    # Exceptions
    "PersistenceReadFailure",
    "PersistenceWriteFailure",
    "StorageError",
    # Implementations
    "InMemoryStorage",
    "JsonFileStorage",
]
