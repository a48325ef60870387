"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep data in local JSON files for a single-user install
2. Use in-memory storage for testing
3. Swap in another key-value medium later
4. Keep the stores decoupled from the storage implementation

The interface is intentionally tiny: the tracker mirrors four independent
documents, so a string key-value medium is all it needs.
"""

from abc import ABC, abstractmethod
from typing import Optional


class KeyValueStorageInterface(ABC):
    """
    Abstract interface for durable key-value storage.

    Values are serialized text. Any implementation must make a completed
    write visible to the next read, including after a process restart.
    """

    @abstractmethod
    def read(self, key: str) -> Optional[str]:
        """
        Read the value stored under a key.

        Args:
            key: Storage key

        Returns:
            The stored text, or None if the key is absent

        Raises:
            StorageError: If the medium cannot be read
        """
        pass

    @abstractmethod
    def write(self, key: str, value: str) -> None:
        """
        Store text under a key, replacing any previous value.

        Raises:
            PersistenceWriteFailure: If the write did not complete
        """
        pass

    @abstractmethod
    def delete(self, key: str) -> bool:
        """
        Remove a key.

        Returns:
            True if the key existed
        """
        pass

    @abstractmethod
    def keys(self) -> list[str]:
        """List the keys currently stored."""
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class PersistenceReadFailure(StorageError):
    """Stored data could not be read or decoded."""

    def __init__(self, key: str, message: str):
        self.key = key
        super().__init__(message)


class PersistenceWriteFailure(StorageError):
    """A value could not be written to durable storage."""

    def __init__(self, key: str, message: str):
        self.key = key
        super().__init__(message)
