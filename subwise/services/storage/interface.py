"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Keep the collection in a local file, Google Sheets, or memory
2. Use in-memory storage for testing
3. Keep the store decoupled from storage implementation

The interface is intentionally tiny: the whole subscription collection
is one opaque blob under one fixed key. The store decides what the blob
means; the backend only has to hold it durably.
"""

from abc import ABC, abstractmethod
from typing import Optional

from subwise.models.audit import AuditEvent


class BlobStorageInterface(ABC):
    """
    Abstract interface for durable key-value blob storage.

    Any storage implementation (file, Google Sheets, etc.)
    must implement these methods.
    """

    @abstractmethod
    def read(self, key: str) -> Optional[str]:
        """
        Read the blob stored under a key.

        Args:
            key: The storage key

        Returns:
            The stored text, or None if the key has never been written

        Raises:
            StorageError: If the backend cannot be read
        """
        pass

    @abstractmethod
    def write(self, key: str, value: str) -> None:
        """
        Replace the blob stored under a key.

        The write is all-or-nothing: a reader never sees a partial value.

        Args:
            key: The storage key
            value: The full text to store

        Raises:
            PersistenceFailure: If the write fails
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


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        """
        Get all events for a specific entity, in chronological order.
        """
        pass

    @abstractmethod
    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events (newest first).
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class PersistenceFailure(StorageError):
    """A write to durable storage did not complete."""
    pass


class StorageConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
