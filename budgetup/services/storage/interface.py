"""
Abstract Storage Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Persist to a JSON file today and something else later
2. Use in-memory storage for testing
3. Keep the financial store decoupled from the storage medium

The record store writes its whole state as one blob under one key,
so the interface is a key/blob store, not an ORM.
"""

from abc import ABC, abstractmethod
from typing import Optional

from budgetup.models.audit import AuditEvent


class StorageBackend(ABC):
    """
    Abstract interface for blob storage.

    Implementations must make write() all-or-nothing: a reader never
    observes a partially written payload.
    """

    @abstractmethod
    async def read(self, key: str) -> Optional[str]:
        """
        Read the payload stored under a key.

        Returns:
            The payload, or None if nothing is stored

        Raises:
            StorageReadError: If the medium cannot be read
        """
        pass

    @abstractmethod
    async def write(self, key: str, payload: str) -> None:
        """
        Replace the payload stored under a key.

        Raises:
            StorageWriteError: If the write fails
        """
        pass

    @abstractmethod
    async def remove(self, key: str) -> bool:
        """
        Remove a key.

        Returns:
            True if something was removed
        """
        pass


class AuditStorageInterface(ABC):
    """
    Abstract interface for audit log storage.

    Audit logs are append-only - we never delete or modify them.
    """

    @abstractmethod
    async def append_event(self, event: AuditEvent) -> bool:
        """
        Append an audit event to the log.

        Returns:
            True if logged successfully
        """
        pass

    @abstractmethod
    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        """
        Get all events for a specific entity, oldest first.
        """
        pass

    @abstractmethod
    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        """
        Get the most recent audit events, newest first.
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class StorageReadError(StorageError):
    """Stored payload could not be read."""
    pass


class StorageWriteError(StorageError):
    """Payload could not be written."""
    pass
