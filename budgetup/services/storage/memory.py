"""
In-Memory Storage

Used by tests and by callers that do not want anything on disk.
Payloads are kept as the exact strings written, so round-trips behave
the same as the file backend.
"""

from typing import Optional

from budgetup.models.audit import AuditEvent
from budgetup.services.storage.interface import (
    AuditStorageInterface,
    StorageBackend,
)


class InMemoryStorage(StorageBackend):
    """Dictionary-backed blob storage."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._blobs: dict[str, str] = dict(initial or {})
        self.write_count = 0

    async def read(self, key: str) -> Optional[str]:
        return self._blobs.get(key)

    async def write(self, key: str, payload: str) -> None:
        self._blobs[key] = payload
        self.write_count += 1

    async def remove(self, key: str) -> bool:
        return self._blobs.pop(key, None) is not None

    def peek(self, key: str) -> Optional[str]:
        """Synchronous read for assertions."""
        return self._blobs.get(key)


class InMemoryAuditStorage(AuditStorageInterface):
    """Append-only in-memory audit log."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    @property
    def events(self) -> list[AuditEvent]:
        return list(self._events)

    async def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    async def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        events = [
            e for e in self._events
            if e.entity_type == entity_type and e.entity_id == entity_id
        ]
        events.sort(key=lambda e: e.timestamp)
        return events

    async def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        # Newest first; append order breaks timestamp ties
        return list(reversed(self._events))[:limit]
