"""
In-Memory Storage

Backs tests and throwaway sessions. Nothing survives the process, but the
semantics match the durable backends: whole-value writes, None for
missing keys.
"""

from typing import Optional

from subwise.models.audit import AuditEvent
from subwise.services.storage.interface import (
    AuditStorageInterface,
    BlobStorageInterface,
)


class InMemoryBlobStorage(BlobStorageInterface):
    """Dict-backed blob storage."""

    def __init__(self, initial: Optional[dict[str, str]] = None):
        self._blobs: dict[str, str] = dict(initial or {})
        self.write_count = 0

    def read(self, key: str) -> Optional[str]:
        return self._blobs.get(key)

    def write(self, key: str, value: str) -> None:
        self._blobs[key] = value
        self.write_count += 1

    def delete(self, key: str) -> bool:
        return self._blobs.pop(key, None) is not None


class InMemoryAuditStorage(AuditStorageInterface):
    """List-backed audit log."""

    def __init__(self):
        self._events: list[AuditEvent] = []

    def append_event(self, event: AuditEvent) -> bool:
        self._events.append(event)
        return True

    def get_events_by_entity(
        self,
        entity_type: str,
        entity_id: str,
    ) -> list[AuditEvent]:
        events = [
            event for event in self._events
            if event.entity_type == entity_type and event.entity_id == entity_id
        ]
        events.sort(key=lambda e: e.timestamp)
        return events

    def get_recent_events(
        self,
        limit: int = 100,
    ) -> list[AuditEvent]:
        events = sorted(self._events, key=lambda e: e.timestamp, reverse=True)
        return events[:limit]
