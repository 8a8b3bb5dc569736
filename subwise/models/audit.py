"""
Audit Models for SubWise

Every change to the subscription collection is logged for audit purposes.
This provides:
1. Traceability of every add, update and delete
2. Debugging information when persisted data turns out to be corrupt
3. A record of silent date normalization

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

import json
from datetime import datetime, timezone
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field


def _utcnow() -> datetime:
    return datetime.now(timezone.utc)


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Loading
    COLLECTION_LOADED = "collection_loaded"
    COLLECTION_SEEDED = "collection_seeded"
    MALFORMED_DATA_RECOVERED = "malformed_data_recovered"
    DATES_NORMALIZED = "dates_normalized"

    # Mutations
    SUBSCRIPTION_ADDED = "subscription_added"
    SUBSCRIPTION_UPDATED = "subscription_updated"
    SUBSCRIPTION_CANCELLED = "subscription_cancelled"
    SUBSCRIPTION_DELETED = "subscription_deleted"

    # Persistence
    COLLECTION_PERSISTED = "collection_persisted"
    PERSIST_FAILED = "persist_failed"

    # System events
    SYSTEM_ERROR = "system_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=_utcnow,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType
    severity: AuditSeverity = AuditSeverity.INFO

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'subscription', 'collection')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    # Correlation - for tracking related events
    correlation_id: Optional[UUID] = None

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(default_factory=dict)

    # Error information (if applicable)
    error_code: Optional[str] = None
    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "correlation_id": str(self.correlation_id) if self.correlation_id else None,
            "description": self.description,
            "details": self.details,
            "error_code": self.error_code,
            "error_message": self.error_message,
        }

    def to_sheets_row(self) -> list:
        """
        Convert to a row suitable for Google Sheets storage.

        Returns columns in order:
        [event_id, timestamp, event_type, severity, entity_type, entity_id,
         correlation_id, description, details_json, error_message]
        """
        return [
            str(self.event_id),
            self.timestamp.isoformat(),
            self.event_type.value,
            self.severity.value,
            self.entity_type or "",
            self.entity_id or "",
            str(self.correlation_id) if self.correlation_id else "",
            self.description,
            json.dumps(self.details, default=str) if self.details else "",
            self.error_message or "",
        ]


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.subscription_added(sub_id, name, correlation_id)
        event = AuditEventBuilder.malformed_data_recovered(key, error, correlation_id)
    """

    @staticmethod
    def collection_loaded(
        key: str,
        count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.COLLECTION_LOADED,
            entity_type="collection",
            entity_id=key,
            correlation_id=correlation_id,
            description=f"Loaded {count} subscriptions",
            details={"count": count},
        )

    @staticmethod
    def collection_seeded(
        key: str,
        count: int,
        reason: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.COLLECTION_SEEDED,
            entity_type="collection",
            entity_id=key,
            correlation_id=correlation_id,
            description=f"Seeded {count} default subscriptions ({reason})",
            details={"count": count, "reason": reason},
        )

    @staticmethod
    def malformed_data_recovered(
        key: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MALFORMED_DATA_RECOVERED,
            severity=AuditSeverity.WARNING,
            entity_type="collection",
            entity_id=key,
            correlation_id=correlation_id,
            description="Persisted collection was malformed; falling back to defaults",
            error_code="malformed_persisted_data",
            error_message=error_message,
        )

    @staticmethod
    def dates_normalized(
        key: str,
        changed: int,
        today: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DATES_NORMALIZED,
            entity_type="collection",
            entity_id=key,
            correlation_id=correlation_id,
            description=f"Advanced {changed} past billing dates",
            details={"changed": changed, "today": today},
        )

    @staticmethod
    def subscription_added(
        subscription_id: str,
        name: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUBSCRIPTION_ADDED,
            entity_type="subscription",
            entity_id=subscription_id,
            correlation_id=correlation_id,
            description=f"Subscription added: {name}",
            details={"name": name},
        )

    @staticmethod
    def subscription_updated(
        subscription_id: str,
        fields: list[str],
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUBSCRIPTION_UPDATED,
            entity_type="subscription",
            entity_id=subscription_id,
            correlation_id=correlation_id,
            description=f"Subscription updated: {', '.join(fields) or 'no fields'}",
            details={"fields": fields},
        )

    @staticmethod
    def subscription_cancelled(
        subscription_id: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUBSCRIPTION_CANCELLED,
            entity_type="subscription",
            entity_id=subscription_id,
            correlation_id=correlation_id,
            description="Subscription cancelled",
        )

    @staticmethod
    def subscription_deleted(
        subscription_id: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SUBSCRIPTION_DELETED,
            entity_type="subscription",
            entity_id=subscription_id,
            correlation_id=correlation_id,
            description="Subscription deleted",
        )

    @staticmethod
    def collection_persisted(
        key: str,
        count: int,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.COLLECTION_PERSISTED,
            severity=AuditSeverity.DEBUG,
            entity_type="collection",
            entity_id=key,
            correlation_id=correlation_id,
            description=f"Persisted {count} subscriptions",
            details={"count": count},
        )

    @staticmethod
    def persist_failed(
        key: str,
        error_message: str,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PERSIST_FAILED,
            severity=AuditSeverity.ERROR,
            entity_type="collection",
            entity_id=key,
            correlation_id=correlation_id,
            description="Failed to persist subscription collection",
            error_code="persistence_failure",
            error_message=error_message,
        )

    @staticmethod
    def system_error(
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.SYSTEM_ERROR,
            severity=AuditSeverity.ERROR,
            description=f"System error: {error_type}",
            error_message=error_message,
            details=details or {},
            correlation_id=correlation_id,
        )
