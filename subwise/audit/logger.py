"""
Audit Logger

DESIGN DECISION: Every change to the subscription collection is logged.
This provides:
1. Traceability of adds, updates and deletes
2. A visible record when corrupt persisted data was replaced by defaults
3. Debugging capability when a write to storage fails

The audit logger:
- Gracefully handles failures (a broken audit sink never breaks a mutation)
- Supports correlation IDs to trace related events
"""

from typing import Optional
from uuid import UUID, uuid4

import structlog

from subwise.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from subwise.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. An audit storage backend, when one is configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("subwise.audit")

    def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        elif event.severity == AuditSeverity.DEBUG:
            self._logger.debug("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    def log_collection_loaded(
        self,
        key: str,
        count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a successful load of the persisted collection."""
        self.log(AuditEventBuilder.collection_loaded(
            key=key,
            count=count,
            correlation_id=correlation_id,
        ))

    def log_collection_seeded(
        self,
        key: str,
        count: int,
        reason: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log that the default collection was used."""
        self.log(AuditEventBuilder.collection_seeded(
            key=key,
            count=count,
            reason=reason,
            correlation_id=correlation_id,
        ))

    def log_malformed_data(
        self,
        key: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log recovery from a corrupt or legacy blob."""
        self.log(AuditEventBuilder.malformed_data_recovered(
            key=key,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_dates_normalized(
        self,
        key: str,
        changed: int,
        today: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log how many past billing dates were advanced."""
        self.log(AuditEventBuilder.dates_normalized(
            key=key,
            changed=changed,
            today=today,
            correlation_id=correlation_id,
        ))

    def log_subscription_added(
        self,
        subscription_id: str,
        name: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.subscription_added(
            subscription_id=subscription_id,
            name=name,
            correlation_id=correlation_id,
        ))

    def log_subscription_updated(
        self,
        subscription_id: str,
        fields: list[str],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.subscription_updated(
            subscription_id=subscription_id,
            fields=fields,
            correlation_id=correlation_id,
        ))

    def log_subscription_cancelled(
        self,
        subscription_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.subscription_cancelled(
            subscription_id=subscription_id,
            correlation_id=correlation_id,
        ))

    def log_subscription_deleted(
        self,
        subscription_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.subscription_deleted(
            subscription_id=subscription_id,
            correlation_id=correlation_id,
        ))

    def log_collection_persisted(
        self,
        key: str,
        count: int,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        self.log(AuditEventBuilder.collection_persisted(
            key=key,
            count=count,
            correlation_id=correlation_id,
        ))

    def log_persist_failed(
        self,
        key: str,
        error_message: str,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log a failed write to durable storage."""
        self.log(AuditEventBuilder.persist_failed(
            key=key,
            error_message=error_message,
            correlation_id=correlation_id,
        ))

    def log_error(
        self,
        error_type: str,
        error_message: str,
        details: Optional[dict] = None,
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Log an error."""
        self.log(AuditEventBuilder.system_error(
            error_type=error_type,
            error_message=error_message,
            details=details,
            correlation_id=correlation_id,
        ))


def create_correlation_id() -> UUID:
    """
    Create a new correlation ID for tracking related events.

    Use this at the start of a new caller action (e.g., a session load).
    Pass it through all subsequent operations.
    """
    return uuid4()
