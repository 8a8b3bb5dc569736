"""
Data Models Package

This package contains all Pydantic models used by SubWise.
All data flowing through the engine must conform to these schemas.
"""

from subwise.models.subscription import (
    BillingCycle,
    SpendingSummary,
    Subscription,
    SubscriptionCategory,
    SubscriptionCreate,
    SubscriptionStatus,
    SubscriptionUpdate,
)
from subwise.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Subscription models
    "BillingCycle",
    "SpendingSummary",
    "Subscription",
    "SubscriptionCategory",
    "SubscriptionCreate",
    "SubscriptionStatus",
    "SubscriptionUpdate",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
