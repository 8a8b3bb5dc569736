"""
Core Data Models for SubWise

These models define the strict schemas for all data flowing through the engine.
They are designed to:
1. Enforce type safety at runtime
2. Provide clear validation error messages
3. Serialize to the persisted JSON layout (camelCase names, ISO dates)

DESIGN DECISION: Records are frozen. The store replaces a record on update
instead of mutating it, so a snapshot handed to a reader never changes
underneath it.
"""

from datetime import date
from decimal import Decimal
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_serializer,
)
from pydantic.alias_generators import to_camel


# =============================================================================
# ENUMS - Finite set of valid values
# =============================================================================

class SubscriptionCategory(str, Enum):
    """Supported subscription categories."""
    ENTERTAINMENT = "entertainment"
    PRODUCTIVITY = "productivity"
    UTILITIES = "utilities"
    SHOPPING = "shopping"
    FINANCE = "finance"
    HEALTH = "health"
    EDUCATION = "education"


class BillingCycle(str, Enum):
    """
    Recurrence unit of a subscription's charge.

    Every cycle is a whole number of calendar months, which is what the
    schedule arithmetic works in.
    """
    MONTHLY = "monthly"
    QUARTERLY = "quarterly"
    YEARLY = "yearly"

    @property
    def months(self) -> int:
        """Length of one cycle in calendar months."""
        return _CYCLE_MONTHS[self]


_CYCLE_MONTHS = {
    BillingCycle.MONTHLY: 1,
    BillingCycle.QUARTERLY: 3,
    BillingCycle.YEARLY: 12,
}


class SubscriptionStatus(str, Enum):
    """
    Lifecycle status of a subscription.

    Only ACTIVE subscriptions count towards spend.
    ACTIVE and TRIAL subscriptions both show up as upcoming renewals.
    """
    ACTIVE = "active"
    TRIAL = "trial"
    CANCELLED = "cancelled"


# =============================================================================
# CORE SUBSCRIPTION MODEL
# =============================================================================

_RECORD_CONFIG = dict(
    str_strip_whitespace=True,
    alias_generator=to_camel,
    populate_by_name=True,
)


class Subscription(BaseModel):
    """
    A tracked subscription as stored in the collection.

    Attribute names are snake_case; the persisted JSON uses the camelCase
    aliases (billingCycle, nextBilling). Both are accepted on input.
    """
    model_config = ConfigDict(frozen=True, **_RECORD_CONFIG)

    id: str = Field(
        ...,
        min_length=1,
        description="Opaque unique identifier, assigned at creation"
    )
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Service name"
    )
    category: SubscriptionCategory
    cost: Decimal = Field(
        ...,
        ge=0,
        description="Charge per billing cycle (currency-agnostic)"
    )
    billing_cycle: BillingCycle
    next_billing: date = Field(
        ...,
        description="Next date the subscription bills"
    )
    status: SubscriptionStatus = SubscriptionStatus.ACTIVE
    description: Optional[str] = Field(
        default=None,
        max_length=1000,
    )

    @field_serializer("cost", when_used="json")
    def serialize_cost(self, cost: Decimal) -> float:
        """Persist cost as a JSON number rather than a string."""
        return float(cost)

    def to_record(self) -> dict:
        """Convert to the persisted JSON-compatible record."""
        return self.model_dump(mode="json", by_alias=True)

    @property
    def is_billable(self) -> bool:
        """Active and trial subscriptions still produce billing events."""
        return self.status in (SubscriptionStatus.ACTIVE, SubscriptionStatus.TRIAL)


class SubscriptionCreate(BaseModel):
    """
    Fields a caller supplies to add a subscription.

    Everything except the id, which the store assigns.
    """
    model_config = ConfigDict(extra="forbid", **_RECORD_CONFIG)

    name: str = Field(..., min_length=1, max_length=200)
    category: SubscriptionCategory
    cost: Decimal = Field(..., ge=0)
    billing_cycle: BillingCycle
    next_billing: date
    status: SubscriptionStatus = SubscriptionStatus.ACTIVE
    description: Optional[str] = Field(default=None, max_length=1000)


class SubscriptionUpdate(BaseModel):
    """
    A partial update.

    Only the fields the caller actually passed are applied; an explicit
    None for description clears it. The id can never be changed.
    """
    model_config = ConfigDict(extra="forbid", **_RECORD_CONFIG)

    name: Optional[str] = Field(default=None, min_length=1, max_length=200)
    category: Optional[SubscriptionCategory] = None
    cost: Optional[Decimal] = Field(default=None, ge=0)
    billing_cycle: Optional[BillingCycle] = None
    next_billing: Optional[date] = None
    status: Optional[SubscriptionStatus] = None
    description: Optional[str] = Field(default=None, max_length=1000)

    def changes(self) -> dict:
        """Only the fields explicitly set by the caller."""
        return self.model_dump(include=self.model_fields_set)

    @property
    def touches_schedule(self) -> bool:
        """Does this update change the billing date or cycle?"""
        return bool({"billing_cycle", "next_billing"} & self.model_fields_set)


# =============================================================================
# INSIGHT MODELS
# =============================================================================

class SpendingSummary(BaseModel):
    """
    Everything a dashboard needs in one derived snapshot.

    Computed on demand from the current collection; never persisted.
    """

    as_of: date = Field(
        ...,
        description="The 'today' the summary was computed for"
    )
    total_monthly_spend: Decimal = Field(
        ...,
        description="Normalized monthly spend over active subscriptions"
    )
    projected_yearly_spend: Decimal
    active_count: int = Field(ge=0)
    trial_count: int = Field(ge=0)
    category_spend: dict[SubscriptionCategory, Decimal] = Field(
        default_factory=dict,
        description="Monthly spend per category (active only, zero categories absent)"
    )
    renewal_window_days: int = Field(ge=0)
    upcoming_renewals: list[Subscription] = Field(default_factory=list)
