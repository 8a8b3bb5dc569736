"""
Default Subscription Collection

Seeded on first run, and whenever the persisted collection is unreadable.
The dates are deliberately in the past; loading normalizes them.
"""

from datetime import date
from decimal import Decimal

from subwise.models.subscription import (
    BillingCycle,
    Subscription,
    SubscriptionCategory,
    SubscriptionStatus,
)


DEFAULT_SUBSCRIPTIONS: tuple[Subscription, ...] = (
    Subscription(
        id="1",
        name="Netflix",
        category=SubscriptionCategory.ENTERTAINMENT,
        cost=Decimal("15.99"),
        billing_cycle=BillingCycle.MONTHLY,
        next_billing=date(2024, 8, 15),
        status=SubscriptionStatus.ACTIVE,
        description="Streaming service",
    ),
    Subscription(
        id="2",
        name="Spotify Premium",
        category=SubscriptionCategory.ENTERTAINMENT,
        cost=Decimal("9.99"),
        billing_cycle=BillingCycle.MONTHLY,
        next_billing=date(2024, 8, 12),
        status=SubscriptionStatus.ACTIVE,
        description="Music streaming",
    ),
    Subscription(
        id="3",
        name="Adobe Creative Suite",
        category=SubscriptionCategory.PRODUCTIVITY,
        cost=Decimal("52.99"),
        billing_cycle=BillingCycle.MONTHLY,
        next_billing=date(2024, 8, 20),
        status=SubscriptionStatus.ACTIVE,
        description="Design software",
    ),
    Subscription(
        id="4",
        name="ChatGPT Plus",
        category=SubscriptionCategory.PRODUCTIVITY,
        cost=Decimal("20.00"),
        billing_cycle=BillingCycle.MONTHLY,
        next_billing=date(2024, 8, 8),
        status=SubscriptionStatus.TRIAL,
        description="AI assistant",
    ),
    Subscription(
        id="5",
        name="Gym Membership",
        category=SubscriptionCategory.HEALTH,
        cost=Decimal("49.99"),
        billing_cycle=BillingCycle.MONTHLY,
        next_billing=date(2024, 8, 25),
        status=SubscriptionStatus.ACTIVE,
        description="Fitness center",
    ),
    Subscription(
        id="6",
        name="Dropbox Plus",
        category=SubscriptionCategory.PRODUCTIVITY,
        cost=Decimal("119.88"),
        billing_cycle=BillingCycle.YEARLY,
        next_billing=date(2024, 12, 15),
        status=SubscriptionStatus.ACTIVE,
        description="Cloud storage",
    ),
)


def default_subscriptions() -> list[Subscription]:
    """A fresh list of the default records."""
    return list(DEFAULT_SUBSCRIPTIONS)
