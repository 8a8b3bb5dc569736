"""
Spending Aggregation

DESIGN DECISION: Every figure is recomputed from the collection it is
given. Nothing here caches, mutates, or reads the clock; "today" is
always an argument.

Spend is compared on a normalized monthly basis:
    monthly   -> cost
    quarterly -> cost / 3
    yearly    -> cost / 12

Only ACTIVE subscriptions count towards spend. ACTIVE and TRIAL
subscriptions both produce billing events (renewals, calendar).
Empty input yields zero totals and empty collections, never an error.
"""

import calendar
from datetime import date, timedelta
from decimal import Decimal
from typing import Iterable

from subwise.models.subscription import (
    Subscription,
    SubscriptionCategory,
    SubscriptionStatus,
)
from subwise.schedule import occurrences


ZERO = Decimal("0")


def normalized_monthly_cost(subscription: Subscription) -> Decimal:
    """A subscription's cost rescaled to one month."""
    return subscription.cost / subscription.billing_cycle.months


def _active(subscriptions: Iterable[Subscription]) -> list[Subscription]:
    return [s for s in subscriptions if s.status == SubscriptionStatus.ACTIVE]


def _billable(subscriptions: Iterable[Subscription]) -> list[Subscription]:
    return [s for s in subscriptions if s.is_billable]


def total_monthly_spend(subscriptions: Iterable[Subscription]) -> Decimal:
    """Sum of normalized monthly cost over active subscriptions."""
    return sum(
        (normalized_monthly_cost(s) for s in _active(subscriptions)),
        ZERO,
    )


def projected_yearly_spend(subscriptions: Iterable[Subscription]) -> Decimal:
    """Twelve months of the current normalized monthly spend."""
    return total_monthly_spend(subscriptions) * 12


def category_spend(
    subscriptions: Iterable[Subscription],
) -> dict[SubscriptionCategory, Decimal]:
    """
    Normalized monthly spend per category, active subscriptions only.

    Categories without an active subscription are absent, not zero.
    """
    totals: dict[SubscriptionCategory, Decimal] = {}
    for subscription in _active(subscriptions):
        key = subscription.category
        totals[key] = totals.get(key, ZERO) + normalized_monthly_cost(subscription)
    return totals


def upcoming_renewals(
    subscriptions: Iterable[Subscription],
    window_days: int,
    today: date,
) -> list[Subscription]:
    """
    Active and trial subscriptions billing within [today, today + window_days].

    Both ends are inclusive. Sorted by billing date; records on the same
    date keep their collection order.
    """
    if window_days < 0:
        raise ValueError(f"window_days must be >= 0, got {window_days}")

    horizon = today + timedelta(days=window_days)
    due = [
        s for s in _billable(subscriptions)
        if today <= s.next_billing <= horizon
    ]
    return sorted(due, key=lambda s: s.next_billing)


def total_due_within(
    subscriptions: Iterable[Subscription],
    window_days: int,
    today: date,
) -> Decimal:
    """What will actually be charged (raw cost, not normalized) in the window."""
    return sum(
        (s.cost for s in upcoming_renewals(subscriptions, window_days, today)),
        ZERO,
    )


def renewals_on(
    subscriptions: Iterable[Subscription],
    day: date,
) -> list[Subscription]:
    """
    Active and trial subscriptions that bill on ``day``.

    Projects forward from each stored billing date, so a monthly
    subscription shows up on every later month too.
    """
    return [
        s for s in _billable(subscriptions)
        if occurrences(s.next_billing, s.billing_cycle, day, day)
    ]


def total_due_on(
    subscriptions: Iterable[Subscription],
    day: date,
) -> Decimal:
    """Raw cost of everything billing on ``day``."""
    return sum((s.cost for s in renewals_on(subscriptions, day)), ZERO)


def renewal_calendar(
    subscriptions: Iterable[Subscription],
    year: int,
    month: int,
) -> dict[date, list[Subscription]]:
    """
    Billing events for one calendar month, keyed by date in ascending order.

    Days without events are absent.
    """
    first_day = date(year, month, 1)
    last_day = date(year, month, calendar.monthrange(year, month)[1])

    events: dict[date, list[Subscription]] = {}
    for subscription in _billable(subscriptions):
        for day in occurrences(
            subscription.next_billing,
            subscription.billing_cycle,
            first_day,
            last_day,
        ):
            events.setdefault(day, []).append(subscription)

    return dict(sorted(events.items()))


def days_until(subscription: Subscription, today: date) -> int:
    """Days from today to the next billing date (0 means today)."""
    return (subscription.next_billing - today).days
