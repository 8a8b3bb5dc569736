"""
Renewal Normalizer

Re-applies the cycle arithmetic to stored records so that no
subscription ever carries a billing date in the past.
"""

from datetime import date
from typing import Iterable

from subwise.models.subscription import Subscription
from subwise.schedule.cycles import advance


def normalize_subscription(subscription: Subscription, today: date) -> Subscription:
    """Return the record with ``next_billing`` advanced to today or later."""
    next_billing = advance(
        subscription.next_billing,
        subscription.billing_cycle,
        today,
    )
    if next_billing == subscription.next_billing:
        return subscription
    return subscription.model_copy(update={"next_billing": next_billing})


def normalize_collection(
    subscriptions: Iterable[Subscription],
    today: date,
) -> tuple[list[Subscription], int]:
    """
    Normalize every record, preserving order.

    Returns (normalized_records, number_of_records_whose_date_moved).
    """
    normalized = []
    changed = 0
    for subscription in subscriptions:
        current = normalize_subscription(subscription, today)
        if current is not subscription:
            changed += 1
        normalized.append(current)
    return normalized, changed
