"""Billing schedule package."""

from subwise.schedule.cycles import (
    add_months,
    advance,
    cycles_elapsed,
    occurrences,
    shift,
)
from subwise.schedule.normalizer import (
    normalize_collection,
    normalize_subscription,
)

__all__ = [
    "add_months",
    "advance",
    "cycles_elapsed",
    "normalize_collection",
    "normalize_subscription",
    "occurrences",
    "shift",
]
