"""
Insights Engine

Binds the aggregation functions to a store. Each call takes a fresh
snapshot of the collection, so results always reflect the latest
mutation and no figure is ever served stale.
"""

from datetime import date
from decimal import Decimal
from typing import Callable, Optional

from subwise.insights import aggregation
from subwise.models.subscription import (
    SpendingSummary,
    Subscription,
    SubscriptionCategory,
    SubscriptionStatus,
)
from subwise.store import SubscriptionStore


class SpendingInsights:
    """
    Read-only queries over a subscription store.

    GUARANTEES:
    - Never mutates the store
    - Never caches a result
    - Uses the store's clock unless one is injected here
    """

    def __init__(
        self,
        store: SubscriptionStore,
        clock: Optional[Callable[[], date]] = None,
        default_window_days: int = 7,
        calendar_window_days: int = 30,
    ):
        self._store = store
        self._clock = clock or store.today
        self._default_window_days = default_window_days
        self._calendar_window_days = calendar_window_days

    def today(self) -> date:
        return self._clock()

    def _window(self, window_days: Optional[int]) -> int:
        return self._default_window_days if window_days is None else window_days

    @staticmethod
    def normalized_monthly_cost(subscription: Subscription) -> Decimal:
        return aggregation.normalized_monthly_cost(subscription)

    def total_monthly_spend(self) -> Decimal:
        return aggregation.total_monthly_spend(self._store.snapshot())

    def projected_yearly_spend(self) -> Decimal:
        return aggregation.projected_yearly_spend(self._store.snapshot())

    def category_spend(self) -> dict[SubscriptionCategory, Decimal]:
        return aggregation.category_spend(self._store.snapshot())

    def upcoming_renewals(self, window_days: Optional[int] = None) -> list[Subscription]:
        return aggregation.upcoming_renewals(
            self._store.snapshot(),
            self._window(window_days),
            self.today(),
        )

    def total_due_within(self, window_days: Optional[int] = None) -> Decimal:
        return aggregation.total_due_within(
            self._store.snapshot(),
            self._window(window_days),
            self.today(),
        )

    def upcoming_calendar_total(self, window_days: Optional[int] = None) -> Decimal:
        """Raw cost of everything billing in the calendar's look-ahead window."""
        window = self._calendar_window_days if window_days is None else window_days
        return aggregation.total_due_within(
            self._store.snapshot(),
            window,
            self.today(),
        )

    def renewals_on(self, day: date) -> list[Subscription]:
        return aggregation.renewals_on(self._store.snapshot(), day)

    def total_due_on(self, day: date) -> Decimal:
        return aggregation.total_due_on(self._store.snapshot(), day)

    def renewal_calendar(self, year: int, month: int) -> dict[date, list[Subscription]]:
        return aggregation.renewal_calendar(self._store.snapshot(), year, month)

    def summary(self, window_days: Optional[int] = None) -> SpendingSummary:
        """
        Dashboard figures computed from a single snapshot.

        Using one snapshot keeps the figures consistent with each other
        even if a write lands while the summary is being built.
        """
        subscriptions = self._store.snapshot()
        today = self.today()
        window = self._window(window_days)

        return SpendingSummary(
            as_of=today,
            total_monthly_spend=aggregation.total_monthly_spend(subscriptions),
            projected_yearly_spend=aggregation.projected_yearly_spend(subscriptions),
            active_count=sum(
                1 for s in subscriptions if s.status == SubscriptionStatus.ACTIVE
            ),
            trial_count=sum(
                1 for s in subscriptions if s.status == SubscriptionStatus.TRIAL
            ),
            category_spend=aggregation.category_spend(subscriptions),
            renewal_window_days=window,
            upcoming_renewals=aggregation.upcoming_renewals(subscriptions, window, today),
        )
