"""Spending insights package."""

from subwise.insights.aggregation import (
    category_spend,
    days_until,
    normalized_monthly_cost,
    projected_yearly_spend,
    renewal_calendar,
    renewals_on,
    total_due_on,
    total_due_within,
    total_monthly_spend,
    upcoming_renewals,
)
from subwise.insights.engine import SpendingInsights

__all__ = [
    "SpendingInsights",
    "category_spend",
    "days_until",
    "normalized_monthly_cost",
    "projected_yearly_spend",
    "renewal_calendar",
    "renewals_on",
    "total_due_on",
    "total_due_within",
    "total_monthly_spend",
    "upcoming_renewals",
]
