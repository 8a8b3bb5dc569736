"""
Billing Cycle Arithmetic

Pure calendar math for recurring charges. Nothing in here reads the clock:
every function that needs "today" takes it as an argument.

Rules:
- A month step keeps the day-of-month and clamps it to the last day of a
  shorter target month (Jan 31 + 1 month -> Feb 28/29).
- A year is twelve month steps, so Feb 29 clamps to Feb 28 in common years.
- Multiples are always taken from the anchor date, never chained, so a
  subscription anchored on the 31st returns to the 31st whenever the
  month allows it.
"""

import calendar
from datetime import date
from typing import Union

from subwise.models.subscription import BillingCycle

CycleLike = Union[BillingCycle, str]


def add_months(value: date, months: int) -> date:
    """Add whole calendar months, clamping the day to the target month."""
    month_index = value.month - 1 + months
    year = value.year + month_index // 12
    month = month_index % 12 + 1
    last_day = calendar.monthrange(year, month)[1]
    return value.replace(year=year, month=month, day=min(value.day, last_day))


def shift(value: date, cycle: CycleLike, count: int = 1) -> date:
    """Return ``value + count * cycle``, measured from ``value`` itself."""
    return add_months(value, BillingCycle(cycle).months * count)


def cycles_elapsed(value: date, cycle: CycleLike, today: date) -> int:
    """
    Smallest k >= 0 such that ``shift(value, cycle, k) >= today``.

    A date equal to today is current and needs no cycles.
    """
    cycle = BillingCycle(cycle)
    if value >= today:
        return 0

    elapsed_months = (today.year - value.year) * 12 + (today.month - value.month)
    count = max(elapsed_months // cycle.months, 0)

    # The month estimate is off by at most one step either way
    while count > 0 and shift(value, cycle, count - 1) >= today:
        count -= 1
    while shift(value, cycle, count) < today:
        count += 1

    return count


def advance(value: date, cycle: CycleLike, today: date) -> date:
    """
    Move a billing date forward past every fully elapsed cycle.

    Dates on or after today are returned unchanged, which makes the
    function idempotent: ``advance(advance(d, c, t), c, t) == advance(d, c, t)``.
    """
    count = cycles_elapsed(value, cycle, today)
    if count == 0:
        return value
    return shift(value, cycle, count)


def occurrences(
    anchor: date,
    cycle: CycleLike,
    start: date,
    end: date,
) -> list[date]:
    """
    Every billing date generated from ``anchor`` that falls in [start, end].

    Projection only runs forward: nothing before the anchor is returned.
    """
    if end < start:
        return []

    cycle = BillingCycle(cycle)
    count = cycles_elapsed(anchor, cycle, start)
    dates = []
    current = shift(anchor, cycle, count)
    while current <= end:
        dates.append(current)
        count += 1
        current = shift(anchor, cycle, count)
    return dates
