"""
SubWise - Source Package

A recurring-subscription tracker engine: it owns the subscription
collection, keeps billing dates current, and derives spending insights
for whatever presentation layer sits on top.

DESIGN PRINCIPLES:
1. Billing dates are never left in the past
2. Aggregates are always derived, never stored
3. "Today" is injected, never read inside the arithmetic
4. A failed write never corrupts the in-memory collection
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "SubWise Team"
