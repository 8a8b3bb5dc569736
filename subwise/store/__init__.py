"""Subscription store package."""

from subwise.store.codec import dump_collection, load_collection
from subwise.store.defaults import DEFAULT_SUBSCRIPTIONS, default_subscriptions
from subwise.store.errors import (
    InvalidFieldError,
    MalformedPersistedDataError,
    NotFoundError,
    SubscriptionStoreError,
)
from subwise.store.subscription_store import SortKey, SubscriptionStore

__all__ = [
    "DEFAULT_SUBSCRIPTIONS",
    "InvalidFieldError",
    "MalformedPersistedDataError",
    "NotFoundError",
    "SortKey",
    "SubscriptionStore",
    "SubscriptionStoreError",
    "default_subscriptions",
    "dump_collection",
    "load_collection",
]
