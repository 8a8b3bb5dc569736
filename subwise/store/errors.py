"""Exceptions raised by the subscription store."""

from typing import Optional


class SubscriptionStoreError(Exception):
    """Base exception for subscription store operations."""
    pass


class NotFoundError(SubscriptionStoreError):
    """No subscription with the given id exists in the collection."""

    def __init__(self, subscription_id: str):
        self.subscription_id = subscription_id
        super().__init__(f"Subscription not found: {subscription_id}")


class InvalidFieldError(SubscriptionStoreError):
    """
    A caller-supplied record is missing a required field or holds a value
    outside its allowed range. Raised before any mutation.
    """

    def __init__(self, message: str, fields: Optional[list[str]] = None):
        self.fields = fields or []
        super().__init__(message)


class MalformedPersistedDataError(SubscriptionStoreError):
    """The persisted blob could not be decoded into a valid collection."""
    pass
