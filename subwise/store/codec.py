"""
Collection Codec

The persisted form is a JSON array of records using the camelCase field
names (billingCycle, nextBilling), ISO ``YYYY-MM-DD`` dates and numeric
costs.
"""

import json
from typing import Iterable

from subwise.models.subscription import Subscription
from subwise.store.errors import MalformedPersistedDataError


def dump_collection(subscriptions: Iterable[Subscription]) -> str:
    """Serialize the full collection."""
    return json.dumps(
        [subscription.to_record() for subscription in subscriptions],
        ensure_ascii=False,
    )


def load_collection(raw: str) -> list[Subscription]:
    """
    Decode a persisted collection.

    Raises:
        MalformedPersistedDataError: invalid JSON, not an array, a record
            failing the schema, or duplicate ids
    """
    try:
        data = json.loads(raw)
    except ValueError as e:
        raise MalformedPersistedDataError(f"Invalid JSON: {e}") from e

    if not isinstance(data, list):
        raise MalformedPersistedDataError(
            f"Expected a JSON array, got {type(data).__name__}"
        )

    subscriptions = []
    seen_ids = set()
    for index, item in enumerate(data):
        if not isinstance(item, dict):
            raise MalformedPersistedDataError(
                f"Record {index} is not an object"
            )
        try:
            subscription = Subscription.model_validate(item)
        except ValueError as e:
            raise MalformedPersistedDataError(
                f"Record {index} failed validation: {e}"
            ) from e
        if subscription.id in seen_ids:
            raise MalformedPersistedDataError(
                f"Duplicate subscription id: {subscription.id}"
            )
        seen_ids.add(subscription.id)
        subscriptions.append(subscription)

    return subscriptions
