"""
Subscription Store

Owns the subscription collection. Every mutation follows the same path:

    validate -> build the new collection -> normalize dates -> persist -> swap

The swap only happens after the write succeeded, so a PersistenceFailure
leaves the in-memory collection at its last known-good state.

CONCURRENCY: one logical writer at a time. All operations take a
re-entrant lock; readers get a copy of the collection taken under that
lock, so aggregation always sees a consistent snapshot.
"""

import threading
from datetime import date
from typing import Callable, Iterator, Literal, Mapping, Optional, Union
from uuid import UUID, uuid4

from pydantic import ValidationError

from subwise.audit import AuditLogger, create_correlation_id
from subwise.config import DEFAULT_STORAGE_KEY
from subwise.models.subscription import (
    Subscription,
    SubscriptionCategory,
    SubscriptionCreate,
    SubscriptionStatus,
    SubscriptionUpdate,
)
from subwise.schedule import normalize_collection, normalize_subscription
from subwise.services.storage import (
    BlobStorageInterface,
    PersistenceFailure,
    StorageError,
)
from subwise.store.codec import dump_collection, load_collection
from subwise.store.defaults import default_subscriptions
from subwise.store.errors import (
    InvalidFieldError,
    MalformedPersistedDataError,
    NotFoundError,
)


SortKey = Literal["name", "cost", "date"]


def _new_id() -> str:
    return uuid4().hex


def _invalid_fields(error: ValidationError) -> InvalidFieldError:
    """Translate a pydantic error into the store's boundary error."""
    fields = sorted({
        ".".join(str(part) for part in detail["loc"]) or "__root__"
        for detail in error.errors()
    })
    return InvalidFieldError(
        f"Invalid subscription fields: {', '.join(fields)}",
        fields=fields,
    )


class SubscriptionStore:
    """
    In-memory subscription collection backed by a durable blob.

    Usage:
        store = SubscriptionStore(FileBlobStorage(Path("~/.subwise")))
        store.load()
        sub = store.add({"name": "Netflix", ...})
        store.update(sub.id, {"billingCycle": "yearly"})
    """

    def __init__(
        self,
        storage: BlobStorageInterface,
        storage_key: str = DEFAULT_STORAGE_KEY,
        clock: Callable[[], date] = date.today,
        audit_logger: Optional[AuditLogger] = None,
        id_factory: Callable[[], str] = _new_id,
        persist_on_load: bool = False,
    ):
        """
        Args:
            storage: Backend holding the serialized collection
            storage_key: Fixed key the collection lives under
            clock: Returns "today"; injected so schedules are testable
            audit_logger: Where change events go. Defaults to local-only logging.
            id_factory: Produces candidate ids for new records
            persist_on_load: Write the normalized collection back after load()
        """
        self._storage = storage
        self._key = storage_key
        self._clock = clock
        self._audit = audit_logger or AuditLogger()
        self._id_factory = id_factory
        self._persist_on_load = persist_on_load

        self._lock = threading.RLock()
        self._subscriptions: list[Subscription] = []
        self._loaded = False

    # =========================================================================
    # Properties
    # =========================================================================

    @property
    def storage_key(self) -> str:
        return self._key

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    def today(self) -> date:
        """The store's notion of the current date."""
        return self._clock()

    # =========================================================================
    # Loading and persistence
    # =========================================================================

    def load(self, correlation_id: Optional[UUID] = None) -> list[Subscription]:
        """
        Read the persisted collection and normalize every billing date.

        A missing key (first run) or a malformed blob falls back to the
        default collection. Malformed data is logged, never raised.

        Raises:
            StorageError: If the backend itself cannot be read
        """
        correlation_id = correlation_id or create_correlation_id()

        with self._lock:
            raw = self._storage.read(self._key)

            if raw is None:
                records = default_subscriptions()
                self._audit.log_collection_seeded(
                    key=self._key,
                    count=len(records),
                    reason="no persisted collection",
                    correlation_id=correlation_id,
                )
            else:
                try:
                    records = load_collection(raw)
                except MalformedPersistedDataError as e:
                    self._audit.log_malformed_data(
                        key=self._key,
                        error_message=str(e),
                        correlation_id=correlation_id,
                    )
                    records = default_subscriptions()
                    self._audit.log_collection_seeded(
                        key=self._key,
                        count=len(records),
                        reason="malformed persisted collection",
                        correlation_id=correlation_id,
                    )
                else:
                    self._audit.log_collection_loaded(
                        key=self._key,
                        count=len(records),
                        correlation_id=correlation_id,
                    )

            today = self.today()
            normalized, changed = normalize_collection(records, today)
            if changed:
                self._audit.log_dates_normalized(
                    key=self._key,
                    changed=changed,
                    today=today.isoformat(),
                    correlation_id=correlation_id,
                )

            if self._persist_on_load:
                self._write(normalized, correlation_id)

            self._subscriptions = normalized
            self._loaded = True
            return list(normalized)

    def persist(self, correlation_id: Optional[UUID] = None) -> None:
        """
        Write the full collection to durable storage.

        Raises:
            PersistenceFailure: If the write fails
        """
        with self._lock:
            self._ensure_loaded()
            self._write(self._subscriptions, correlation_id)

    def _write(
        self,
        subscriptions: list[Subscription],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        payload = dump_collection(subscriptions)
        try:
            self._storage.write(self._key, payload)
        except StorageError as e:
            self._audit.log_persist_failed(
                key=self._key,
                error_message=str(e),
                correlation_id=correlation_id,
            )
            if isinstance(e, PersistenceFailure):
                raise
            raise PersistenceFailure(f"Failed to persist {self._key}: {e}") from e

        self._audit.log_collection_persisted(
            key=self._key,
            count=len(subscriptions),
            correlation_id=correlation_id,
        )

    def _commit(
        self,
        subscriptions: list[Subscription],
        correlation_id: Optional[UUID] = None,
    ) -> None:
        """Persist a new collection, then make it current."""
        self._write(subscriptions, correlation_id)
        self._subscriptions = subscriptions

    def _ensure_loaded(self) -> None:
        # Mutating before load() would overwrite the stored collection
        if not self._loaded:
            self.load()

    def _index_of(self, subscription_id: str) -> int:
        for index, subscription in enumerate(self._subscriptions):
            if subscription.id == subscription_id:
                return index
        raise NotFoundError(subscription_id)

    # =========================================================================
    # Mutations
    # =========================================================================

    def add(
        self,
        fields: Union[SubscriptionCreate, Mapping],
        correlation_id: Optional[UUID] = None,
    ) -> Subscription:
        """
        Add a subscription.

        Assigns a fresh id and advances a past billing date before storing.

        Raises:
            InvalidFieldError: If a required field is missing or invalid
            PersistenceFailure: If the collection could not be written
        """
        if isinstance(fields, SubscriptionCreate):
            payload = fields
        else:
            try:
                payload = SubscriptionCreate.model_validate(dict(fields))
            except ValidationError as e:
                raise _invalid_fields(e) from e

        with self._lock:
            self._ensure_loaded()

            existing_ids = {sub.id for sub in self._subscriptions}
            new_id = self._id_factory()
            while new_id in existing_ids:
                new_id = self._id_factory()

            subscription = normalize_subscription(
                Subscription(id=new_id, **payload.model_dump()),
                self.today(),
            )
            self._commit([*self._subscriptions, subscription], correlation_id)

        self._audit.log_subscription_added(
            subscription_id=subscription.id,
            name=subscription.name,
            correlation_id=correlation_id,
        )
        return subscription

    def update(
        self,
        subscription_id: str,
        changes: Union[SubscriptionUpdate, Mapping, None] = None,
        correlation_id: Optional[UUID] = None,
        **fields,
    ) -> Subscription:
        """
        Apply a partial update to a subscription.

        Fields can be passed as a mapping, a SubscriptionUpdate, or keyword
        arguments. When the update touches the billing date or cycle, the
        date is re-advanced using the merged cycle and the new date (or the
        stored one if no new date was given).

        Raises:
            NotFoundError: If no subscription has this id
            InvalidFieldError: If a field is unknown or invalid
            PersistenceFailure: If the collection could not be written
        """
        if isinstance(changes, SubscriptionUpdate):
            changes = changes.changes()
        try:
            update = SubscriptionUpdate.model_validate(
                {**dict(changes or {}), **fields}
            )
        except ValidationError as e:
            raise _invalid_fields(e) from e

        with self._lock:
            self._ensure_loaded()
            index = self._index_of(subscription_id)
            current = self._subscriptions[index]

            try:
                merged = Subscription.model_validate(
                    {**current.model_dump(), **update.changes()}
                )
            except ValidationError as e:
                raise _invalid_fields(e) from e

            if update.touches_schedule:
                merged = normalize_subscription(merged, self.today())

            subscriptions = list(self._subscriptions)
            subscriptions[index] = merged
            self._commit(subscriptions, correlation_id)

        self._audit.log_subscription_updated(
            subscription_id=subscription_id,
            fields=sorted(update.model_fields_set),
            correlation_id=correlation_id,
        )
        return merged

    def cancel(
        self,
        subscription_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> Subscription:
        """Mark a subscription as cancelled. It stays in the collection."""
        cancelled = self.update(
            subscription_id,
            {"status": SubscriptionStatus.CANCELLED},
            correlation_id=correlation_id,
        )
        self._audit.log_subscription_cancelled(
            subscription_id=subscription_id,
            correlation_id=correlation_id,
        )
        return cancelled

    def delete(
        self,
        subscription_id: str,
        correlation_id: Optional[UUID] = None,
    ) -> bool:
        """
        Remove a subscription.

        Deleting an id that is not present is a no-op: nothing is written
        and False is returned.

        Raises:
            PersistenceFailure: If the collection could not be written
        """
        with self._lock:
            self._ensure_loaded()
            remaining = [
                sub for sub in self._subscriptions if sub.id != subscription_id
            ]
            if len(remaining) == len(self._subscriptions):
                return False
            self._commit(remaining, correlation_id)

        self._audit.log_subscription_deleted(
            subscription_id=subscription_id,
            correlation_id=correlation_id,
        )
        return True

    # =========================================================================
    # Reads
    # =========================================================================

    def snapshot(self) -> list[Subscription]:
        """A consistent copy of the collection, in insertion order."""
        with self._lock:
            self._ensure_loaded()
            return list(self._subscriptions)

    def get(self, subscription_id: str) -> Subscription:
        """
        Raises:
            NotFoundError: If no subscription has this id
        """
        with self._lock:
            self._ensure_loaded()
            return self._subscriptions[self._index_of(subscription_id)]

    def list_subscriptions(
        self,
        search: Optional[str] = None,
        category: Optional[SubscriptionCategory] = None,
        status: Optional[SubscriptionStatus] = None,
        sort_by: SortKey = "name",
    ) -> list[Subscription]:
        """
        Filter and sort the collection.

        Args:
            search: Case-insensitive substring of the name
            category: Only this category
            status: Only this status
            sort_by: "name" (A-Z), "cost" (highest first) or "date" (soonest first)
        """
        subscriptions = self.snapshot()

        if search:
            needle = search.strip().lower()
            subscriptions = [s for s in subscriptions if needle in s.name.lower()]
        if category is not None:
            category = SubscriptionCategory(category)
            subscriptions = [s for s in subscriptions if s.category == category]
        if status is not None:
            status = SubscriptionStatus(status)
            subscriptions = [s for s in subscriptions if s.status == status]

        if sort_by == "cost":
            subscriptions.sort(key=lambda s: s.cost, reverse=True)
        elif sort_by == "date":
            subscriptions.sort(key=lambda s: s.next_billing)
        elif sort_by == "name":
            subscriptions.sort(key=lambda s: s.name.casefold())
        else:
            raise ValueError(f"Unknown sort key: {sort_by!r}")

        return subscriptions

    def active(self) -> list[Subscription]:
        return self.list_subscriptions(status=SubscriptionStatus.ACTIVE, sort_by="date")

    def trials(self) -> list[Subscription]:
        return self.list_subscriptions(status=SubscriptionStatus.TRIAL, sort_by="date")

    def __len__(self) -> int:
        return len(self.snapshot())

    def __iter__(self) -> Iterator[Subscription]:
        return iter(self.snapshot())

    def __contains__(self, subscription_id: object) -> bool:
        return any(sub.id == subscription_id for sub in self.snapshot())
