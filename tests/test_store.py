"""Tests for the subscription store: loading, CRUD, persistence."""

import json
from datetime import date
from decimal import Decimal

import pytest

from subwise.audit import AuditLogger
from subwise.models.audit import AuditEventType
from subwise.models.subscription import (
    BillingCycle,
    SubscriptionCategory,
    SubscriptionStatus,
    SubscriptionUpdate,
)
from subwise.services.storage import (
    FileBlobStorage,
    InMemoryAuditStorage,
    InMemoryBlobStorage,
    PersistenceFailure,
    StorageConnectionError,
)
from subwise.store import (
    DEFAULT_SUBSCRIPTIONS,
    InvalidFieldError,
    NotFoundError,
    SubscriptionStore,
    dump_collection,
)
from tests.factories import TODAY, make_subscription, new_subscription_fields


KEY = "subwise_subscriptions"


class FailingBlobStorage(InMemoryBlobStorage):
    """Reads work; writes fail once armed."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.fail_writes = False
        self.error = PersistenceFailure("disk full")

    def write(self, key, value):
        if self.fail_writes:
            raise self.error
        super().write(key, value)


def event_types(audit_storage: InMemoryAuditStorage) -> list[AuditEventType]:
    return [e.event_type for e in audit_storage.get_recent_events(limit=1000)]


class TestLoad:
    """Tests for loading the persisted collection."""

    def test_first_run_seeds_defaults(self, store, blob_storage):
        """Missing key falls back to the default collection."""
        subs = store.load()
        assert [s.id for s in subs] == ["1", "2", "3", "4", "5", "6"]
        assert blob_storage.write_count == 0

    def test_seeded_dates_are_normalized(self, store):
        """Every default billing date is moved to today or later."""
        subs = {s.id: s for s in store.load()}
        assert all(s.next_billing >= TODAY for s in subs.values())
        # ChatGPT Plus was due 2024-08-08, two days before "today"
        assert subs["4"].next_billing == date(2024, 9, 8)
        assert subs["1"].next_billing == date(2024, 8, 15)

    @pytest.mark.parametrize("raw", [
        "{not json",
        '{"subscriptions": []}',
        '[{"id": "1", "name": "Broken"}]',
        '["just a string"]',
        '[{"id": "1", "name": "A", "category": "entertainment", "cost": 1,'
        ' "billingCycle": "fortnightly", "nextBilling": "2024-08-20", "status": "active"}]',
    ])
    def test_malformed_blob_seeds_defaults(self, blob_storage, audit_storage, raw):
        """Corrupt or legacy data is recovered, never fatal."""
        blob_storage.write(KEY, raw)
        store = SubscriptionStore(
            blob_storage,
            clock=lambda: TODAY,
            audit_logger=AuditLogger(audit_storage),
        )
        subs = store.load()
        assert [s.id for s in subs] == [s.id for s in DEFAULT_SUBSCRIPTIONS]
        assert all(s.next_billing >= TODAY for s in subs)
        assert AuditEventType.MALFORMED_DATA_RECOVERED in event_types(audit_storage)

    def test_duplicate_ids_are_malformed(self, blob_storage):
        """A collection with repeated ids is treated as corrupt."""
        duplicate = make_subscription(id="x", next_billing=date(2024, 9, 1))
        blob_storage.write(KEY, dump_collection([duplicate, duplicate]))
        store = SubscriptionStore(blob_storage, clock=lambda: TODAY)
        assert len(store.load()) == len(DEFAULT_SUBSCRIPTIONS)

    def test_valid_blob_loaded_and_normalized(self, blob_storage, audit_storage):
        """Past dates in a valid blob are advanced on load."""
        blob_storage.write(KEY, dump_collection([
            make_subscription(id="a", next_billing=date(2024, 1, 31)),
            make_subscription(id="b", next_billing=date(2024, 8, 30)),
        ]))
        store = SubscriptionStore(
            blob_storage,
            clock=lambda: TODAY,
            audit_logger=AuditLogger(audit_storage),
        )
        subs = store.load()
        assert [s.id for s in subs] == ["a", "b"]
        assert subs[0].next_billing == date(2024, 8, 31)
        assert subs[1].next_billing == date(2024, 8, 30)
        assert AuditEventType.DATES_NORMALIZED in event_types(audit_storage)

    def test_load_does_not_write_back_by_default(self, blob_storage):
        blob_storage.write(KEY, "[]")
        store = SubscriptionStore(blob_storage, clock=lambda: TODAY)
        store.load()
        assert blob_storage.write_count == 1

    def test_persist_on_load(self, blob_storage):
        """With persist_on_load the normalized collection is written back."""
        store = SubscriptionStore(
            blob_storage, clock=lambda: TODAY, persist_on_load=True
        )
        store.load()
        assert blob_storage.write_count == 1
        stored = json.loads(blob_storage.read(KEY))
        assert {r["nextBilling"] for r in stored} >= {"2024-09-08"}

    def test_empty_collection_is_not_reseeded(self, blob_storage):
        """A user who deleted everything keeps an empty collection."""
        blob_storage.write(KEY, "[]")
        store = SubscriptionStore(blob_storage, clock=lambda: TODAY)
        assert store.load() == []

    def test_mutation_before_load_loads_first(self, store):
        """Adding before load() must not overwrite the stored collection."""
        store.add(new_subscription_fields())
        assert len(store) == len(DEFAULT_SUBSCRIPTIONS) + 1


class TestAdd:
    """Tests for adding subscriptions."""

    def test_add_assigns_id_and_persists(self, loaded_store, blob_storage):
        sub = loaded_store.add(new_subscription_fields())
        assert sub.id
        assert sub.id in loaded_store
        assert blob_storage.write_count == 1
        stored = json.loads(blob_storage.read(KEY))
        assert stored[-1] == {
            "id": sub.id,
            "name": "Notion",
            "category": "productivity",
            "cost": 12.5,
            "billingCycle": "monthly",
            "nextBilling": "2024-08-20",
            "status": "active",
            "description": "Notes",
        }

    def test_successful_write_is_audited(self, loaded_store, audit_storage):
        assert AuditEventType.COLLECTION_PERSISTED not in event_types(audit_storage)
        loaded_store.add(new_subscription_fields())
        assert event_types(audit_storage).count(AuditEventType.COLLECTION_PERSISTED) == 1

    def test_add_normalizes_past_date(self, loaded_store):
        sub = loaded_store.add(new_subscription_fields(nextBilling="2024-07-01"))
        assert sub.next_billing == date(2024, 9, 1)

    def test_add_accepts_attribute_names(self, loaded_store):
        sub = loaded_store.add({
            "name": "Duolingo",
            "category": SubscriptionCategory.EDUCATION,
            "cost": Decimal("6.99"),
            "billing_cycle": BillingCycle.QUARTERLY,
            "next_billing": date(2024, 8, 11),
        })
        assert sub.status == SubscriptionStatus.ACTIVE
        assert sub.billing_cycle == BillingCycle.QUARTERLY

    def test_add_redraws_colliding_id(self, blob_storage):
        ids = iter(["1", "fresh"])
        store = SubscriptionStore(
            blob_storage, clock=lambda: TODAY, id_factory=lambda: next(ids)
        )
        store.load()
        assert store.add(new_subscription_fields()).id == "fresh"

    @pytest.mark.parametrize("fields,bad_field", [
        (new_subscription_fields(category=None), "category"),
        (new_subscription_fields(billingCycle="weekly"), "billingCycle"),
        (new_subscription_fields(status="paused"), "status"),
        (new_subscription_fields(cost=-3), "cost"),
        (new_subscription_fields(name=""), "name"),
        (new_subscription_fields(id="mine"), "id"),
    ])
    def test_invalid_fields_rejected(self, loaded_store, blob_storage, fields, bad_field):
        """Invalid payloads raise before the collection changes."""
        before = loaded_store.snapshot()
        with pytest.raises(InvalidFieldError) as exc_info:
            loaded_store.add(fields)
        assert bad_field in exc_info.value.fields
        assert loaded_store.snapshot() == before
        assert blob_storage.write_count == 0

    def test_missing_field_rejected(self, loaded_store):
        fields = new_subscription_fields()
        del fields["nextBilling"]
        with pytest.raises(InvalidFieldError) as exc_info:
            loaded_store.add(fields)
        assert exc_info.value.fields == ["nextBilling"]


class TestUpdate:
    """Tests for partial updates."""

    def test_unknown_id(self, loaded_store):
        with pytest.raises(NotFoundError):
            loaded_store.update("missing", {"name": "X"})

    def test_partial_update_persists_once(self, loaded_store, blob_storage):
        updated = loaded_store.update("1", {"cost": "17.99"})
        assert updated.cost == Decimal("17.99")
        assert updated.name == "Netflix"
        assert loaded_store.get("1") == updated
        assert blob_storage.write_count == 1

    def test_keyword_arguments(self, loaded_store):
        assert loaded_store.update("4", status="active").status == SubscriptionStatus.ACTIVE

    def test_update_model(self, loaded_store):
        updated = loaded_store.update("2", SubscriptionUpdate(name="Spotify Family"))
        assert updated.name == "Spotify Family"

    def test_description_can_be_cleared(self, loaded_store):
        assert loaded_store.update("1", {"description": None}).description is None

    def test_cycle_change_keeps_current_date(self, loaded_store):
        """Netflix renews 2024-08-15; switching to yearly keeps that date."""
        updated = loaded_store.update("1", {"billingCycle": "yearly"})
        assert updated.billing_cycle == BillingCycle.YEARLY
        assert updated.next_billing == date(2024, 8, 15)

    def test_past_date_is_renormalized(self, loaded_store):
        updated = loaded_store.update("1", {"nextBilling": "2024-07-20"})
        assert updated.next_billing == date(2024, 8, 20)

    def test_new_date_and_cycle_used_together(self, loaded_store):
        updated = loaded_store.update(
            "1", {"nextBilling": "2024-01-31", "billingCycle": "quarterly"}
        )
        assert updated.next_billing == date(2024, 10, 31)

    def test_new_date_uses_stored_cycle(self, loaded_store):
        loaded_store.update("1", {"billingCycle": "quarterly"})
        updated = loaded_store.update("1", {"nextBilling": "2024-05-10"})
        # 2024-05-10 + one quarter is exactly today
        assert updated.next_billing == TODAY

    def test_invalid_update_leaves_record_unchanged(self, loaded_store, blob_storage):
        before = loaded_store.get("1")
        with pytest.raises(InvalidFieldError):
            loaded_store.update("1", {"status": "paused"})
        with pytest.raises(InvalidFieldError):
            loaded_store.update("1", {"name": None})
        with pytest.raises(InvalidFieldError):
            loaded_store.update("1", {"id": "99"})
        assert loaded_store.get("1") == before
        assert blob_storage.write_count == 0

    def test_cancel(self, loaded_store, audit_storage):
        cancelled = loaded_store.cancel("3")
        assert cancelled.status == SubscriptionStatus.CANCELLED
        assert "3" in loaded_store
        assert AuditEventType.SUBSCRIPTION_CANCELLED in event_types(audit_storage)


class TestDelete:
    """Tests for deletion."""

    def test_delete_existing(self, loaded_store, blob_storage):
        assert loaded_store.delete("2") is True
        assert "2" not in loaded_store
        assert blob_storage.write_count == 1
        assert "2" not in {r["id"] for r in json.loads(blob_storage.read(KEY))}

    def test_delete_missing_is_a_noop(self, loaded_store, blob_storage):
        """Deleting an absent id changes nothing and raises nothing."""
        before = loaded_store.snapshot()
        assert loaded_store.delete("missing") is False
        assert loaded_store.snapshot() == before
        assert len(loaded_store) == len(before)
        assert blob_storage.write_count == 0

    def test_delete_twice(self, loaded_store):
        assert loaded_store.delete("2") is True
        assert loaded_store.delete("2") is False


class TestPersistenceFailure:
    """A failed write must leave the in-memory collection untouched."""

    @pytest.fixture
    def failing(self, audit_storage):
        storage = FailingBlobStorage()
        store = SubscriptionStore(
            storage,
            clock=lambda: TODAY,
            audit_logger=AuditLogger(audit_storage),
        )
        store.load()
        storage.fail_writes = True
        return store

    def test_add(self, failing, audit_storage):
        before = failing.snapshot()
        with pytest.raises(PersistenceFailure):
            failing.add(new_subscription_fields())
        assert failing.snapshot() == before
        assert AuditEventType.PERSIST_FAILED in event_types(audit_storage)

    def test_other_storage_errors_become_persistence_failure(self, audit_storage):
        """Whatever the backend raises, callers only need to handle one error."""
        storage = FailingBlobStorage()
        store = SubscriptionStore(
            storage,
            clock=lambda: TODAY,
            audit_logger=AuditLogger(audit_storage),
        )
        store.load()
        storage.error = StorageConnectionError("offline")
        storage.fail_writes = True

        with pytest.raises(PersistenceFailure) as exc_info:
            store.delete("1")
        assert isinstance(exc_info.value.__cause__, StorageConnectionError)
        assert "1" in store
        assert AuditEventType.PERSIST_FAILED in event_types(audit_storage)

    def test_update(self, failing):
        before = failing.get("1")
        with pytest.raises(PersistenceFailure):
            failing.update("1", {"cost": 99})
        assert failing.get("1") == before

    def test_delete(self, failing):
        with pytest.raises(PersistenceFailure):
            failing.delete("1")
        assert "1" in failing

    def test_explicit_persist(self, failing):
        with pytest.raises(PersistenceFailure):
            failing.persist()


class TestRoundTrip:
    """Tests that simulate a restart against file storage."""

    def test_added_record_survives_restart(self, tmp_path):
        storage = FileBlobStorage(tmp_path)
        first = SubscriptionStore(storage, clock=lambda: TODAY)
        first.load()
        added = first.add(new_subscription_fields())

        second = SubscriptionStore(FileBlobStorage(tmp_path), clock=lambda: TODAY)
        second.load()
        assert second.get(added.id) == added
        assert [s.id for s in second] == [s.id for s in first]

    def test_dates_advance_when_time_passes(self, tmp_path):
        first = SubscriptionStore(FileBlobStorage(tmp_path), clock=lambda: TODAY)
        first.load()
        added = first.add(new_subscription_fields())

        later = SubscriptionStore(
            FileBlobStorage(tmp_path), clock=lambda: date(2024, 10, 1)
        )
        later.load()
        restored = later.get(added.id)
        assert restored.next_billing == date(2024, 10, 20)
        assert restored.model_copy(update={"next_billing": added.next_billing}) == added


class TestQueries:
    """Tests for filtered listings."""

    def test_search_is_case_insensitive(self, loaded_store):
        assert [s.name for s in loaded_store.list_subscriptions(search="SPOT")] == ["Spotify Premium"]

    def test_filter_by_category_and_status(self, loaded_store):
        productivity = loaded_store.list_subscriptions(category="productivity")
        assert {s.id for s in productivity} == {"3", "4", "6"}
        active_productivity = loaded_store.list_subscriptions(
            category=SubscriptionCategory.PRODUCTIVITY,
            status=SubscriptionStatus.ACTIVE,
        )
        assert {s.id for s in active_productivity} == {"3", "6"}

    def test_sort_orders(self, loaded_store):
        by_name = loaded_store.list_subscriptions(sort_by="name")
        assert by_name[0].name == "Adobe Creative Suite"
        by_cost = loaded_store.list_subscriptions(sort_by="cost")
        assert by_cost[0].name == "Dropbox Plus"
        by_date = loaded_store.list_subscriptions(sort_by="date")
        assert by_date[0].name == "Spotify Premium"

    def test_unknown_sort_key(self, loaded_store):
        with pytest.raises(ValueError):
            loaded_store.list_subscriptions(sort_by="popularity")

    def test_active_and_trials(self, loaded_store):
        assert [s.id for s in loaded_store.trials()] == ["4"]
        assert {s.id for s in loaded_store.active()} == {"1", "2", "3", "5", "6"}

    def test_get_missing(self, loaded_store):
        with pytest.raises(NotFoundError):
            loaded_store.get("missing")

    def test_snapshot_is_a_copy(self, loaded_store):
        snapshot = loaded_store.snapshot()
        snapshot.clear()
        assert len(loaded_store) == len(DEFAULT_SUBSCRIPTIONS)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
