"""Shared fixtures. "Today" is pinned so every schedule is deterministic."""

import pytest

from subwise.audit import AuditLogger
from subwise.services.storage import InMemoryAuditStorage, InMemoryBlobStorage
from subwise.store import SubscriptionStore
from tests.factories import TODAY


@pytest.fixture
def blob_storage():
    return InMemoryBlobStorage()


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def store(blob_storage, audit_storage):
    return SubscriptionStore(
        blob_storage,
        clock=lambda: TODAY,
        audit_logger=AuditLogger(audit_storage),
    )


@pytest.fixture
def loaded_store(store):
    store.load()
    return store
