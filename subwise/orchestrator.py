"""
Orchestrator for SubWise

Ties the configured storage backend, audit logging, the subscription
store and the insights engine together.

This is the one place that turns configuration into objects; everything
else receives its collaborators explicitly.
"""

from datetime import date
from typing import Callable, Optional

import structlog

from subwise.audit import AuditLogger
from subwise.config import Settings, get_settings
from subwise.insights import SpendingInsights
from subwise.services.storage import (
    AuditStorageInterface,
    BlobStorageInterface,
    FileBlobStorage,
    GoogleSheetsAuditStorage,
    GoogleSheetsBlobStorage,
    GoogleSheetsClient,
    InMemoryBlobStorage,
)
from subwise.store import SubscriptionStore


logger = structlog.get_logger("subwise.orchestrator")


def create_storage(
    settings: Optional[Settings] = None,
) -> tuple[BlobStorageInterface, Optional[AuditStorageInterface]]:
    """
    Build the blob storage for the configured backend.

    Returns:
        (blob_storage, audit_storage). Audit storage is only provided by
        the Google Sheets backend; other backends log locally.
    """
    settings = settings or get_settings()
    storage_settings = settings.storage

    if storage_settings.backend == "memory":
        return InMemoryBlobStorage(), None

    if storage_settings.backend == "google_sheets":
        # Both share one client so the spreadsheet is opened once
        client = GoogleSheetsClient(settings.google_sheets)
        return GoogleSheetsBlobStorage(client), GoogleSheetsAuditStorage(client)

    logger.debug(
        "file_storage_selected",
        data_dir=str(storage_settings.data_dir),
    )
    return FileBlobStorage(storage_settings.data_dir), None


def create_store(
    settings: Optional[Settings] = None,
    clock: Callable[[], date] = date.today,
    load: bool = True,
) -> SubscriptionStore:
    """
    Factory function for a ready-to-use subscription store.

    Args:
        settings: Settings to build from (defaults to cached settings)
        clock: Source of "today"
        load: Load the persisted collection immediately
    """
    settings = settings or get_settings()
    blob_storage, audit_storage = create_storage(settings)

    store = SubscriptionStore(
        storage=blob_storage,
        storage_key=settings.storage.key,
        clock=clock,
        audit_logger=AuditLogger(audit_storage),
        persist_on_load=settings.storage.persist_on_load,
    )
    if load:
        store.load()
    return store


def create_app_components(
    settings: Optional[Settings] = None,
    clock: Callable[[], date] = date.today,
) -> tuple[SubscriptionStore, SpendingInsights]:
    """
    Factory function to create everything a presentation layer needs.

    Returns:
        (store, insights)
    """
    settings = settings or get_settings()
    app_settings = settings.app
    store = create_store(settings, clock=clock)
    insights = SpendingInsights(
        store,
        default_window_days=app_settings.default_renewal_window_days,
        calendar_window_days=app_settings.calendar_window_days,
    )
    return store, insights
