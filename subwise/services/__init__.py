"""Services package."""

from subwise.services.storage import (
    AuditStorageInterface,
    BlobStorageInterface,
    FileBlobStorage,
    GoogleSheetsAuditStorage,
    GoogleSheetsBlobStorage,
    GoogleSheetsClient,
    InMemoryAuditStorage,
    InMemoryBlobStorage,
    PersistenceFailure,
    StorageConnectionError,
    StorageError,
)

__all__ = [
    "AuditStorageInterface",
    "BlobStorageInterface",
    "FileBlobStorage",
    "GoogleSheetsAuditStorage",
    "GoogleSheetsBlobStorage",
    "GoogleSheetsClient",
    "InMemoryAuditStorage",
    "InMemoryBlobStorage",
    "PersistenceFailure",
    "StorageConnectionError",
    "StorageError",
]
