"""
Storage Services Package

Provides abstract interfaces and concrete implementations for durable
key-value blob storage. A local file backend is the default; Google Sheets
and in-memory backends share the same interface.
"""

from subwise.services.storage.interface import (
    AuditStorageInterface,
    BlobStorageInterface,
    PersistenceFailure,
    StorageConnectionError,
    StorageError,
)
from subwise.services.storage.file_storage import FileBlobStorage
from subwise.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryBlobStorage,
)
from subwise.services.storage.google_sheets import (
    GoogleSheetsAuditStorage,
    GoogleSheetsBlobStorage,
    GoogleSheetsClient,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "BlobStorageInterface",
    # Exceptions
    "PersistenceFailure",
    "StorageConnectionError",
    "StorageError",
    # Local implementations
    "FileBlobStorage",
    "InMemoryAuditStorage",
    "InMemoryBlobStorage",
    # Google Sheets implementation
    "GoogleSheetsAuditStorage",
    "GoogleSheetsBlobStorage",
    "GoogleSheetsClient",
]
