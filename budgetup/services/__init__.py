"""
Services package.

Currency services live in budgetup.services.currency and are imported
from there; they depend on the store, which itself depends on storage.
"""

from budgetup.services.storage import (
    AuditStorageInterface,
    InMemoryAuditStorage,
    InMemoryStorage,
    JSONFileStorage,
    StorageBackend,
    StorageError,
    StorageReadError,
    StorageWriteError,
)

__all__ = [
    # Storage services
    "AuditStorageInterface",
    "InMemoryAuditStorage",
    "InMemoryStorage",
    "JSONFileStorage",
    "StorageBackend",
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
]
