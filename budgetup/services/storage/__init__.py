"""
Storage Services Package

Provides abstract interfaces and concrete implementations for data storage.
JSON files on disk for real use, in-memory dictionaries for tests.
"""

from budgetup.services.storage.interface import (
    AuditStorageInterface,
    StorageBackend,
    StorageError,
    StorageReadError,
    StorageWriteError,
)
from budgetup.services.storage.json_file import JSONFileStorage
from budgetup.services.storage.memory import (
    InMemoryAuditStorage,
    InMemoryStorage,
)

__all__ = [
    # Interfaces
    "AuditStorageInterface",
    "StorageBackend",
    # Exceptions
    "StorageError",
    "StorageReadError",
    "StorageWriteError",
    # Implementations
    "InMemoryAuditStorage",
    "InMemoryStorage",
    "JSONFileStorage",
]
