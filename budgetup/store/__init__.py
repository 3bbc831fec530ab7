"""Versioned financial store and its schema migrations."""

from budgetup.store.financial_store import (
    DEFAULT_STORAGE_KEY,
    FinancialStore,
    RecordNotFoundError,
    StoreError,
)
from budgetup.store.migrations import (
    AMOUNT_FIELDS,
    MigrationError,
    migrate_records,
    migrate_state,
    needs_migration,
)

__all__ = [
    "DEFAULT_STORAGE_KEY",
    "FinancialStore",
    "RecordNotFoundError",
    "StoreError",
    "AMOUNT_FIELDS",
    "MigrationError",
    "migrate_records",
    "migrate_state",
    "needs_migration",
]
