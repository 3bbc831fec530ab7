"""
Versioned Financial Store

Single-writer holder of the user's financial records and preferences,
persisted as one JSON blob under a logical storage key.

Load path:
    read blob -> backfill missing fields -> validate -> (re-save if changed)

Write path:
    every mutating action holds the write lock, builds the new state from
    the current one, writes the full record set plus version tag in a
    single storage write, and only then swaps the new state in.

DESIGN DECISION: A corrupted blob is not fatal. The store logs it at
error level, records a store_reset audit event, and starts again from
the empty state. A record that is merely missing its currency or
originalAmount is lifted, whatever the blob's version tag says.

GUARANTEES:
- No code outside this module sees un-migrated records
- In-memory state always matches the last successful write: a failed
  write leaves the current state untouched
- Mutations are serialized, so none is built on a state that never
  reached storage
- A record's currency and originalAmount survive preference changes
"""

import asyncio
import json
from typing import TYPE_CHECKING, Any, Optional

import structlog
from pydantic import ValidationError

from budgetup.models.currency import CurrencyCode
from budgetup.models.records import (
    CURRENT_SCHEMA_VERSION,
    RECORD_MODELS,
    FinancialState,
    MonetaryRecord,
    RecordKind,
    UserPreferences,
    collection_attr,
    utc_now,
)
from budgetup.services.storage import StorageBackend, StorageError
from budgetup.store.migrations import (
    MigrationError,
    migrate_state,
    read_version,
    resolve_default_currency,
)

if TYPE_CHECKING:
    from budgetup.audit import AuditLogger


logger = structlog.get_logger(__name__)

DEFAULT_STORAGE_KEY = "budgetup-financial-store"

# Parent kind -> (child kind, child field referencing the parent)
CASCADES: dict[RecordKind, tuple[RecordKind, str]] = {
    RecordKind.SAVINGS_GOAL: (RecordKind.SAVINGS_ENTRY, "goal_id"),
    RecordKind.GROUP_GOAL: (RecordKind.GROUP_CONTRIBUTION, "group_id"),
}


class StoreError(Exception):
    """Invalid store operation."""
    pass


class RecordNotFoundError(StoreError):
    """No record with the given id in the collection."""

    def __init__(self, kind: RecordKind, record_id: str):
        self.kind = kind
        self.record_id = record_id
        super().__init__(f"No record {record_id!r} in {kind.value}")


def _is_absent(value: Any) -> bool:
    return value is None or value == ""


class FinancialStore:
    """
    Owner of FinancialState.

    Usage:
        store = FinancialStore(JSONFileStorage("./data"))
        await store.load()
        txn = await store.add(RecordKind.TRANSACTION, type="income", amount=200)
    """

    def __init__(
        self,
        storage: StorageBackend,
        storage_key: str = DEFAULT_STORAGE_KEY,
        audit_logger: Optional["AuditLogger"] = None,
        default_currency: CurrencyCode = CurrencyCode.USD,
    ):
        self._storage = storage
        self._storage_key = storage_key
        self._audit_logger = audit_logger
        self._default_currency = CurrencyCode(default_currency)
        self._state = FinancialState()
        self._loaded = False
        self._lock = asyncio.Lock()

    @property
    def state(self) -> FinancialState:
        return self._state

    @property
    def is_loaded(self) -> bool:
        return self._loaded

    @property
    def storage_key(self) -> str:
        return self._storage_key

    @property
    def preferences(self) -> Optional[UserPreferences]:
        return self._state.user_preferences

    @property
    def preferred_currency(self) -> CurrencyCode:
        """The user's currency; the store default when no preferences exist."""
        prefs = self._state.user_preferences
        return prefs.currency if prefs is not None else self._default_currency

    # =========================================================================
    # LOAD / PERSIST
    # =========================================================================

    async def load(self) -> FinancialState:
        """
        Load, migrate and validate the persisted blob.

        Every record is lifted by field presence, so a record missing its
        currency or originalAmount is filled even in a blob already tagged
        with the current version. The blob is re-saved only when that
        changed something. A malformed blob resets the store and persists
        the empty state.

        Raises:
            StorageReadError: If the backend cannot be read at all
        """
        async with self._lock:
            return await self._load()

    async def _load(self) -> FinancialState:
        raw = await self._storage.read(self._storage_key)

        if raw is None:
            self._state = FinancialState()
            self._loaded = True
            logger.info("store_initialized", storage_key=self._storage_key)
            if self._audit_logger:
                await self._audit_logger.log_store_loaded(CURRENT_SCHEMA_VERSION, 0)
            return self._state

        try:
            data = json.loads(raw)
            migrated = migrate_state(data, force=True)
            from_version = read_version(data)
            state = FinancialState.model_validate(migrated)
        except (json.JSONDecodeError, MigrationError, ValidationError) as e:
            await self._reset_corrupted(e)
            return self._state

        if migrated != data:
            default_currency = resolve_default_currency(data.get("userPreferences"))
            logger.info(
                "store_migrated",
                from_version=from_version,
                to_version=state.migration_version,
                default_currency=default_currency,
            )
            await self._persist(state)
            if self._audit_logger:
                await self._audit_logger.log_migration_applied(
                    from_version, state.migration_version, default_currency
                )

        self._state = state
        self._loaded = True

        if self._audit_logger:
            await self._audit_logger.log_store_loaded(
                state.migration_version, state.record_count
            )
        return self._state

    async def _reset_corrupted(self, error: Exception) -> None:
        logger.error(
            "store_blob_corrupted",
            storage_key=self._storage_key,
            error_type=type(error).__name__,
            error=str(error),
        )
        if self._audit_logger:
            await self._audit_logger.log_store_reset("corrupted_blob", str(error))
        self._state = FinancialState()
        self._loaded = True
        await self._persist(self._state)

    async def _persist(self, state: FinancialState) -> None:
        payload = state.model_dump_json(by_alias=True)
        try:
            await self._storage.write(self._storage_key, payload)
        except StorageError as e:
            logger.error("store_persist_failed", storage_key=self._storage_key, error=str(e))
            if self._audit_logger:
                await self._audit_logger.log_storage_error("write", str(e))
            raise

    async def _commit(self, new_state: FinancialState) -> None:
        # Caller holds self._lock
        await self._persist(new_state)
        self._state = new_state

    # =========================================================================
    # RECORDS
    # =========================================================================

    def records(self, kind: RecordKind) -> list[MonetaryRecord]:
        """A copy of one collection."""
        return list(self._state.records(RecordKind(kind)))

    def get(self, kind: RecordKind, record_id: str) -> Optional[MonetaryRecord]:
        for record in self._state.records(RecordKind(kind)):
            if record.id == record_id:
                return record
        return None

    async def add(self, kind: RecordKind, **fields: Any) -> MonetaryRecord:
        """
        Create and persist a record.

        A missing currency is stamped with the preferred currency, and
        original_amount defaults to the record's amount.

        Raises:
            pydantic.ValidationError: If the fields don't form a valid record
            StorageWriteError: If persisting fails (nothing is added)
        """
        kind = RecordKind(kind)
        model = RECORD_MODELS[kind]
        attr = collection_attr(kind)

        async with self._lock:
            data = dict(fields)
            if _is_absent(data.get("currency")):
                data["currency"] = self.preferred_currency
            amount = data.get(model.amount_field)
            if _is_absent(data.get("original_amount")) and amount is not None:
                data["original_amount"] = amount

            record = model.model_validate(data)
            await self._commit(
                self._state.model_copy(update={attr: [*getattr(self._state, attr), record]})
            )

        if self._audit_logger:
            await self._audit_logger.log_record_added(kind.value, record.id)
        return record

    async def update(self, kind: RecordKind, record_id: str, **updates: Any) -> MonetaryRecord:
        """
        Apply field updates to a record and persist.

        updated_at is refreshed on models that have it.

        Raises:
            RecordNotFoundError: If no record has that id
            StoreError: If the update tries to change the id
        """
        kind = RecordKind(kind)
        if "id" in updates:
            raise StoreError("Record ids cannot be changed")

        model = RECORD_MODELS[kind]
        attr = collection_attr(kind)

        async with self._lock:
            existing = self.get(kind, record_id)
            if existing is None:
                raise RecordNotFoundError(kind, record_id)

            merged = {**existing.model_dump(), **updates}
            if "updated_at" in model.model_fields:
                merged["updated_at"] = utc_now()
            updated = model.model_validate(merged)

            collection = [
                updated if record.id == record_id else record
                for record in getattr(self._state, attr)
            ]
            await self._commit(self._state.model_copy(update={attr: collection}))

        if self._audit_logger:
            await self._audit_logger.log_record_updated(
                kind.value, record_id, sorted(updates)
            )
        return updated

    async def delete(self, kind: RecordKind, record_id: str) -> MonetaryRecord:
        """
        Remove a record and persist.

        Deleting a savings goal also deletes its entries; deleting a group
        goal also deletes its contributions.

        Raises:
            RecordNotFoundError: If no record has that id
        """
        kind = RecordKind(kind)
        attr = collection_attr(kind)

        async with self._lock:
            existing = self.get(kind, record_id)
            if existing is None:
                raise RecordNotFoundError(kind, record_id)

            update = {
                attr: [r for r in getattr(self._state, attr) if r.id != record_id],
            }

            cascaded = 0
            if kind in CASCADES:
                child_kind, parent_field = CASCADES[kind]
                child_attr = collection_attr(child_kind)
                children = getattr(self._state, child_attr)
                kept = [c for c in children if getattr(c, parent_field) != record_id]
                cascaded = len(children) - len(kept)
                update[child_attr] = kept

            await self._commit(self._state.model_copy(update=update))

        if cascaded:
            logger.info(
                "store_cascade_delete",
                collection=kind.value,
                record_id=record_id,
                cascaded=cascaded,
            )
        if self._audit_logger:
            await self._audit_logger.log_record_deleted(kind.value, record_id, cascaded)
        return existing

    # =========================================================================
    # PREFERENCES
    # =========================================================================

    async def update_user_preferences(self, **updates: Any) -> UserPreferences:
        """
        Merge updates into the user preferences, creating them if absent.

        Changing the currency here never touches stored records.
        """
        async with self._lock:
            current = self._state.user_preferences or UserPreferences()
            preferences = UserPreferences.model_validate({**current.model_dump(), **updates})
            await self._commit(self._state.model_copy(update={"user_preferences": preferences}))

        if self._audit_logger:
            await self._audit_logger.log_preferences_updated(sorted(updates))
        return preferences

    # =========================================================================
    # MAINTENANCE
    # =========================================================================

    async def migrate_currency_data(self) -> FinancialState:
        """
        Re-run the migration pipeline over the current records.

        Fills any record still missing a currency or originalAmount, using
        the preferred currency. Records that already have them are untouched.
        """
        async with self._lock:
            default_currency = self.preferred_currency.value
            raw = self._state.model_dump(mode="json", by_alias=True)
            migrated = migrate_state(raw, default_currency=default_currency, force=True)
            state = FinancialState.model_validate(migrated)
            await self._commit(state)

        if self._audit_logger:
            await self._audit_logger.log_migration_applied(
                raw.get("migrationVersion", CURRENT_SCHEMA_VERSION),
                state.migration_version,
                default_currency,
            )
        return state

    async def reset(self) -> None:
        """Drop everything, preferences included."""
        async with self._lock:
            await self._commit(FinancialState())
        if self._audit_logger:
            await self._audit_logger.log_store_reset("user_request")

    async def reset_financial_data(self) -> None:
        """Drop every record, keeping preferences and the version tag."""
        async with self._lock:
            await self._commit(
                FinancialState(
                    user_preferences=self._state.user_preferences,
                    migration_version=self._state.migration_version,
                )
            )
        if self._audit_logger:
            await self._audit_logger.log_store_reset("financial_data_reset")

    async def reset_user_preferences(self) -> None:
        async with self._lock:
            await self._commit(self._state.model_copy(update={"user_preferences": None}))
        if self._audit_logger:
            await self._audit_logger.log_store_reset("preferences_reset")
