"""
Store Schema Migrations

Schema versions of the persisted financial store:

    v0  records have no currency field
    v1  every record has a currency (missing ones default-filled)
    v2  every record has originalAmount; migrationVersion is stamped

Migrations operate on the raw JSON-shaped dict, before pydantic
validation, because older blobs would not validate against the current
models.

GUARANTEES:
- Pure: the input is never mutated
- Total: every well-formed blob migrates; malformed ones raise MigrationError
- Idempotent: migrating already-migrated data is a no-op
- A record that already carries a currency keeps it, whatever the
  user's current preference is
"""

import copy
from typing import Any, Callable, Mapping, Optional

from budgetup.models.currency import CurrencyCode, InvalidCurrencyError, parse_currency
from budgetup.models.records import CURRENT_SCHEMA_VERSION, RecordKind


VERSION_KEY = "migrationVersion"
PREFERENCES_KEY = "userPreferences"
FALLBACK_CURRENCY = CurrencyCode.USD

# Persisted field holding each collection's amount
AMOUNT_FIELDS: dict[str, str] = {
    RecordKind.TRANSACTION.value: "amount",
    RecordKind.SAVINGS_GOAL.value: "targetAmount",
    RecordKind.SAVINGS_ENTRY.value: "amount",
    RecordKind.GROUP_GOAL.value: "targetAmount",
    RecordKind.GROUP_CONTRIBUTION.value: "amount",
    RecordKind.BUDGET_CATEGORY.value: "budgetedAmount",
}


class MigrationError(Exception):
    """Persisted data is malformed and cannot be migrated."""
    pass


def _is_missing(record: Mapping[str, Any], field: str) -> bool:
    value = record.get(field)
    return value is None or value == ""


def add_currency(record: Mapping[str, Any], default_currency: str) -> dict:
    """v0 -> v1 for one record: fill a missing currency."""
    migrated = dict(record)
    if _is_missing(migrated, "currency"):
        migrated["currency"] = default_currency
    return migrated


def backfill_original_amount(record: Mapping[str, Any], amount_field: str = "amount") -> dict:
    """v1 -> v2 for one record: originalAmount defaults to the amount."""
    migrated = dict(record)
    if _is_missing(migrated, "originalAmount") and not _is_missing(migrated, amount_field):
        migrated["originalAmount"] = migrated[amount_field]
    return migrated


def migrate_records(
    records: list[Mapping[str, Any]],
    default_currency: str,
    amount_field: str = "amount",
) -> list[dict]:
    """
    Lift a list of raw records to the current schema.

    Records missing a currency get default_currency; records missing
    originalAmount get it from amount_field. Nothing else changes.
    """
    default_code = parse_currency(default_currency).value
    migrated = []
    for index, record in enumerate(records):
        if not isinstance(record, Mapping):
            raise MigrationError(f"Record {index} is not an object: {record!r}")
        migrated.append(
            backfill_original_amount(add_currency(record, default_code), amount_field)
        )
    return migrated


def resolve_default_currency(preferences: Any) -> str:
    """The user's preferred currency, or USD when there is none."""
    if isinstance(preferences, Mapping):
        try:
            return parse_currency(preferences.get("currency")).value
        except InvalidCurrencyError:
            pass
    return FALLBACK_CURRENCY.value


def read_version(state: Mapping[str, Any]) -> int:
    """Schema version of a raw blob; blobs without a tag are v0."""
    version = state.get(VERSION_KEY, 0)
    if version is None:
        return 0
    # bool is an int subclass; a boolean tag is corruption
    if isinstance(version, bool) or not isinstance(version, int) or version < 0:
        raise MigrationError(f"Invalid schema version: {version!r}")
    return version


def _map_collections(
    state: dict,
    transform: Callable[[Mapping[str, Any], str], dict],
) -> dict:
    for collection, amount_field in AMOUNT_FIELDS.items():
        records = state.get(collection)
        if records is None:
            continue
        if not isinstance(records, list):
            raise MigrationError(f"Collection {collection} is not a list")
        transformed = []
        for index, record in enumerate(records):
            if not isinstance(record, Mapping):
                raise MigrationError(f"{collection}[{index}] is not an object")
            transformed.append(transform(record, amount_field))
        state[collection] = transformed
    return state


def _to_v1(state: dict, default_currency: str) -> dict:
    return _map_collections(state, lambda record, _: add_currency(record, default_currency))


def _to_v2(state: dict, default_currency: str) -> dict:
    return _map_collections(state, backfill_original_amount)


# Step that lifts a blob TO the keyed version
MIGRATIONS: dict[int, Callable[[dict, str], dict]] = {
    1: _to_v1,
    2: _to_v2,
}


def needs_migration(state: Mapping[str, Any]) -> bool:
    return read_version(state) < CURRENT_SCHEMA_VERSION


def migrate_state(
    state: Mapping[str, Any],
    default_currency: Optional[str] = None,
    force: bool = False,
) -> dict:
    """
    Migrate a raw persisted blob to the current schema version.

    Args:
        state: The blob as decoded from JSON
        default_currency: Currency for records that have none.
                          Defaults to the blob's own user preference, else USD.
        force: Re-run every step regardless of the version tag. Each
               step only fills missing fields, so this is used on every
               load and by the explicit on-demand migration.

    Returns:
        A new dict at CURRENT_SCHEMA_VERSION. Without force, blobs tagged
        with a newer version are returned unchanged (as a copy).

    Raises:
        MigrationError: If the blob is not an object, has a bad version
                        tag, or contains malformed collections.
    """
    if not isinstance(state, Mapping):
        raise MigrationError(f"Persisted state is not an object: {type(state).__name__}")

    version = read_version(state)
    migrated = copy.deepcopy(dict(state))

    if default_currency is None:
        default_currency = resolve_default_currency(migrated.get(PREFERENCES_KEY))
    else:
        try:
            default_currency = parse_currency(default_currency).value
        except InvalidCurrencyError as e:
            raise MigrationError(str(e))

    start = 0 if force else version
    for target in range(start + 1, CURRENT_SCHEMA_VERSION + 1):
        migrated = MIGRATIONS[target](migrated, default_currency)

    migrated[VERSION_KEY] = max(version, CURRENT_SCHEMA_VERSION)
    return migrated
