"""Tests for the store schema migration pipeline."""

import copy

import pytest

from budgetup.models.records import CURRENT_SCHEMA_VERSION
from budgetup.store.migrations import (
    MigrationError,
    migrate_records,
    migrate_state,
    needs_migration,
    read_version,
    resolve_default_currency,
)


def v0_blob():
    """A blob written before currencies existed."""
    return {
        "userPreferences": {"name": "Ama", "currency": "GHS", "isSetupComplete": True},
        "transactions": [
            {"id": "t1", "type": "income", "amount": 200},
            {"id": "t2", "type": "expense", "amount": 50, "currency": "GBP"},
        ],
        "savingsGoals": [{"id": "g1", "title": "Car", "targetAmount": 5000}],
        "savingsEntries": [{"id": "e1", "goalId": "g1", "amount": 100}],
        "groupGoals": [],
        "groupContributions": [],
        "budgetCategories": [
            {"id": "b1", "name": "Food", "budgetedAmount": 300, "month": 1, "year": 2024},
        ],
    }


class TestMigrateRecords:
    """Tests for record-level migration."""

    def test_fills_currency_and_original_amount(self):
        """Test the basic v0 record lift."""
        migrated = migrate_records(
            [{"amount": 200, "type": "income", "description": "Salary"}], "EUR"
        )
        assert migrated == [{
            "amount": 200,
            "type": "income",
            "description": "Salary",
            "currency": "EUR",
            "originalAmount": 200,
        }]

    def test_existing_currency_is_permanent(self):
        """Test that a GBP record stays GBP under a USD default."""
        migrated = migrate_records([{"amount": 10, "currency": "GBP"}], "USD")
        assert migrated[0]["currency"] == "GBP"

    def test_existing_original_amount_is_kept(self):
        migrated = migrate_records([{"amount": 10, "originalAmount": 12}], "USD")
        assert migrated[0]["originalAmount"] == 12

    def test_empty_values_count_as_missing(self):
        migrated = migrate_records([{"amount": 7, "currency": "", "originalAmount": None}], "NGN")
        assert migrated[0]["currency"] == "NGN"
        assert migrated[0]["originalAmount"] == 7

    def test_custom_amount_field(self):
        migrated = migrate_records([{"targetAmount": 900}], "USD", "targetAmount")
        assert migrated[0]["originalAmount"] == 900

    def test_missing_amount_leaves_original_unset(self):
        migrated = migrate_records([{"title": "Someday"}], "USD", "targetAmount")
        assert "originalAmount" not in migrated[0]

    def test_input_not_mutated(self):
        records = [{"amount": 5}]
        migrate_records(records, "USD")
        assert records == [{"amount": 5}]

    def test_rejects_non_object_record(self):
        with pytest.raises(MigrationError):
            migrate_records([42], "USD")

    def test_rejects_unknown_default_currency(self):
        with pytest.raises(ValueError):
            migrate_records([{"amount": 1}], "ZZZ")


class TestMigrateState:
    """Tests for blob-level migration."""

    def test_v0_uses_preference_currency(self):
        """Test that missing currencies default to the user's preference."""
        migrated = migrate_state(v0_blob())
        assert migrated["transactions"][0]["currency"] == "GHS"
        assert migrated["transactions"][1]["currency"] == "GBP"
        assert migrated["savingsEntries"][0]["currency"] == "GHS"

    def test_backfills_each_collection_from_its_amount_field(self):
        migrated = migrate_state(v0_blob())
        assert migrated["savingsGoals"][0]["originalAmount"] == 5000
        assert migrated["budgetCategories"][0]["originalAmount"] == 300
        assert migrated["transactions"][0]["originalAmount"] == 200

    def test_stamps_current_version(self):
        migrated = migrate_state(v0_blob())
        assert migrated["migrationVersion"] == CURRENT_SCHEMA_VERSION

    def test_no_preferences_defaults_to_usd(self):
        blob = v0_blob()
        blob["userPreferences"] = None
        migrated = migrate_state(blob)
        assert migrated["transactions"][0]["currency"] == "USD"

    def test_explicit_default_currency(self):
        migrated = migrate_state(v0_blob(), default_currency="eur")
        assert migrated["transactions"][0]["currency"] == "EUR"

    def test_idempotent(self):
        """Test migrate(migrate(s)) == migrate(s)."""
        once = migrate_state(v0_blob())
        assert migrate_state(once) == once
        assert migrate_state(once, force=True) == once

    def test_input_not_mutated(self):
        blob = v0_blob()
        snapshot = copy.deepcopy(blob)
        migrate_state(blob)
        assert blob == snapshot

    def test_v1_only_backfills(self):
        """Test that a v1 blob skips the currency step."""
        blob = {
            "migrationVersion": 1,
            "transactions": [{"id": "t1", "type": "income", "amount": 9, "currency": "EUR"}],
        }
        migrated = migrate_state(blob, default_currency="USD")
        assert migrated["transactions"][0] == {
            "id": "t1",
            "type": "income",
            "amount": 9,
            "currency": "EUR",
            "originalAmount": 9,
        }

    def test_current_version_skips_steps(self):
        """Test that a current blob is left as-is unless forced."""
        blob = {"migrationVersion": CURRENT_SCHEMA_VERSION, "transactions": [{"amount": 1}]}
        assert migrate_state(blob)["transactions"] == [{"amount": 1}]
        forced = migrate_state(blob, default_currency="EUR", force=True)
        assert forced["transactions"][0]["currency"] == "EUR"

    def test_newer_version_untouched(self):
        blob = {"migrationVersion": CURRENT_SCHEMA_VERSION + 1, "transactions": []}
        assert migrate_state(blob) == blob

    def test_missing_collections_are_fine(self):
        migrated = migrate_state({})
        assert migrated == {"migrationVersion": CURRENT_SCHEMA_VERSION}

    def test_rejects_non_object(self):
        with pytest.raises(MigrationError):
            migrate_state([1, 2, 3])

    def test_rejects_non_list_collection(self):
        with pytest.raises(MigrationError):
            migrate_state({"transactions": {"t1": {}}})

    def test_rejects_bad_version_tag(self):
        for bad in ("2", -1, True, 1.5):
            with pytest.raises(MigrationError):
                migrate_state({"migrationVersion": bad})

    def test_rejects_unknown_default_currency(self):
        with pytest.raises(MigrationError):
            migrate_state({}, default_currency="ZZZ")


class TestVersionHelpers:
    """Tests for version reading and default resolution."""

    def test_read_version(self):
        assert read_version({}) == 0
        assert read_version({"migrationVersion": None}) == 0
        assert read_version({"migrationVersion": 1}) == 1

    def test_needs_migration(self):
        assert needs_migration({})
        assert not needs_migration({"migrationVersion": CURRENT_SCHEMA_VERSION})

    def test_resolve_default_currency(self):
        assert resolve_default_currency({"currency": "ngn"}) == "NGN"
        assert resolve_default_currency({"currency": "bogus"}) == "USD"
        assert resolve_default_currency(None) == "USD"


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
