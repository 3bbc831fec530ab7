"""Tests for the rate table and the conversion resolver."""

import pytest
from structlog.testing import capture_logs

from budgetup.models.currency import ConversionPath, CurrencyCode
from budgetup.services.currency import ConversionResolver, RateTable


USD = CurrencyCode.USD
EUR = CurrencyCode.EUR
GBP = CurrencyCode.GBP
GHS = CurrencyCode.GHS
NGN = CurrencyCode.NGN
CHF = CurrencyCode.CHF
SEK = CurrencyCode.SEK


@pytest.fixture
def sparse_resolver():
    """Resolver over a table where EUR <-> GHS needs the pivot."""
    table = RateTable({
        "EUR": {"USD": 1.18},
        "USD": {"EUR": 0.85, "GHS": 12.0},
        "GHS": {"USD": 0.083},
        "NGN": {"EUR": 0.0018},
    })
    return ConversionResolver(table, pivot_currency=USD)


class TestRateTable:
    """Tests for the static rate table."""

    def test_default_table_lookup(self):
        table = RateTable()
        assert table.get(USD, EUR) == 0.85
        assert table.get(GHS, NGN) == 38.3

    def test_missing_entry_is_none(self):
        """Test that absent pairs are normal, not errors."""
        table = RateTable()
        assert table.get(CHF, SEK) is None
        assert not table.has_rate(CHF, SEK)

    def test_rates_are_directional(self):
        """Test that the table is not assumed symmetric."""
        table = RateTable()
        assert table.get(USD, EUR) * table.get(EUR, USD) != 1.0

    def test_rejects_non_positive_rates(self):
        with pytest.raises(ValueError):
            RateTable({"USD": {"EUR": 0}})

    def test_rejects_unknown_codes(self):
        with pytest.raises(ValueError):
            RateTable({"USD": {"XYZ": 1.0}})

    def test_default_table_size(self):
        """Test that the canonical table has 11 rows of 10 entries."""
        table = RateTable()
        assert len(table) == 110
        assert len(table.currencies()) == 11
        assert (USD, EUR) in table.pairs()
        assert (USD, USD) not in table.pairs()


class TestConversionResolver:
    """Tests for rate resolution order."""

    def test_same_currency_is_identity(self, resolver):
        """Test that identical currencies short-circuit to 1.0."""
        result = resolver.rate(CHF, CHF)
        assert result.rate == 1.0
        assert result.path == ConversionPath.SAME

    def test_identity_conversion_is_exact(self, resolver):
        """Test convert(x, c, c) == x exactly."""
        for amount in (100, 0.1, -42.37, 1e12):
            assert resolver.convert(amount, GHS, GHS).amount == amount

    def test_rate_lookup_carries_no_amount(self, resolver):
        """Test that only convert fills in the converted amount."""
        assert resolver.rate(USD, EUR).amount is None
        assert resolver.rate(CHF, SEK).amount is None
        assert resolver.convert(10, USD, EUR).amount == pytest.approx(8.5)

    def test_direct_rate(self, resolver):
        result = resolver.convert(100, USD, GHS)
        assert result.path == ConversionPath.DIRECT
        assert result.amount == pytest.approx(1200.0)
        assert result.warning is None

    def test_pivot_rate(self, sparse_resolver):
        """Test the single hop through the pivot currency."""
        result = sparse_resolver.rate(EUR, GHS)
        assert result.path == ConversionPath.PIVOT
        assert result.rate == pytest.approx(1.18 * 12.0)

    def test_pivot_consistency(self, sparse_resolver):
        """Test that a pivot conversion matches converting via the pivot by hand."""
        amount = 250.0
        direct = sparse_resolver.convert(amount, EUR, GHS).amount
        via_usd = sparse_resolver.convert(
            sparse_resolver.convert(amount, EUR, USD).amount, USD, GHS
        ).amount
        assert direct == pytest.approx(via_usd)

    def test_pivot_is_single_hop(self, sparse_resolver):
        """Test that NGN -> GHS is not resolved via NGN -> EUR -> USD -> GHS."""
        result = sparse_resolver.rate(NGN, GHS)
        assert result.path == ConversionPath.FALLBACK

    def test_missing_leg_with_pivot_side_falls_back(self, sparse_resolver):
        """Test that a pair involving the pivot never recurses."""
        result = sparse_resolver.rate(USD, NGN)
        assert result.path == ConversionPath.FALLBACK
        assert result.rate == 1.0

    def test_fallback_returns_amount_unchanged(self, resolver):
        result = resolver.convert(75.5, CHF, SEK)
        assert result.is_fallback
        assert result.amount == 75.5
        assert "CHF" in result.warning and "SEK" in result.warning

    def test_fallback_logs_warning(self, resolver):
        """Test that a missing rate emits a warning-level log entry."""
        with capture_logs() as logs:
            resolver.rate(CHF, SEK)
        warnings = [e for e in logs if e["event"] == "exchange_rate_missing"]
        assert len(warnings) == 1
        assert warnings[0]["log_level"] == "warning"
        assert warnings[0]["from_currency"] == "CHF"

    def test_never_raises_for_any_pair(self, resolver):
        """Test total coverage of the catalogue without exceptions."""
        codes = list(CurrencyCode)[:20]
        for a in codes:
            for b in codes:
                assert resolver.rate(a, b).rate > 0

    def test_configurable_pivot(self):
        table = RateTable({"GHS": {"EUR": 0.071}, "EUR": {"GBP": 0.86}})
        resolver = ConversionResolver(table, pivot_currency=EUR)
        assert resolver.pivot_currency == EUR
        assert resolver.rate(GHS, GBP).rate == pytest.approx(0.071 * 0.86)


if __name__ == "__main__":
    pytest.main([__file__, "-v"])
