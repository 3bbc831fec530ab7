"""
Conversion Resolver

Computes the rate between any two supported currencies.

Resolution order:
1. Same currency -> 1.0, no lookup
2. Direct table entry
3. One hop through the pivot currency: rate(from, PIVOT) * rate(PIVOT, to),
   using direct entries only (never recursing further)
4. Identity fallback (rate 1.0) with a warning

DESIGN DECISION: The resolver never raises. A missing rate is reported
through ConversionResult.path == FALLBACK and the amount passes
through unconverted.
"""

import structlog

from budgetup.models.currency import ConversionPath, ConversionResult, CurrencyCode
from budgetup.services.currency.rates import RateTable


logger = structlog.get_logger(__name__)


class ConversionResolver:
    """Rate lookups over a RateTable with pivot fallback."""

    def __init__(
        self,
        rate_table: RateTable,
        pivot_currency: CurrencyCode = CurrencyCode.USD,
    ):
        self._table = rate_table
        self._pivot = CurrencyCode(pivot_currency)

    @property
    def pivot_currency(self) -> CurrencyCode:
        return self._pivot

    def rate(self, from_currency: CurrencyCode, to_currency: CurrencyCode) -> ConversionResult:
        """Resolve the rate from one currency to another."""
        if from_currency == to_currency:
            return ConversionResult(
                from_currency=from_currency,
                to_currency=to_currency,
                rate=1.0,
                path=ConversionPath.SAME,
            )

        direct = self._table.get(from_currency, to_currency)
        if direct is not None:
            return ConversionResult(
                from_currency=from_currency,
                to_currency=to_currency,
                rate=direct,
                path=ConversionPath.DIRECT,
            )

        # Pivot legs must both be direct entries
        if self._pivot not in (from_currency, to_currency):
            first_leg = self._table.get(from_currency, self._pivot)
            second_leg = self._table.get(self._pivot, to_currency)
            if first_leg is not None and second_leg is not None:
                return ConversionResult(
                    from_currency=from_currency,
                    to_currency=to_currency,
                    rate=first_leg * second_leg,
                    path=ConversionPath.PIVOT,
                )

        warning = (
            f"Exchange rate not found for {from_currency.value} to "
            f"{to_currency.value}, returning original amount"
        )
        logger.warning(
            "exchange_rate_missing",
            from_currency=from_currency.value,
            to_currency=to_currency.value,
            pivot_currency=self._pivot.value,
        )
        return ConversionResult(
            from_currency=from_currency,
            to_currency=to_currency,
            rate=1.0,
            path=ConversionPath.FALLBACK,
            warning=warning,
        )

    def convert(
        self,
        amount: float,
        from_currency: CurrencyCode,
        to_currency: CurrencyCode,
    ) -> ConversionResult:
        """
        Convert an amount.

        On FALLBACK the returned amount is the input amount, unconverted.
        Same-currency conversion returns the amount exactly.
        """
        resolved = self.rate(from_currency, to_currency)
        if resolved.path in (ConversionPath.SAME, ConversionPath.FALLBACK):
            converted = amount
        else:
            converted = amount * resolved.rate
        return resolved.model_copy(update={"amount": converted})
