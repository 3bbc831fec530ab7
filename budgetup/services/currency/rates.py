"""
Static Exchange Rate Table

Rates are directional multipliers: RATES[from][to] * amount_in_from
gives the amount in `to`. They are NOT guaranteed symmetric, and most
pairs of the currency catalogue have no entry at all - the resolver
handles that.

There is no live market-data provider; this table is the single
canonical source of rates.
"""

from typing import Mapping, Optional

from budgetup.models.currency import CurrencyCode


EXCHANGE_RATES: dict[str, dict[str, float]] = {
    "USD": {"EUR": 0.85, "GBP": 0.73, "JPY": 110, "AUD": 1.35, "CAD": 1.25, "GHS": 12.0, "NGN": 460, "INR": 74, "BRL": 5.2, "MXN": 17.5},
    "EUR": {"USD": 1.18, "GBP": 0.86, "JPY": 130, "AUD": 1.59, "CAD": 1.47, "GHS": 14.1, "NGN": 542, "INR": 87, "BRL": 6.1, "MXN": 20.6},
    "GBP": {"USD": 1.37, "EUR": 1.16, "JPY": 151, "AUD": 1.85, "CAD": 1.71, "GHS": 16.4, "NGN": 630, "INR": 101, "BRL": 7.1, "MXN": 24.0},
    "GHS": {"USD": 0.083, "EUR": 0.071, "GBP": 0.061, "JPY": 9.2, "AUD": 0.112, "CAD": 0.104, "NGN": 38.3, "INR": 6.2, "BRL": 0.43, "MXN": 1.46},
    "NGN": {"USD": 0.0022, "EUR": 0.0018, "GBP": 0.0016, "JPY": 0.24, "AUD": 0.0029, "CAD": 0.0027, "GHS": 0.026, "INR": 0.16, "BRL": 0.011, "MXN": 0.038},
    "INR": {"USD": 0.014, "EUR": 0.011, "GBP": 0.0099, "JPY": 1.49, "AUD": 0.018, "CAD": 0.017, "GHS": 0.16, "NGN": 6.2, "BRL": 0.070, "MXN": 0.24},
    "BRL": {"USD": 0.19, "EUR": 0.16, "GBP": 0.14, "JPY": 21.2, "AUD": 0.26, "CAD": 0.24, "GHS": 2.33, "NGN": 88.4, "INR": 14.3, "MXN": 3.37},
    "MXN": {"USD": 0.057, "EUR": 0.049, "GBP": 0.042, "JPY": 6.3, "AUD": 0.077, "CAD": 0.071, "GHS": 0.68, "NGN": 26.2, "INR": 4.2, "BRL": 0.30},
    "JPY": {"USD": 0.0091, "EUR": 0.0077, "GBP": 0.0066, "AUD": 0.012, "CAD": 0.011, "GHS": 0.11, "NGN": 4.2, "INR": 0.67, "BRL": 0.047, "MXN": 0.16},
    "AUD": {"USD": 0.74, "EUR": 0.63, "GBP": 0.54, "JPY": 81.5, "CAD": 0.93, "GHS": 8.9, "NGN": 340, "INR": 55, "BRL": 3.9, "MXN": 13.0},
    "CAD": {"USD": 0.80, "EUR": 0.68, "GBP": 0.58, "JPY": 88, "AUD": 1.08, "GHS": 9.6, "NGN": 368, "INR": 59, "BRL": 4.2, "MXN": 14.0},
}


class RateTable:
    """
    Read-only view over a directional rate mapping.

    Unknown currency codes in the mapping are rejected at construction,
    so lookups only ever deal with catalogue codes.
    """

    def __init__(self, rates: Optional[Mapping[str, Mapping[str, float]]] = None):
        source = EXCHANGE_RATES if rates is None else rates
        self._rates: dict[CurrencyCode, dict[CurrencyCode, float]] = {}
        for from_code, targets in source.items():
            from_currency = CurrencyCode(str(from_code).upper())
            row = self._rates.setdefault(from_currency, {})
            for to_code, rate in targets.items():
                rate = float(rate)
                if rate <= 0:
                    raise ValueError(f"Rate {from_code}->{to_code} must be positive")
                row[CurrencyCode(str(to_code).upper())] = rate

    def get(self, from_currency: CurrencyCode, to_currency: CurrencyCode) -> Optional[float]:
        """Direct rate, or None when the table has no entry."""
        return self._rates.get(from_currency, {}).get(to_currency)

    def has_rate(self, from_currency: CurrencyCode, to_currency: CurrencyCode) -> bool:
        return self.get(from_currency, to_currency) is not None

    def pairs(self) -> list[tuple[CurrencyCode, CurrencyCode]]:
        return [
            (from_currency, to_currency)
            for from_currency, row in self._rates.items()
            for to_currency in row
        ]

    def currencies(self) -> set[CurrencyCode]:
        """Every currency that appears on either side of an entry."""
        codes = set(self._rates)
        for row in self._rates.values():
            codes.update(row)
        return codes

    def __len__(self) -> int:
        return sum(len(row) for row in self._rates.values())
