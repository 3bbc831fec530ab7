"""
Currency Formatter

Renders monetary amounts as locale-aware strings through Babel (CLDR data),
always with exactly two fraction digits.

If Babel cannot format the currency or the locale, the formatter falls
back to the catalogue symbol followed by a two-decimal number. That
fallback is silent: an unusual currency must never surface as an error.
Negative amounts always carry a leading minus sign.
"""

from typing import Optional

import structlog
from babel import Locale, UnknownLocaleError
from babel.numbers import (
    UnknownCurrencyError,
    format_currency,
    format_decimal,
    validate_currency,
)

from budgetup.models.currency import CurrencyCode, get_currency_info


logger = structlog.get_logger(__name__)

DEFAULT_LOCALE = "en-US"

_FALLBACK_PATTERN = "#,##0.00"


def normalize_locale(locale: str) -> str:
    """Accept BCP 47 ('en-US') as well as POSIX ('en_US') spellings."""
    return (locale or DEFAULT_LOCALE).strip().replace("-", "_")


class CurrencyFormatter:
    """Locale-aware money formatting with a symbol fallback."""

    def __init__(self, default_locale: str = DEFAULT_LOCALE):
        self.default_locale = default_locale

    def format(
        self,
        amount: float,
        currency: CurrencyCode,
        locale: Optional[str] = None,
    ) -> str:
        """Format an amount in the given currency, e.g. '$1,234.56'."""
        babel_locale = normalize_locale(locale or self.default_locale)
        try:
            validate_currency(currency.value)
            return format_currency(
                amount,
                currency.value,
                locale=babel_locale,
                currency_digits=False,
            )
        except (UnknownCurrencyError, UnknownLocaleError, ValueError, TypeError) as e:
            logger.debug(
                "currency_format_fallback",
                currency=currency.value,
                locale=babel_locale,
                reason=str(e),
            )
            return self._fallback(amount, currency, babel_locale)

    def symbol(self, currency: CurrencyCode) -> str:
        """Catalogue symbol, or the code itself when unknown."""
        info = get_currency_info(currency)
        return info.symbol if info else str(getattr(currency, "value", currency))

    def name(self, currency: CurrencyCode) -> str:
        """Catalogue name, or the code itself when unknown."""
        info = get_currency_info(currency)
        return info.name if info else str(getattr(currency, "value", currency))

    def _fallback(self, amount: float, currency: CurrencyCode, babel_locale: str) -> str:
        sign = "-" if amount < 0 else ""
        magnitude = abs(amount)
        try:
            Locale.parse(babel_locale)
            number = format_decimal(magnitude, format=_FALLBACK_PATTERN, locale=babel_locale)
        except (UnknownLocaleError, ValueError, TypeError):
            number = f"{magnitude:,.2f}"
        return f"{sign}{self.symbol(currency)}{number}"
