"""
Currency Service

The single entry point the rest of the application uses for money:
conversion into the active display currency, formatting, and changing
the active currency.

The active currency is not stored here. It is read from the store's
user preferences on every call, so there is exactly one source of truth.

DESIGN DECISION: Nothing in this service raises on bad input.
- convert/format fall back to the unconverted amount
- set_active_currency records an error string and keeps the previous
  currency; callers inspect `error` instead of catching
"""

from typing import TYPE_CHECKING, Iterable, Optional

import structlog

from budgetup.events import CurrencyChangeEvent, CurrencyChangeNotifier
from budgetup.models.currency import (
    CurrencyCode,
    InvalidCurrencyError,
    parse_currency,
)
from budgetup.models.records import MonetaryRecord
from budgetup.services.currency.cache import CurrencyCache
from budgetup.services.currency.formatter import DEFAULT_LOCALE, CurrencyFormatter
from budgetup.services.currency.resolver import ConversionResolver
from budgetup.services.storage import StorageError
from budgetup.store import FinancialStore, StoreError

if TYPE_CHECKING:
    from budgetup.audit import AuditLogger


logger = structlog.get_logger(__name__)

# (amount, currency the amount is in; None meaning the active currency)
MoneyItem = tuple[float, Optional[str]]


class CurrencyService:
    """
    Facade over resolver, cache and formatter, bound to the store's
    preferred currency.

    Usage:
        service.convert(100, "EUR")    # EUR -> active currency
        service.format(100, "EUR")     # converted and formatted
        await service.set_active_currency("GBP")
        if service.error:
            ...
    """

    def __init__(
        self,
        store: FinancialStore,
        resolver: ConversionResolver,
        cache: CurrencyCache,
        formatter: CurrencyFormatter,
        notifier: CurrencyChangeNotifier,
        locale: str = DEFAULT_LOCALE,
        audit_logger: Optional["AuditLogger"] = None,
    ):
        self._store = store
        self._resolver = resolver
        self._cache = cache
        self._formatter = formatter
        self._notifier = notifier
        self._locale = locale
        self._audit_logger = audit_logger
        self._is_loading = False
        self._error: Optional[str] = None

    # =========================================================================
    # STATE
    # =========================================================================

    @property
    def active_currency(self) -> CurrencyCode:
        return self._store.preferred_currency

    @property
    def locale(self) -> str:
        return self._locale

    @property
    def is_loading(self) -> bool:
        return self._is_loading

    @property
    def error(self) -> Optional[str]:
        return self._error

    @property
    def notifier(self) -> CurrencyChangeNotifier:
        return self._notifier

    def clear_error(self) -> None:
        self._error = None

    def symbol(self) -> str:
        """Symbol of the active currency."""
        return self._formatter.symbol(self.active_currency)

    def currency_name(self) -> str:
        return self._formatter.name(self.active_currency)

    # =========================================================================
    # CONVERSION
    # =========================================================================

    def rate(self, from_currency: CurrencyCode, to_currency: CurrencyCode) -> float:
        """
        Rate between two currencies, through the cache.

        Fallback (identity) rates are never cached, so a rate that becomes
        available later is picked up.
        """
        if from_currency == to_currency:
            return 1.0

        cached = self._cache.get_conversion(from_currency, to_currency)
        if cached is not None:
            return cached

        result = self._resolver.rate(from_currency, to_currency)
        if not result.is_fallback:
            self._cache.set_conversion(from_currency, to_currency, result.rate)
        return result.rate

    def convert(self, amount: float, from_currency: Optional[str] = None) -> float:
        """
        Convert an amount into the active currency.

        Args:
            amount: The amount
            from_currency: Currency of the amount; defaults to the active
                           currency (no conversion)

        Returns:
            The converted amount. If the source currency is invalid or no
            rate exists, the amount is returned unchanged.
        """
        target = self.active_currency
        source = self._source_currency(from_currency, target)
        if source is None or source == target:
            return amount
        return amount * self.rate(source, target)

    def convert_record(self, record: MonetaryRecord) -> float:
        """A stored record's amount in the active currency (0 if it has none)."""
        amount = record.amount_value
        if amount is None:
            return 0.0
        return self.convert(amount, record.currency)

    def convert_many(self, items: Iterable[MoneyItem]) -> list[float]:
        return [self.convert(amount, currency) for amount, currency in items]

    # =========================================================================
    # FORMATTING
    # =========================================================================

    def format(self, amount: float, from_currency: Optional[str] = None) -> str:
        """Convert to the active currency and format, e.g. '$1,234.56'."""
        converted = self.convert(amount, from_currency)
        return self.format_currency(converted, self.active_currency)

    def format_currency(self, amount: float, currency: Optional[str] = None) -> str:
        """
        Format an amount as-is in the given currency (active by default).

        No conversion happens. Results are cached per amount, currency
        and locale.
        """
        code = self._source_currency(currency, self.active_currency)
        if code is None:
            code = self.active_currency

        cached = self._cache.get_format(amount, code, self._locale)
        if cached is not None:
            return cached

        formatted = self._formatter.format(amount, code, self._locale)
        self._cache.set_format(amount, code, self._locale, formatted)
        return formatted

    def format_many(self, items: Iterable[MoneyItem]) -> list[str]:
        return [self.format(amount, currency) for amount, currency in items]

    # =========================================================================
    # CACHE
    # =========================================================================

    def preload(self, targets: Iterable[str]) -> int:
        """
        Warm the rate cache with both directions between the active
        currency and each target. Invalid targets are skipped.

        Returns:
            Number of rates stored
        """
        codes = []
        for target in targets:
            try:
                codes.append(parse_currency(target))
            except InvalidCurrencyError as e:
                logger.warning("currency_preload_invalid", target=repr(target), error=str(e))

        def compute_rate(from_currency: CurrencyCode, to_currency: CurrencyCode) -> Optional[float]:
            result = self._resolver.rate(from_currency, to_currency)
            return None if result.is_fallback else result.rate

        stored = self._cache.preload(self.active_currency, codes, compute_rate)
        logger.info(
            "currency_cache_preloaded",
            base=self.active_currency.value,
            targets=[c.value for c in codes],
            stored=stored,
        )
        return stored

    def cache_stats(self) -> dict:
        return self._cache.stats()

    def clear_cache(self) -> None:
        self._cache.clear()

    # =========================================================================
    # ACTIVE CURRENCY
    # =========================================================================

    async def set_active_currency(self, code: str) -> None:
        """
        Change the display currency.

        Persists the new preference through the store and notifies
        subscribers. On failure `error` is set and the previous currency
        stays active; nothing is raised. Stored records keep their own
        currency either way.
        """
        self._is_loading = True
        self._error = None
        old_currency = self.active_currency

        try:
            new_currency = parse_currency(code)
            await self._store.update_user_preferences(currency=new_currency)
        except (ValueError, StoreError, StorageError) as e:
            # pydantic's ValidationError is a ValueError
            self._error = str(e)
            logger.warning(
                "currency_change_failed",
                attempted=repr(code),
                active_currency=old_currency.value,
                error=self._error,
            )
            if self._audit_logger:
                await self._audit_logger.log_currency_change_failed(code, self._error)
            return
        finally:
            self._is_loading = False

        if new_currency == old_currency:
            return

        logger.info(
            "currency_changed",
            old_currency=old_currency.value,
            new_currency=new_currency.value,
        )
        self._notifier.publish(
            CurrencyChangeEvent(old_currency=old_currency, new_currency=new_currency)
        )
        if self._audit_logger:
            await self._audit_logger.log_currency_changed(
                old_currency.value, new_currency.value
            )

    # =========================================================================
    # HELPERS
    # =========================================================================

    def _source_currency(
        self,
        value: Optional[str],
        default: CurrencyCode,
    ) -> Optional[CurrencyCode]:
        if value is None:
            return default
        try:
            return parse_currency(value)
        except InvalidCurrencyError as e:
            logger.warning("currency_unrecognized", value=repr(value), error=str(e))
            return None
