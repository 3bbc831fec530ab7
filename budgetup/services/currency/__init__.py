"""
Currency services: rate table, resolver, caches, formatter and the
CurrencyService facade that combines them.
"""

from budgetup.services.currency.cache import (
    CacheEntry,
    CacheStats,
    CurrencyCache,
    TTLCache,
)
from budgetup.services.currency.formatter import CurrencyFormatter
from budgetup.services.currency.rates import EXCHANGE_RATES, RateTable
from budgetup.services.currency.resolver import ConversionResolver
from budgetup.services.currency.service import CurrencyService

__all__ = [
    "CacheEntry",
    "CacheStats",
    "CurrencyCache",
    "TTLCache",
    "CurrencyFormatter",
    "EXCHANGE_RATES",
    "RateTable",
    "ConversionResolver",
    "CurrencyService",
]
