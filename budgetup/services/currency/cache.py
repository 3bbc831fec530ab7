"""
Currency Cache Layer

Two independently configured TTL caches:
- conversion rates, keyed "FROM-TO"
- formatted strings, keyed "AMOUNT-CURRENCY-LOCALE"

Each entry records when it was created and how long it lives. An entry
is valid while now - created_at <= ttl; once invalid it is treated as
absent, deleted on access, and removed by the periodic sweep.

When a cache is full, the oldest 10% of entries (by created_at) are
evicted before inserting. This is insertion-order LRU, not access-order
LRU: a hot entry still ages out.

DESIGN DECISION: The cache knows nothing about the resolver or the
formatter. It stores whatever the facade computed. Clearing it must never
change a value any caller observes, only how long it takes.
"""

import asyncio
import contextlib
import math
import time
from dataclasses import dataclass
from typing import Callable, Generic, Iterable, Optional, TypeVar

import structlog

from budgetup.models.currency import CurrencyCode


logger = structlog.get_logger(__name__)

T = TypeVar("T")

Clock = Callable[[], float]

DEFAULT_TTL_SECONDS = 5 * 60
DEFAULT_MAX_SIZE = 1000
DEFAULT_EVICTION_FRACTION = 0.1
DEFAULT_SWEEP_INTERVAL_SECONDS = 60


@dataclass
class CacheEntry(Generic[T]):
    key: str
    value: T
    created_at: float
    ttl: float

    def is_valid(self, now: float) -> bool:
        return now - self.created_at <= self.ttl


@dataclass
class CacheStats:
    size: int
    max_size: int
    hits: int
    misses: int
    evictions: int


class TTLCache(Generic[T]):
    """
    Bounded string-keyed cache with per-entry TTL.

    Time comes from an injectable clock (seconds, monotonic by default)
    so tests can advance it without sleeping.
    """

    def __init__(
        self,
        name: str,
        default_ttl: float = DEFAULT_TTL_SECONDS,
        max_size: int = DEFAULT_MAX_SIZE,
        eviction_fraction: float = DEFAULT_EVICTION_FRACTION,
        clock: Clock = time.monotonic,
    ):
        if max_size < 1:
            raise ValueError("max_size must be at least 1")
        if not 0 < eviction_fraction <= 1:
            raise ValueError("eviction_fraction must be in (0, 1]")
        self.name = name
        self.default_ttl = default_ttl
        self.max_size = max_size
        self.eviction_fraction = eviction_fraction
        self._clock = clock
        self._entries: dict[str, CacheEntry[T]] = {}
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def __len__(self) -> int:
        return len(self._entries)

    def __contains__(self, key: str) -> bool:
        entry = self._entries.get(key)
        return entry is not None and entry.is_valid(self._clock())

    def get(self, key: str) -> Optional[T]:
        """Value for a key, or None if absent or expired."""
        entry = self._entries.get(key)
        if entry is None:
            self.misses += 1
            return None
        if not entry.is_valid(self._clock()):
            del self._entries[key]
            self.misses += 1
            return None
        self.hits += 1
        return entry.value

    def set(self, key: str, value: T, ttl: Optional[float] = None) -> None:
        """Insert or refresh an entry, evicting the oldest if full."""
        ttl = self.default_ttl if ttl is None else ttl
        # Re-insert so dict order keeps tracking created_at
        self._entries.pop(key, None)
        if len(self._entries) >= self.max_size:
            self._evict_oldest()
        self._entries[key] = CacheEntry(
            key=key,
            value=value,
            created_at=self._clock(),
            ttl=ttl,
        )

    def delete(self, key: str) -> bool:
        return self._entries.pop(key, None) is not None

    def sweep(self) -> int:
        """Remove every expired entry. Returns how many were removed."""
        now = self._clock()
        expired = [key for key, entry in self._entries.items() if not entry.is_valid(now)]
        for key in expired:
            del self._entries[key]
        return len(expired)

    def clear(self) -> None:
        self._entries.clear()

    def reset_stats(self) -> None:
        self.hits = 0
        self.misses = 0
        self.evictions = 0

    def stats(self) -> CacheStats:
        return CacheStats(
            size=len(self._entries),
            max_size=self.max_size,
            hits=self.hits,
            misses=self.misses,
            evictions=self.evictions,
        )

    def _evict_oldest(self) -> None:
        count = max(1, math.floor(self.max_size * self.eviction_fraction))
        oldest = sorted(self._entries.values(), key=lambda e: e.created_at)[:count]
        for entry in oldest:
            del self._entries[entry.key]
        self.evictions += len(oldest)
        logger.debug("cache_evicted", cache=self.name, count=len(oldest))


def conversion_key(from_currency: CurrencyCode, to_currency: CurrencyCode) -> str:
    return f"{from_currency.value}-{to_currency.value}"


def format_key(amount: float, currency: CurrencyCode, locale: str) -> str:
    return f"{amount!r}-{currency.value}-{locale}"


class CurrencyCache:
    """
    The conversion-rate cache and the format-string cache, with a
    background sweep that runs on the event loop.
    """

    def __init__(
        self,
        ttl: float = DEFAULT_TTL_SECONDS,
        max_size: int = DEFAULT_MAX_SIZE,
        eviction_fraction: float = DEFAULT_EVICTION_FRACTION,
        sweep_interval: float = DEFAULT_SWEEP_INTERVAL_SECONDS,
        clock: Clock = time.monotonic,
    ):
        self.conversions: TTLCache[float] = TTLCache(
            "conversions", ttl, max_size, eviction_fraction, clock
        )
        self.formats: TTLCache[str] = TTLCache(
            "formats", ttl, max_size, eviction_fraction, clock
        )
        self.sweep_interval = sweep_interval
        self._sweeper: Optional[asyncio.Task] = None

    # Conversion rates

    def get_conversion(
        self,
        from_currency: CurrencyCode,
        to_currency: CurrencyCode,
    ) -> Optional[float]:
        return self.conversions.get(conversion_key(from_currency, to_currency))

    def set_conversion(
        self,
        from_currency: CurrencyCode,
        to_currency: CurrencyCode,
        rate: float,
        ttl: Optional[float] = None,
    ) -> None:
        self.conversions.set(conversion_key(from_currency, to_currency), rate, ttl)

    # Formatted strings

    def get_format(
        self,
        amount: float,
        currency: CurrencyCode,
        locale: str,
    ) -> Optional[str]:
        return self.formats.get(format_key(amount, currency, locale))

    def set_format(
        self,
        amount: float,
        currency: CurrencyCode,
        locale: str,
        formatted: str,
        ttl: Optional[float] = None,
    ) -> None:
        self.formats.set(format_key(amount, currency, locale), formatted, ttl)

    # Management

    def cleanup(self) -> int:
        """Sweep expired entries from both caches."""
        removed = self.conversions.sweep() + self.formats.sweep()
        if removed:
            logger.debug("cache_swept", removed=removed)
        return removed

    def clear(self) -> None:
        self.conversions.clear()
        self.formats.clear()

    def stats(self) -> dict:
        conversions = self.conversions.stats()
        formats = self.formats.stats()
        return {
            "conversion_cache_size": conversions.size,
            "format_cache_size": formats.size,
            "total_cache_size": conversions.size + formats.size,
            "max_cache_size": conversions.max_size + formats.max_size,
            "conversion_hits": conversions.hits,
            "conversion_misses": conversions.misses,
            "conversion_evictions": conversions.evictions,
            "format_hits": formats.hits,
            "format_misses": formats.misses,
            "format_evictions": formats.evictions,
        }

    def preload(
        self,
        base: CurrencyCode,
        targets: Iterable[CurrencyCode],
        compute_rate: Callable[[CurrencyCode, CurrencyCode], Optional[float]],
    ) -> int:
        """
        Warm the conversion cache with both directions of base <-> target.

        compute_rate returns None when no rate is available; such pairs
        are skipped. Returns the number of rates stored.
        """
        stored = 0
        for target in targets:
            if target == base:
                continue
            for pair in ((base, target), (target, base)):
                rate = compute_rate(*pair)
                if rate is None:
                    logger.warning(
                        "cache_preload_skipped",
                        from_currency=pair[0].value,
                        to_currency=pair[1].value,
                    )
                    continue
                self.set_conversion(pair[0], pair[1], rate)
                stored += 1
        return stored

    # Background sweep

    @property
    def sweeper_running(self) -> bool:
        return self._sweeper is not None and not self._sweeper.done()

    def start_sweeper(self) -> asyncio.Task:
        """
        Start the periodic sweep on the running event loop.

        Must be called from within a coroutine. Calling it again while
        the sweeper runs returns the existing task.
        """
        if self.sweeper_running:
            return self._sweeper
        self._sweeper = asyncio.get_running_loop().create_task(self._sweep_forever())
        return self._sweeper

    async def stop_sweeper(self) -> None:
        if self._sweeper is None:
            return
        self._sweeper.cancel()
        with contextlib.suppress(asyncio.CancelledError):
            await self._sweeper
        self._sweeper = None

    async def _sweep_forever(self) -> None:
        while True:
            await asyncio.sleep(self.sweep_interval)
            self.cleanup()
