"""
Application Context

Builds and wires every component from settings. There are no module-level
singletons: each context owns its store, caches and notifier, so tests
and embedding applications can create as many as they need.

Startup order:
1. Configure log level
2. Load (and migrate) the store
3. Build resolver, caches, formatter and the currency service
4. Warm the rate cache around the active currency
5. Optionally start the background cache sweep
"""

import time
from dataclasses import dataclass
from typing import Optional

import structlog

from budgetup.audit import AuditLogger, set_log_level
from budgetup.config import Settings, get_settings
from budgetup.events import CurrencyChangeNotifier
from budgetup.models.currency import parse_currency
from budgetup.queries import SummaryQueries
from budgetup.services.currency import (
    ConversionResolver,
    CurrencyCache,
    CurrencyFormatter,
    CurrencyService,
    RateTable,
)
from budgetup.services.currency.cache import Clock
from budgetup.services.storage import (
    AuditStorageInterface,
    JSONFileStorage,
    StorageBackend,
)
from budgetup.store import FinancialStore


logger = structlog.get_logger(__name__)


@dataclass
class AppContext:
    settings: Settings
    store: FinancialStore
    currency: CurrencyService
    cache: CurrencyCache
    notifier: CurrencyChangeNotifier
    summaries: SummaryQueries
    audit_logger: AuditLogger

    async def close(self) -> None:
        """Stop background work. The store needs no shutdown."""
        await self.cache.stop_sweeper()


async def create_app_context(
    storage: Optional[StorageBackend] = None,
    settings: Optional[Settings] = None,
    audit_storage: Optional[AuditStorageInterface] = None,
    clock: Optional[Clock] = None,
    start_sweeper: bool = False,
) -> AppContext:
    """
    Factory function to create all application components.

    Args:
        storage: Blob storage backend. Defaults to JSON files under the
                 configured data directory.
        settings: Settings to use. Defaults to get_settings().
        audit_storage: Where audit events are persisted. If None, audit
                       events are only logged locally.
        clock: Time source for the caches (seconds). Defaults to
               time.monotonic.
        start_sweeper: Start the periodic cache sweep. Requires a
                       running event loop, which this coroutine has.

    Returns:
        A loaded, ready-to-use AppContext
    """
    settings = settings or get_settings()
    currency_settings = settings.currency
    store_settings = settings.store

    set_log_level(settings.app.log_level)

    if storage is None:
        storage = JSONFileStorage(store_settings.data_dir)

    audit_logger = AuditLogger(audit_storage)

    store = FinancialStore(
        storage,
        storage_key=store_settings.storage_key,
        audit_logger=audit_logger,
        default_currency=parse_currency(currency_settings.default_currency),
    )
    await store.load()

    resolver = ConversionResolver(
        RateTable(),
        pivot_currency=parse_currency(currency_settings.pivot_currency),
    )
    cache = CurrencyCache(
        ttl=currency_settings.cache_ttl_seconds,
        max_size=currency_settings.cache_max_size,
        eviction_fraction=currency_settings.cache_eviction_fraction,
        sweep_interval=currency_settings.sweep_interval_seconds,
        clock=clock or time.monotonic,
    )
    notifier = CurrencyChangeNotifier()
    currency = CurrencyService(
        store,
        resolver,
        cache,
        CurrencyFormatter(currency_settings.default_locale),
        notifier,
        locale=currency_settings.default_locale,
        audit_logger=audit_logger,
    )

    currency.preload(currency_settings.preload_currencies_list)
    if start_sweeper:
        cache.start_sweeper()

    logger.info(
        "app_context_ready",
        active_currency=currency.active_currency.value,
        record_count=store.state.record_count,
        sweeper=cache.sweeper_running,
    )

    return AppContext(
        settings=settings,
        store=store,
        currency=currency,
        cache=cache,
        notifier=notifier,
        summaries=SummaryQueries(store, currency),
        audit_logger=audit_logger,
    )
