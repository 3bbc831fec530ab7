"""
Shared fixtures.

Everything runs against in-memory storage and a manual clock, so no
test touches disk (except the JSON backend tests, which use tmp_path)
and no test sleeps.
"""

import pytest

from budgetup.audit import AuditLogger
from budgetup.events import CurrencyChangeNotifier
from budgetup.services.currency import (
    ConversionResolver,
    CurrencyCache,
    CurrencyFormatter,
    CurrencyService,
    RateTable,
)
from budgetup.services.storage import (
    InMemoryAuditStorage,
    InMemoryStorage,
    StorageWriteError,
)
from budgetup.store import FinancialStore


class ManualClock:
    """Clock that only moves when told to."""

    def __init__(self, start: float = 1000.0):
        self.now = start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class FlakyStorage(InMemoryStorage):
    """In-memory storage whose writes can be switched to fail."""

    def __init__(self, initial=None):
        super().__init__(initial)
        self.fail_writes = False

    async def write(self, key: str, payload: str) -> None:
        if self.fail_writes:
            raise StorageWriteError("disk full")
        await super().write(key, payload)


@pytest.fixture
def clock():
    return ManualClock()


@pytest.fixture
def storage():
    return FlakyStorage()


@pytest.fixture
def audit_storage():
    return InMemoryAuditStorage()


@pytest.fixture
def audit_logger(audit_storage):
    return AuditLogger(audit_storage)


@pytest.fixture
async def store(storage, audit_logger):
    store = FinancialStore(storage, audit_logger=audit_logger)
    await store.load()
    return store


@pytest.fixture
def resolver():
    return ConversionResolver(RateTable())


@pytest.fixture
def cache(clock):
    return CurrencyCache(clock=clock)


@pytest.fixture
def notifier():
    return CurrencyChangeNotifier()


@pytest.fixture
def service(store, resolver, cache, notifier, audit_logger):
    return CurrencyService(
        store,
        resolver,
        cache,
        CurrencyFormatter(),
        notifier,
        audit_logger=audit_logger,
    )
