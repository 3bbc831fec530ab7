"""
Currency Change Notifications

Publish/subscribe broadcast of display-currency changes. Consumers
subscribe a callable and get back an unsubscribe handle; the publisher
never knows who is listening.

A listener that raises is logged and skipped - one broken consumer must
not stop the others from re-rendering.
"""

from datetime import datetime
from typing import Callable

import structlog
from pydantic import BaseModel, ConfigDict, Field

from budgetup.models.currency import CurrencyCode
from budgetup.models.records import utc_now


logger = structlog.get_logger(__name__)


class CurrencyChangeEvent(BaseModel):
    """Carries the previous and the new display currency."""
    model_config = ConfigDict(frozen=True)

    old_currency: CurrencyCode
    new_currency: CurrencyCode
    occurred_at: datetime = Field(default_factory=utc_now)


CurrencyChangeListener = Callable[[CurrencyChangeEvent], None]


class CurrencyChangeNotifier:
    """Fan-out of CurrencyChangeEvent to any number of listeners."""

    def __init__(self):
        self._listeners: list[CurrencyChangeListener] = []

    @property
    def listener_count(self) -> int:
        return len(self._listeners)

    def subscribe(self, listener: CurrencyChangeListener) -> Callable[[], None]:
        """
        Register a listener.

        Returns:
            A handle that removes the listener. Calling it twice is harmless.
        """
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def publish(self, event: CurrencyChangeEvent) -> int:
        """
        Deliver an event to every listener.

        Returns:
            Number of listeners that handled the event without raising
        """
        delivered = 0
        # Snapshot so listeners may unsubscribe while being notified
        for listener in list(self._listeners):
            try:
                listener(event)
                delivered += 1
            except Exception as e:
                logger.error(
                    "currency_listener_failed",
                    listener=getattr(listener, "__qualname__", repr(listener)),
                    error=str(e),
                    old_currency=event.old_currency.value,
                    new_currency=event.new_currency.value,
                )
        return delivered
