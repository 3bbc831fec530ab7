"""
Audit Logger

DESIGN DECISION: Every change to stored financial data is logged.
This provides:
1. Traceability of record changes
2. A loud trail when a corrupted blob forced a reset
3. History of display-currency changes

The audit logger:
- Is async, like the store that calls it
- Gracefully handles failures (doesn't crash the app if logging fails)
"""

import logging
from typing import Any, Optional

import structlog

from budgetup.models.audit import AuditEvent, AuditEventBuilder, AuditSeverity
from budgetup.services.storage import AuditStorageInterface


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=False,
)


def set_log_level(level: str) -> None:
    """Set the minimum level for all budgetup loggers."""
    logging.getLogger("budgetup").setLevel(level)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. Audit storage (for persistence), when configured
    """

    def __init__(
        self,
        storage: Optional[AuditStorageInterface] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Storage backend for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("budgetup.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity in (AuditSeverity.ERROR, AuditSeverity.CRITICAL):
            self._logger.error("audit_event", **log_dict)
        elif event.severity == AuditSeverity.WARNING:
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                return await self._storage.append_event(event)
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_record_added(self, collection: str, record_id: str) -> None:
        await self.log(AuditEventBuilder.record_added(collection, record_id))

    async def log_record_updated(
        self,
        collection: str,
        record_id: str,
        fields: list[str],
    ) -> None:
        await self.log(AuditEventBuilder.record_updated(collection, record_id, fields))

    async def log_record_deleted(
        self,
        collection: str,
        record_id: str,
        cascaded: int = 0,
    ) -> None:
        await self.log(AuditEventBuilder.record_deleted(collection, record_id, cascaded))

    async def log_preferences_updated(self, fields: list[str]) -> None:
        await self.log(AuditEventBuilder.preferences_updated(fields))

    async def log_store_loaded(self, version: int, record_count: int) -> None:
        await self.log(AuditEventBuilder.store_loaded(version, record_count))

    async def log_migration_applied(
        self,
        from_version: int,
        to_version: int,
        default_currency: str,
    ) -> None:
        await self.log(
            AuditEventBuilder.migration_applied(from_version, to_version, default_currency)
        )

    async def log_store_reset(
        self,
        reason: str,
        error_message: Optional[str] = None,
    ) -> None:
        await self.log(AuditEventBuilder.store_reset(reason, error_message))

    async def log_currency_changed(self, old_currency: str, new_currency: str) -> None:
        await self.log(AuditEventBuilder.currency_changed(old_currency, new_currency))

    async def log_currency_change_failed(
        self,
        attempted: Any,
        error_message: str,
    ) -> None:
        await self.log(AuditEventBuilder.currency_change_failed(attempted, error_message))

    async def log_storage_error(self, operation: str, error_message: str) -> None:
        await self.log(AuditEventBuilder.storage_error(operation, error_message))
