"""
Audit Models for BudgetUp

Every change to stored financial data is logged for audit purposes.
This provides:
1. Traceability of record changes and migrations
2. Debugging information when a persisted blob had to be reset
3. A history of display-currency changes

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from budgetup.models.records import utc_now


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Record changes
    RECORD_ADDED = "record_added"
    RECORD_UPDATED = "record_updated"
    RECORD_DELETED = "record_deleted"
    PREFERENCES_UPDATED = "preferences_updated"

    # Store lifecycle
    STORE_LOADED = "store_loaded"
    MIGRATION_APPLIED = "migration_applied"
    STORE_RESET = "store_reset"

    # Currency
    CURRENCY_CHANGED = "currency_changed"
    CURRENCY_CHANGE_FAILED = "currency_change_failed"

    # System events
    STORAGE_ERROR = "storage_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    Every significant store or currency action creates one of these.
    """

    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC)"
    )

    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Context - what entity is this about?
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'transactions', 'store', 'currency')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="ID of the entity this event relates to"
    )

    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None
    is_user_action: bool = Field(
        default=False,
        description="Was this triggered by a user action?"
    )

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
            "is_user_action": self.is_user_action,
        }


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.record_added("transactions", record_id)
        event = AuditEventBuilder.currency_changed("USD", "EUR")
    """

    @staticmethod
    def record_added(collection: str, record_id: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_ADDED,
            entity_type=collection,
            entity_id=record_id,
            description=f"Record added to {collection}",
            is_user_action=True,
        )

    @staticmethod
    def record_updated(
        collection: str,
        record_id: str,
        fields: list[str],
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_UPDATED,
            entity_type=collection,
            entity_id=record_id,
            description=f"Record updated in {collection}",
            details={"fields": fields},
            is_user_action=True,
        )

    @staticmethod
    def record_deleted(
        collection: str,
        record_id: str,
        cascaded: int = 0,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.RECORD_DELETED,
            entity_type=collection,
            entity_id=record_id,
            description=f"Record deleted from {collection}",
            details={"cascaded_deletes": cascaded},
            is_user_action=True,
        )

    @staticmethod
    def preferences_updated(fields: list[str]) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.PREFERENCES_UPDATED,
            entity_type="preferences",
            description="User preferences updated",
            details={"fields": fields},
            is_user_action=True,
        )

    @staticmethod
    def store_loaded(version: int, record_count: int) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORE_LOADED,
            entity_type="store",
            description=f"Store loaded at schema v{version} with {record_count} records",
            details={"version": version, "record_count": record_count},
        )

    @staticmethod
    def migration_applied(
        from_version: int,
        to_version: int,
        default_currency: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.MIGRATION_APPLIED,
            entity_type="store",
            description=f"Store migrated from v{from_version} to v{to_version}",
            details={
                "from_version": from_version,
                "to_version": to_version,
                "default_currency": default_currency,
            },
        )

    @staticmethod
    def store_reset(reason: str, error_message: Optional[str] = None) -> AuditEvent:
        # A reset caused by an error means stored data was lost
        forced = error_message is not None
        return AuditEvent(
            event_type=AuditEventType.STORE_RESET,
            severity=AuditSeverity.CRITICAL if forced else AuditSeverity.INFO,
            entity_type="store",
            description=f"Store reset to empty state: {reason}",
            error_message=error_message,
            details={"reason": reason},
            is_user_action=not forced,
        )

    @staticmethod
    def currency_changed(old_currency: str, new_currency: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CURRENCY_CHANGED,
            entity_type="currency",
            description=f"Display currency changed: {old_currency} -> {new_currency}",
            details={
                "old_currency": old_currency,
                "new_currency": new_currency,
            },
            is_user_action=True,
        )

    @staticmethod
    def currency_change_failed(attempted: Any, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.CURRENCY_CHANGE_FAILED,
            severity=AuditSeverity.WARNING,
            entity_type="currency",
            description="Display currency change rejected",
            error_message=error_message,
            details={"attempted": repr(attempted)},
            is_user_action=True,
        )

    @staticmethod
    def storage_error(operation: str, error_message: str) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.ERROR,
            entity_type="store",
            description=f"Storage error during {operation}",
            error_message=error_message,
            details={"operation": operation},
        )
