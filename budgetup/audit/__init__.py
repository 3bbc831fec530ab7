"""Audit logging package."""

from budgetup.audit.logger import AuditLogger, set_log_level

__all__ = ["AuditLogger", "set_log_level"]
