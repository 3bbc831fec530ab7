"""
Data Models Package

This package contains all Pydantic models used in BudgetUp.
All data flowing through the system must conform to these schemas.
"""

from budgetup.models.currency import (
    SUPPORTED_CURRENCIES,
    WORLD_CURRENCIES,
    ConversionPath,
    ConversionResult,
    CurrencyCode,
    CurrencyInfo,
    InvalidCurrencyError,
    get_currency_info,
    is_supported_currency,
    parse_currency,
)
from budgetup.models.records import (
    CURRENT_SCHEMA_VERSION,
    RECORD_MODELS,
    BudgetCategory,
    FinancialState,
    FinancialSummary,
    GroupContribution,
    GroupGoal,
    MonetaryRecord,
    RecordKind,
    SavingsEntry,
    SavingsGoal,
    Transaction,
    TransactionType,
    UserPreferences,
    collection_attr,
)
from budgetup.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Currency models
    "SUPPORTED_CURRENCIES",
    "WORLD_CURRENCIES",
    "ConversionPath",
    "ConversionResult",
    "CurrencyCode",
    "CurrencyInfo",
    "InvalidCurrencyError",
    "get_currency_info",
    "is_supported_currency",
    "parse_currency",
    # Record models
    "CURRENT_SCHEMA_VERSION",
    "RECORD_MODELS",
    "BudgetCategory",
    "FinancialState",
    "FinancialSummary",
    "GroupContribution",
    "GroupGoal",
    "MonetaryRecord",
    "RecordKind",
    "SavingsEntry",
    "SavingsGoal",
    "Transaction",
    "TransactionType",
    "UserPreferences",
    "collection_attr",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
