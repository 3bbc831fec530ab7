"""
Financial Record Models for BudgetUp

Every stored monetary record carries the amount as entered, the currency
it was entered in, and originalAmount: the amount in that original
currency, which is never rewritten by later preference changes.

DESIGN DECISION: Models serialize with camelCase aliases so the persisted
blob keeps the field names older clients wrote (originalAmount,
userPreferences, migrationVersion). Python code uses snake_case.
Dates are ISO-8601 strings on disk and datetimes in memory.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import ClassVar, Optional
from uuid import uuid4

from pydantic import BaseModel, ConfigDict, Field
from pydantic.alias_generators import to_camel

from budgetup.models.currency import CurrencyCode


# Schema version written by this code. See budgetup.store.migrations.
CURRENT_SCHEMA_VERSION = 2


def utc_now() -> datetime:
    return datetime.now(timezone.utc)


def generate_id() -> str:
    return uuid4().hex


class TransactionType(str, Enum):
    """Direction of money flow."""
    INCOME = "income"
    EXPENSE = "expense"


class RecordKind(str, Enum):
    """
    The six monetary collections held by the store.

    Values are the persisted collection names.
    """
    TRANSACTION = "transactions"
    SAVINGS_GOAL = "savingsGoals"
    SAVINGS_ENTRY = "savingsEntries"
    GROUP_GOAL = "groupGoals"
    GROUP_CONTRIBUTION = "groupContributions"
    BUDGET_CATEGORY = "budgetCategories"


class CamelModel(BaseModel):
    """Base for persisted models: camelCase on disk, snake_case in Python."""
    model_config = ConfigDict(
        alias_generator=to_camel,
        populate_by_name=True,
        str_strip_whitespace=True,
    )


# =============================================================================
# MONETARY RECORDS
# =============================================================================

class MonetaryRecord(CamelModel):
    """
    Common shape of every stored money record.

    amount_field names the attribute that holds the record's amount;
    originalAmount is backfilled from it.
    """
    amount_field: ClassVar[str] = "amount"

    id: str = Field(default_factory=generate_id)
    currency: CurrencyCode = Field(
        ...,
        description="Currency the amount was recorded in (permanent)"
    )
    original_amount: Optional[float] = Field(
        default=None,
        description="Amount as entered, in its original currency"
    )
    created_at: datetime = Field(default_factory=utc_now)

    @property
    def amount_value(self) -> Optional[float]:
        return getattr(self, self.amount_field)


class Transaction(MonetaryRecord):
    user_id: str = "demo-user"
    type: TransactionType
    amount: float
    description: str = ""
    category: str = "other"
    date: datetime = Field(default_factory=utc_now)


class SavingsGoal(MonetaryRecord):
    amount_field: ClassVar[str] = "target_amount"

    user_id: str = "demo-user"
    title: str = Field(..., min_length=1)
    target_amount: Optional[float] = Field(default=None, ge=0)
    start_date: datetime = Field(default_factory=utc_now)
    end_date: datetime = Field(default_factory=utc_now)
    is_active: bool = True
    updated_at: datetime = Field(default_factory=utc_now)


class SavingsEntry(MonetaryRecord):
    user_id: str = "demo-user"
    goal_id: Optional[str] = None
    amount: float
    description: str = ""
    date: datetime = Field(default_factory=utc_now)


class GroupGoal(MonetaryRecord):
    amount_field: ClassVar[str] = "target_amount"

    name: str = Field(..., min_length=1)
    description: Optional[str] = None
    target_amount: float = Field(..., ge=0)
    participants: list[str] = Field(default_factory=list)
    created_by: str = "demo-user"
    is_active: bool = True
    updated_at: datetime = Field(default_factory=utc_now)


class GroupContribution(MonetaryRecord):
    group_id: str
    amount: float
    participant_name: str = Field(..., min_length=1)
    participant_id: Optional[str] = None
    date: datetime = Field(default_factory=utc_now)
    time: str = ""
    description: Optional[str] = None


class BudgetCategory(MonetaryRecord):
    amount_field: ClassVar[str] = "budgeted_amount"

    user_id: str = "demo-user"
    name: str = Field(..., min_length=1)
    budgeted_amount: float = Field(..., ge=0)
    spent_amount: float = Field(default=0.0, ge=0)
    month: int = Field(..., ge=1, le=12)
    year: int = Field(..., ge=1970)
    updated_at: datetime = Field(default_factory=utc_now)


RECORD_MODELS: dict[RecordKind, type[MonetaryRecord]] = {
    RecordKind.TRANSACTION: Transaction,
    RecordKind.SAVINGS_GOAL: SavingsGoal,
    RecordKind.SAVINGS_ENTRY: SavingsEntry,
    RecordKind.GROUP_GOAL: GroupGoal,
    RecordKind.GROUP_CONTRIBUTION: GroupContribution,
    RecordKind.BUDGET_CATEGORY: BudgetCategory,
}


# =============================================================================
# PREFERENCES & PERSISTED STATE
# =============================================================================

class UserPreferences(CamelModel):
    """Singular user preferences. Owned by the store."""

    name: str = ""
    currency: CurrencyCode = CurrencyCode.USD
    is_setup_complete: bool = False


class FinancialState(CamelModel):
    """
    The full persisted record set.

    This is exactly what gets written under the store's storage key.
    """

    user_preferences: Optional[UserPreferences] = None
    transactions: list[Transaction] = Field(default_factory=list)
    savings_goals: list[SavingsGoal] = Field(default_factory=list)
    savings_entries: list[SavingsEntry] = Field(default_factory=list)
    group_goals: list[GroupGoal] = Field(default_factory=list)
    group_contributions: list[GroupContribution] = Field(default_factory=list)
    budget_categories: list[BudgetCategory] = Field(default_factory=list)
    migration_version: int = Field(
        default=CURRENT_SCHEMA_VERSION,
        ge=0,
        description="Schema version of the persisted blob"
    )

    def records(self, kind: RecordKind) -> list[MonetaryRecord]:
        """Records of one collection."""
        return getattr(self, collection_attr(kind))

    @property
    def record_count(self) -> int:
        return sum(len(self.records(kind)) for kind in RecordKind)


def collection_attr(kind: RecordKind) -> str:
    """Python attribute name of a collection on FinancialState."""
    return {
        RecordKind.TRANSACTION: "transactions",
        RecordKind.SAVINGS_GOAL: "savings_goals",
        RecordKind.SAVINGS_ENTRY: "savings_entries",
        RecordKind.GROUP_GOAL: "group_goals",
        RecordKind.GROUP_CONTRIBUTION: "group_contributions",
        RecordKind.BUDGET_CATEGORY: "budget_categories",
    }[kind]


# =============================================================================
# DERIVED VIEWS
# =============================================================================

class FinancialSummary(BaseModel):
    """Totals expressed in a single display currency."""

    total_income: float
    total_expenses: float
    total_savings: float
    available_balance: float
    currency: CurrencyCode
