"""
Financial Summary Queries

Read-only aggregates over the store, every amount expressed in the
active display currency.

DESIGN DECISION: Summaries are computed from stored records on each
call. Nothing is estimated or cached here. Each record is converted from
its own currency, so records entered in different currencies add up
correctly.
"""

from typing import Optional

from budgetup.models.records import (
    FinancialSummary,
    RecordKind,
    TransactionType,
)
from budgetup.services.currency import CurrencyService
from budgetup.store import FinancialStore


class SummaryQueries:
    """
    Totals, balances and goal progress.

    GUARANTEES:
    - Only stored records contribute
    - Missing goals or targets give 0% progress, never an error
    - Progress is capped at 100%
    """

    def __init__(self, store: FinancialStore, currency: CurrencyService):
        self._store = store
        self._currency = currency

    def _transactions_total(self, type_: TransactionType) -> float:
        return sum(
            self._currency.convert_record(t)
            for t in self._store.records(RecordKind.TRANSACTION)
            if t.type == type_
        )

    def total_income(self) -> float:
        return self._transactions_total(TransactionType.INCOME)

    def total_expenses(self) -> float:
        return self._transactions_total(TransactionType.EXPENSE)

    def available_balance(self) -> float:
        return self.total_income() - self.total_expenses()

    def total_savings(self) -> float:
        """Sum of all savings entries."""
        return sum(
            self._currency.convert_record(entry)
            for entry in self._store.records(RecordKind.SAVINGS_ENTRY)
        )

    def transactions_by_category(
        self,
        type_: Optional[TransactionType] = None,
    ) -> dict[str, float]:
        """Converted totals per category, optionally for one transaction type."""
        totals: dict[str, float] = {}
        for txn in self._store.records(RecordKind.TRANSACTION):
            if type_ is not None and txn.type != type_:
                continue
            totals[txn.category] = totals.get(txn.category, 0.0) + self._currency.convert_record(txn)
        return totals

    def savings_progress(self, goal_id: str) -> float:
        """Percent of a savings goal's target reached by its entries."""
        goal = self._store.get(RecordKind.SAVINGS_GOAL, goal_id)
        if goal is None:
            return 0.0
        saved = sum(
            self._currency.convert_record(entry)
            for entry in self._store.records(RecordKind.SAVINGS_ENTRY)
            if entry.goal_id == goal_id
        )
        return self._percent(saved, self._currency.convert_record(goal))

    def group_savings_progress(self, group_id: str) -> float:
        """Percent of a group goal's target reached by its contributions."""
        group = self._store.get(RecordKind.GROUP_GOAL, group_id)
        if group is None:
            return 0.0
        contributed = sum(
            self._currency.convert_record(c)
            for c in self._store.records(RecordKind.GROUP_CONTRIBUTION)
            if c.group_id == group_id
        )
        return self._percent(contributed, self._currency.convert_record(group))

    def summary(self) -> FinancialSummary:
        income = self.total_income()
        expenses = self.total_expenses()
        return FinancialSummary(
            total_income=income,
            total_expenses=expenses,
            total_savings=self.total_savings(),
            available_balance=income - expenses,
            currency=self._currency.active_currency,
        )

    @staticmethod
    def _percent(reached: float, target: float) -> float:
        if target <= 0:
            return 0.0
        return min(100.0, reached / target * 100)
