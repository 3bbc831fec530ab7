"""Financial summary queries."""

from budgetup.queries.summary import SummaryQueries

__all__ = ["SummaryQueries"]
