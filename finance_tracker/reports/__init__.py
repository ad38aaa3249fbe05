"""
Reports package.

Pure functions that turn owner-scoped record lists into the numbers
the dashboard, reports and tasks pages render.
"""

from finance_tracker.reports.aggregations import (
    DEFAULT_SAVINGS_ALLOCATIONS,
    UNKNOWN_CATEGORY,
    category_breakdown,
    monthly_trend,
    running_cash_balance,
    savings_breakdown,
    summary,
)
from finance_tracker.reports.filters import (
    category_name_lookup,
    filter_transactions,
    transactions_in_month,
    transactions_in_year,
)
from finance_tracker.reports.tasks import sort_todos, todo_stats

__all__ = [
    "DEFAULT_SAVINGS_ALLOCATIONS",
    "UNKNOWN_CATEGORY",
    "summary",
    "category_breakdown",
    "monthly_trend",
    "running_cash_balance",
    "savings_breakdown",
    "category_name_lookup",
    "filter_transactions",
    "transactions_in_month",
    "transactions_in_year",
    "sort_todos",
    "todo_stats",
]
