"""
Report Models

Outputs of the aggregation functions. These are plain value objects:
the UI turns them into cards and charts, tests compare them directly.
"""

from decimal import Decimal

from pydantic import BaseModel, Field

from finance_tracker.models.transaction import TransactionPage

ZERO = Decimal("0")


class FinancialSummary(BaseModel):
    """Totals over a list of transactions."""

    total_income: Decimal = ZERO
    total_expenses: Decimal = ZERO
    net_balance: Decimal = ZERO


class CategoryShare(BaseModel):
    """One slice of a category breakdown."""

    name: str
    amount: Decimal
    percentage: float = Field(
        ...,
        ge=0.0,
        le=100.0,
        description="Share of the type total, rounded to one decimal"
    )


class MonthlyTotals(BaseModel):
    """Income and expenses for one calendar month."""

    month: int = Field(..., ge=1, le=12)
    label: str = Field(..., description="Short month name, e.g. 'Jan'")
    income: Decimal = ZERO
    expenses: Decimal = ZERO
    net: Decimal = ZERO


class CashFlowReport(BaseModel):
    """
    Month-by-month cash flow for one year.

    All lists have exactly 12 entries (January first). The balance
    carries over from month to month starting at zero.
    """

    year: int
    income_by_month: list[Decimal]
    expenses_by_month: list[Decimal]
    balance_by_month: list[Decimal]


class SavingsAllocation(BaseModel):
    """How much of the net balance goes to one savings goal."""

    name: str
    percentage: float
    amount: Decimal


class TodoStats(BaseModel):
    """Counts shown above the task list."""

    total: int = 0
    completed: int = 0
    pending: int = 0
    in_progress: int = 0
    urgent: int = 0

    @property
    def open(self) -> int:
        """Pending plus in-progress tasks."""
        return self.pending + self.in_progress


class DashboardView(BaseModel):
    """What the dashboard renders for one month."""

    year: int
    month: int = Field(..., ge=1, le=12)
    summary: FinancialSummary
    recent: TransactionPage


class YearlyReport(BaseModel):
    """Everything the reports page renders for one year."""

    year: int
    summary: FinancialSummary
    monthly: list[MonthlyTotals]
    cash_flow: CashFlowReport
    expense_breakdown: list[CategoryShare]
    income_breakdown: list[CategoryShare]
    savings: list[SavingsAllocation]
