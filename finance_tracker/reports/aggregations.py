"""
Transaction Aggregations

DESIGN DECISION: Aggregation is DETERMINISTIC and PURE.
Every function takes an already owner-scoped list of transactions and
returns a report model. Nothing here touches storage, so the same
input list always yields the same output, whatever order it came in.

Amounts are summed as Decimal; only percentages are floats.
"""

import calendar
from decimal import Decimal
from typing import Iterable, Mapping, Optional, Sequence, Union

from finance_tracker.models.report import (
    ZERO,
    CashFlowReport,
    CategoryShare,
    FinancialSummary,
    MonthlyTotals,
    SavingsAllocation,
)
from finance_tracker.models.transaction import Transaction, TransactionType

UNKNOWN_CATEGORY = "Unknown Category"

# Fixed split of a positive net balance across savings goals (percent)
DEFAULT_SAVINGS_ALLOCATIONS: tuple[tuple[str, float], ...] = (
    ("Yearly Saving", 40.0),
    ("Public Event", 15.0),
    ("Healthy", 20.0),
    ("Travel", 10.0),
    ("Accessory", 15.0),
)


def summary(transactions: Iterable[Transaction]) -> FinancialSummary:
    """Total income, total expenses and their difference."""
    income = ZERO
    expenses = ZERO
    for txn in transactions:
        if txn.type == TransactionType.INCOME:
            income += txn.amount
        else:
            expenses += txn.amount

    return FinancialSummary(
        total_income=income,
        total_expenses=expenses,
        net_balance=income - expenses,
    )


def _percentage(amount: Decimal, total: Decimal) -> float:
    if total == 0:
        return 0.0
    return round(float(amount / total * 100), 1)


def category_breakdown(
    transactions: Sequence[Transaction],
    type: Union[TransactionType, str],
    category_names: Optional[Mapping[str, str]] = None,
    top_n: int = 6,
) -> list[CategoryShare]:
    """
    Group one type's transactions by category display name.

    Ids missing from `category_names` are grouped under
    "Unknown Category". Groups are sorted by amount, largest first,
    with equal amounts kept in order of first appearance, then cut
    to `top_n`. Percentages are of the whole type total, so a
    truncated breakdown sums to less than 100.
    """
    type = TransactionType(type)
    category_names = category_names or {}

    grouped: dict[str, Decimal] = {}
    total = ZERO
    for txn in transactions:
        if txn.type != type:
            continue
        name = category_names.get(txn.category_id, UNKNOWN_CATEGORY)
        grouped[name] = grouped.get(name, ZERO) + txn.amount
        total += txn.amount

    # sorted() is stable; dict order is first appearance
    ranked = sorted(grouped.items(), key=lambda item: item[1], reverse=True)

    return [
        CategoryShare(name=name, amount=amount, percentage=_percentage(amount, total))
        for name, amount in ranked[:max(top_n, 0)]
    ]


def _monthly_sums(
    transactions: Iterable[Transaction],
    year: int,
) -> tuple[list[Decimal], list[Decimal]]:
    income = [ZERO] * 12
    expenses = [ZERO] * 12
    for txn in transactions:
        if txn.date.year != year:
            continue
        index = txn.date.month - 1
        if txn.type == TransactionType.INCOME:
            income[index] += txn.amount
        else:
            expenses[index] += txn.amount
    return income, expenses


def monthly_trend(transactions: Iterable[Transaction], year: int) -> list[MonthlyTotals]:
    """Income, expenses and net for each of the 12 months of `year`."""
    income, expenses = _monthly_sums(transactions, year)
    return [
        MonthlyTotals(
            month=month,
            label=calendar.month_abbr[month],
            income=income[month - 1],
            expenses=expenses[month - 1],
            net=income[month - 1] - expenses[month - 1],
        )
        for month in range(1, 13)
    ]


def running_cash_balance(transactions: Iterable[Transaction], year: int) -> CashFlowReport:
    """
    Monthly income and expenses plus a balance carried month to month.

    The balance starts at zero in January; nothing carries in from
    previous years.
    """
    income, expenses = _monthly_sums(transactions, year)

    balance = []
    running = ZERO
    for month_income, month_expenses in zip(income, expenses):
        running = running + month_income - month_expenses
        balance.append(running)

    return CashFlowReport(
        year=year,
        income_by_month=income,
        expenses_by_month=expenses,
        balance_by_month=balance,
    )


def savings_breakdown(
    net_balance: Decimal,
    allocations: Sequence[tuple[str, float]] = DEFAULT_SAVINGS_ALLOCATIONS,
) -> list[SavingsAllocation]:
    """
    Split a net balance across savings goals.

    A negative balance has nothing to save, so every goal gets zero.
    """
    base = net_balance if net_balance > 0 else ZERO
    return [
        SavingsAllocation(
            name=name,
            percentage=percentage,
            amount=(base * Decimal(str(percentage)) / 100).quantize(Decimal("0.01")),
        )
        for name, percentage in allocations
    ]
