"""
Transaction list filters used by the listing and dashboard pages.
"""

from datetime import date
from typing import Iterable, Mapping, Optional, Union

from finance_tracker.models.category import Category
from finance_tracker.models.transaction import (
    DateRangeFilter,
    Transaction,
    TransactionType,
)


def transactions_in_year(transactions: Iterable[Transaction], year: int) -> list[Transaction]:
    return [txn for txn in transactions if txn.date.year == year]


def transactions_in_month(
    transactions: Iterable[Transaction],
    year: int,
    month: int,
) -> list[Transaction]:
    return [
        txn for txn in transactions
        if txn.date.year == year and txn.date.month == month
    ]


def category_name_lookup(categories: Iterable[Category]) -> dict[str, str]:
    """Map category id to display name."""
    return {category.id: category.name for category in categories}


def filter_transactions(
    transactions: Iterable[Transaction],
    type: Optional[Union[TransactionType, str]] = None,
    category_id: Optional[str] = None,
    search: str = "",
    date_range: Union[DateRangeFilter, str] = DateRangeFilter.ALL,
    today: Optional[date] = None,
    category_names: Optional[Mapping[str, str]] = None,
) -> list[Transaction]:
    """
    Apply the transaction page filters.

    Args:
        type: Keep only this type
        category_id: Keep only this category
        search: Case-insensitive match against description and category name
        date_range: Keep transactions at most N days from `today`
            (today=0, week=7, month=30, year=365), in either direction
    """
    type = TransactionType(type) if type else None
    days = DateRangeFilter(date_range).days
    today = today or date.today()
    needle = search.strip().casefold()
    category_names = category_names or {}

    results = []
    for txn in transactions:
        if type and txn.type != type:
            continue
        if category_id and txn.category_id != category_id:
            continue
        if needle:
            haystack = f"{txn.description} {category_names.get(txn.category_id, '')}"
            if needle not in haystack.casefold():
                continue
        if days is not None and abs((today - txn.date).days) > days:
            continue
        results.append(txn)
    return results
