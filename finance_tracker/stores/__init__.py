"""
Record stores.

Owner-scoped CRUD over the document store, with input validation,
ownership checks and audit logging.
"""

from finance_tracker.stores.categories import CATEGORIES, CategoryStore
from finance_tracker.stores.errors import (
    DuplicateCategoryError,
    FinanceTrackerError,
    InvalidCategoryError,
    NetworkError,
    NotFoundError,
    ValidationError,
    translate_storage_errors,
    user_message,
)
from finance_tracker.stores.todos import TODOS, TodoStore
from finance_tracker.stores.transactions import TRANSACTIONS, TransactionStore

__all__ = [
    "CATEGORIES",
    "TODOS",
    "TRANSACTIONS",
    "CategoryStore",
    "TodoStore",
    "TransactionStore",
    "FinanceTrackerError",
    "ValidationError",
    "DuplicateCategoryError",
    "InvalidCategoryError",
    "NotFoundError",
    "NetworkError",
    "translate_storage_errors",
    "user_message",
]
