"""
Data Models Package

This package contains all Pydantic models used in the Finance Tracker.
All data crossing the store boundary must conform to these schemas.
"""

from finance_tracker.models.category import (
    Category,
    CategoryGroups,
    CategoryInput,
    CategoryStatus,
    CategoryType,
    derive_category_key,
    utc_now,
)
from finance_tracker.models.transaction import (
    DateRangeFilter,
    Transaction,
    TransactionInput,
    TransactionPage,
    TransactionType,
)
from finance_tracker.models.todo import (
    Todo,
    TodoHistoryEntry,
    TodoSortKey,
    TodoStatus,
    TodoUpdate,
)
from finance_tracker.models.user import AuthSession, User
from finance_tracker.models.report import (
    CashFlowReport,
    CategoryShare,
    DashboardView,
    FinancialSummary,
    MonthlyTotals,
    SavingsAllocation,
    TodoStats,
    YearlyReport,
)
from finance_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)

__all__ = [
    # Category models
    "Category",
    "CategoryGroups",
    "CategoryInput",
    "CategoryStatus",
    "CategoryType",
    "derive_category_key",
    "utc_now",
    # Transaction models
    "DateRangeFilter",
    "Transaction",
    "TransactionInput",
    "TransactionPage",
    "TransactionType",
    # Todo models
    "Todo",
    "TodoHistoryEntry",
    "TodoSortKey",
    "TodoStatus",
    "TodoUpdate",
    # Identity
    "AuthSession",
    "User",
    # Reports
    "CashFlowReport",
    "CategoryShare",
    "DashboardView",
    "FinancialSummary",
    "MonthlyTotals",
    "SavingsAllocation",
    "TodoStats",
    "YearlyReport",
    # Audit models
    "AuditEvent",
    "AuditEventBuilder",
    "AuditEventType",
    "AuditSeverity",
]
