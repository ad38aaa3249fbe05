"""
Main Orchestrator for Finance Tracker

This module ties together all the components and defines the
flows behind the two read-heavy pages:
1. Dashboard (month summary + recent transactions page)
2. Reports (yearly summary, trend, cash flow, breakdowns, savings)

DESIGN DECISION: Flows do the store round trips; the reports package
does the arithmetic. A flow never computes a number itself, so every
figure on screen can be reproduced from the same transaction list.
"""

from typing import Optional

import structlog
from pydantic import BaseModel, ConfigDict

from finance_tracker.audit import AuditLogger
from finance_tracker.config import AppSettings, get_settings
from finance_tracker.models.report import DashboardView, YearlyReport
from finance_tracker.models.transaction import TransactionType
from finance_tracker.reports import (
    category_breakdown,
    monthly_trend,
    running_cash_balance,
    savings_breakdown,
    summary,
    transactions_in_month,
    transactions_in_year,
)
from finance_tracker.services.auth import DocumentStoreIdentityProvider, IdentityProvider
from finance_tracker.services.storage import (
    DocumentStore,
    GoogleSheetsClient,
    GoogleSheetsDocumentStore,
    InMemoryDocumentStore,
)
from finance_tracker.stores import CategoryStore, TodoStore, TransactionStore

logger = structlog.get_logger("finance_tracker.orchestrator")


class DashboardFlow:
    """
    Loads the dashboard for one month.

    Flow:
    1. Fetch the first page of recent transactions
    2. Fetch all transactions and keep the selected month
    3. Summarize the month
    """

    def __init__(
        self,
        transactions: TransactionStore,
        settings: Optional[AppSettings] = None,
    ):
        self._transactions = transactions
        self._settings = settings or get_settings().app

    async def load(
        self,
        owner_id: str,
        year: int,
        month: int,
        cursor: Optional[str] = None,
    ) -> DashboardView:
        recent = await self._transactions.list_recent(
            owner_id,
            cursor=cursor,
            page_size=self._settings.default_page_size,
        )
        everything = await self._transactions.list_all(owner_id)
        month_transactions = transactions_in_month(everything, year, month)

        return DashboardView(
            year=year,
            month=month,
            summary=summary(month_transactions),
            recent=recent,
        )


class ReportFlow:
    """
    Builds the yearly report.

    Category names are resolved once per load; transactions whose
    category has been deleted are reported as "Unknown Category".
    """

    def __init__(
        self,
        transactions: TransactionStore,
        categories: CategoryStore,
        settings: Optional[AppSettings] = None,
    ):
        self._transactions = transactions
        self._categories = categories
        self._settings = settings or get_settings().app

    async def load(self, owner_id: str, year: int) -> YearlyReport:
        everything = await self._transactions.list_all(owner_id)
        names = await self._categories.names_by_id(owner_id)
        year_transactions = transactions_in_year(everything, year)

        totals = summary(year_transactions)
        top_n = self._settings.breakdown_top_n

        return YearlyReport(
            year=year,
            summary=totals,
            monthly=monthly_trend(year_transactions, year),
            cash_flow=running_cash_balance(year_transactions, year),
            expense_breakdown=category_breakdown(
                year_transactions, TransactionType.EXPENSE, names, top_n
            ),
            income_breakdown=category_breakdown(
                year_transactions, TransactionType.INCOME, names, top_n
            ),
            savings=savings_breakdown(totals.net_balance),
        )


class AppComponents(BaseModel):
    """Everything the UI needs, built once per app session."""
    model_config = ConfigDict(arbitrary_types_allowed=True)

    db: DocumentStore
    audit_logger: AuditLogger
    categories: CategoryStore
    transactions: TransactionStore
    todos: TodoStore
    identity: IdentityProvider
    dashboard: DashboardFlow
    reports: ReportFlow
    # True when Sheets was configured but could not be reached
    storage_fallback: bool = False


def _open_document_store(use_storage: bool, settings: AppSettings) -> tuple[DocumentStore, bool]:
    """Return the store and whether it is an in-memory fallback."""
    if not use_storage or settings.storage_backend == "memory":
        return InMemoryDocumentStore(), False

    try:
        client = GoogleSheetsClient()
        client.connect()
        return GoogleSheetsDocumentStore(client), False
    except Exception as e:
        # Storage not configured - continue in memory
        logger.warning("storage_not_configured", error=str(e), fallback="memory")
        return InMemoryDocumentStore(), True


def create_app_components(use_storage: bool = True) -> AppComponents:
    """
    Factory function to create all application components.

    Args:
        use_storage: Whether to use the configured Google Sheets store.
                    Set to False for an in-memory store (tests, demos).
    """
    settings = get_settings().app
    db, storage_fallback = _open_document_store(use_storage, settings)
    audit_logger = AuditLogger(db)

    categories = CategoryStore(db, audit_logger, settings)
    transactions = TransactionStore(db, audit_logger, settings)
    todos = TodoStore(db, audit_logger)
    identity = DocumentStoreIdentityProvider(db, audit_logger=audit_logger)

    return AppComponents(
        db=db,
        audit_logger=audit_logger,
        categories=categories,
        transactions=transactions,
        todos=todos,
        identity=identity,
        dashboard=DashboardFlow(transactions, settings),
        reports=ReportFlow(transactions, categories, settings),
        storage_fallback=storage_fallback,
    )
