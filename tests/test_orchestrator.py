"""Tests for the dashboard and report flows."""

from decimal import Decimal

import pytest

from conftest import OWNER, run

from finance_tracker import orchestrator
from finance_tracker.config import AppSettings
from finance_tracker.orchestrator import (
    AppComponents,
    DashboardFlow,
    ReportFlow,
    create_app_components,
)
from finance_tracker.services.storage import InMemoryDocumentStore


@pytest.fixture
def seeded(categories, transactions, groceries, salary):
    """The 2024 scenario: January +1000/-300, February -200."""
    rent = run(categories.add(OWNER, {"name": "Rent", "type": "expense"}))
    for category, type_, amount, day in [
        (salary, "income", "1000", "2024-01-05"),
        (groceries, "expense", "300", "2024-01-20"),
        (rent, "expense", "200", "2024-02-03"),
        (groceries, "expense", "75", "2023-12-30"),
    ]:
        run(transactions.add(OWNER, {
            "type": type_,
            "category_id": category.id,
            "amount": amount,
            "date": day,
        }))
    return rent


class TestDashboardFlow:
    def test_month_summary_and_recent_page(self, transactions, app_settings, seeded):
        flow = DashboardFlow(transactions, app_settings)
        view = run(flow.load(OWNER, 2024, 1))

        assert view.summary.total_income == Decimal("1000")
        assert view.summary.total_expenses == Decimal("300")
        assert view.summary.net_balance == Decimal("700")
        # The recent list is not limited to the selected month
        assert len(view.recent.items) == 4
        assert view.recent.has_more is False


class TestReportFlow:
    def test_yearly_report(self, transactions, categories, app_settings, seeded):
        flow = ReportFlow(transactions, categories, app_settings)
        report = run(flow.load(OWNER, 2024))

        assert report.summary.net_balance == Decimal("500")
        assert report.monthly[0].net == Decimal("700")
        assert report.monthly[1].net == Decimal("-200")
        assert report.cash_flow.balance_by_month[:2] == [Decimal("700"), Decimal("500")]
        assert [s.name for s in report.expense_breakdown] == ["Groceries", "Rent"]
        assert [s.percentage for s in report.expense_breakdown] == [60.0, 40.0]
        assert [s.name for s in report.income_breakdown] == ["Salary"]
        assert report.savings[0].amount == Decimal("200.00")

    def test_deleted_category_reported_as_unknown(
        self, transactions, categories, app_settings, seeded
    ):
        run(categories.delete(OWNER, seeded.id))
        report = run(ReportFlow(transactions, categories, app_settings).load(OWNER, 2024))
        assert "Unknown Category" in [s.name for s in report.expense_breakdown]


class TestCreateAppComponents:
    def test_in_memory_components(self):
        components = create_app_components(use_storage=False)

        assert isinstance(components, AppComponents)
        assert isinstance(components.db, InMemoryDocumentStore)

    def test_components_share_one_store(self):
        components = create_app_components(use_storage=False)

        session = run(components.identity.sign_up("carol@example.com", "secret99"))
        category = run(components.categories.add(
            session.user_id, {"name": "Books", "type": "expense"}
        ))
        run(components.transactions.add(session.user_id, {
            "type": "expense",
            "category_id": category.id,
            "amount": "18",
            "date": "2024-04-01",
        }))

        report = run(components.reports.load(session.user_id, 2024))
        assert report.summary.total_expenses == Decimal("18")

    def test_memory_requested_is_not_a_fallback(self):
        components = create_app_components(use_storage=False)
        assert components.storage_fallback is False


class UnreachableSheetsClient:
    def connect(self):
        raise ConnectionError("sheets unreachable")


class TestOpenDocumentStore:
    def test_unreachable_sheets_falls_back_to_memory(self, monkeypatch):
        """A configured but failing Sheets backend is flagged as a fallback."""
        monkeypatch.setattr(orchestrator, "GoogleSheetsClient", UnreachableSheetsClient)
        settings = AppSettings(storage_backend="google_sheets")

        db, fell_back = orchestrator._open_document_store(True, settings)

        assert isinstance(db, InMemoryDocumentStore)
        assert fell_back is True

    def test_memory_backend_is_not_a_fallback(self):
        db, fell_back = orchestrator._open_document_store(True, AppSettings(storage_backend="memory"))

        assert isinstance(db, InMemoryDocumentStore)
        assert fell_back is False
