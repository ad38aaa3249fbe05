"""
Tests for Finance Tracker models

Test strategy:
1. Unit tests for individual components (models, key derivation)
2. Store and flow tests run on the in-memory document store
3. No real API calls in tests (a fake worksheet stands in for Sheets)
"""

import pytest
from datetime import date, datetime, timedelta, timezone
from decimal import Decimal

from finance_tracker.models.category import (
    Category,
    CategoryGroups,
    CategoryInput,
    CategoryStatus,
    CategoryType,
    derive_category_key,
)
from finance_tracker.models.transaction import (
    DateRangeFilter,
    Transaction,
    TransactionInput,
    TransactionType,
)
from finance_tracker.models.todo import Todo, TodoHistoryEntry, TodoStatus, TodoUpdate
from finance_tracker.models.user import AuthSession, User
from finance_tracker.models.report import TodoStats
from finance_tracker.models.audit import (
    AuditEvent,
    AuditEventBuilder,
    AuditEventType,
    AuditSeverity,
)


class TestCategoryKey:
    """Tests for the per-owner uniqueness key."""

    def test_basic_key(self):
        """Test type prefix and upper-cased name."""
        assert derive_category_key("expense", "Groceries") == "EXPENSE_GROCERIES"

    def test_whitespace_becomes_underscore(self):
        """Test that inner whitespace runs collapse into one underscore."""
        assert derive_category_key("income", "  side   hustle ") == "INCOME_SIDE_HUSTLE"

    def test_punctuation_is_dropped(self):
        """Test that characters outside A-Z, 0-9 and _ are removed."""
        assert derive_category_key("expense", "Food & Dining!") == "EXPENSE_FOOD__DINING"

    def test_normalisation_is_stable(self):
        """Test that spelling variants of a name give the same key."""
        variants = ["Food", "food", "  FOOD ", "fOoD"]
        keys = {derive_category_key("expense", name) for name in variants}
        assert keys == {"EXPENSE_FOOD"}

    def test_type_is_part_of_key(self):
        """Test that the same name under both types gives two keys."""
        assert derive_category_key("expense", "Gifts") != derive_category_key("income", "Gifts")

    def test_accepts_enum_type(self):
        assert derive_category_key(CategoryType.INCOME, "Salary") == "INCOME_SALARY"


class TestCategoryModels:
    """Tests for category Pydantic models."""

    def test_input_type_is_case_insensitive(self):
        """Test that 'EXPENSE' is accepted as a type."""
        category = CategoryInput(name="Rent", type="EXPENSE")
        assert category.type == CategoryType.EXPENSE
        assert category.status == CategoryStatus.ACTIVE

    def test_input_strips_whitespace(self):
        """Test that whitespace is stripped from the name."""
        category = CategoryInput(name="  Rent  ", type="expense")
        assert category.name == "Rent"
        assert category.category_key == "EXPENSE_RENT"

    def test_input_rejects_unknown_type(self):
        with pytest.raises(ValueError):
            CategoryInput(name="Rent", type="transfer")

    def test_stored_category_derives_missing_key(self):
        """Test that records without a stored key get one on read."""
        category = Category(id="c1", user_id="u1", name="Fuel", type="expense")
        assert category.category_key == "EXPENSE_FUEL"

    def test_stored_key_is_kept(self):
        category = Category(
            id="c1", user_id="u1", name="Fuel", type="expense", category_key="EXPENSE_PETROL"
        )
        assert category.category_key == "EXPENSE_PETROL"

    def test_groups(self):
        """Test CategoryGroups partition helpers."""
        rent = Category(id="c1", user_id="u1", name="Rent", type="expense")
        pay = Category(id="c2", user_id="u1", name="Pay", type="income")
        groups = CategoryGroups(expense=[rent], income=[pay])

        assert groups.for_type(CategoryType.INCOME) == [pay]
        assert groups.all() == [rent, pay]
        assert groups.find("c2") is pay
        assert groups.find("missing") is None


class TestTransactionModels:
    """Tests for transaction Pydantic models."""

    def test_input_creation(self):
        """Test TransactionInput model creation."""
        txn = TransactionInput(
            type="income",
            category_id="c1",
            amount="1000.00",
            date="2024-01-15",
        )
        assert txn.type == TransactionType.INCOME
        assert txn.amount == Decimal("1000.00")
        assert txn.date == date(2024, 1, 15)
        assert txn.description == ""

    def test_input_rejects_non_positive_amount(self):
        """Test that zero and negative amounts are rejected."""
        for amount in ("0", "-5"):
            with pytest.raises(ValueError):
                TransactionInput(type="expense", category_id="c1", amount=amount, date="2024-01-01")

    def test_input_rejects_missing_category(self):
        with pytest.raises(ValueError):
            TransactionInput(type="expense", category_id="", amount="5", date="2024-01-01")

    def test_input_truncates_datetimes(self):
        """Test that ISO datetimes and datetime objects keep only the date."""
        from_string = TransactionInput(
            type="expense", category_id="c1", amount="5", date="2024-03-02T18:30:00Z"
        )
        from_datetime = TransactionInput(
            type="expense", category_id="c1", amount="5", date=datetime(2024, 3, 2, 9, 0)
        )
        assert from_string.date == date(2024, 3, 2)
        assert from_datetime.date == date(2024, 3, 2)

    def test_stored_transaction_from_document(self):
        """Test that a persisted document (float amount, ISO date) parses."""
        txn = Transaction.model_validate({
            "id": "t1",
            "user_id": "u1",
            "type": "expense",
            "category_id": "c1",
            "amount": 12.5,
            "description": "Lunch",
            "date": "2024-02-10",
            "created_at": 1_700_000_000_000,
            "updated_at": "2024-02-10T12:00:00+00:00",
        })
        assert txn.amount == Decimal("12.5")
        assert txn.date == date(2024, 2, 10)
        assert not txn.is_income

    def test_date_range_windows(self):
        """Test the day counts behind each date range filter."""
        assert DateRangeFilter.ALL.days is None
        assert DateRangeFilter.TODAY.days == 0
        assert DateRangeFilter.WEEK.days == 7
        assert DateRangeFilter.MONTH.days == 30
        assert DateRangeFilter.YEAR.days == 365


class TestTodoModels:
    """Tests for todo Pydantic models."""

    def test_defaults(self):
        todo = Todo(id="t1", user_id="u1", text="Pay rent")
        assert todo.status == TodoStatus.PENDING
        assert todo.completed is False
        assert todo.prev_status is None
        assert todo.history == []

    def test_status_values(self):
        """Test the stored string for each status."""
        assert [s.value for s in TodoStatus] == ["pending", "in-progress", "completed", "urgent"]

    def test_history_entries_are_frozen(self):
        entry = TodoHistoryEntry(status=TodoStatus.URGENT, note="Escalated")
        with pytest.raises(ValueError):
            entry.note = "Changed"

    def test_update_tracks_explicit_fields(self):
        """Test that only explicitly set fields are dumped."""
        update = TodoUpdate(due_date=None)
        assert update.model_dump(exclude_unset=True) == {"due_date": None}

    def test_update_rejects_empty_text(self):
        with pytest.raises(ValueError):
            TodoUpdate(text="   ")

    def test_todo_stats_open(self):
        stats = TodoStats(total=5, pending=2, in_progress=1, urgent=1, completed=1)
        assert stats.open == 3


class TestUserModels:
    """Tests for identity models."""

    def test_email_is_lowercased(self):
        user = User(id="u1", email="  Alice@Example.COM ")
        assert user.email == "alice@example.com"

    def test_email_requires_at_sign(self):
        with pytest.raises(ValueError):
            User(id="u1", email="not-an-email")

    def test_password_hash_hidden_from_repr(self):
        user = User(id="u1", email="a@b.c", password_hash="secret-hash")
        assert "secret-hash" not in repr(user)

    def test_session_expiry(self):
        issued = datetime(2024, 1, 1, tzinfo=timezone.utc)
        session = AuthSession(
            token="t",
            user_id="u1",
            email="a@b.c",
            issued_at=issued,
            expires_at=issued + timedelta(minutes=30),
        )
        assert not session.is_expired(issued + timedelta(minutes=29))
        assert session.is_expired(issued + timedelta(minutes=30))


class TestAuditModels:
    """Tests for audit-related models."""

    def test_audit_event_creation(self):
        """Test AuditEvent model creation."""
        event = AuditEvent(
            event_type=AuditEventType.CATEGORY_ADDED,
            description="Category added",
        )
        assert event.event_type == AuditEventType.CATEGORY_ADDED
        assert event.severity == AuditSeverity.INFO

    def test_audit_event_to_log_dict(self):
        """Test conversion to log dictionary."""
        event = AuditEvent(
            event_type=AuditEventType.TRANSACTION_ADDED,
            description="Transaction added",
            details={"amount": "1000"},
        )
        log_dict = event.to_log_dict()
        assert "event_id" in log_dict
        assert log_dict["event_type"] == "transaction_added"
        assert log_dict["details"]["amount"] == "1000"

    def test_audit_event_to_document(self):
        """Test that the stored document leaves id assignment to the store."""
        event = AuditEvent(
            event_type=AuditEventType.ACCESS_DENIED,
            description="Denied",
        )
        doc = event.to_document()
        assert "event_id" not in doc
        assert doc["event_type"] == "access_denied"

    def test_builder_record_added(self):
        """Test AuditEventBuilder.record_added."""
        event = AuditEventBuilder.record_added("todo", "t1", "u1")
        assert event.event_type == AuditEventType.TODO_ADDED
        assert event.entity_type == "todo"
        assert event.entity_id == "t1"
        assert event.user_id == "u1"

    def test_builder_duplicate_category(self):
        """Test AuditEventBuilder.duplicate_category."""
        event = AuditEventBuilder.duplicate_category("u1", "EXPENSE_FOOD")
        assert event.event_type == AuditEventType.DUPLICATE_CATEGORY_REJECTED
        assert event.severity == AuditSeverity.WARNING
        assert event.details["category_key"] == "EXPENSE_FOOD"
