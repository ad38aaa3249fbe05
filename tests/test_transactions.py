"""Tests for the transaction store."""

from datetime import date
from decimal import Decimal

import pytest

from conftest import OTHER_OWNER, OWNER, run

from finance_tracker.models import TransactionType
from finance_tracker.services.storage import PageCursor
from finance_tracker.stores import (
    TRANSACTIONS,
    InvalidCategoryError,
    NotFoundError,
    ValidationError,
)


def expense(category, amount="10.00", day="2024-01-10", description=""):
    return {
        "type": "expense",
        "category_id": category.id,
        "amount": amount,
        "description": description,
        "date": day,
    }


class TestAddTransaction:
    """Tests for TransactionStore.add."""

    def test_add(self, transactions, groceries):
        txn = run(transactions.add(OWNER, expense(groceries, "42.50", description="Market")))

        assert txn.id
        assert txn.user_id == OWNER
        assert txn.type == TransactionType.EXPENSE
        assert txn.amount == Decimal("42.50")
        assert txn.date == date(2024, 1, 10)
        assert txn.created_at > 0

    def test_persisted_form(self, transactions, groceries, db):
        """Test that amount is stored as a number and date as ISO text."""
        txn = run(transactions.add(OWNER, expense(groceries, "42.50")))
        doc = run(db.get(TRANSACTIONS, txn.id))

        assert doc["amount"] == 42.5
        assert doc["date"] == "2024-01-10"
        assert isinstance(doc["created_at"], int)

    def test_unknown_category_rejected(self, transactions, groceries, db):
        bogus = groceries.model_copy(update={"id": "does-not-exist"})
        with pytest.raises(InvalidCategoryError):
            run(transactions.add(OWNER, expense(bogus)))
        assert db.count(TRANSACTIONS) == 0

    def test_type_mismatch_rejected(self, transactions, salary):
        """Test that an expense can't be filed under an income category."""
        with pytest.raises(InvalidCategoryError):
            run(transactions.add(OWNER, expense(salary)))

    def test_other_owners_category_rejected(self, transactions, categories):
        foreign = run(categories.add(OTHER_OWNER, {"name": "Groceries", "type": "expense"}))
        with pytest.raises(InvalidCategoryError):
            run(transactions.add(OWNER, expense(foreign)))

    def test_invalid_amount_rejected(self, transactions, groceries):
        with pytest.raises(ValidationError):
            run(transactions.add(OWNER, expense(groceries, "-3")))

    def test_missing_date_rejected(self, transactions, groceries):
        data = expense(groceries)
        del data["date"]
        with pytest.raises(ValidationError):
            run(transactions.add(OWNER, data))


class TestListRecent:
    """Tests for cursor pagination over recent transactions."""

    def _add_many(self, transactions, category, n):
        return [
            run(transactions.add(OWNER, expense(category, str(i + 1))))
            for i in range(n)
        ]

    def _pages(self, transactions, page_size=10, max_pages=10):
        pages = []
        cursor = None
        for _ in range(max_pages):
            page = run(transactions.list_recent(OWNER, cursor=cursor, page_size=page_size))
            pages.append(page)
            if not page.has_more:
                break
            cursor = page.cursor
        return pages

    def test_twenty_five_items(self, transactions, groceries):
        added = self._add_many(transactions, groceries, 25)

        pages = self._pages(transactions)

        assert [len(p.items) for p in pages] == [10, 10, 5]
        assert [p.has_more for p in pages] == [True, True, False]

        ids = [txn.id for page in pages for txn in page.items]
        assert len(set(ids)) == 25
        # Newest created first
        assert ids == [txn.id for txn in reversed(added)]

    def test_exact_multiple_has_trailing_empty_page(self, transactions, groceries):
        """Test that a full last page still reports has_more."""
        self._add_many(transactions, groceries, 20)

        pages = self._pages(transactions)

        assert [len(p.items) for p in pages] == [10, 10, 0]
        assert [p.has_more for p in pages] == [True, True, False]

    def test_empty(self, transactions):
        page = run(transactions.list_recent(OWNER))
        assert page.items == []
        assert page.has_more is False
        assert page.cursor is None

    def test_scoped_to_owner(self, transactions, groceries, categories):
        foreign = run(categories.add(OTHER_OWNER, {"name": "Fuel", "type": "expense"}))
        run(transactions.add(OWNER, expense(groceries)))
        run(transactions.add(OTHER_OWNER, expense(foreign)))

        page = run(transactions.list_recent(OWNER))
        assert [txn.user_id for txn in page.items] == [OWNER]

    def test_cursor_is_opaque_token(self, transactions, groceries):
        self._add_many(transactions, groceries, 3)
        page = run(transactions.list_recent(OWNER, page_size=2))

        cursor = PageCursor.decode(page.cursor)
        assert cursor.doc_id == page.items[-1].id
        assert cursor.value == page.items[-1].created_at

    def test_malformed_cursor(self, transactions):
        with pytest.raises(ValidationError):
            run(transactions.list_recent(OWNER, cursor="not a cursor"))

    def test_default_page_size(self, transactions, groceries):
        self._add_many(transactions, groceries, 12)
        page = run(transactions.list_recent(OWNER))
        assert len(page.items) == 10

    @pytest.mark.parametrize("page_size", [0, -1])
    def test_page_size_below_one_rejected(self, transactions, page_size):
        with pytest.raises(ValidationError, match="at least 1"):
            run(transactions.list_recent(OWNER, page_size=page_size))


class TestListAll:
    """Tests for TransactionStore.list_all."""

    TODAY = date(2024, 6, 30)

    @pytest.fixture
    def dated(self, transactions, groceries):
        for day in ["2024-06-05", "2023-01-01", "2024-06-30", "2024-01-15", "2024-06-25"]:
            run(transactions.add(OWNER, expense(groceries, day=day)))

    @pytest.mark.parametrize(
        "date_range, expected",
        [
            ("all", 5),
            ("today", 1),
            ("week", 2),
            ("month", 3),
            ("year", 4),
        ],
    )
    def test_date_ranges(self, transactions, dated, date_range, expected):
        result = run(transactions.list_all(OWNER, date_range, today=self.TODAY))
        assert len(result) == expected

    def test_ordered_by_business_date(self, transactions, dated):
        result = run(transactions.list_all(OWNER, today=self.TODAY))
        assert [txn.date.isoformat() for txn in result] == [
            "2024-06-30",
            "2024-06-25",
            "2024-06-05",
            "2024-01-15",
            "2023-01-01",
        ]

    def test_unknown_range(self, transactions):
        with pytest.raises(ValidationError):
            run(transactions.list_all(OWNER, "decade"))


class TestUpdateTransaction:
    """Tests for TransactionStore.update."""

    def test_update(self, transactions, groceries):
        txn = run(transactions.add(OWNER, expense(groceries, "10")))
        updated = run(transactions.update(
            OWNER, txn.id, expense(groceries, "15.25", day="2024-02-01", description="Fixed")
        ))

        assert updated.amount == Decimal("15.25")
        assert updated.date == date(2024, 2, 1)
        assert updated.description == "Fixed"
        assert updated.created_at == txn.created_at

    def test_other_owner_cannot_update(self, transactions, groceries):
        txn = run(transactions.add(OWNER, expense(groceries, "10")))

        with pytest.raises(NotFoundError):
            run(transactions.update(OTHER_OWNER, txn.id, expense(groceries, "999")))

        assert run(transactions.get(OWNER, txn.id)).amount == Decimal("10")

    def test_category_revalidated(self, transactions, groceries, salary):
        txn = run(transactions.add(OWNER, expense(groceries)))
        with pytest.raises(InvalidCategoryError):
            run(transactions.update(OWNER, txn.id, expense(salary)))

    def test_missing_transaction(self, transactions, groceries):
        with pytest.raises(NotFoundError):
            run(transactions.update(OWNER, "nope", expense(groceries)))

    def test_invalid_input_rejected_before_lookup(self, transactions, groceries):
        txn = run(transactions.add(OWNER, expense(groceries, "10")))

        with pytest.raises(ValidationError):
            run(transactions.update(OTHER_OWNER, txn.id, expense(groceries, "-5")))
        with pytest.raises(ValidationError):
            run(transactions.update(OWNER, "nope", expense(groceries, "abc")))


class TestDeleteTransaction:
    """Tests for TransactionStore.delete."""

    def test_delete(self, transactions, groceries, db):
        txn = run(transactions.add(OWNER, expense(groceries)))
        run(transactions.delete(OWNER, txn.id))
        assert db.count(TRANSACTIONS) == 0

    def test_other_owner_cannot_delete(self, transactions, groceries, db):
        txn = run(transactions.add(OWNER, expense(groceries)))
        with pytest.raises(NotFoundError):
            run(transactions.delete(OTHER_OWNER, txn.id))
        assert db.count(TRANSACTIONS) == 1

    def test_orphaned_after_category_delete(self, transactions, categories, groceries):
        """Test that deleting a category leaves its transactions in place."""
        txn = run(transactions.add(OWNER, expense(groceries)))
        run(categories.delete(OWNER, groceries.id))

        remaining = run(transactions.list_all(OWNER))
        assert [t.id for t in remaining] == [txn.id]
        assert remaining[0].category_id == groceries.id
