"""
Transaction Store

CRUD over an owner's transactions plus the two listing modes:

- `list_recent`: newest-created first, cursor paginated
- `list_all`: everything, newest business date first, optional
  relative date window

The category reference is checked before every write. The check and
the write are separate round trips, so a category deleted in between
still leaves an orphaned reference behind.
"""

import time
from datetime import date, timedelta
from typing import Callable, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from finance_tracker.audit import AuditLogger
from finance_tracker.config import AppSettings, get_settings
from finance_tracker.models.category import utc_now
from finance_tracker.models.transaction import (
    DateRangeFilter,
    Transaction,
    TransactionInput,
    TransactionPage,
)
from finance_tracker.services.storage import DocumentStore, PageCursor, where
from finance_tracker.stores.base import OwnedRecordStore, parse_input, require_id
from finance_tracker.stores.categories import CATEGORIES
from finance_tracker.stores.errors import (
    InvalidCategoryError,
    ValidationError,
    translate_storage_errors,
)

TRANSACTIONS = "transactions"


def epoch_millis() -> int:
    return int(time.time() * 1000)


class TransactionStore(OwnedRecordStore):
    """Owner-scoped transaction records."""

    collection = TRANSACTIONS
    entity_type = "transaction"

    def __init__(
        self,
        db: DocumentStore,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[AppSettings] = None,
        clock: Callable[[], int] = epoch_millis,
    ):
        super().__init__(db, audit_logger)
        self._settings = settings or get_settings().app
        self._clock = clock

    @staticmethod
    def _to_fields(txn: TransactionInput) -> dict:
        """Persisted form: numeric amount, ISO date."""
        return {
            "type": txn.type.value,
            "category_id": txn.category_id,
            "amount": float(txn.amount),
            "description": txn.description,
            "date": txn.date.isoformat(),
        }

    async def _check_category(self, owner_id: str, txn: TransactionInput) -> None:
        """
        Confirm the category exists, is owned by the caller and matches
        the transaction type.
        """
        with translate_storage_errors("verify category"):
            doc = await self._db.get(CATEGORIES, txn.category_id)

        reason = None
        if doc is None:
            reason = "Category not found"
        elif doc.get("user_id") != owner_id:
            reason = "Category not found"
        elif doc.get("type") != txn.type.value:
            reason = f"Category is not an {txn.type.value} category"

        if reason:
            if self._audit:
                await self._audit.log_invalid_category(owner_id, txn.category_id, reason)
            raise InvalidCategoryError(reason)

    async def add(self, owner_id: str, data: Union[TransactionInput, dict]) -> Transaction:
        """
        Record a transaction.

        Raises:
            ValidationError: Malformed input
            InvalidCategoryError: Category missing, not owned, or wrong type
            NetworkError: Store call failed
        """
        require_id(owner_id, "User ID")
        txn = parse_input(TransactionInput, data)
        await self._check_category(owner_id, txn)

        doc = {
            **self._to_fields(txn),
            "user_id": owner_id,
            "created_at": self._clock(),
            "updated_at": utc_now().isoformat(),
        }
        with translate_storage_errors("add transaction"):
            transaction_id = await self._db.add(TRANSACTIONS, doc)

        if self._audit:
            await self._audit.log_added(
                "transaction",
                transaction_id,
                owner_id,
                {"type": doc["type"], "amount": str(txn.amount)},
            )
        return Transaction(id=transaction_id, **doc)

    async def get(self, owner_id: str, transaction_id: str) -> Transaction:
        """Fetch one owned transaction or raise NotFoundError."""
        doc = await self._fetch_owned(owner_id, transaction_id, "read")
        return Transaction.model_validate(doc)

    def _parse_docs(self, docs: list[dict]) -> list[Transaction]:
        transactions = []
        for doc in docs:
            try:
                transactions.append(Transaction.model_validate(doc))
            except PydanticValidationError:
                continue  # Skip malformed records
        return transactions

    async def list_recent(
        self,
        owner_id: str,
        cursor: Optional[str] = None,
        page_size: Optional[int] = None,
    ) -> TransactionPage:
        """
        One page of the owner's transactions, most recently created first.

        Pass the returned `cursor` back to get the next page.
        """
        require_id(owner_id, "User ID")
        if page_size is None:
            page_size = self._settings.default_page_size
        if page_size < 1:
            raise ValidationError("Page size must be at least 1")

        start_after = None
        if cursor:
            try:
                start_after = PageCursor.decode(cursor)
            except ValueError as e:
                raise ValidationError(str(e)) from e

        with translate_storage_errors("fetch transactions"):
            docs = await self._db.query(
                TRANSACTIONS,
                [where("user_id", "==", owner_id)],
                order_by="created_at",
                descending=True,
                limit=page_size,
                start_after=start_after,
            )

        next_cursor = PageCursor.after(docs[-1], "created_at").encode() if docs else None
        return TransactionPage(
            items=self._parse_docs(docs),
            cursor=next_cursor,
            has_more=len(docs) == page_size,
        )

    async def list_all(
        self,
        owner_id: str,
        date_range: Union[DateRangeFilter, str] = DateRangeFilter.ALL,
        today: Optional[date] = None,
    ) -> list[Transaction]:
        """
        Every owned transaction, newest business date first.

        `date_range` keeps transactions dated on or after today minus
        0/7/30/365 days for today/week/month/year.
        """
        require_id(owner_id, "User ID")
        try:
            date_range = DateRangeFilter(date_range)
        except ValueError:
            raise ValidationError(f"Unknown date range: {date_range}")

        filters = [where("user_id", "==", owner_id)]
        if date_range.days is not None:
            cutoff = (today or date.today()) - timedelta(days=date_range.days)
            filters.append(where("date", ">=", cutoff.isoformat()))

        with translate_storage_errors("fetch transactions"):
            docs = await self._db.query(
                TRANSACTIONS,
                filters,
                order_by="date",
                descending=True,
            )
        return self._parse_docs(docs)

    async def update(
        self,
        owner_id: str,
        transaction_id: str,
        data: Union[TransactionInput, dict],
    ) -> Transaction:
        """
        Replace every editable field of an owned transaction.

        Raises:
            NotFoundError: Transaction missing or owned by someone else
            InvalidCategoryError: New category missing, not owned, or wrong type
        """
        txn = parse_input(TransactionInput, data)
        await self._fetch_owned(owner_id, transaction_id, "update")
        await self._check_category(owner_id, txn)

        fields = {**self._to_fields(txn), "updated_at": utc_now().isoformat()}
        with translate_storage_errors("update transaction"):
            updated = await self._db.update(TRANSACTIONS, transaction_id, fields)

        if self._audit:
            await self._audit.log_updated(
                "transaction", transaction_id, owner_id, {"amount": str(txn.amount)}
            )
        return Transaction.model_validate(updated)

    async def delete(self, owner_id: str, transaction_id: str) -> None:
        """Delete an owned transaction or raise NotFoundError."""
        await self._delete_owned(owner_id, transaction_id)
