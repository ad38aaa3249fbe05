"""
Abstract Document Store Interface

DESIGN DECISION: We define an abstract interface for storage operations.
This allows us to:
1. Swap Google Sheets for a managed document database later
2. Use in-memory storage for testing
3. Keep the stores decoupled from the storage implementation

The interface is intentionally small - a document is a flat dict of
JSON-safe values with a store-assigned string "id". Collections support
equality/range filters, ordering on one field and cursor pagination.

Query evaluation (filter, order, page) lives in `run_query` so every
backend that filters in Python behaves identically.
"""

import base64
import json
from abc import ABC, abstractmethod
from typing import Any, Literal, Optional

from pydantic import BaseModel, ValidationError as PydanticValidationError


Document = dict[str, Any]

FilterOp = Literal["==", "!=", "<", "<=", ">", ">="]


class FieldFilter(BaseModel):
    """A single predicate on a document field."""

    field: str
    op: FilterOp = "=="
    value: Any = None

    def matches(self, doc: Document) -> bool:
        actual = doc.get(self.field)
        if self.op == "==":
            return actual == self.value
        if self.op == "!=":
            return actual != self.value
        # Range predicates never match a missing value
        if actual is None or self.value is None:
            return False
        try:
            if self.op == "<":
                return actual < self.value
            if self.op == "<=":
                return actual <= self.value
            if self.op == ">":
                return actual > self.value
            return actual >= self.value
        except TypeError:
            return False


def where(field: str, op: FilterOp, value: Any) -> FieldFilter:
    """Shorthand for building a FieldFilter."""
    return FieldFilter(field=field, op=op, value=value)


class PageCursor(BaseModel):
    """Sort position of the last document on a page."""

    value: Any = None
    doc_id: str

    def encode(self) -> str:
        raw = json.dumps({"v": self.value, "id": self.doc_id}).encode("utf-8")
        return base64.urlsafe_b64encode(raw).decode("ascii")

    @classmethod
    def decode(cls, token: str) -> "PageCursor":
        """
        Parse a token produced by `encode`.

        Raises:
            ValueError: If the token is malformed
        """
        try:
            raw = json.loads(base64.urlsafe_b64decode(token.encode("ascii")))
            return cls(value=raw["v"], doc_id=raw["id"])
        except (ValueError, KeyError, TypeError, PydanticValidationError) as e:
            raise ValueError(f"Malformed page cursor: {token!r}") from e

    @classmethod
    def after(cls, doc: Document, order_by: Optional[str]) -> "PageCursor":
        return cls(
            value=doc.get(order_by) if order_by else None,
            doc_id=doc["id"],
        )


def _sort_key(value: Any, doc_id: str) -> tuple:
    # Missing values sort before present ones; id breaks ties
    return (value is not None, value, doc_id)


def run_query(
    docs: list[Document],
    filters: Optional[list[FieldFilter]] = None,
    order_by: Optional[str] = None,
    descending: bool = False,
    limit: Optional[int] = None,
    start_after: Optional[PageCursor] = None,
) -> list[Document]:
    """
    Evaluate a query over an in-memory list of documents.

    Ordering is on `order_by` with the document id as tie-breaker, so
    pagination with `start_after` neither skips nor repeats documents
    as long as the collection does not change between pages.
    """
    matched = [
        doc for doc in docs
        if all(f.matches(doc) for f in (filters or []))
    ]

    def key(doc: Document) -> tuple:
        return _sort_key(doc.get(order_by) if order_by else None, doc["id"])

    matched.sort(key=key, reverse=descending)

    if start_after is not None:
        cursor_key = _sort_key(start_after.value, start_after.doc_id)
        if descending:
            matched = [doc for doc in matched if key(doc) < cursor_key]
        else:
            matched = [doc for doc in matched if key(doc) > cursor_key]

    if limit is not None:
        matched = matched[:limit]

    return matched


class DocumentStore(ABC):
    """
    Abstract interface for a hosted document store.

    Any storage implementation (Google Sheets, Firestore, etc.)
    must implement these methods.
    """

    @abstractmethod
    async def add(self, collection: str, data: Document) -> str:
        """
        Insert a new document.

        Args:
            collection: Collection name
            data: Document fields (without "id")

        Returns:
            The store-assigned document id

        Raises:
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def get(self, collection: str, doc_id: str) -> Optional[Document]:
        """
        Fetch a document by id.

        Returns:
            The document including its "id", or None if missing
        """
        pass

    @abstractmethod
    async def update(self, collection: str, doc_id: str, fields: Document) -> Document:
        """
        Merge `fields` into an existing document.

        Returns:
            The document after the update

        Raises:
            DocumentNotFoundError: If the document doesn't exist
            StorageError: If the write fails
        """
        pass

    @abstractmethod
    async def delete(self, collection: str, doc_id: str) -> bool:
        """
        Delete a document by id.

        Returns:
            True if a document was deleted, False if it didn't exist
        """
        pass

    @abstractmethod
    async def query(
        self,
        collection: str,
        filters: Optional[list[FieldFilter]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
        start_after: Optional[PageCursor] = None,
    ) -> list[Document]:
        """
        List documents matching all filters.

        Args:
            collection: Collection name
            filters: Predicates that must all hold
            order_by: Field to order by (ties broken by id)
            descending: Reverse the ordering
            limit: Maximum number of results
            start_after: Resume after this sort position

        Returns:
            Matching documents in order
        """
        pass


class StorageError(Exception):
    """Base exception for storage operations."""
    pass


class DocumentNotFoundError(StorageError):
    """Document not found in storage."""
    pass


class StorageConnectionError(StorageError):
    """Could not connect to storage backend."""
    pass
