"""
In-Memory Document Store

Used by the test suite and as the fallback backend when Google Sheets
is not configured. Documents are deep-copied on the way in and out so
callers can never mutate stored state by accident.
"""

import copy
from typing import Optional
from uuid import uuid4

from finance_tracker.services.storage.interface import (
    Document,
    DocumentNotFoundError,
    DocumentStore,
    FieldFilter,
    PageCursor,
    run_query,
)


class InMemoryDocumentStore(DocumentStore):
    """Dict-of-dicts implementation of the document store."""

    def __init__(self):
        self._collections: dict[str, dict[str, Document]] = {}

    def _collection(self, name: str) -> dict[str, Document]:
        return self._collections.setdefault(name, {})

    async def add(self, collection: str, data: Document) -> str:
        doc_id = uuid4().hex
        doc = copy.deepcopy(data)
        doc["id"] = doc_id
        self._collection(collection)[doc_id] = doc
        return doc_id

    async def get(self, collection: str, doc_id: str) -> Optional[Document]:
        doc = self._collection(collection).get(doc_id)
        return copy.deepcopy(doc) if doc is not None else None

    async def update(self, collection: str, doc_id: str, fields: Document) -> Document:
        docs = self._collection(collection)
        if doc_id not in docs:
            raise DocumentNotFoundError(f"{collection}/{doc_id} not found")
        updated = {**docs[doc_id], **copy.deepcopy(fields), "id": doc_id}
        docs[doc_id] = updated
        return copy.deepcopy(updated)

    async def delete(self, collection: str, doc_id: str) -> bool:
        return self._collection(collection).pop(doc_id, None) is not None

    async def query(
        self,
        collection: str,
        filters: Optional[list[FieldFilter]] = None,
        order_by: Optional[str] = None,
        descending: bool = False,
        limit: Optional[int] = None,
        start_after: Optional[PageCursor] = None,
    ) -> list[Document]:
        docs = list(self._collection(collection).values())
        results = run_query(
            docs,
            filters=filters,
            order_by=order_by,
            descending=descending,
            limit=limit,
            start_after=start_after,
        )
        return copy.deepcopy(results)

    def count(self, collection: str) -> int:
        """Number of documents in a collection."""
        return len(self._collection(collection))
