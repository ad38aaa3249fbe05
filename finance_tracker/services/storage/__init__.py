"""
Storage Services Package

Provides the abstract document store interface and concrete backends.
Google Sheets is the hosted backend; the in-memory store backs tests
and unconfigured development runs.
"""

from finance_tracker.services.storage.interface import (
    Document,
    DocumentNotFoundError,
    DocumentStore,
    FieldFilter,
    PageCursor,
    StorageConnectionError,
    StorageError,
    run_query,
    where,
)
from finance_tracker.services.storage.memory import InMemoryDocumentStore
from finance_tracker.services.storage.google_sheets import (
    COLLECTION_COLUMNS,
    GoogleSheetsClient,
    GoogleSheetsDocumentStore,
)

__all__ = [
    # Interface
    "Document",
    "DocumentStore",
    "FieldFilter",
    "PageCursor",
    "run_query",
    "where",
    # Exceptions
    "DocumentNotFoundError",
    "StorageConnectionError",
    "StorageError",
    # Backends
    "COLLECTION_COLUMNS",
    "GoogleSheetsClient",
    "GoogleSheetsDocumentStore",
    "InMemoryDocumentStore",
]
