"""
Services package.

The identity provider lives in `finance_tracker.services.auth` and is
imported from there directly, since it depends on the audit logger.
"""

from finance_tracker.services.storage import (
    DocumentNotFoundError,
    DocumentStore,
    GoogleSheetsClient,
    GoogleSheetsDocumentStore,
    InMemoryDocumentStore,
    StorageConnectionError,
    StorageError,
)

__all__ = [
    # Storage services
    "DocumentNotFoundError",
    "DocumentStore",
    "GoogleSheetsClient",
    "GoogleSheetsDocumentStore",
    "InMemoryDocumentStore",
    "StorageConnectionError",
    "StorageError",
]
