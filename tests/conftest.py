"""
Shared fixtures.

All store tests run against the in-memory document store; async
operations are driven with `run`, a thin wrapper over asyncio.run.
"""

import asyncio
from itertools import count

import pytest

from finance_tracker.audit import AuditLogger
from finance_tracker.config import AppSettings, AuthSettings
from finance_tracker.services.storage import InMemoryDocumentStore
from finance_tracker.stores import CategoryStore, TodoStore, TransactionStore

OWNER = "user-alice"
OTHER_OWNER = "user-bob"


def run(coro):
    """Run a coroutine to completion."""
    return asyncio.run(coro)


@pytest.fixture
def app_settings():
    return AppSettings(storage_backend="memory")


@pytest.fixture
def auth_settings():
    return AuthSettings(session_ttl_minutes=30, min_password_length=6)


@pytest.fixture
def db():
    return InMemoryDocumentStore()


@pytest.fixture
def audit_logger(db):
    return AuditLogger(db)


@pytest.fixture
def categories(db, audit_logger, app_settings):
    return CategoryStore(db, audit_logger, app_settings)


@pytest.fixture
def transactions(db, audit_logger, app_settings):
    # Strictly increasing creation stamps, one millisecond apart
    ticks = count(1_700_000_000_000)
    return TransactionStore(db, audit_logger, app_settings, clock=lambda: next(ticks))


@pytest.fixture
def todos(db, audit_logger):
    return TodoStore(db, audit_logger)


@pytest.fixture
def groceries(categories):
    return run(categories.add(OWNER, {"name": "Groceries", "type": "expense"}))


@pytest.fixture
def salary(categories):
    return run(categories.add(OWNER, {"name": "Salary", "type": "income"}))
