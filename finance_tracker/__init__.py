"""
Finance Tracker - Source Package

A personal finance tracker: record income and expense transactions
against your own categories, see where the money goes, and keep a
small task list next to it.

DESIGN PRINCIPLES:
1. Validate at the store boundary, before any network call
2. Every record is scoped to its owner
3. Aggregation is pure and runs over already-fetched data
4. Every mutation is auditable
5. Storage layer is swappable
"""

__version__ = "1.0.0"
__author__ = "Finance Tracker Team"
