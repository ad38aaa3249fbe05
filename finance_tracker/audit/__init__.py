"""Audit logging package."""

from finance_tracker.audit.logger import AUDIT_COLLECTION, AuditLogger

__all__ = ["AUDIT_COLLECTION", "AuditLogger"]
