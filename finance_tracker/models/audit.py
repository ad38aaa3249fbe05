"""
Audit Models for Finance Tracker

Every mutation and every rejected write is logged for audit purposes.
This provides:
1. Traceability of who changed which record
2. Debugging information when things go wrong
3. A way to see how often duplicate or invalid writes happen

DESIGN DECISION: Audit logs are append-only. We never delete or modify them.
"""

from datetime import datetime
from enum import Enum
from typing import Any, Optional
from uuid import UUID, uuid4

from pydantic import BaseModel, Field

from finance_tracker.models.category import utc_now


class AuditEventType(str, Enum):
    """Types of events we audit."""
    # Categories
    CATEGORY_ADDED = "category_added"
    CATEGORY_UPDATED = "category_updated"
    CATEGORY_DELETED = "category_deleted"
    DUPLICATE_CATEGORY_REJECTED = "duplicate_category_rejected"

    # Transactions
    TRANSACTION_ADDED = "transaction_added"
    TRANSACTION_UPDATED = "transaction_updated"
    TRANSACTION_DELETED = "transaction_deleted"
    INVALID_CATEGORY_REJECTED = "invalid_category_rejected"

    # Todos
    TODO_ADDED = "todo_added"
    TODO_UPDATED = "todo_updated"
    TODO_STATUS_CHANGED = "todo_status_changed"
    TODO_DELETED = "todo_deleted"

    # Identity
    USER_SIGNED_UP = "user_signed_up"
    USER_SIGNED_IN = "user_signed_in"
    USER_SIGNED_OUT = "user_signed_out"
    SIGN_IN_FAILED = "sign_in_failed"
    SESSION_EXPIRED = "session_expired"

    # Access and system events
    ACCESS_DENIED = "access_denied"
    STORAGE_ERROR = "storage_error"


class AuditSeverity(str, Enum):
    """Severity level for audit events."""
    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"
    CRITICAL = "critical"


class AuditEvent(BaseModel):
    """
    A single audit event.

    This is the core unit of our audit trail.
    Every significant action creates one of these.
    """

    # Identity
    event_id: UUID = Field(
        default_factory=uuid4,
        description="Unique event identifier"
    )
    timestamp: datetime = Field(
        default_factory=utc_now,
        description="When the event occurred (UTC)"
    )

    # Event classification
    event_type: AuditEventType = Field(
        ...,
        description="Type of event"
    )
    severity: AuditSeverity = Field(
        default=AuditSeverity.INFO,
        description="Event severity"
    )

    # Who, and what entity is this about?
    user_id: Optional[str] = Field(
        default=None,
        description="Owner id of the acting user"
    )
    entity_type: Optional[str] = Field(
        default=None,
        description="Type of entity (e.g., 'category', 'transaction', 'todo')"
    )
    entity_id: Optional[str] = Field(
        default=None,
        description="Store-assigned id of the entity"
    )

    # Event details
    description: str = Field(
        ...,
        max_length=500,
        description="Human-readable description of what happened"
    )
    details: dict[str, Any] = Field(
        default_factory=dict,
        description="Additional event-specific data"
    )

    error_message: Optional[str] = None

    def to_log_dict(self) -> dict:
        """
        Convert to a dictionary suitable for structured logging.
        """
        return {
            "event_id": str(self.event_id),
            "timestamp": self.timestamp.isoformat(),
            "event_type": self.event_type.value,
            "severity": self.severity.value,
            "user_id": self.user_id,
            "entity_type": self.entity_type,
            "entity_id": self.entity_id,
            "description": self.description,
            "details": self.details,
            "error_message": self.error_message,
        }

    def to_document(self) -> dict:
        """Convert to a document for the audit_log collection."""
        doc = self.to_log_dict()
        doc.pop("event_id")
        return doc


class AuditEventBuilder:
    """
    Helper class to build audit events with common patterns.

    Usage:
        event = AuditEventBuilder.record_added("category", category_id, user_id, ...)
        event = AuditEventBuilder.duplicate_category(user_id, key)
    """

    _ADDED = {
        "category": AuditEventType.CATEGORY_ADDED,
        "transaction": AuditEventType.TRANSACTION_ADDED,
        "todo": AuditEventType.TODO_ADDED,
    }
    _UPDATED = {
        "category": AuditEventType.CATEGORY_UPDATED,
        "transaction": AuditEventType.TRANSACTION_UPDATED,
        "todo": AuditEventType.TODO_UPDATED,
    }
    _DELETED = {
        "category": AuditEventType.CATEGORY_DELETED,
        "transaction": AuditEventType.TRANSACTION_DELETED,
        "todo": AuditEventType.TODO_DELETED,
    }

    @staticmethod
    def record_added(
        entity_type: str,
        entity_id: str,
        user_id: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventBuilder._ADDED[entity_type],
            user_id=user_id,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.capitalize()} added",
            details=details or {},
        )

    @staticmethod
    def record_updated(
        entity_type: str,
        entity_id: str,
        user_id: str,
        details: Optional[dict] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventBuilder._UPDATED[entity_type],
            user_id=user_id,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.capitalize()} updated",
            details=details or {},
        )

    @staticmethod
    def record_deleted(
        entity_type: str,
        entity_id: str,
        user_id: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventBuilder._DELETED[entity_type],
            user_id=user_id,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"{entity_type.capitalize()} deleted",
        )

    @staticmethod
    def duplicate_category(
        user_id: str,
        category_key: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.DUPLICATE_CATEGORY_REJECTED,
            severity=AuditSeverity.WARNING,
            user_id=user_id,
            entity_type="category",
            description=f"Duplicate category rejected: {category_key}",
            details={"category_key": category_key},
        )

    @staticmethod
    def invalid_category(
        user_id: str,
        category_id: str,
        reason: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.INVALID_CATEGORY_REJECTED,
            severity=AuditSeverity.WARNING,
            user_id=user_id,
            entity_type="transaction",
            description="Transaction rejected: invalid category reference",
            details={"category_id": category_id, "reason": reason},
        )

    @staticmethod
    def todo_status_changed(
        todo_id: str,
        user_id: str,
        old_status: str,
        new_status: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.TODO_STATUS_CHANGED,
            user_id=user_id,
            entity_type="todo",
            entity_id=todo_id,
            description=f"Todo status changed from {old_status} to {new_status}",
            details={"from": old_status, "to": new_status},
        )

    @staticmethod
    def access_denied(
        entity_type: str,
        entity_id: str,
        user_id: str,
        action: str,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.ACCESS_DENIED,
            severity=AuditSeverity.WARNING,
            user_id=user_id,
            entity_type=entity_type,
            entity_id=entity_id,
            description=f"Refused to {action} {entity_type} not owned by caller",
            details={"action": action},
        )

    @staticmethod
    def auth_event(
        event_type: AuditEventType,
        email: str,
        user_id: Optional[str] = None,
    ) -> AuditEvent:
        severity = (
            AuditSeverity.WARNING
            if event_type == AuditEventType.SIGN_IN_FAILED
            else AuditSeverity.INFO
        )
        return AuditEvent(
            event_type=event_type,
            severity=severity,
            user_id=user_id,
            entity_type="user",
            entity_id=user_id,
            description=f"{event_type.value.replace('_', ' ').capitalize()}: {email}",
            details={"email": email},
        )

    @staticmethod
    def storage_error(
        action: str,
        error_message: str,
        user_id: Optional[str] = None,
    ) -> AuditEvent:
        return AuditEvent(
            event_type=AuditEventType.STORAGE_ERROR,
            severity=AuditSeverity.ERROR,
            user_id=user_id,
            description=f"Storage error during: {action}",
            error_message=error_message,
            details={"action": action},
        )
