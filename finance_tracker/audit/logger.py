"""
Audit Logger

DESIGN DECISION: Every mutation and every rejected write is logged.
This provides:
1. Traceability of who changed what
2. Debugging capability
3. A visible history of duplicate/invalid write attempts

The audit logger:
- Is async so it can persist through the same document store
- Gracefully handles failures (doesn't crash the app if logging fails)
"""

from typing import Optional

import structlog

from finance_tracker.models.audit import AuditEvent, AuditEventBuilder
from finance_tracker.services.storage import DocumentStore

AUDIT_COLLECTION = "audit_log"


# Configure structlog for local logging
structlog.configure(
    processors=[
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.stdlib.PositionalArgumentsFormatter(),
        structlog.processors.TimeStamper(fmt="iso"),
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        structlog.processors.UnicodeDecoder(),
        structlog.processors.JSONRenderer()
    ],
    wrapper_class=structlog.stdlib.BoundLogger,
    context_class=dict,
    logger_factory=structlog.stdlib.LoggerFactory(),
    cache_logger_on_first_use=True,
)


class AuditLogger:
    """
    Central audit logging service.

    Logs events both to:
    1. Structured local log (for debugging)
    2. The audit_log collection (for persistence), when a store is given
    """

    def __init__(
        self,
        storage: Optional[DocumentStore] = None,
    ):
        """
        Initialize audit logger.

        Args:
            storage: Document store for persistence.
                    If None, only logs locally.
        """
        self._storage = storage
        self._logger = structlog.get_logger("finance_tracker.audit")

    async def log(self, event: AuditEvent) -> bool:
        """
        Log an audit event.

        Always logs locally. Persists to storage if available.

        Returns True if storage write succeeded (or no storage configured).
        """
        log_dict = event.to_log_dict()

        if event.severity.value in ("error", "critical"):
            self._logger.error("audit_event", **log_dict)
        elif event.severity.value == "warning":
            self._logger.warning("audit_event", **log_dict)
        else:
            self._logger.info("audit_event", **log_dict)

        if self._storage:
            try:
                await self._storage.add(AUDIT_COLLECTION, event.to_document())
                return True
            except Exception as e:
                # Log failure but don't raise
                self._logger.error(
                    "audit_storage_failed",
                    error=str(e),
                    event_id=str(event.event_id),
                )
                return False

        return True

    async def log_added(
        self,
        entity_type: str,
        entity_id: str,
        user_id: str,
        details: Optional[dict] = None,
    ) -> None:
        await self.log(AuditEventBuilder.record_added(entity_type, entity_id, user_id, details))

    async def log_updated(
        self,
        entity_type: str,
        entity_id: str,
        user_id: str,
        details: Optional[dict] = None,
    ) -> None:
        await self.log(AuditEventBuilder.record_updated(entity_type, entity_id, user_id, details))

    async def log_deleted(
        self,
        entity_type: str,
        entity_id: str,
        user_id: str,
    ) -> None:
        await self.log(AuditEventBuilder.record_deleted(entity_type, entity_id, user_id))

    async def log_duplicate_category(self, user_id: str, category_key: str) -> None:
        await self.log(AuditEventBuilder.duplicate_category(user_id, category_key))

    async def log_invalid_category(self, user_id: str, category_id: str, reason: str) -> None:
        await self.log(AuditEventBuilder.invalid_category(user_id, category_id, reason))

    async def log_todo_status_changed(
        self,
        todo_id: str,
        user_id: str,
        old_status: str,
        new_status: str,
    ) -> None:
        await self.log(
            AuditEventBuilder.todo_status_changed(todo_id, user_id, old_status, new_status)
        )

    async def log_access_denied(
        self,
        entity_type: str,
        entity_id: str,
        user_id: str,
        action: str,
    ) -> None:
        await self.log(AuditEventBuilder.access_denied(entity_type, entity_id, user_id, action))

    async def log_storage_error(
        self,
        action: str,
        error_message: str,
        user_id: Optional[str] = None,
    ) -> None:
        await self.log(AuditEventBuilder.storage_error(action, error_message, user_id))
