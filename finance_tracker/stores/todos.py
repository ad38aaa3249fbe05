"""
Todo Store

Tasks and their status machine. Every status change goes through
`_transition`, which re-reads the stored task, appends one history
entry and writes status, completion flag and history back together.
Two sessions editing the same task still race: the later write wins
and its history replaces the earlier one.
"""

from datetime import date, datetime
from typing import Callable, Optional, Union

from pydantic import ValidationError as PydanticValidationError

from finance_tracker.audit import AuditLogger
from finance_tracker.models.category import utc_now
from finance_tracker.models.todo import Todo, TodoHistoryEntry, TodoStatus, TodoUpdate
from finance_tracker.services.storage import DocumentStore, where
from finance_tracker.stores.base import OwnedRecordStore, parse_input, require_id
from finance_tracker.stores.errors import ValidationError, translate_storage_errors

TODOS = "todos"


class TodoStore(OwnedRecordStore):
    """Owner-scoped tasks with status history."""

    collection = TODOS
    entity_type = "todo"

    def __init__(
        self,
        db: DocumentStore,
        audit_logger: Optional[AuditLogger] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        super().__init__(db, audit_logger)
        self._clock = clock

    def _history_entry(
        self,
        status: TodoStatus,
        note: str,
        updated_by: Optional[str],
    ) -> dict:
        entry = TodoHistoryEntry(
            status=status,
            timestamp=self._clock(),
            note=note,
            updated_by=updated_by,
        )
        return entry.model_dump(mode="json")

    async def add(
        self,
        owner_id: str,
        text: str,
        updated_by: Optional[str] = None,
        due_date: Optional[date] = None,
        notes: str = "",
    ) -> Todo:
        """Create a pending task with a single "Task created" history entry."""
        require_id(owner_id, "User ID")
        text = (text or "").strip()
        if not text:
            raise ValidationError("Task text is required")

        now = self._clock().isoformat()
        doc = {
            "user_id": owner_id,
            "text": text,
            "completed": False,
            "status": TodoStatus.PENDING.value,
            "prev_status": None,
            "due_date": due_date.isoformat() if due_date else None,
            "notes": notes or "",
            "history": [
                self._history_entry(TodoStatus.PENDING, "Task created", updated_by or owner_id)
            ],
            "created_at": now,
            "updated_at": now,
        }
        with translate_storage_errors("add task"):
            todo_id = await self._db.add(TODOS, doc)

        if self._audit:
            await self._audit.log_added("todo", todo_id, owner_id)
        return Todo.model_validate({**doc, "id": todo_id})

    async def list_todos(self, owner_id: str) -> list[Todo]:
        """The owner's tasks, newest first."""
        require_id(owner_id, "User ID")
        with translate_storage_errors("fetch tasks"):
            docs = await self._db.query(
                TODOS,
                [where("user_id", "==", owner_id)],
                order_by="created_at",
                descending=True,
            )

        todos = []
        for doc in docs:
            try:
                todos.append(Todo.model_validate(doc))
            except PydanticValidationError:
                continue
        return todos

    async def get(self, owner_id: str, todo_id: str) -> Todo:
        doc = await self._fetch_owned(owner_id, todo_id, "read")
        return Todo.model_validate(doc)

    async def update(
        self,
        owner_id: str,
        todo_id: str,
        data: Union[TodoUpdate, dict],
    ) -> Todo:
        """
        Edit text, notes or due date.

        Only fields present on the update are written; status changes
        go through `set_status` / `toggle_completed`.
        """
        changes = parse_input(TodoUpdate, data).model_dump(mode="json", exclude_unset=True)
        if "text" in changes and not changes["text"]:
            raise ValidationError("Task text is required")
        await self._fetch_owned(owner_id, todo_id, "update")
        if changes.get("notes") is None and "notes" in changes:
            changes["notes"] = ""

        changes["updated_at"] = self._clock().isoformat()
        with translate_storage_errors("update task"):
            updated = await self._db.update(TODOS, todo_id, changes)

        if self._audit:
            await self._audit.log_updated(
                "todo", todo_id, owner_id, {"fields": sorted(k for k in changes if k != "updated_at")}
            )
        return Todo.model_validate(updated)

    async def _transition(
        self,
        owner_id: str,
        todo_id: str,
        new_status: TodoStatus,
        note: str,
        updated_by: Optional[str],
        action: str,
    ) -> Todo:
        doc = await self._fetch_owned(owner_id, todo_id, action)
        current = Todo.model_validate(doc)

        fields = {
            "status": new_status.value,
            "completed": new_status == TodoStatus.COMPLETED,
            "history": [
                *(entry.model_dump(mode="json") for entry in current.history),
                self._history_entry(new_status, note, updated_by or owner_id),
            ],
            "updated_at": self._clock().isoformat(),
        }
        if new_status == TodoStatus.COMPLETED and current.status != TodoStatus.COMPLETED:
            fields["prev_status"] = current.status.value

        with translate_storage_errors(f"{action} task"):
            updated = await self._db.update(TODOS, todo_id, fields)

        if self._audit:
            await self._audit.log_todo_status_changed(
                todo_id, owner_id, current.status.value, new_status.value
            )
        return Todo.model_validate(updated)

    async def set_status(
        self,
        owner_id: str,
        todo_id: str,
        status: Union[TodoStatus, str],
        updated_by: Optional[str] = None,
    ) -> Todo:
        """
        Move a task to any status.

        Choosing the status the task already has changes nothing and
        adds no history entry.
        """
        try:
            status = TodoStatus(status)
        except ValueError:
            raise ValidationError(f"Unknown task status: {status}")

        current = await self.get(owner_id, todo_id)
        if current.status == status:
            return current

        note = f"Status changed from {current.status.value} to {status.value}"
        return await self._transition(owner_id, todo_id, status, note, updated_by, "update")

    async def toggle_completed(
        self,
        owner_id: str,
        todo_id: str,
        updated_by: Optional[str] = None,
    ) -> Todo:
        """
        Checkbox transition.

        Checking remembers the current status in `prev_status` and marks
        the task completed. Unchecking restores `prev_status`, or pending
        when none was recorded.
        """
        current = await self.get(owner_id, todo_id)
        if current.completed:
            restored = current.prev_status or TodoStatus.PENDING
            if restored == TodoStatus.COMPLETED:
                restored = TodoStatus.PENDING
            return await self._transition(
                owner_id, todo_id, restored, "Marked as not completed", updated_by, "update"
            )
        return await self._transition(
            owner_id, todo_id, TodoStatus.COMPLETED, "Marked as completed", updated_by, "update"
        )

    async def delete(self, owner_id: str, todo_id: str) -> None:
        await self._delete_owned(owner_id, todo_id)
