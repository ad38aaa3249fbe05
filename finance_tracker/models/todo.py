"""
Todo Models

Tasks have a four-value status and an append-only history of status
changes. `completed` mirrors `status == completed` so the checkbox and
the status selector always agree.
"""

from datetime import date, datetime
from enum import Enum
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field

from finance_tracker.models.category import utc_now


class TodoStatus(str, Enum):
    """
    Task status.

    URGENT behaves like a flag rather than a step in a sequence;
    every status can move to every other status.
    """
    PENDING = "pending"
    IN_PROGRESS = "in-progress"
    COMPLETED = "completed"
    URGENT = "urgent"


class TodoSortKey(str, Enum):
    CREATED_AT = "created_at"
    DUE_DATE = "due_date"
    STATUS = "status"
    TEXT = "text"


class TodoHistoryEntry(BaseModel):
    """One status change. Entries are never edited once written."""
    model_config = ConfigDict(frozen=True)

    status: TodoStatus
    timestamp: datetime = Field(default_factory=utc_now)
    note: str = ""
    updated_by: Optional[str] = None


class Todo(BaseModel):
    """A stored task."""

    id: str
    user_id: str
    text: str = Field(..., min_length=1)
    completed: bool = False
    status: TodoStatus = TodoStatus.PENDING
    prev_status: Optional[TodoStatus] = Field(
        default=None,
        description="Status to restore when completion is toggled off"
    )
    due_date: Optional[date] = None
    notes: str = ""
    history: list[TodoHistoryEntry] = Field(default_factory=list)
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def is_urgent(self) -> bool:
        return self.status == TodoStatus.URGENT


class TodoUpdate(BaseModel):
    """
    Partial edit of a task's details.

    Only fields that were explicitly set are written, so
    `TodoUpdate(due_date=None)` clears the due date while
    `TodoUpdate(notes="x")` leaves it alone.
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    text: Optional[str] = Field(default=None, min_length=1, max_length=500)
    notes: Optional[str] = Field(default=None, max_length=2000)
    due_date: Optional[date] = None
