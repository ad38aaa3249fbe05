"""
Store Error Taxonomy

Every failure a store operation can surface to the UI is one of:

- ValidationError: missing/malformed input, raised before any network call
- DuplicateCategoryError: category key collision for the owner
- InvalidCategoryError: transaction references a missing/mismatched category
- NotFoundError: target missing or not owned by the caller
- NetworkError: the document store call itself failed

Nothing is retried. Callers catch FinanceTrackerError, show
`user_message(error)` and keep whatever they were displaying.
"""

from contextlib import contextmanager
from typing import Iterator

from pydantic import ValidationError as PydanticValidationError

from finance_tracker.services.storage import DocumentNotFoundError, StorageError


class FinanceTrackerError(Exception):
    """Base exception for store operations."""

    default_message = "Something went wrong. Please try again."

    @property
    def user_message(self) -> str:
        return str(self) or self.default_message


class ValidationError(FinanceTrackerError):
    """A required field is missing or malformed."""

    default_message = "Please check the form and try again."

    @classmethod
    def from_pydantic(cls, error: PydanticValidationError) -> "ValidationError":
        """Collapse pydantic's error list into one readable message."""
        parts = []
        for item in error.errors():
            field = ".".join(str(loc) for loc in item.get("loc", ())) or "input"
            parts.append(f"{field}: {item.get('msg', 'invalid value')}")
        return cls("; ".join(parts))


class DuplicateCategoryError(FinanceTrackerError):
    """A category with the same name and type already exists for the owner."""

    default_message = "A category with this name and type already exists"


class InvalidCategoryError(FinanceTrackerError):
    """The referenced category is missing, not owned, or of the wrong type."""

    default_message = "Please choose a valid category"


class NotFoundError(FinanceTrackerError):
    """The record doesn't exist or belongs to someone else."""

    default_message = "That record no longer exists"


class NetworkError(FinanceTrackerError):
    """The document store could not be reached or rejected the call."""

    default_message = "Could not reach the server. Please check your connection."

    def __init__(self, message: str = "", action: str = ""):
        super().__init__(message)
        self.action = action

    @property
    def user_message(self) -> str:
        # Backend error strings are not meant for end users
        return self.default_message


def user_message(error: Exception) -> str:
    """Map any error to the short message shown in a notification."""
    if isinstance(error, FinanceTrackerError):
        return error.user_message
    if isinstance(error, PydanticValidationError):
        return ValidationError.from_pydantic(error).user_message
    return FinanceTrackerError.default_message


@contextmanager
def translate_storage_errors(action: str) -> Iterator[None]:
    """
    Re-raise storage backend failures as store errors.

    Usage:
        with translate_storage_errors("add category"):
            doc_id = await self._db.add(...)
    """
    try:
        yield
    except DocumentNotFoundError as e:
        raise NotFoundError(f"Failed to {action}: record not found") from e
    except StorageError as e:
        raise NetworkError(f"Failed to {action}: {e}", action=action) from e
