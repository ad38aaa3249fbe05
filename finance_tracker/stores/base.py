"""
Shared plumbing for the record stores.

Each store wraps one collection of the document store, scopes every
operation to an owner id and reports mutations to the audit logger.
"""

from typing import Optional, TypeVar

from pydantic import BaseModel, ValidationError as PydanticValidationError

from finance_tracker.audit import AuditLogger
from finance_tracker.services.storage import Document, DocumentStore
from finance_tracker.stores.errors import (
    NotFoundError,
    ValidationError,
    translate_storage_errors,
)

ModelT = TypeVar("ModelT", bound=BaseModel)


def parse_input(model: type[ModelT], data) -> ModelT:
    """
    Validate user input against a pydantic model.

    Raises:
        ValidationError: With a readable message listing the bad fields
    """
    if isinstance(data, model):
        return data
    try:
        return model.model_validate(data)
    except PydanticValidationError as e:
        raise ValidationError.from_pydantic(e) from e


def require_id(value: Optional[str], what: str) -> str:
    if not value or not str(value).strip():
        raise ValidationError(f"{what} is required")
    return value


class OwnedRecordStore:
    """Base class for stores over a collection of owner-scoped documents."""

    collection: str = ""
    entity_type: str = ""

    def __init__(
        self,
        db: DocumentStore,
        audit_logger: Optional[AuditLogger] = None,
    ):
        self._db = db
        self._audit = audit_logger

    async def _fetch_owned(self, owner_id: str, doc_id: str, action: str) -> Document:
        """
        Load a document and confirm the caller owns it.

        A record owned by someone else is reported exactly like a missing
        one so ids of other users' records can't be discovered.
        """
        require_id(owner_id, "User ID")
        require_id(doc_id, f"{self.entity_type.capitalize()} ID")

        with translate_storage_errors(f"{action} {self.entity_type}"):
            doc = await self._db.get(self.collection, doc_id)

        if doc is None:
            raise NotFoundError(f"{self.entity_type.capitalize()} not found")
        if doc.get("user_id") != owner_id:
            if self._audit:
                await self._audit.log_access_denied(self.entity_type, doc_id, owner_id, action)
            raise NotFoundError(f"{self.entity_type.capitalize()} not found")
        return doc

    async def _delete_owned(self, owner_id: str, doc_id: str) -> None:
        await self._fetch_owned(owner_id, doc_id, "delete")
        with translate_storage_errors(f"delete {self.entity_type}"):
            deleted = await self._db.delete(self.collection, doc_id)
        if not deleted:
            raise NotFoundError(f"{self.entity_type.capitalize()} not found")
        if self._audit:
            await self._audit.log_deleted(self.entity_type, doc_id, owner_id)
