"""
Category Store

CRUD over an owner's categories. The derived category key is the
uniqueness constraint: the duplicate check is a query followed by a
write, so two sessions racing can still both succeed.
"""

import re
from typing import Optional, Union

from pydantic import ValidationError as PydanticValidationError

from finance_tracker.audit import AuditLogger
from finance_tracker.config import AppSettings, get_settings
from finance_tracker.models.category import (
    Category,
    CategoryGroups,
    CategoryInput,
    CategoryType,
    utc_now,
)
from finance_tracker.services.storage import DocumentStore, where
from finance_tracker.stores.base import OwnedRecordStore, parse_input, require_id
from finance_tracker.stores.errors import (
    DuplicateCategoryError,
    ValidationError,
    translate_storage_errors,
)

CATEGORIES = "categories"


class CategoryStore(OwnedRecordStore):
    """Owner-scoped category records with a per-owner unique key."""

    collection = CATEGORIES
    entity_type = "category"

    def __init__(
        self,
        db: DocumentStore,
        audit_logger: Optional[AuditLogger] = None,
        settings: Optional[AppSettings] = None,
    ):
        super().__init__(db, audit_logger)
        self._settings = settings or get_settings().app

    def _validate(self, data: Union[CategoryInput, dict]) -> CategoryInput:
        if isinstance(data, dict) and not str(data.get("name") or "").strip():
            raise ValidationError("Category name is required")
        if isinstance(data, dict) and not data.get("type"):
            raise ValidationError("Category type is required")

        category = parse_input(CategoryInput, data)

        min_len = self._settings.category_name_min_length
        max_len = self._settings.category_name_max_length
        if len(category.name) < min_len:
            raise ValidationError(f"Category name must be at least {min_len} characters")
        if len(category.name) > max_len:
            raise ValidationError(f"Category name must be at most {max_len} characters")
        if not re.search(r"[A-Za-z0-9]", category.name):
            raise ValidationError("Category name must contain letters or digits")
        return category

    async def _key_holders(self, owner_id: str, category_key: str) -> list[dict]:
        with translate_storage_errors("check for duplicate categories"):
            return await self._db.query(
                CATEGORIES,
                [
                    where("user_id", "==", owner_id),
                    where("category_key", "==", category_key),
                ],
            )

    async def _reject_duplicate(self, owner_id: str, category_key: str) -> None:
        if self._audit:
            await self._audit.log_duplicate_category(owner_id, category_key)
        raise DuplicateCategoryError("A category with this name and type already exists")

    async def add(self, owner_id: str, data: Union[CategoryInput, dict]) -> Category:
        """
        Create a category.

        Raises:
            ValidationError: Name/type missing or malformed
            DuplicateCategoryError: Same derived key already exists for the owner
            NetworkError: Store call failed
        """
        require_id(owner_id, "User ID")
        category = self._validate(data)

        if await self._key_holders(owner_id, category.category_key):
            await self._reject_duplicate(owner_id, category.category_key)

        now = utc_now().isoformat()
        doc = {
            "user_id": owner_id,
            "name": category.name,
            "type": category.type.value,
            "status": category.status.value,
            "category_key": category.category_key,
            "created_at": now,
            "updated_at": now,
        }
        with translate_storage_errors("add category"):
            category_id = await self._db.add(CATEGORIES, doc)

        if self._audit:
            await self._audit.log_added(
                "category", category_id, owner_id, {"category_key": category.category_key}
            )
        return Category(id=category_id, **doc)

    async def list_categories(self, owner_id: str) -> CategoryGroups:
        """Return the owner's categories split by type, sorted by name."""
        require_id(owner_id, "User ID")
        with translate_storage_errors("fetch categories"):
            docs = await self._db.query(CATEGORIES, [where("user_id", "==", owner_id)])

        categories = []
        for doc in docs:
            try:
                categories.append(Category.model_validate(doc))
            except PydanticValidationError:
                continue  # Skip records with an unknown type

        categories.sort(key=lambda c: c.name.casefold())

        groups = CategoryGroups()
        for category in categories:
            groups.for_type(category.type).append(category)
        return groups

    async def get(self, owner_id: str, category_id: str) -> Category:
        """Fetch one owned category or raise NotFoundError."""
        doc = await self._fetch_owned(owner_id, category_id, "read")
        return Category.model_validate(doc)

    async def update(
        self,
        owner_id: str,
        category_id: str,
        data: Union[CategoryInput, dict],
    ) -> Category:
        """
        Replace a category's name, type and status.

        Raises:
            NotFoundError: Category missing or owned by someone else
            DuplicateCategoryError: Another owned category has the new key
        """
        category = self._validate(data)
        await self._fetch_owned(owner_id, category_id, "update")

        holders = await self._key_holders(owner_id, category.category_key)
        if any(doc["id"] != category_id for doc in holders):
            await self._reject_duplicate(owner_id, category.category_key)

        fields = {
            "name": category.name,
            "type": category.type.value,
            "status": category.status.value,
            "category_key": category.category_key,
            "updated_at": utc_now().isoformat(),
        }
        with translate_storage_errors("update category"):
            updated = await self._db.update(CATEGORIES, category_id, fields)

        if self._audit:
            await self._audit.log_updated(
                "category", category_id, owner_id, {"category_key": category.category_key}
            )
        return Category.model_validate(updated)

    async def delete(self, owner_id: str, category_id: str) -> None:
        """
        Delete a category.

        Transactions that reference it are left alone and show up
        as "Unknown Category" in listings and reports.
        """
        await self._delete_owned(owner_id, category_id)

    async def names_by_id(self, owner_id: str) -> dict[str, str]:
        """Map category id to display name for the owner's categories."""
        groups = await self.list_categories(owner_id)
        return {category.id: category.name for category in groups.all()}

    async def for_type(self, owner_id: str, category_type: CategoryType) -> list[Category]:
        """Active categories of one type, for entry forms."""
        groups = await self.list_categories(owner_id)
        return [c for c in groups.for_type(category_type) if c.is_active]
