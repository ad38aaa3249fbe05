"""
Category Models

A category is owned by one user and classifies transactions as either
expense or income. Categories are unique per owner by their derived key,
so "Food", "food" and "  FOOD " are the same expense category.
"""

import re
from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import (
    BaseModel,
    ConfigDict,
    Field,
    field_validator,
    model_validator,
)


def utc_now() -> datetime:
    """Current time as an aware UTC datetime."""
    return datetime.now(timezone.utc)


# =============================================================================
# ENUMS
# =============================================================================

class CategoryType(str, Enum):
    """Whether a category groups money going out or coming in."""
    EXPENSE = "expense"
    INCOME = "income"


class CategoryStatus(str, Enum):
    """Inactive categories are kept for history but hidden from entry forms."""
    ACTIVE = "active"
    INACTIVE = "inactive"


_WHITESPACE_RUN = re.compile(r"\s+")
_NOT_KEY_CHAR = re.compile(r"[^A-Z0-9_]")


def derive_category_key(category_type: str, name: str) -> str:
    """
    Build the per-owner uniqueness key for a category.

    The name is trimmed, upper-cased, whitespace runs become a single
    underscore and anything outside A-Z, 0-9 and underscore is dropped.

    >>> derive_category_key("expense", "  Food & Dining ")
    'EXPENSE_FOOD__DINING'
    """
    if isinstance(category_type, CategoryType):
        category_type = category_type.value
    clean_name = _WHITESPACE_RUN.sub("_", name.strip().upper())
    clean_name = _NOT_KEY_CHAR.sub("", clean_name)
    return f"{category_type.strip().upper()}_{clean_name}"


# =============================================================================
# CATEGORY MODELS
# =============================================================================

class CategoryInput(BaseModel):
    """
    Data a user submits to create or edit a category.

    Type is accepted case-insensitively ("EXPENSE" works).
    """
    model_config = ConfigDict(str_strip_whitespace=True)

    # Length bounds come from AppSettings and are checked by the store
    name: str = Field(
        ...,
        min_length=1,
        max_length=200,
        description="Category display name"
    )
    type: CategoryType = Field(
        ...,
        description="expense or income"
    )
    status: CategoryStatus = Field(
        default=CategoryStatus.ACTIVE
    )

    @field_validator('type', 'status', mode='before')
    @classmethod
    def lowercase_enum_values(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @property
    def category_key(self) -> str:
        return derive_category_key(self.type.value, self.name)


class Category(BaseModel):
    """A stored category."""

    id: str = Field(..., description="Store-assigned identifier")
    user_id: str = Field(..., description="Owner of this category")
    name: str
    type: CategoryType
    status: CategoryStatus = CategoryStatus.ACTIVE
    category_key: str = ""
    created_at: datetime = Field(default_factory=utc_now)
    updated_at: datetime = Field(default_factory=utc_now)

    @model_validator(mode='after')
    def fill_category_key(self) -> 'Category':
        # Records written before keys existed get one derived on read
        if not self.category_key:
            self.category_key = derive_category_key(self.type.value, self.name)
        return self

    @property
    def is_active(self) -> bool:
        return self.status == CategoryStatus.ACTIVE


class CategoryGroups(BaseModel):
    """An owner's categories partitioned by type, each sorted by name."""

    expense: list[Category] = Field(default_factory=list)
    income: list[Category] = Field(default_factory=list)

    def for_type(self, category_type: CategoryType) -> list[Category]:
        if category_type == CategoryType.EXPENSE:
            return self.expense
        return self.income

    def all(self) -> list[Category]:
        return [*self.expense, *self.income]

    def find(self, category_id: str) -> Optional[Category]:
        for category in self.all():
            if category.id == category_id:
                return category
        return None
