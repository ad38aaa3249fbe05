"""
Transaction Models

A transaction records one amount of money going out (expense) or
coming in (income) on a given business date, filed under a category
of the same type.

DESIGN DECISION: `date` is the business date the user picked, while
`created_at` is an epoch-millisecond stamp taken when the record was
created. The "recent" list orders by `created_at`, reports by `date`.
"""

from datetime import date, datetime
from decimal import Decimal
from enum import Enum
from typing import Annotated, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from finance_tracker.models.category import utc_now


class TransactionType(str, Enum):
    """Direction of money for a transaction."""
    EXPENSE = "expense"
    INCOME = "income"


class DateRangeFilter(str, Enum):
    """
    Relative date windows for transaction listings.

    Each window keeps transactions dated on or after today minus N days.
    """
    ALL = "all"
    TODAY = "today"
    WEEK = "week"
    MONTH = "month"
    YEAR = "year"

    @property
    def days(self) -> Optional[int]:
        return {
            "all": None,
            "today": 0,
            "week": 7,
            "month": 30,
            "year": 365,
        }[self.value]


PositiveAmount = Annotated[
    Decimal,
    Field(gt=0, decimal_places=2, description="Amount (must be positive)")
]


class TransactionInput(BaseModel):
    """Data a user submits to create or replace a transaction."""
    model_config = ConfigDict(str_strip_whitespace=True)

    type: TransactionType
    category_id: str = Field(..., min_length=1)
    amount: PositiveAmount
    description: str = Field(default="", max_length=500)
    date: date

    @field_validator('type', mode='before')
    @classmethod
    def lowercase_type(cls, v):
        if isinstance(v, str):
            return v.strip().lower()
        return v

    @field_validator('date', mode='before')
    @classmethod
    def accept_datetimes(cls, v):
        """Forms sometimes hand over a datetime; keep only its date."""
        if isinstance(v, datetime):
            return v.date()
        if isinstance(v, str) and "T" in v:
            return v.split("T", 1)[0]
        return v


class Transaction(BaseModel):
    """A stored transaction."""

    id: str
    user_id: str
    type: TransactionType
    category_id: str
    amount: PositiveAmount
    description: str = ""
    date: date
    created_at: int = Field(
        ...,
        ge=0,
        description="Creation time in epoch milliseconds"
    )
    updated_at: datetime = Field(default_factory=utc_now)

    @property
    def is_income(self) -> bool:
        return self.type == TransactionType.INCOME


class TransactionPage(BaseModel):
    """
    One page of the recent-transactions list.

    `has_more` is True whenever the page came back full, so a caller
    may see one extra empty page when the total is an exact multiple
    of the page size.
    """

    items: list[Transaction] = Field(default_factory=list)
    cursor: Optional[str] = Field(
        default=None,
        description="Opaque token to pass back for the next page"
    )
    has_more: bool = False
