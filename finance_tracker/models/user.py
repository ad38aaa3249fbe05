"""User and session models for the identity provider."""

from datetime import datetime
from typing import Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator

from finance_tracker.models.category import utc_now


class User(BaseModel):
    """A registered user. `password_hash` never leaves the auth service."""
    model_config = ConfigDict(str_strip_whitespace=True)

    id: str
    email: str = Field(..., min_length=3, max_length=320)
    display_name: Optional[str] = Field(default=None, max_length=100)
    password_hash: str = Field(default="", repr=False)
    created_at: datetime = Field(default_factory=utc_now)

    @field_validator('email')
    @classmethod
    def normalize_email(cls, v: str) -> str:
        if "@" not in v:
            raise ValueError(f"Invalid email address: {v}")
        return v.lower()


class AuthSession(BaseModel):
    """A signed-in session. The UI logs the user out once it expires."""

    token: str
    user_id: str
    email: str
    issued_at: datetime = Field(default_factory=utc_now)
    expires_at: datetime

    def is_expired(self, now: Optional[datetime] = None) -> bool:
        return (now or utc_now()) >= self.expires_at
