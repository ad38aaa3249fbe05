"""Identity provider package."""

from finance_tracker.services.auth.interface import (
    AuthError,
    EmailAlreadyRegisteredError,
    IdentityProvider,
    InvalidCredentialsError,
    SessionExpiredError,
    WeakPasswordError,
)
from finance_tracker.services.auth.local import DocumentStoreIdentityProvider

__all__ = [
    "AuthError",
    "DocumentStoreIdentityProvider",
    "EmailAlreadyRegisteredError",
    "IdentityProvider",
    "InvalidCredentialsError",
    "SessionExpiredError",
    "WeakPasswordError",
]
