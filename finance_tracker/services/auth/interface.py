"""
Identity Provider Interface

Authentication is delegated to an identity provider. The rest of the
app only ever sees an owner id (`User.id`) and a session token.
"""

from abc import ABC, abstractmethod
from typing import Optional

from finance_tracker.models.user import AuthSession, User


class IdentityProvider(ABC):
    """
    Abstract identity provider.

    Implementations may be hosted (Firebase, Cognito, ...) or backed by
    our own document store.
    """

    @abstractmethod
    async def sign_up(
        self,
        email: str,
        password: str,
        display_name: Optional[str] = None,
    ) -> AuthSession:
        """
        Register a new user and sign them in.

        Raises:
            EmailAlreadyRegisteredError: If the email is taken
            WeakPasswordError: If the password is too short
        """
        pass

    @abstractmethod
    async def sign_in(self, email: str, password: str) -> AuthSession:
        """
        Sign in with email and password.

        Raises:
            InvalidCredentialsError: If email or password is wrong
        """
        pass

    @abstractmethod
    async def sign_out(self, token: str) -> None:
        """End a session. Unknown tokens are ignored."""
        pass

    @abstractmethod
    async def current_user(self, token: str) -> User:
        """
        Resolve the user behind a session token.

        Raises:
            SessionExpiredError: If the session is unknown or has expired;
                the caller must log the user out
        """
        pass


class AuthError(Exception):
    """Base exception for authentication errors."""
    pass


class InvalidCredentialsError(AuthError):
    """Email or password is wrong."""
    pass


class EmailAlreadyRegisteredError(AuthError):
    """Attempted to sign up with an email that is already in use."""
    pass


class WeakPasswordError(AuthError):
    """Password does not meet the minimum requirements."""
    pass


class SessionExpiredError(AuthError):
    """Session token is unknown or has expired."""
    pass
