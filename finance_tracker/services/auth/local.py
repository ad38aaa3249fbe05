"""
Document Store Identity Provider

Keeps users in the `users` collection with argon2 password hashes and
issues random session tokens that expire after a configurable TTL.
Sessions live in process memory: restarting the app signs everyone out.
"""

import secrets
from datetime import datetime, timedelta
from typing import Callable, Optional

from argon2 import PasswordHasher
from argon2.exceptions import InvalidHashError, VerificationError, VerifyMismatchError
from pydantic import ValidationError as PydanticValidationError

from finance_tracker.audit import AuditLogger
from finance_tracker.config import AuthSettings, get_settings
from finance_tracker.models.audit import AuditEventBuilder, AuditEventType
from finance_tracker.models.category import utc_now
from finance_tracker.models.user import AuthSession, User
from finance_tracker.services.auth.interface import (
    AuthError,
    EmailAlreadyRegisteredError,
    IdentityProvider,
    InvalidCredentialsError,
    SessionExpiredError,
    WeakPasswordError,
)
from finance_tracker.services.storage import DocumentStore, where

USERS = "users"

_hasher = PasswordHasher()


def _normalize_email(email: str) -> str:
    return (email or "").strip().lower()


class DocumentStoreIdentityProvider(IdentityProvider):
    """Email/password identity provider on top of a DocumentStore."""

    def __init__(
        self,
        db: DocumentStore,
        settings: Optional[AuthSettings] = None,
        audit_logger: Optional[AuditLogger] = None,
        clock: Callable[[], datetime] = utc_now,
    ):
        self._db = db
        self._settings = settings or get_settings().auth
        self._audit = audit_logger
        self._clock = clock
        self._sessions: dict[str, AuthSession] = {}

    async def _find_user_doc(self, email: str) -> Optional[dict]:
        docs = await self._db.query(USERS, [where("email", "==", email)], limit=1)
        return docs[0] if docs else None

    def _start_session(self, user: User) -> AuthSession:
        now = self._clock()
        session = AuthSession(
            token=secrets.token_urlsafe(32),
            user_id=user.id,
            email=user.email,
            issued_at=now,
            expires_at=now + timedelta(minutes=self._settings.session_ttl_minutes),
        )
        self._sessions[session.token] = session
        return session

    async def _audit_event(self, event_type: AuditEventType, email: str, user_id: Optional[str] = None):
        if self._audit:
            await self._audit.log(AuditEventBuilder.auth_event(event_type, email, user_id))

    async def sign_up(
        self,
        email: str,
        password: str,
        display_name: Optional[str] = None,
    ) -> AuthSession:
        email = _normalize_email(email)
        if len(password or "") < self._settings.min_password_length:
            raise WeakPasswordError(
                f"Password must be at least {self._settings.min_password_length} characters"
            )
        if await self._find_user_doc(email):
            raise EmailAlreadyRegisteredError(f"An account already exists for {email}")

        created_at = self._clock()
        data = {
            "email": email,
            "display_name": display_name.strip() if display_name else None,
            "password_hash": _hasher.hash(password),
            "created_at": created_at.isoformat(),
        }
        # Validate before writing so bad emails never reach the store
        try:
            User(id="pending", **data)
        except PydanticValidationError:
            raise AuthError("Please enter a valid email address")
        user_id = await self._db.add(USERS, data)
        user = User(id=user_id, **data)

        await self._audit_event(AuditEventType.USER_SIGNED_UP, email, user_id)
        return self._start_session(user)

    async def sign_in(self, email: str, password: str) -> AuthSession:
        email = _normalize_email(email)
        doc = await self._find_user_doc(email)
        if doc is None:
            await self._audit_event(AuditEventType.SIGN_IN_FAILED, email)
            raise InvalidCredentialsError("Invalid email or password")

        try:
            _hasher.verify(doc["password_hash"], password)
        except (VerifyMismatchError, VerificationError, InvalidHashError):
            await self._audit_event(AuditEventType.SIGN_IN_FAILED, email, doc["id"])
            raise InvalidCredentialsError("Invalid email or password")

        user = User(**doc)
        await self._audit_event(AuditEventType.USER_SIGNED_IN, email, user.id)
        return self._start_session(user)

    async def sign_out(self, token: str) -> None:
        session = self._sessions.pop(token, None)
        if session:
            await self._audit_event(AuditEventType.USER_SIGNED_OUT, session.email, session.user_id)

    async def current_user(self, token: str) -> User:
        session = self._sessions.get(token)
        if session is None:
            raise SessionExpiredError("Not signed in")

        if session.is_expired(self._clock()):
            # Force logout
            del self._sessions[token]
            await self._audit_event(AuditEventType.SESSION_EXPIRED, session.email, session.user_id)
            raise SessionExpiredError("Your session has expired. Please sign in again.")

        doc = await self._db.get(USERS, session.user_id)
        if doc is None:
            del self._sessions[token]
            raise SessionExpiredError("Account no longer exists")
        return User(**doc)
