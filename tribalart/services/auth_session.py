# tribalart/services/auth_session.py
"""
Auth session holder: sign-in/up/out and password reset against the users
table, plus the current-user identity other stores key off.

Every operation returns an Outcome; nothing raises past this boundary.
Listeners registered with subscribe() are told about every user transition
(sign-in, sign-out) so per-user stores can reset.
"""
from __future__ import annotations
from datetime import datetime, timedelta, timezone
from typing import Callable, List, Optional
import logging
import secrets

from tribalart.config import settings
from tribalart.core.outcome import ErrorKind, Outcome
from tribalart.core.security import create_access_token, decode_access_token, hash_password, verify_password
from tribalart.database import DatabaseError, FileBackedDB, UniqueViolation, db as default_db
from tribalart.models.user import User

logger = logging.getLogger(__name__)

UserListener = Callable[[Optional[User]], None]


def _normalize_email(email: Optional[str]) -> str:
    return (email or "").strip().lower()


class AuthSession:
    def __init__(self, db: Optional[FileBackedDB] = None, user: Optional[User] = None):
        self.db = db or default_db
        self.user: Optional[User] = user
        self.access_token: Optional[str] = create_access_token(user.id) if user else None
        self.loading = False
        self._listeners: List[UserListener] = []

    @classmethod
    def from_token(cls, db: FileBackedDB, token: Optional[str]) -> "AuthSession":
        """Restore a session from a bearer token; an invalid token gives an anonymous session."""
        session = cls(db=db)
        user_id = decode_access_token(token) if token else None
        if user_id:
            try:
                row = db.get_record("users", "id", user_id)
            except DatabaseError as e:
                logger.error("Error restoring session: %s", e)
                row = None
            if row:
                session.user = User.from_dict(row)
                session.access_token = token
        return session

    @property
    def user_id(self) -> Optional[str]:
        return self.user.id if self.user else None

    def subscribe(self, listener: UserListener) -> Callable[[], None]:
        self._listeners.append(listener)

        def unsubscribe() -> None:
            if listener in self._listeners:
                self._listeners.remove(listener)

        return unsubscribe

    def _set_user(self, user: Optional[User]) -> None:
        changed = (self.user.id if self.user else None) != (user.id if user else None)
        self.user = user
        self.access_token = create_access_token(user.id) if user else None
        if not changed:
            return
        for listener in list(self._listeners):
            try:
                listener(user)
            except Exception:
                logger.exception("User transition listener failed")

    # --- operations ---

    def sign_up(self, email: str, password: str, full_name: str = "") -> Outcome:
        email = _normalize_email(email)
        full_name = (full_name or "").strip()
        if not email or not password or not full_name:
            return Outcome.failure(ErrorKind.VALIDATION, "Full name, email and password are required")
        if len(password) < settings.MIN_PASSWORD_LENGTH:
            return Outcome.failure(
                ErrorKind.VALIDATION, f"Password should be at least {settings.MIN_PASSWORD_LENGTH} characters"
            )
        self.loading = True
        try:
            row = self.db.create_record(
                "users",
                {"email": email, "full_name": full_name, "password_hash": hash_password(password)},
                id_field="id",
            )
        except UniqueViolation:
            return Outcome.failure(ErrorKind.ALREADY_EXISTS, "User already registered")
        except DatabaseError as e:
            logger.error("Sign up failed: %s", e)
            return Outcome.failure(ErrorKind.REMOTE, e.message)
        finally:
            self.loading = False
        user = User.from_dict(row)
        self._set_user(user)
        return Outcome.success("Account created", data=user)

    def sign_in(self, email: str, password: str) -> Outcome:
        email = _normalize_email(email)
        if not email or not password:
            return Outcome.failure(ErrorKind.VALIDATION, "Email and password are required")
        self.loading = True
        try:
            row = self.db.get_record("users", "email", email)
        except DatabaseError as e:
            logger.error("Sign in failed: %s", e)
            return Outcome.failure(ErrorKind.REMOTE, e.message)
        finally:
            self.loading = False
        if not row or not verify_password(password, row.get("password_hash") or ""):
            return Outcome.failure(ErrorKind.AUTH_REQUIRED, "Invalid login credentials")
        user = User.from_dict(row)
        self._set_user(user)
        return Outcome.success("Signed in", data=user)

    def sign_out(self) -> Outcome:
        self._set_user(None)
        return Outcome.success("Signed out")

    def reset_password(self, email: str) -> Outcome:
        """
        Issue a reset token for a known email. Unknown emails get the same
        answer so the endpoint cannot be used to probe for accounts.
        """
        email = _normalize_email(email)
        if not email:
            return Outcome.failure(ErrorKind.VALIDATION, "Please enter your email address first")
        try:
            row = self.db.get_record("users", "email", email)
            if row:
                now = datetime.now(timezone.utc)
                self.db.create_record(
                    "password_resets",
                    {
                        "token": secrets.token_urlsafe(32),
                        "user_id": row.get("id"),
                        "expires_at": (now + timedelta(minutes=settings.PASSWORD_RESET_EXPIRE_MINUTES)).isoformat(sep=" "),
                    },
                    id_field="id",
                )
        except DatabaseError as e:
            logger.error("Password reset failed: %s", e)
            return Outcome.failure(ErrorKind.REMOTE, e.message)
        return Outcome.success("Password reset instructions sent to your email!")

    def complete_password_reset(self, token: str, new_password: str) -> Outcome:
        if not token or not new_password:
            return Outcome.failure(ErrorKind.VALIDATION, "Reset token and new password are required")
        if len(new_password) < settings.MIN_PASSWORD_LENGTH:
            return Outcome.failure(
                ErrorKind.VALIDATION, f"Password should be at least {settings.MIN_PASSWORD_LENGTH} characters"
            )
        try:
            row = self.db.get_record("password_resets", "token", token)
            if not row:
                return Outcome.failure(ErrorKind.NOT_FOUND, "Invalid or expired reset link")
            # one-time token
            self.db.delete_record("password_resets", "token", token)
            try:
                expires_at = datetime.fromisoformat(str(row.get("expires_at")))
            except ValueError:
                expires_at = None
            if expires_at is not None and expires_at.tzinfo is None:
                # rows written before timestamps carried an offset are UTC
                expires_at = expires_at.replace(tzinfo=timezone.utc)
            expired = expires_at is None or datetime.now(timezone.utc) > expires_at
            if expired:
                return Outcome.failure(ErrorKind.NOT_FOUND, "Invalid or expired reset link")
            self.db.update_record("users", "id", row.get("user_id"), {"password_hash": hash_password(new_password)})
        except DatabaseError as e:
            logger.error("Password reset failed: %s", e)
            return Outcome.failure(ErrorKind.REMOTE, e.message)
        return Outcome.success("Password updated")
