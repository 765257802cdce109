"""Explicit auth session handling.

Operations that need authorization take an ``AuthSession`` argument instead of
reading global auth state. ``SessionWatcher`` keeps one up to date for the
lifetime of a ``with`` block and always unsubscribes on exit.
"""
from __future__ import annotations
import logging
from dataclasses import dataclass
from typing import Any, Callable, List, Optional

from .exceptions import AuthenticationError

logger = logging.getLogger(__name__)


@dataclass(frozen=True)
class AuthSession:
    access_token: str
    user_id: Optional[str] = None
    email: Optional[str] = None

    @classmethod
    def from_supabase(cls, session: Any) -> Optional["AuthSession"]:
        if session is None or not getattr(session, "access_token", None):
            return None
        user = getattr(session, "user", None)
        return cls(
            access_token=session.access_token,
            user_id=str(user.id) if user is not None and getattr(user, "id", None) else None,
            email=getattr(user, "email", None) if user is not None else None,
        )


def require_session(session: Optional[AuthSession]) -> AuthSession:
    if session is None:
        raise AuthenticationError("Please log in to upload files.")
    return session


class SessionWatcher:
    """Track the current auth session while the block is active.

    Usage:
        with SessionWatcher(client.auth) as watcher:
            if watcher.is_authenticated:
                ...
    """

    def __init__(self, auth: Any, on_change: Optional[Callable[[Optional[AuthSession]], None]] = None):
        self._auth = auth
        self._on_change = on_change
        self._subscription = None
        self.current: Optional[AuthSession] = None
        self.events: List[str] = []

    @property
    def is_authenticated(self) -> bool:
        return self.current is not None

    @property
    def active(self) -> bool:
        return self._subscription is not None

    def _handle(self, event: str, session: Any) -> None:
        self.events.append(event)
        self.current = AuthSession.from_supabase(session)
        logger.debug(f"Auth state change: {event} (authenticated={self.is_authenticated})")
        if self._on_change is not None:
            self._on_change(self.current)

    def __enter__(self) -> "SessionWatcher":
        self.current = AuthSession.from_supabase(self._auth.get_session())
        self._subscription = self._auth.on_auth_state_change(self._handle)
        return self

    def __exit__(self, exc_type, exc, tb) -> None:
        if self._subscription is not None:
            self._subscription.unsubscribe()
            self._subscription = None


def sign_in(auth: Any, email: str, password: str) -> AuthSession:
    email = (email or "").strip().lower()
    if not email or not password:
        raise AuthenticationError("Email and password are required.")
    try:
        response = auth.sign_in_with_password({"email": email, "password": password})
    except Exception as e:
        logger.warning(f"Sign-in failed for {email}: {e}")
        raise AuthenticationError(str(e) or "Invalid email or password.") from e
    session = AuthSession.from_supabase(getattr(response, "session", None))
    if session is None:
        raise AuthenticationError("Invalid email or password.")
    logger.info(f"Signed in {email}")
    return session


def sign_out(auth: Any) -> None:
    auth.sign_out()
