"""
auth/sessions.py -- Session lifecycle: create, validate, invalidate.

State machine per session:
  Active -> Invalidated  (invalidate_session; row deleted)
  Active -> Expired      (not a transition: validate_session evaluates
                          expires_at on read and deletes the row lazily)

Correctness never depends on a background sweep. delete_expired_sessions()
exists so the table does not grow without bound, nothing more.

Renewal: with renew_within_seconds > 0, a session read inside that window
before expiry gets a new expires_at (same token) and fresh=True. With the
default of 0 every session has a fixed TTL.

SessionManager only talks to a SessionRepository, so tests can hand it an
in-memory fake and a fake clock. Cookie building is delegated to the pure
functions in auth/tokens.py.

Layer rule: no imports from api/, web/, or posts/.
"""

from __future__ import annotations

import logging
import time
from collections.abc import Callable
from datetime import datetime, timedelta, timezone
from typing import Protocol

from auth.models import CookieDirective, Session
from auth.tokens import SESSION_TOKEN_ENTROPY, blank_session_cookie, generate_id, session_cookie
from core.config import Settings

logger = logging.getLogger("postboard.auth.sessions")


class SessionRepository(Protocol):
    def get_session(self, token: str) -> Session | None: ...

    def insert_session(self, session: Session) -> None: ...

    def update_session_expiry(self, token: str, expires_at: datetime) -> None: ...

    def delete_session(self, token: str) -> None: ...

    def delete_user_sessions(self, user_id: str) -> int: ...

    def delete_expired_sessions(self, now: datetime) -> int: ...


def _utc(ts: float) -> datetime:
    return datetime.fromtimestamp(ts, tz=timezone.utc)


class SessionManager:
    """Issues and checks opaque session tokens bound to a user id.

    Usage:
        manager = SessionManager(SessionStore(engine), ttl_seconds=3600)
        session = manager.create_session(user.id)
        apply_cookie(response, manager.create_session_cookie(session))
        ...
        session = manager.validate_session(request.cookies.get(manager.cookie_name))
    """

    def __init__(
        self,
        store: SessionRepository,
        *,
        ttl_seconds: int = 30 * 24 * 3600,
        renew_within_seconds: int = 0,
        cookie_name: str = "auth_session",
        cookie_path: str = "/",
        secure: bool = False,
        same_site: str = "lax",
        clock: Callable[[], float] = time.time,
    ) -> None:
        self._store = store
        self.ttl_seconds = ttl_seconds
        self.renew_within_seconds = renew_within_seconds
        self.cookie_name = cookie_name
        self.cookie_path = cookie_path
        self.secure = secure
        self.same_site = same_site
        self._clock = clock

    @classmethod
    def from_settings(cls, store: SessionRepository, settings: Settings) -> SessionManager:
        return cls(
            store,
            ttl_seconds=settings.session_ttl_seconds,
            renew_within_seconds=settings.session_renew_seconds,
            cookie_name=settings.session_cookie_name,
            secure=settings.secure_cookies,
            same_site=settings.cookie_same_site,
        )

    # ------------------------------------------------------------------
    # Lifecycle
    # ------------------------------------------------------------------

    def create_session(self, user_id: str) -> Session:
        """Create, persist and return a new Active session for user_id."""
        now = _utc(self._clock())
        session = Session(
            id=generate_id(SESSION_TOKEN_ENTROPY),
            user_id=user_id,
            created_at=now,
            expires_at=now + timedelta(seconds=self.ttl_seconds),
            fresh=True,
        )
        self._store.insert_session(session)
        logger.info("Session created for user %s", user_id)
        return session

    def validate_session(self, token: str | None) -> Session | None:
        """Return the Active session for token, or None if unknown or expired."""
        if not token:
            return None
        session = self._store.get_session(token)
        if session is None:
            return None

        now = _utc(self._clock())
        if now >= session.expires_at:
            self._store.delete_session(token)
            logger.debug("Expired session removed for user %s", session.user_id)
            return None

        remaining = (session.expires_at - now).total_seconds()
        if self.renew_within_seconds and remaining < self.renew_within_seconds:
            session.expires_at = now + timedelta(seconds=self.ttl_seconds)
            self._store.update_session_expiry(token, session.expires_at)
            session.fresh = True
        return session

    def invalidate_session(self, token: str) -> None:
        """Remove the session. Unknown tokens are ignored."""
        self._store.delete_session(token)

    def invalidate_user_sessions(self, user_id: str) -> int:
        """Remove every session belonging to user_id. Returns the number removed."""
        removed = self._store.delete_user_sessions(user_id)
        logger.info("Revoked %d session(s) for user %s", removed, user_id)
        return removed

    def delete_expired_sessions(self) -> int:
        """Sweep sessions whose expiry has passed. Returns the number removed."""
        return self._store.delete_expired_sessions(_utc(self._clock()))

    # ------------------------------------------------------------------
    # Cookie directives
    # ------------------------------------------------------------------

    def create_session_cookie(self, session: Session) -> CookieDirective:
        return session_cookie(
            self.cookie_name,
            session,
            now=_utc(self._clock()),
            path=self.cookie_path,
            secure=self.secure,
            same_site=self.same_site,
        )

    def create_blank_session_cookie(self) -> CookieDirective:
        return blank_session_cookie(
            self.cookie_name,
            path=self.cookie_path,
            secure=self.secure,
            same_site=self.same_site,
        )
