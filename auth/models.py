"""
auth/models.py -- Domain dataclasses for authentication entities.

Pattern: Data class (pure data container, zero logic). Dataclasses own domain
shape; stores, the session manager and routes do the work.

Layer rule: no imports from api/, web/, or posts/.
"""

from __future__ import annotations

from dataclasses import dataclass
from datetime import datetime


@dataclass
class User:
    """A registered account.

    id is an opaque random string assigned at sign-up (see auth.tokens.generate_id),
    not a database sequence, so it reveals nothing about signup order or volume.

    hashed_password is None for accounts created without a local password.
    Sign-in treats such accounts exactly like unknown usernames.
    """

    id: str
    username: str
    email: str
    hashed_password: str | None = None
    created_at: str | None = None


@dataclass
class Session:
    """A server-side session keyed by its opaque token.

    fresh is True only on the request that created or renewed the session.
    It is not persisted; handlers use it to decide whether to re-send the cookie.
    """

    id: str
    user_id: str
    created_at: datetime
    expires_at: datetime
    fresh: bool = False


@dataclass(frozen=True)
class CookieDirective:
    """Transport-level instruction that sets or clears the client-held token.

    This is the only place the token leaves the server. Never log it.
    """

    name: str
    value: str
    path: str = "/"
    http_only: bool = True
    secure: bool = False
    same_site: str = "lax"
    max_age: int = 0
    expires: datetime | None = None
