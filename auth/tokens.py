"""
auth/tokens.py -- Opaque identifiers and session cookie serialization.

Security design decisions:
  Identifiers: generate_id() draws from secrets.token_bytes() and encodes the
       bytes as lowercase base32 without padding. Uniqueness rests on entropy,
       not on lookups: user and post ids use 10 bytes (80 bits), session tokens 25
       bytes (200 bits). Base32 keeps ids case-insensitive and URL/cookie safe.

  Cookies: session_cookie() / blank_session_cookie() are pure functions from a
       Session (or nothing) to a CookieDirective. They take `now` explicitly so
       Max-Age can be computed without reading the clock, which keeps them
       unit-testable without a request. apply_cookie() is the only function
       that touches a framework response.

Layer rule: no imports from api/, web/, or posts/.
"""

from __future__ import annotations

import base64
import secrets
from datetime import datetime, timezone

from auth.models import CookieDirective, Session

RECORD_ID_ENTROPY = 10
SESSION_TOKEN_ENTROPY = 25

_EPOCH = datetime(1970, 1, 1, tzinfo=timezone.utc)


def generate_id(entropy_size: int) -> str:
    """Return a random lowercase base32 string carrying entropy_size random bytes."""
    raw = secrets.token_bytes(entropy_size)
    return base64.b32encode(raw).decode("ascii").rstrip("=").lower()


# ---------------------------------------------------------------------------
# Cookie directives
# ---------------------------------------------------------------------------


def session_cookie(
    name: str,
    session: Session,
    *,
    now: datetime,
    path: str = "/",
    secure: bool = False,
    same_site: str = "lax",
) -> CookieDirective:
    """Build the directive that hands session.id to the client.

    Max-Age and Expires both track session.expires_at so the browser drops the
    cookie at the same moment the server stops honouring the token.
    """
    max_age = max(0, int((session.expires_at - now).total_seconds()))
    return CookieDirective(
        name=name,
        value=session.id,
        path=path,
        http_only=True,
        secure=secure,
        same_site=same_site,
        max_age=max_age,
        expires=session.expires_at,
    )


def blank_session_cookie(
    name: str,
    *,
    path: str = "/",
    secure: bool = False,
    same_site: str = "lax",
) -> CookieDirective:
    """Build the directive that clears the client cookie (empty value, immediate expiry)."""
    return CookieDirective(
        name=name,
        value="",
        path=path,
        http_only=True,
        secure=secure,
        same_site=same_site,
        max_age=0,
        expires=_EPOCH,
    )


def apply_cookie(response, directive: CookieDirective) -> None:
    """Write a CookieDirective onto a FastAPI/Starlette response as Set-Cookie."""
    response.set_cookie(
        directive.name,
        value=directive.value,
        max_age=directive.max_age,
        expires=directive.expires,
        path=directive.path,
        secure=directive.secure,
        httponly=directive.http_only,
        samesite=directive.same_site,
    )
