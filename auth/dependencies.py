"""
auth/dependencies.py -- FastAPI Depends() helpers for authentication.

The session cookie is resolved once per request by the session middleware in
api/main.py, which calls resolve_session() and stores the result on
request.state. The helpers here only read request.state:

try_get_current_user() is the soft variant (returns None when signed out).
get_current_user() wraps it and raises HTTP 401 if unauthenticated.
get_current_session() does the same for the Session (needed by logout).

Layer rule: no imports from web/ or posts/.
  auth/dependencies.py may import from fastapi (for HTTPException/Request)
  because this module is part of the FastAPI dependency injection system.
"""

from __future__ import annotations

from fastapi import HTTPException, Request

from auth.models import Session, User
from auth.sessions import SessionManager
from auth.store import UserStore


def resolve_session(request: Request) -> tuple[Session | None, User | None]:
    """Validate the session cookie on request and load its user.

    Blocking (database reads); the middleware runs it on the thread pool.
    A live session whose user row is gone is invalidated and treated as absent.
    """
    manager: SessionManager = request.app.state.session_manager
    user_store: UserStore = request.app.state.user_store

    session = manager.validate_session(request.cookies.get(manager.cookie_name))
    if session is None:
        return None, None
    user = user_store.get_by_id(session.user_id)
    if user is None:
        manager.invalidate_session(session.id)
        return None, None
    return session, user


def try_get_current_user(request: Request) -> User | None:
    """Return the signed-in User, or None. Never raises."""
    return getattr(request.state, "user", None)


def _unauthorized() -> HTTPException:
    return HTTPException(
        status_code=401,
        detail={"code": "unauthorized", "message": "Authentication required."},
    )


def get_current_user(request: Request) -> User:
    """Require authentication. Raises HTTP 401 if the request is not authenticated.

    Use as a FastAPI dependency:
        @router.post("/posts")
        def route(user: User = Depends(get_current_user)): ...
    """
    user = try_get_current_user(request)
    if user is None:
        raise _unauthorized()
    return user


def get_current_session(request: Request) -> Session:
    """Require an active session. Raises HTTP 401 when there is none."""
    session = getattr(request.state, "session", None)
    if session is None:
        raise _unauthorized()
    return session
