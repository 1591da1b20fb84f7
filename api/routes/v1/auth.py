"""
api/routes/v1/auth.py -- Authentication REST endpoints.

Routes:
  POST /api/v1/auth/sign-in   -- password sign-in; sets session cookie
  POST /api/v1/auth/sign-up   -- create account; sets session cookie
  POST /api/v1/auth/logout    -- invalidate session; clears cookie (401 if none)
  GET  /api/v1/auth/me        -- current user info (requires auth)

Handlers are plain `def` so FastAPI runs them on its thread pool: argon2 and
the store calls block, and must not stall the event loop.

Flow errors (core.errors.FormError) are raised straight through; the
exception handler in api/main.py renders them with the standard envelope.

Security:
  authenticate_user() provides timing equalization -- use it, never inline.
  Cache-Control: no-store on every response that sets a session cookie.
  The token is only ever sent as Set-Cookie, never in a body.
"""

from __future__ import annotations

from fastapi import APIRouter, Depends, Request
from fastapi.responses import JSONResponse

from api.models import AuthResponse, MessageResponse, UserResponse
from auth.dependencies import get_current_session, get_current_user
from auth.models import Session, User
from auth.service import authenticate_user, register_user
from auth.sessions import SessionManager
from auth.store import UserStore
from auth.tokens import apply_cookie
from core.forms import SignInForm, SignUpForm

# Auth policy:
# - POST /api/v1/auth/sign-in:  public
# - POST /api/v1/auth/sign-up:  public
# - POST /api/v1/auth/logout:   requires an active session (get_current_session)
# - GET  /api/v1/auth/me:       requires auth (get_current_user)
router = APIRouter()


def _signed_in_response(request: Request, user: User, status_code: int) -> JSONResponse:
    """Issue a session for user and return the JSON response carrying its cookie."""
    manager: SessionManager = request.app.state.session_manager
    session = manager.create_session(user.id)
    resp = JSONResponse(
        status_code=status_code,
        content=AuthResponse(
            user=UserResponse.from_user(user),
            expires_at=session.expires_at.isoformat(),
        ).model_dump(),
    )
    apply_cookie(resp, manager.create_session_cookie(session))
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.post("/auth/sign-in", response_model=AuthResponse)
def sign_in(request: Request, body: SignInForm) -> JSONResponse:
    """Authenticate with username and password; set the session cookie.

    Wrong password, unknown username, and accounts without a password all
    produce the same 400 bad_credentials error on the password field.
    """
    user_store: UserStore = request.app.state.user_store
    user = authenticate_user(user_store, body.username, body.password)
    return _signed_in_response(request, user, status_code=200)


@router.post("/auth/sign-up", response_model=AuthResponse, status_code=201)
def sign_up(request: Request, body: SignUpForm) -> JSONResponse:
    """Create an account and sign it in.

    Conflicts are reported on the offending field (email first, then
    username); storage failures as a generic account_not_created error.
    """
    user_store: UserStore = request.app.state.user_store
    user = register_user(user_store, body.username, body.email, body.password)
    return _signed_in_response(request, user, status_code=201)


@router.post("/auth/logout", response_model=MessageResponse)
def logout(request: Request, session: Session = Depends(get_current_session)) -> JSONResponse:
    """Invalidate the current session and clear the cookie."""
    manager: SessionManager = request.app.state.session_manager
    manager.invalidate_session(session.id)
    resp = JSONResponse(content=MessageResponse(message="Logged out.").model_dump())
    apply_cookie(resp, manager.create_blank_session_cookie())
    resp.headers["Cache-Control"] = "no-store"
    return resp


@router.get("/auth/me", response_model=UserResponse)
def me(current_user: User = Depends(get_current_user)) -> UserResponse:
    """Return identity information for the currently authenticated user."""
    return UserResponse.from_user(current_user)
