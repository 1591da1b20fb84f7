"""
web/routes.py -- Jinja2 template routes for the Postboard web UI.

These routes serve server-rendered HTML. They share app.state with the API
routes (same stores and session manager) and the same form schemas and
flows, but answer with redirects and HTML instead of JSON.

Routes:
  GET  /          -- feed, current user, sign-in / sign-up / post forms
  POST /sign-in   -- handle password sign-in, redirect /
  POST /sign-up   -- handle account creation, redirect /
  POST /posts     -- publish a post, redirect /
  POST /logout    -- invalidate session, clear cookie, redirect / (303)

Failed submissions re-render the page with status 400 (401 when signed out)
and the per-field messages. Submitted values are echoed back so the user does
not retype them; passwords never are.

Handlers are plain `def`: argon2 and the store calls run on the thread pool.
"""

import logging
from pathlib import Path
from typing import Optional

from fastapi import APIRouter, Form, Request
from fastapi.responses import HTMLResponse, RedirectResponse
from fastapi.templating import Jinja2Templates

from auth.dependencies import try_get_current_user
from auth.models import User
from auth.service import authenticate_user, register_user
from auth.sessions import SessionManager
from auth.tokens import apply_cookie
from core.errors import FormError
from core.forms import PostTextForm, SignInForm, SignUpForm, validate_form
from posts.service import publish_post
from posts.store import PostStore

logger = logging.getLogger("postboard.web")

templates = Jinja2Templates(directory=str(Path(__file__).parent / "templates"))
router = APIRouter()

_FEED_SIZE = 100


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _render_home(
    request: Request,
    *,
    status_code: int = 200,
    form: Optional[str] = None,
    errors: Optional[dict[str, list[str]]] = None,
    values: Optional[dict[str, str]] = None,
) -> HTMLResponse:
    """Render index.html. form names the submission the errors belong to."""
    post_store: PostStore = request.app.state.post_store
    return templates.TemplateResponse(
        request,
        "index.html",
        {
            "user": try_get_current_user(request),
            "posts": post_store.list_with_authors(limit=_FEED_SIZE),
            "form": form,
            "errors": errors or {},
            "values": values or {},
        },
        status_code=status_code,
    )


def _redirect_signed_in(request: Request, user: User) -> RedirectResponse:
    manager: SessionManager = request.app.state.session_manager
    session = manager.create_session(user.id)
    resp = RedirectResponse("/", status_code=302)
    apply_cookie(resp, manager.create_session_cookie(session))
    resp.headers["Cache-Control"] = "no-store"
    return resp


# ---------------------------------------------------------------------------
# GET / -- feed
# ---------------------------------------------------------------------------


@router.get("/", response_class=HTMLResponse)
def home(request: Request) -> HTMLResponse:
    return _render_home(request)


# ---------------------------------------------------------------------------
# Auth forms
# ---------------------------------------------------------------------------


@router.post("/sign-in", response_class=HTMLResponse)
def sign_in_post(
    request: Request,
    username: str = Form(default=""),
    password: str = Form(default=""),
):
    """Handle the sign-in form. Every credential failure shows one generic message."""
    values = {"username": username}
    form, errors = validate_form(SignInForm, {"username": username, "password": password})
    if form is None:
        return _render_home(request, status_code=400, form="sign_in", errors=errors, values=values)
    try:
        user = authenticate_user(request.app.state.user_store, form.username, form.password)
    except FormError as exc:
        return _render_home(request, status_code=exc.status_code, form="sign_in", errors=exc.fields, values=values)
    return _redirect_signed_in(request, user)


@router.post("/sign-up", response_class=HTMLResponse)
def sign_up_post(
    request: Request,
    username: str = Form(default=""),
    email: str = Form(default=""),
    password: str = Form(default=""),
):
    """Handle the sign-up form; on success the new account is signed in."""
    values = {"username": username, "email": email}
    form, errors = validate_form(SignUpForm, {"username": username, "email": email, "password": password})
    if form is None:
        return _render_home(request, status_code=400, form="sign_up", errors=errors, values=values)
    try:
        user = register_user(request.app.state.user_store, form.username, form.email, form.password)
    except FormError as exc:
        errors = exc.fields or {"form": [exc.message]}
        return _render_home(request, status_code=exc.status_code, form="sign_up", errors=errors, values=values)
    return _redirect_signed_in(request, user)


# ---------------------------------------------------------------------------
# Posting
# ---------------------------------------------------------------------------


@router.post("/posts", response_class=HTMLResponse)
def post_create(request: Request, text_content: str = Form(default="")):
    """Publish a post as the signed-in user."""
    values = {"text_content": text_content}
    user = try_get_current_user(request)
    if user is None:
        errors = {"text_content": ["Sign in to post."]}
        return _render_home(request, status_code=401, form="post", errors=errors, values=values)

    form, errors = validate_form(PostTextForm, {"text_content": text_content})
    if form is None:
        return _render_home(request, status_code=400, form="post", errors=errors, values=values)
    try:
        publish_post(request.app.state.post_store, user.id, form.text_content)
    except FormError as exc:
        return _render_home(request, status_code=exc.status_code, form="post", errors=exc.fields, values=values)
    return RedirectResponse("/", status_code=302)


# ---------------------------------------------------------------------------
# POST /logout
# ---------------------------------------------------------------------------


@router.post("/logout")
def logout(request: Request):
    """Invalidate the session and clear the cookie. 401 when not signed in."""
    session = getattr(request.state, "session", None)
    if session is None:
        return _render_home(request, status_code=401)
    manager: SessionManager = request.app.state.session_manager
    manager.invalidate_session(session.id)
    logger.info("User %s signed out", session.user_id)
    resp = RedirectResponse("/", status_code=303)
    apply_cookie(resp, manager.create_blank_session_cookie())
    return resp
