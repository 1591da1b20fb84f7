"""
api/main.py -- FastAPI application entry point for Postboard.

Run with:      uvicorn asgi:app --reload
               python main.py serve

Middleware stack (outermost to innermost):
  1. TrustedHostMiddleware -- rejects requests with unexpected Host headers
  2. CORSMiddleware        -- adds CORS headers for allowed browser origins
  3. log_requests          -- method, path, status, latency per request
  4. session_context       -- resolves the session cookie onto request.state

Lifespan handles startup (engine, schema, stores, session manager, purge
task) and shutdown (cancel purge task, dispose engine) symmetrically.
"""

from __future__ import annotations

import asyncio
import logging
import time
from collections.abc import AsyncIterator
from contextlib import asynccontextmanager

from fastapi import FastAPI, HTTPException, Request
from fastapi.exceptions import RequestValidationError
from fastapi.middleware.cors import CORSMiddleware
from fastapi.middleware.trustedhost import TrustedHostMiddleware
from fastapi.responses import JSONResponse
from sqlalchemy import text
from sqlalchemy.exc import SQLAlchemyError
from starlette.concurrency import run_in_threadpool

from api.models import ErrorDetail, ErrorResponse, HealthResponse
from api.routes.v1.auth import router as auth_router
from api.routes.v1.posts import router as posts_router
from auth.dependencies import resolve_session
from auth.sessions import SessionManager
from auth.store import SessionStore, UserStore
from auth.tokens import apply_cookie
from core.config import get_settings
from core.database import create_db_engine
from core.errors import FormError
from core.forms import field_errors
from posts.store import PostStore

VERSION = "0.1.0"

settings = get_settings()

# ---------------------------------------------------------------------------
# Logging
# ---------------------------------------------------------------------------

logging.basicConfig(
    level=logging.DEBUG if settings.debug else logging.INFO,
    format="%(asctime)s %(levelname)-5s %(name)s %(message)s",
    datefmt="%Y-%m-%d %H:%M:%S",
)
logger = logging.getLogger("postboard.api")

# ---------------------------------------------------------------------------
# Background purge task
# ---------------------------------------------------------------------------


async def _purge_loop(app: FastAPI, interval: int) -> None:
    """Delete expired sessions every `interval` seconds.

    Expired sessions are already rejected on read; this only keeps the table
    small. The sweep itself is a blocking DELETE, so it runs on the thread pool.
    CancelledError from task.cancel() during shutdown unwinds the loop.
    """
    while True:
        await asyncio.sleep(interval)
        try:
            removed = await run_in_threadpool(app.state.session_manager.delete_expired_sessions)
        except SQLAlchemyError:
            logger.exception("Expired session purge failed")
            continue
        if removed:
            logger.info("Purged %d expired session(s)", removed)


# ---------------------------------------------------------------------------
# Lifespan
# ---------------------------------------------------------------------------


@asynccontextmanager
async def lifespan(app: FastAPI) -> AsyncIterator[None]:
    """Manage application-level resources across the full server lifetime.

    Everything before yield runs on startup; everything after yield runs on
    shutdown. The stores share one engine (and so one connection pool).
    """
    logger.info("Postboard API starting up")
    engine = create_db_engine(settings.database_url)
    app.state.engine = engine
    app.state.user_store = UserStore(engine)
    app.state.post_store = PostStore(engine)
    app.state.session_manager = SessionManager.from_settings(SessionStore(engine), settings)
    logger.info(
        "Sessions initialized (ttl=%ds, renew_within=%ds)",
        settings.session_ttl_seconds,
        settings.session_renew_seconds,
    )
    app.state.purge_task = asyncio.create_task(_purge_loop(app, settings.session_purge_interval_seconds))

    yield

    app.state.purge_task.cancel()
    engine.dispose()
    logger.info("Postboard API shutdown complete")


# ---------------------------------------------------------------------------
# App instantiation
# ---------------------------------------------------------------------------

app = FastAPI(
    title="Postboard API",
    description="Sign up, sign in, and post short messages visible to everyone.",
    version=VERSION,
    lifespan=lifespan,
)

# ---------------------------------------------------------------------------
# Middleware stack
#
# Both add_middleware() and @app.middleware("http") insert at the front of the
# stack, so the LAST registration is the outermost layer. Registration order
# below is therefore innermost first, giving at request time:
# TrustedHost -> CORS -> log_requests -> session_context -> routes.
# ---------------------------------------------------------------------------


@app.middleware("http")
async def session_context(request: Request, call_next):
    """Resolve the session cookie once per request and keep the cookie in sync.

    Before the handler: request.state.session / request.state.user are set
    (None when signed out). The lookup is blocking, so it runs on the pool.

    After the handler:
      - renewed session (fresh=True) -> re-send the cookie with the new expiry
      - cookie present but no live session -> send the blank cookie
    unless the handler already set the session cookie itself (sign-in,
    sign-up, logout), whose directive must win.
    """
    manager: SessionManager = request.app.state.session_manager
    session, user = await run_in_threadpool(resolve_session, request)
    request.state.session = session
    request.state.user = user

    response = await call_next(request)

    cookie_prefix = f"{manager.cookie_name}="
    already_set = any(v.startswith(cookie_prefix) for v in response.headers.getlist("set-cookie"))
    if not already_set:
        if session is not None and session.fresh:
            apply_cookie(response, manager.create_session_cookie(session))
        elif session is None and request.cookies.get(manager.cookie_name):
            apply_cookie(response, manager.create_blank_session_cookie())
    return response


@app.middleware("http")
async def log_requests(request: Request, call_next):
    start = time.perf_counter()
    response = await call_next(request)
    ms = (time.perf_counter() - start) * 1000
    logger.info(
        "%s %s %d %.1fms %s",
        request.method,
        request.url.path,
        response.status_code,
        ms,
        request.client.host if request.client else "unknown",
    )
    return response


app.add_middleware(
    CORSMiddleware,
    allow_origins=["http://localhost", "http://localhost:3000", "http://127.0.0.1"],
    allow_credentials=True,
    allow_methods=["GET", "POST"],
    allow_headers=["Content-Type"],
    max_age=3600,
)

app.add_middleware(TrustedHostMiddleware, allowed_hosts=settings.allowed_hosts)

# ---------------------------------------------------------------------------
# Router registration
# ---------------------------------------------------------------------------

app.include_router(auth_router, prefix="/api/v1", tags=["Auth"])
app.include_router(posts_router, prefix="/api/v1", tags=["Posts"])
# Web UI router is mounted by asgi.py, not here.


# ---------------------------------------------------------------------------
# Exception handlers
#
# All handlers return the same ErrorResponse envelope so API clients can parse
# errors uniformly without inspecting status codes to choose a schema.
# ---------------------------------------------------------------------------


@app.exception_handler(FormError)
async def form_error_handler(request: Request, exc: FormError) -> JSONResponse:
    """Render a flow error (bad credentials, conflict, storage failure).

    The message is always the error's fixed user-facing text; any chained
    storage exception was logged where it happened and is not echoed here.
    """
    response = JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=ErrorDetail(code=exc.code, message=exc.message, fields=exc.fields),
        ).model_dump(),
    )
    response.headers["Cache-Control"] = "no-store"
    return response


@app.exception_handler(RequestValidationError)
async def validation_error_handler(request: Request, exc: RequestValidationError) -> JSONResponse:
    """Return 400 with per-field messages when a request body fails its schema."""
    return JSONResponse(
        status_code=400,
        content=ErrorResponse(
            error=ErrorDetail(
                code="validation_error",
                message="Request validation failed.",
                fields=field_errors(list(exc.errors())),
            )
        ).model_dump(),
    )


@app.exception_handler(HTTPException)
async def http_exception_handler(request: Request, exc: HTTPException) -> JSONResponse:
    """Return a structured error for all FastAPI/Starlette HTTP exceptions.

    Route dependencies raise HTTPException with a dict detail. When detail is
    already structured, use it directly as the error field rather than
    stringifying it.
    """
    if isinstance(exc.detail, dict):
        return JSONResponse(status_code=exc.status_code, content={"error": exc.detail}, headers=exc.headers)
    return JSONResponse(
        status_code=exc.status_code,
        content=ErrorResponse(
            error=ErrorDetail(code=f"http_{exc.status_code}", message=str(exc.detail)),
        ).model_dump(),
        headers=exc.headers,
    )


@app.exception_handler(Exception)
async def generic_exception_handler(request: Request, exc: Exception) -> JSONResponse:
    """Catch-all handler for unexpected server errors.

    The raw exception goes to the log only, never to the response body.
    """
    logger.exception("Unhandled exception on %s %s", request.method, request.url.path)
    return JSONResponse(
        status_code=500,
        content=ErrorResponse(
            error=ErrorDetail(code="internal_error", message="An unexpected error occurred."),
        ).model_dump(),
    )


# ---------------------------------------------------------------------------
# Health endpoint
#
# Defined directly in main.py (not in a router) so it is always reachable
# regardless of router registration state.
# ---------------------------------------------------------------------------


def _database_status(request: Request) -> str:
    try:
        with request.app.state.engine.connect() as conn:
            conn.execute(text("SELECT 1"))
    except SQLAlchemyError:
        logger.exception("Health check: database unreachable")
        return "error"
    return "ok"


@app.get("/api/v1/health", tags=["Health"])
def health(request: Request) -> HealthResponse:
    """Return API liveness, version, and per-component status."""
    return HealthResponse(
        version=VERSION,
        components={"app": "ok", "database": _database_status(request)},
    )
