"""
tests/conftest.py -- Shared test fixtures for Postboard.

This module provides:
  - FakeClock: injectable clock so expiry and renewal can be driven by tests
  - MemorySessionRepository: in-memory SessionRepository fake
  - engine: isolated named shared-memory SQLite database per test
  - client: TestClient over the full ASGI app (API + web) wired to `engine`

Design: Named shared-memory SQLite URIs (not plain :memory:) are required
because TestClient runs route handlers in a thread pool. Plain :memory: DBs
are per-connection and would present a blank schema to each worker thread.
The named URI format (file:name?mode=memory&cache=shared&uri=true) shares
one in-memory instance across all connections in the same process.
"""

from __future__ import annotations

import asyncio
import dataclasses
import os
import time
import uuid
from collections.abc import Generator
from contextlib import asynccontextmanager
from datetime import datetime

# Must be set before the app is imported: TrustedHostMiddleware reads the
# allowed hosts at import, and TestClient sends Host: testserver.
os.environ.setdefault("ALLOWED_HOSTS", '["localhost", "127.0.0.1", "testserver"]')

import pytest
from fastapi.testclient import TestClient
from sqlalchemy.engine import Engine

from asgi import app
from auth.models import Session
from auth.sessions import SessionManager
from auth.store import SessionStore, UserStore
from core.database import create_db_engine
from posts.store import PostStore

SESSION_TTL = 3600


class FakeClock:
    """Callable clock returning epoch seconds; starts at real time so cookie
    Expires headers stay in the future for the HTTP client."""

    def __init__(self, start: float | None = None) -> None:
        self.now = time.time() if start is None else start

    def __call__(self) -> float:
        return self.now

    def advance(self, seconds: float) -> None:
        self.now += seconds


class MemorySessionRepository:
    """Dict-backed SessionRepository. Returns copies so callers cannot alias rows."""

    def __init__(self) -> None:
        self.rows: dict[str, Session] = {}

    def get_session(self, token: str) -> Session | None:
        row = self.rows.get(token)
        return dataclasses.replace(row, fresh=False) if row is not None else None

    def insert_session(self, session: Session) -> None:
        self.rows[session.id] = dataclasses.replace(session, fresh=False)

    def update_session_expiry(self, token: str, expires_at: datetime) -> None:
        if token in self.rows:
            self.rows[token].expires_at = expires_at

    def delete_session(self, token: str) -> None:
        self.rows.pop(token, None)

    def delete_user_sessions(self, user_id: str) -> int:
        doomed = [t for t, s in self.rows.items() if s.user_id == user_id]
        for token in doomed:
            del self.rows[token]
        return len(doomed)

    def delete_expired_sessions(self, now: datetime) -> int:
        doomed = [t for t, s in self.rows.items() if s.expires_at <= now]
        for token in doomed:
            del self.rows[token]
        return len(doomed)


# ---------------------------------------------------------------------------
# Fixtures
# ---------------------------------------------------------------------------


@pytest.fixture
def clock() -> FakeClock:
    return FakeClock()


@pytest.fixture
def engine() -> Generator[Engine, None, None]:
    """A fresh shared-memory database, unique per test."""
    eng = create_db_engine(f"sqlite:///file:test_{uuid.uuid4().hex}?mode=memory&cache=shared&uri=true")
    yield eng
    eng.dispose()


@pytest.fixture
def user_store(engine: Engine) -> UserStore:
    return UserStore(engine)


@pytest.fixture
def session_manager(engine: Engine, clock: FakeClock) -> SessionManager:
    return SessionManager(SessionStore(engine), ttl_seconds=SESSION_TTL, clock=clock)


def _patch_lifespan(engine: Engine, user_store: UserStore, session_manager: SessionManager):
    """Return an async context manager that replaces the real lifespan.

    Wires the test stores into app.state so routes see the isolated database.
    The purge_task is a long-sleeping coroutine (a real asyncio.Task is
    required; the shutdown path calls .cancel() on it).
    """

    @asynccontextmanager
    async def test_lifespan(app):
        app.state.engine = engine
        app.state.user_store = user_store
        app.state.post_store = PostStore(engine)
        app.state.session_manager = session_manager
        app.state.purge_task = asyncio.create_task(asyncio.sleep(99999))
        yield
        app.state.purge_task.cancel()

    return test_lifespan


@pytest.fixture
def client(engine: Engine, user_store: UserStore, session_manager: SessionManager) -> Generator[TestClient, None, None]:
    """TestClient over API + web routes with follow_redirects=False.

    Redirect tests assert on Location headers, which are invisible once the
    client follows the redirect.
    """
    app.router.lifespan_context = _patch_lifespan(engine, user_store, session_manager)
    with TestClient(app, follow_redirects=False, raise_server_exceptions=True) as c:
        yield c


def cookie_headers(resp, name: str = "auth_session") -> list[str]:
    """Return the Set-Cookie header values for cookie `name`."""
    return [v for v in resp.headers.get_list("set-cookie") if v.startswith(f"{name}=")]
