"""
auth/store.py -- SQLAlchemy Core persistence layer for users and sessions.

Pattern: Repository + Data Mapper. UserStore and SessionStore are the
repositories; _row_to_user / _row_to_session are the mappers. Route and
service code never touches SQL directly.

Security:
  All queries use bound parameters. No f-strings in SQL.

  username and email carry UNIQUE constraints. The database is the source of
  truth for uniqueness: create_user() lets IntegrityError propagate so the
  sign-up flow can turn a lost race into the right field error.

  Session timestamps are stored as UTC epoch seconds (REAL) so the expiry
  sweep is a plain numeric comparison.

Layer rule: no imports from api/, web/, or posts/.
"""

from __future__ import annotations

from datetime import datetime, timezone

from sqlalchemy import Column, Float, ForeignKey, String, Table, Text
from sqlalchemy.engine import Engine

from auth.models import Session, User
from core.database import create_schema, metadata

# ---------------------------------------------------------------------------
# Schema
# ---------------------------------------------------------------------------

users_table = Table(
    "users",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("username", String(50), nullable=False, unique=True),
    Column("email", String(255), nullable=False, unique=True),
    Column("hashed_password", Text),  # NULL = no local password
    Column("created_at", String(32), nullable=False),
)

sessions_table = Table(
    "sessions",
    metadata,
    Column("id", String(64), primary_key=True),  # the opaque token
    Column("user_id", String(64), ForeignKey("users.id"), nullable=False, index=True),
    Column("created_at", Float, nullable=False),
    Column("expires_at", Float, nullable=False, index=True),
)


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


def _now_iso() -> str:
    return datetime.now(timezone.utc).isoformat()


def _from_epoch(ts: float) -> datetime:
    return datetime.fromtimestamp(ts, tz=timezone.utc)


# ---------------------------------------------------------------------------
# Repositories
# ---------------------------------------------------------------------------


class UserStore:
    """Repository for User entities.

    Usage:
        store = UserStore(create_db_engine("sqlite:///postboard.db"))
        store.create_user(User(id=generate_id(10), username="alice", email="a@x.com",
                               hashed_password=hash_password("secret")))
        user = store.get_by_username("alice")
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        create_schema(engine)

    def create_user(self, user: User) -> None:
        """Insert a new user in a single statement.

        Raises sqlalchemy.exc.IntegrityError if the username or email already
        exists. Nothing is written in that case.
        """
        created_at = user.created_at or _now_iso()
        with self.engine.begin() as conn:
            conn.execute(
                users_table.insert().values(
                    id=user.id,
                    username=user.username,
                    email=user.email,
                    hashed_password=user.hashed_password,
                    created_at=created_at,
                )
            )
        user.created_at = created_at

    def get_by_username(self, username: str) -> User | None:
        """Look up a user by exact username (case-sensitive). Returns None if not found."""
        with self.engine.connect() as conn:
            row = conn.execute(users_table.select().where(users_table.c.username == username)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_email(self, email: str) -> User | None:
        """Look up a user by email. Emails are stored lower-cased by the sign-up form."""
        with self.engine.connect() as conn:
            row = conn.execute(users_table.select().where(users_table.c.email == email)).fetchone()
        return _row_to_user(row) if row is not None else None

    def get_by_id(self, user_id: str) -> User | None:
        with self.engine.connect() as conn:
            row = conn.execute(users_table.select().where(users_table.c.id == user_id)).fetchone()
        return _row_to_user(row) if row is not None else None


class SessionStore:
    """Repository for Session entities, keyed by token. Implements SessionRepository."""

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        create_schema(engine)

    def get_session(self, token: str) -> Session | None:
        with self.engine.connect() as conn:
            row = conn.execute(sessions_table.select().where(sessions_table.c.id == token)).fetchone()
        return _row_to_session(row) if row is not None else None

    def insert_session(self, session: Session) -> None:
        with self.engine.begin() as conn:
            conn.execute(
                sessions_table.insert().values(
                    id=session.id,
                    user_id=session.user_id,
                    created_at=session.created_at.timestamp(),
                    expires_at=session.expires_at.timestamp(),
                )
            )

    def update_session_expiry(self, token: str, expires_at: datetime) -> None:
        with self.engine.begin() as conn:
            conn.execute(
                sessions_table.update().where(sessions_table.c.id == token).values(expires_at=expires_at.timestamp())
            )

    def delete_session(self, token: str) -> None:
        """Delete one session. Deleting an unknown token is a no-op."""
        with self.engine.begin() as conn:
            conn.execute(sessions_table.delete().where(sessions_table.c.id == token))

    def delete_user_sessions(self, user_id: str) -> int:
        with self.engine.begin() as conn:
            result = conn.execute(sessions_table.delete().where(sessions_table.c.user_id == user_id))
        return result.rowcount

    def delete_expired_sessions(self, now: datetime) -> int:
        """Delete every session with expires_at <= now. Returns rows removed."""
        with self.engine.begin() as conn:
            result = conn.execute(sessions_table.delete().where(sessions_table.c.expires_at <= now.timestamp()))
        return result.rowcount


# ---------------------------------------------------------------------------
# Row mappers (Data Mapper pattern)
# ---------------------------------------------------------------------------


def _row_to_user(row) -> User:
    return User(
        id=row.id,
        username=row.username,
        email=row.email,
        hashed_password=row.hashed_password,
        created_at=row.created_at,
    )


def _row_to_session(row) -> Session:
    return Session(
        id=row.id,
        user_id=row.user_id,
        created_at=_from_epoch(row.created_at),
        expires_at=_from_epoch(row.expires_at),
    )
