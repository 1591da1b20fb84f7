"""
core/database.py -- Shared SQLAlchemy Core metadata and engine factory.

Every table (users, sessions, posts) registers on the same MetaData so a single
create_all() builds the whole schema and posts can join against users.
Stores receive an Engine rather than building their own, which lets the
lifespan and the CLI share one connection pool per process.

Layer rule: core/ is the kernel. No imports from api/, web/, auth/, or posts/.
"""

from __future__ import annotations

from sqlalchemy import MetaData, create_engine, event
from sqlalchemy.engine import Engine

metadata = MetaData()


def _set_wal_mode(dbapi_conn, connection_record) -> None:
    """Enable WAL journal mode for concurrent read safety.

    Set per-connection because SQLite PRAGMAs are not inherited by new
    connections from the pool.
    """
    dbapi_conn.execute("PRAGMA journal_mode=WAL")


def create_db_engine(db_url: str) -> Engine:
    """Create an Engine for db_url with the SQLite tweaks applied when relevant.

    check_same_thread=False is required because FastAPI runs sync handlers on a
    thread pool; SQLAlchemy's pool already serialises access per connection.
    """
    connect_args: dict = {}
    if db_url.startswith("sqlite"):
        connect_args["check_same_thread"] = False
    engine = create_engine(db_url, connect_args=connect_args)
    if db_url.startswith("sqlite"):
        event.listen(engine, "connect", _set_wal_mode)
    return engine


def create_schema(engine: Engine) -> None:
    """Create all registered tables. Idempotent."""
    metadata.create_all(engine)
