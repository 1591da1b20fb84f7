"""
posts/store.py -- SQLAlchemy Core persistence for posts.

Pattern: Repository + Data Mapper, same as auth/store.py. The posts table is
registered on the shared core.database.metadata so listing can join users for
the author's username in one query.

Security: all queries use bound parameters. No f-strings in SQL.
"""

from datetime import datetime, timezone

from sqlalchemy import Column, ForeignKey, String, Table, Text, select
from sqlalchemy.engine import Engine

from auth.store import users_table
from core.database import create_schema, metadata
from posts.models import Post

posts_table = Table(
    "posts",
    metadata,
    Column("id", String(64), primary_key=True),
    Column("author_id", String(64), ForeignKey("users.id"), nullable=False, index=True),
    Column("text_content", Text, nullable=False),
    Column("created_at", String(32), nullable=False, index=True),
)


class PostStore:
    """Repository for Post entities.

    Usage:
        store = PostStore(engine)
        store.add_post(Post(id=generate_id(10), author_id=user.id, text_content="hi"))
        feed = store.list_with_authors(limit=50)
    """

    def __init__(self, engine: Engine) -> None:
        self.engine = engine
        create_schema(engine)

    def add_post(self, post: Post) -> None:
        """Insert post. Storage errors propagate to the caller."""
        created_at = post.created_at or datetime.now(timezone.utc).isoformat()
        with self.engine.begin() as conn:
            conn.execute(
                posts_table.insert().values(
                    id=post.id,
                    author_id=post.author_id,
                    text_content=post.text_content,
                    created_at=created_at,
                )
            )
        post.created_at = created_at

    def list_with_authors(self, limit: int = 100) -> list[Post]:
        """Return the newest posts first, each with its author's username."""
        query = (
            select(posts_table, users_table.c.username.label("author_username"))
            .join(users_table, users_table.c.id == posts_table.c.author_id)
            .order_by(posts_table.c.created_at.desc(), posts_table.c.id)
            .limit(limit)
        )
        with self.engine.connect() as conn:
            rows = conn.execute(query).fetchall()
        return [_row_to_post(r) for r in rows]


def _row_to_post(row) -> Post:
    return Post(
        id=row.id,
        author_id=row.author_id,
        text_content=row.text_content,
        created_at=row.created_at,
        author_username=getattr(row, "author_username", None),
    )
