"""
posts/models.py -- Domain dataclasses for posts.

Pure data containers. Persistence lives in posts/store.py, the creation flow
in posts/service.py.
"""

from __future__ import annotations

from dataclasses import dataclass


@dataclass
class Post:
    """A short text message. Immutable once written; never deleted.

    author_username is filled only by listing queries that join users.
    """

    id: str
    author_id: str
    text_content: str
    created_at: str = ""  # ISO 8601, set by store on insert
    author_username: str | None = None
