"""
posts/service.py -- Post creation flow.

The caller must already hold an authenticated user id; unauthenticated
requests are rejected by the route layer before this runs.
"""

import logging

from sqlalchemy.exc import SQLAlchemyError

from auth.tokens import RECORD_ID_ENTROPY, generate_id
from core.errors import PostNotCreated
from posts.models import Post
from posts.store import PostStore

logger = logging.getLogger("postboard.posts")


def publish_post(store: PostStore, author_id: str, text_content: str) -> Post:
    """Persist a new post by author_id. Raises PostNotCreated on storage failure."""
    post = Post(id=generate_id(RECORD_ID_ENTROPY), author_id=author_id, text_content=text_content)
    try:
        store.add_post(post)
    except SQLAlchemyError as exc:
        logger.exception("Could not insert post for user %s", author_id)
        raise PostNotCreated() from exc
    return post
