"""
api/routes/v1/posts.py -- Public feed and post creation.

Routes:
  GET  /api/v1/posts   -- newest posts first, with author usernames (public)
  POST /api/v1/posts   -- publish a post (requires auth)
"""

from fastapi import APIRouter, Depends, Query, Request

from api.models import PostResponse
from auth.dependencies import get_current_user
from auth.models import User
from core.forms import PostTextForm
from posts.service import publish_post
from posts.store import PostStore

router = APIRouter()


@router.get("/posts", response_model=list[PostResponse])
def list_posts(request: Request, limit: int = Query(default=100, ge=1, le=500)) -> list[PostResponse]:
    post_store: PostStore = request.app.state.post_store
    return [PostResponse.from_post(p) for p in post_store.list_with_authors(limit=limit)]


@router.post("/posts", response_model=PostResponse, status_code=201)
def create_post(
    request: Request,
    body: PostTextForm,
    current_user: User = Depends(get_current_user),
) -> PostResponse:
    """Publish body.text_content as the current user.

    Auth is resolved before the body is used: signed-out callers get 401.
    """
    post_store: PostStore = request.app.state.post_store
    post = publish_post(post_store, current_user.id, body.text_content)
    post.author_username = current_user.username
    return PostResponse.from_post(post)
