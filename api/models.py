"""
API request and response models for Postboard REST endpoints.

Request bodies reuse the form schemas from core/forms.py so the JSON API and
the HTML forms enforce identical rules. The response models below define the
HTTP transport contract; they are separate from the dataclasses in
auth/models.py and posts/models.py, which own the internal representation.
Route handlers map between the two.

No response model carries a session token. The token only travels in the
Set-Cookie header.
"""

from __future__ import annotations

from pydantic import BaseModel, ConfigDict, Field

from auth.models import User
from posts.models import Post

# ---------------------------------------------------------------------------
# Response models
# ---------------------------------------------------------------------------


class UserResponse(BaseModel):
    """Public identity of an account. Never includes the password hash."""

    model_config = ConfigDict(frozen=True)

    id: str
    username: str
    email: str

    @classmethod
    def from_user(cls, user: User) -> UserResponse:
        return cls(id=user.id, username=user.username, email=user.email)


class AuthResponse(BaseModel):
    """Body returned by sign-in and sign-up. The session itself is in Set-Cookie."""

    model_config = ConfigDict(frozen=True)

    user: UserResponse
    expires_at: str


class MessageResponse(BaseModel):
    model_config = ConfigDict(frozen=True)

    message: str


class PostResponse(BaseModel):
    """One post in the public feed."""

    model_config = ConfigDict(frozen=True)

    id: str
    author_id: str
    author_username: str | None = None
    text_content: str
    created_at: str

    @classmethod
    def from_post(cls, post: Post) -> PostResponse:
        return cls(
            id=post.id,
            author_id=post.author_id,
            author_username=post.author_username,
            text_content=post.text_content,
            created_at=post.created_at,
        )


class ErrorDetail(BaseModel):
    """Machine-readable error payload.

    fields maps a form field name to its messages for validation, credential,
    and uniqueness errors. It is empty for action-level errors.
    """

    model_config = ConfigDict(frozen=True)

    code: str
    message: str
    detail: str | None = None
    fields: dict[str, list[str]] = Field(default_factory=dict)


class ErrorResponse(BaseModel):
    """Top-level error envelope returned on 4xx/5xx responses."""

    model_config = ConfigDict(frozen=True)

    error: ErrorDetail


class HealthResponse(BaseModel):
    """Response for GET /api/v1/health."""

    model_config = ConfigDict(frozen=True)

    status: str = "healthy"
    version: str
    components: dict[str, str] = Field(default_factory=dict)
