"""
core/errors.py -- Errors raised by the sign-in, sign-up and posting flows.

Each error carries everything a handler needs to answer the caller: a stable
machine-readable code, a user-facing message, and the form field the message
belongs to. Messages are fixed strings; storage exceptions are chained with
`raise ... from exc` for the logs but never copied into the message.

The API layer turns these into the standard error envelope; the web layer
renders them next to the offending form field.
"""

from __future__ import annotations

from typing import Optional


class FormError(Exception):
    """Base class for recoverable, user-facing flow errors."""

    code: str = "form_error"
    message: str = "The form could not be processed."
    field: Optional[str] = None
    status_code: int = 400

    def __init__(self, message: Optional[str] = None, *, field: Optional[str] = None) -> None:
        if message is not None:
            self.message = message
        if field is not None:
            self.field = field
        super().__init__(self.message)

    @property
    def fields(self) -> dict[str, list[str]]:
        """Per-field messages in the same shape as structural validation errors."""
        if self.field is None:
            return {}
        return {self.field: [self.message]}


class InvalidCredentials(FormError):
    """Unknown username, missing password hash, or wrong password.

    All three cases share this one error so callers cannot tell them apart.
    """

    code = "bad_credentials"
    message = "Incorrect username or password."
    field = "password"


class EmailTaken(FormError):
    code = "email_taken"
    message = "E-mail already exists."
    field = "email"


class UsernameTaken(FormError):
    code = "username_taken"
    message = "Username already taken."
    field = "username"


class AccountNotCreated(FormError):
    code = "account_not_created"
    message = "Could not create account. Try again."


class PostNotCreated(FormError):
    code = "post_not_created"
    message = "Not possible to post. Try again."
    field = "text_content"
