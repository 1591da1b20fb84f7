"""
core/forms.py -- Structural validation schemas for the three form submissions.

The same pydantic v2 models back both surfaces: the JSON API declares them as
request bodies (FastAPI raises RequestValidationError), the HTML routes feed
raw form fields through validate_form(). Either way the caller ends up with a
{field: [messages]} mapping, so a bad submission never reaches a flow.

Passwords are never stripped: leading/trailing whitespace is part of the secret.
"""

from __future__ import annotations

from collections.abc import Mapping
from typing import Annotated, Any, Optional, TypeVar

from pydantic import (
    AfterValidator,
    BaseModel,
    BeforeValidator,
    ConfigDict,
    EmailStr,
    Field,
    StringConstraints,
    ValidationError,
)

from core.config import get_settings

_settings = get_settings()

# Syntax only (email-validator, no DNS lookup). The whole address is lower-cased
# so uniqueness does not depend on how the user typed it.
def _strip(value: Any) -> Any:
    return value.strip() if isinstance(value, str) else value


Email = Annotated[EmailStr, BeforeValidator(_strip), AfterValidator(str.lower)]

Username = Annotated[str, StringConstraints(strip_whitespace=True, min_length=2, max_length=50)]

F = TypeVar("F", bound=BaseModel)


class SignInForm(BaseModel):
    username: Username
    password: str = Field(min_length=1, max_length=255)


class SignUpForm(BaseModel):
    username: Username
    email: Email
    password: str = Field(min_length=_settings.password_min_length, max_length=255)


class PostTextForm(BaseModel):
    model_config = ConfigDict(str_strip_whitespace=True)

    text_content: str = Field(min_length=1, max_length=_settings.post_max_length)


def field_errors(errors: list[dict[str, Any]]) -> dict[str, list[str]]:
    """Group pydantic error dicts by field name.

    The field is the last string element of `loc` ("body" and list indexes are
    skipped). Errors not tied to any field (e.g. an unparseable JSON body)
    are filed under "form".
    """
    grouped: dict[str, list[str]] = {}
    for err in errors:
        names = [part for part in err.get("loc", ()) if isinstance(part, str) and part != "body"]
        field = names[-1] if names else "form"
        grouped.setdefault(field, []).append(err.get("msg", "Invalid value."))
    return grouped


def validate_form(schema: type[F], data: Mapping[str, Any]) -> tuple[Optional[F], dict[str, list[str]]]:
    """Validate untrusted form data against schema.

    Returns (form, {}) on success and (None, errors) on failure.
    """
    try:
        return schema.model_validate(dict(data)), {}
    except ValidationError as exc:
        return None, field_errors(exc.errors())
