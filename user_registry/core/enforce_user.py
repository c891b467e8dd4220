"""User Input Enforcement — validates caller-supplied fields against the UserCreate shape.

Invariants:
    - All functions are PURE: no IO, no async, no side effects
    - validate_user_input raises core ValidationError, never pydantic's
    - The first failing field is reported by name in the message

Design Decisions:
    - Translate pydantic errors here so handlers catch a single hierarchy (RegistryError)
"""

import pydantic

from user_registry.core.errors import ValidationError
from user_registry.schemas.user import UserCreate


def describe_validation_error(exc: pydantic.ValidationError) -> tuple[str, str | None]:
    """Summarize a pydantic error as (message, field). First error wins."""
    errors = exc.errors()
    if not errors:
        return "Invalid user data", None
    first = errors[0]
    field = ".".join(str(loc) for loc in first["loc"]) or None
    if field:
        return f"Invalid user data: {field}: {first['msg']}", field
    return f"Invalid user data: {first['msg']}", None


def validate_user_input(data: object) -> UserCreate:
    """Validate a raw parameter object. Raises ValidationError on any shape problem."""
    if not isinstance(data, dict):
        raise ValidationError(
            f"Invalid user data: expected an object, got {type(data).__name__}",
        )
    try:
        return UserCreate.model_validate(data)
    except pydantic.ValidationError as e:
        message, field = describe_validation_error(e)
        raise ValidationError(message, field=field)
