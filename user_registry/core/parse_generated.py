"""Generated User Parsing — turns free-form model output into a UserCreate.

Invariants:
    - All functions are PURE: no IO, no async, no side effects
    - parse_generated_user never raises: returns ParsedUser or ParseFailure
    - Only one outer Markdown fence is stripped (```json or bare ```)

Design Decisions:
    - Tagged result over exceptions: the handler branches on the variant and
      builds the failure envelope itself (uniform tool response shape)
    - Fence stripping tolerant of a language tag other than json and of
      trailing whitespace: models vary in how they wrap JSON
"""

import json
import re
from dataclasses import dataclass

import pydantic

from user_registry.core.enforce_user import describe_validation_error
from user_registry.schemas.user import UserCreate

_OPENING_FENCE = re.compile(r"^```[A-Za-z0-9_-]*[ \t]*\n?")
_CLOSING_FENCE = re.compile(r"\n?```$")


@dataclass(frozen=True)
class ParsedUser:
    """Generated text parsed into a valid user."""
    user: UserCreate


@dataclass(frozen=True)
class ParseFailure:
    """Generated text could not be used. reason is human-readable."""
    reason: str


ParseResult = ParsedUser | ParseFailure


def strip_code_fence(text: str) -> str:
    """Remove a Markdown code fence wrapping the whole text, if present."""
    stripped = text.strip()
    if not stripped.startswith("```"):
        return stripped
    stripped = _OPENING_FENCE.sub("", stripped, count=1)
    stripped = _CLOSING_FENCE.sub("", stripped, count=1)
    return stripped.strip()


def parse_generated_user(text: str) -> ParseResult:
    """Strip fences, decode JSON and validate the UserCreate shape."""
    body = strip_code_fence(text)
    if not body:
        return ParseFailure("generated text is empty")
    try:
        data = json.loads(body)
    except json.JSONDecodeError as e:
        return ParseFailure(f"generated text is not valid JSON ({e.msg})")
    if not isinstance(data, dict):
        return ParseFailure("generated JSON is not an object")
    try:
        return ParsedUser(UserCreate.model_validate(data))
    except pydantic.ValidationError as e:
        message, _ = describe_validation_error(e)
        return ParseFailure(message)
