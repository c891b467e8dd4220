"""Domain Types — rich types that replace bare primitives across the codebase.

Invariants:
    - UserId wraps a positive int — never a raw index into the backing array
    - All valid states encoded as Enums — no raw string matching

Design Decisions:
    - NewType over dataclass wrappers: zero runtime cost, full type-checker support
    - str Enums: serialize to JSON without custom encoders (tool results are JSON)
"""

from enum import Enum
from typing import NewType


# ─── Identity Types ──────────────────────────────────────────────

UserId = NewType("UserId", int)


# ─── Enums ───────────────────────────────────────────────────────

class ToolName(str, Enum):
    """Tools exposed by the server — names are the wire identifiers."""
    CREATE_USER = "create-user"
    CREATE_RANDOM_USER = "create-random-user"


class GeneratorBackend(str, Enum):
    """Where create-random-user gets its generated text from."""
    SAMPLING = "sampling"
    ANTHROPIC = "anthropic"


class ContentType(str, Enum):
    """Content kinds a text generator can return. Only TEXT is usable."""
    TEXT = "text"
    IMAGE = "image"
    AUDIO = "audio"
    OTHER = "other"
