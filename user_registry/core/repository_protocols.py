"""Boundary Protocols — contracts between core and shell.

Invariants:
    - Core NEVER imports from shell — dependency arrows point inward only
    - All IO operations accessed through Protocol types
    - Implementations provided by shell via dependency injection

Design Decisions:
    - Protocol over ABC: structural subtyping, tests pass plain fakes
    - GenerationResult carries the content type so handlers can reject
      non-text output without knowing which backend produced it
"""

from dataclasses import dataclass
from typing import Protocol

from user_registry.core.domain_types import ContentType, UserId
from user_registry.schemas.user import UserCreate, UserRecord


@dataclass(frozen=True)
class GenerationResult:
    """Output of a text generator. text is None for non-text content."""
    content_type: ContentType
    text: str | None = None

    @property
    def is_text(self) -> bool:
        return self.content_type == ContentType.TEXT and self.text is not None


class UserRepository(Protocol):
    """Contract for user persistence — implemented by shell."""
    async def load_all(self) -> list[UserRecord]: ...
    async def append(self, fields: UserCreate) -> UserId: ...
    async def find_by_id(self, user_id: int) -> UserRecord | None: ...


class TextGenerator(Protocol):
    """Contract for the external "generate text from a prompt" collaborator."""
    async def generate(self, prompt: str, max_tokens: int) -> GenerationResult: ...
