"""User Handlers — create-user, create-random-user, and the two user resources.

Invariants:
    - Tool handlers always return an envelope: {"ok": True, "id", "message"} or
      RegistryError.to_envelope(); no RegistryError escapes
    - Resource handlers always return JSON text; failures become {"error": ...}
    - Every write goes through the injected UserRepository (single-writer append)
    - Generated text is used only after parse_generated_user returns ParsedUser

Design Decisions:
    - Store injected, not module state: tests pass a tmp_path store or a fake
    - Generator passed per call: MCP sampling is bound to the requesting session
    - Parse failures handled by branching on the tagged result, not by raising
"""

import json
import logging

from user_registry.core.domain_types import ToolName
from user_registry.core.enforce_user import validate_user_input
from user_registry.core.errors import (
    ErrorContext,
    GenerationError,
    GenerationParseError,
    NotFoundError,
    RegistryError,
)
from user_registry.core.parse_generated import ParseFailure, parse_generated_user
from user_registry.core.repository_protocols import TextGenerator, UserRepository
from user_registry.services.prompts import RANDOM_USER_PROMPT

logger = logging.getLogger(__name__)


class UserHandlers:
    """Registry tool and resource handlers."""

    def __init__(self, store: UserRepository, max_tokens: int = 1024):
        self.store = store
        self.max_tokens = max_tokens

    async def create_user(self, input_data: dict) -> dict:
        """Validate fields and append one user."""
        try:
            fields = validate_user_input(input_data)
            user_id = await self.store.append(fields)
        except RegistryError as e:
            return self._failure(e, ToolName.CREATE_USER)
        return _created(user_id)

    async def create_random_user(
        self, input_data: dict, generator: TextGenerator | None = None,
    ) -> dict:
        """Generate a fake user with the text generator and append it."""
        tool = ToolName.CREATE_RANDOM_USER
        if generator is None:
            return self._failure(GenerationError("no text generator configured"), tool)
        try:
            result = await generator.generate(RANDOM_USER_PROMPT, self.max_tokens)
        except RegistryError as e:
            return self._failure(e, tool)
        if not result.is_text:
            return self._failure(
                GenerationError(f"generator returned {result.content_type.value} content"),
                tool,
            )

        parsed = parse_generated_user(result.text)
        if isinstance(parsed, ParseFailure):
            return self._failure(GenerationParseError(parsed.reason), tool)

        try:
            user_id = await self.store.append(parsed.user)
        except RegistryError as e:
            return self._failure(e, tool)
        return _created(user_id)

    async def list_users(self) -> str:
        """All users as a JSON array (resource user://all)."""
        try:
            records = await self.store.load_all()
        except RegistryError as e:
            return self._resource_error(e)
        return json.dumps([r.model_dump() for r in records])

    async def get_user_details(self, user_id: str) -> str:
        """One user as a JSON object (resource users://{user_id}/details)."""
        try:
            wanted = int(user_id)
        except (TypeError, ValueError):
            wanted = None
        record = None
        if wanted is not None:
            try:
                record = await self.store.find_by_id(wanted)
            except RegistryError as e:
                return self._resource_error(e)
        if record is None:
            return self._resource_error(
                NotFoundError(user_id, ErrorContext(user_message="User not found")),
            )
        return json.dumps(record.model_dump())

    def _failure(self, error: RegistryError, tool: ToolName) -> dict:
        error.context.tool_name = tool.value
        log = logger.warning if error.recoverable else logger.error
        log(
            f"{tool.value} failed: {error.message}",
            extra={"tool_name": tool.value, "error_code": error.code},
        )
        return error.to_envelope()

    def _resource_error(self, error: RegistryError) -> str:
        log = logger.info if error.recoverable else logger.error
        log(error.message, extra={"error_code": error.code})
        return json.dumps({"error": error.context.user_message or error.message})


def _created(user_id: int) -> dict:
    return {
        "ok": True,
        "id": user_id,
        "message": f"User {user_id} created successfully",
    }
