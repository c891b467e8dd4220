"""User Registry MCP Server — FastMCP application entry point.

Invariants:
    - Tools, resources and the prompt registered explicitly (no auto-discovery)
    - Tool calls go through ToolDispatch: envelope in every outcome
    - create-user arguments are optional at the MCP layer so a missing field
      comes back as a VALIDATION_ERROR envelope; a non-string argument is
      still rejected by FastMCP's argument schema as an isError result
    - The store is built once per server and injected, never module state
    - stdout carries the stdio transport; logs go to stderr

Design Decisions:
    - build_server() separate from main(): tests build a server on a tmp_path
      store and drive it through an in-memory client session
    - Sampling generator built per call from the request Context: sampling
      requests must go back over the session that asked for the tool
"""

import logging
import sys

from mcp.server.fastmcp import Context, FastMCP

from user_registry.config import Settings, get_settings
from user_registry.core.domain_types import GeneratorBackend, ToolName
from user_registry.core.repository_protocols import TextGenerator, UserRepository
from user_registry.infrastructure.anthropic_client import ResilientAnthropicClient
from user_registry.infrastructure.json_file_store import JsonFileUserStore
from user_registry.infrastructure.observability import setup_logging
from user_registry.services.define_user_tools import (
    PROMPT_FAKE_USER,
    RESOURCE_ALL_USERS,
    RESOURCE_USER_DETAILS,
    get_tool_definition,
)
from user_registry.services.handle_users import UserHandlers
from user_registry.services.prompts import build_fake_user_prompt
from user_registry.services.text_generation import (
    AnthropicTextGenerator,
    SamplingTextGenerator,
)
from user_registry.services.tool_dispatch import ToolDispatch

logger = logging.getLogger(__name__)


def build_generator(settings: Settings) -> TextGenerator | None:
    """Server-wide generator, or None when each call samples its own client."""
    if settings.generator_backend != GeneratorBackend.ANTHROPIC:
        return None
    client = ResilientAnthropicClient(
        api_key=settings.anthropic_api_key,
        max_retries=settings.anthropic_max_retries,
        base_delay_ms=settings.anthropic_base_delay_ms,
        max_delay_ms=settings.anthropic_max_delay_ms,
        timeout_seconds=settings.anthropic_timeout_seconds,
    )
    return AnthropicTextGenerator(client, settings.anthropic_model)


def build_server(
    settings: Settings,
    store: UserRepository | None = None,
    generator: TextGenerator | None = None,
) -> FastMCP:
    """Wire store → handlers → dispatch and register the MCP surface."""
    store = store or JsonFileUserStore(settings.store_path)
    handlers = UserHandlers(store, max_tokens=settings.generation_max_tokens)
    dispatch = ToolDispatch(handlers)
    shared_generator = generator or build_generator(settings)

    mcp = FastMCP(settings.server_name)

    # ─── Tools ──────────────────────────────────────────────────

    @mcp.tool(**get_tool_definition(ToolName.CREATE_USER))
    async def create_user(
        name: str | None = None,
        email: str | None = None,
        address: str | None = None,
        phone: str | None = None,
    ) -> dict:
        # omitted fields reach validate_user_input so they get the envelope
        fields = {"name": name, "email": email, "address": address, "phone": phone}
        return await dispatch.execute(
            ToolName.CREATE_USER.value,
            {k: v for k, v in fields.items() if v is not None},
        )

    @mcp.tool(**get_tool_definition(ToolName.CREATE_RANDOM_USER))
    async def create_random_user(ctx: Context) -> dict:
        active = shared_generator or SamplingTextGenerator(ctx.session)
        return await dispatch.execute(
            ToolName.CREATE_RANDOM_USER.value, {}, active,
        )

    # ─── Resources ──────────────────────────────────────────────

    @mcp.resource(**RESOURCE_ALL_USERS)
    async def all_users() -> str:
        return await handlers.list_users()

    @mcp.resource(**RESOURCE_USER_DETAILS)
    async def user_details(user_id: str) -> str:
        return await handlers.get_user_details(user_id)

    # ─── Prompts ────────────────────────────────────────────────

    @mcp.prompt(**PROMPT_FAKE_USER)
    def generate_fake_user(name: str) -> str:
        return build_fake_user_prompt(name)

    return mcp


def main() -> None:
    """Run the server over stdio."""
    settings = get_settings()
    setup_logging(settings.log_level, settings.log_format)
    try:
        mcp = build_server(settings)
        logger.info(
            f"{settings.server_name} running on stdio",
            extra={"store_path": str(settings.store_path)},
        )
        mcp.run()
    except Exception as e:
        logger.critical(f"Fatal error in main(): {e}", exc_info=True)
        sys.exit(1)


if __name__ == "__main__":
    main()
