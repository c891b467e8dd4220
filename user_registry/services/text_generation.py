"""Text Generators — the external "generate text from a prompt" collaborators.

Invariants:
    - generate() returns GenerationResult; non-text output is a result, not an error
    - Transport or API failures raise GenerationError / AnthropicAPIError (RegistryError)
    - SamplingTextGenerator never calls a client that did not declare sampling

Design Decisions:
    - MCP sampling is the default: the connected client's model writes the text,
      the server needs no API key
    - AnthropicTextGenerator for clients without sampling: wraps
      ResilientAnthropicClient so retries and error mapping stay in one place
"""

import logging

from mcp.server.session import ServerSession
from mcp.shared.exceptions import McpError
from mcp.types import (
    ClientCapabilities,
    SamplingCapability,
    SamplingMessage,
    TextContent,
)

from user_registry.core.domain_types import ContentType
from user_registry.core.errors import GenerationError
from user_registry.core.repository_protocols import GenerationResult
from user_registry.infrastructure.anthropic_client import ResilientAnthropicClient

logger = logging.getLogger(__name__)


def _content_type(kind: str | None) -> ContentType:
    try:
        return ContentType(kind)
    except ValueError:
        return ContentType.OTHER


def _result_from_blocks(blocks: list) -> GenerationResult:
    """Join text blocks; report the first block's type when there is no text."""
    texts = [b.text for b in blocks if getattr(b, "type", None) == "text"]
    if texts:
        return GenerationResult(ContentType.TEXT, "".join(texts))
    first = blocks[0] if blocks else None
    return GenerationResult(_content_type(getattr(first, "type", None)))


class SamplingTextGenerator:
    """Asks the connected MCP client to sample its model (sampling/createMessage)."""

    def __init__(self, session: ServerSession):
        self._session = session

    async def generate(self, prompt: str, max_tokens: int) -> GenerationResult:
        supported = self._session.check_client_capability(
            ClientCapabilities(sampling=SamplingCapability()),
        )
        if not supported:
            raise GenerationError("client does not support sampling")
        try:
            result = await self._session.create_message(
                messages=[
                    SamplingMessage(
                        role="user",
                        content=TextContent(type="text", text=prompt),
                    ),
                ],
                max_tokens=max_tokens,
            )
        except McpError as e:
            logger.warning(f"Sampling request failed: {e}")
            raise GenerationError(f"sampling request failed ({e.error.message})")
        content = result.content
        return _result_from_blocks(content if isinstance(content, list) else [content])


class AnthropicTextGenerator:
    """Generates text with the Anthropic Messages API."""

    def __init__(self, client: ResilientAnthropicClient, model: str):
        self._client = client
        self._model = model

    async def generate(self, prompt: str, max_tokens: int) -> GenerationResult:
        response = await self._client.create_message(
            model=self._model,
            max_tokens=max_tokens,
            messages=[{"role": "user", "content": prompt}],
        )
        return _result_from_blocks(list(response.content))
