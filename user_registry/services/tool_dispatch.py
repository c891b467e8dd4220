"""Tool Dispatch — explicit routing from tool_name to handler function.

Invariants:
    - Every tool->handler mapping is visible — no getattr magic, no auto-discovery
    - Only GENERATOR_TOOLS receive the per-request text generator
    - Unknown tools return UNKNOWN_TOOL envelope (never raises)
    - Unexpected handler exceptions return INTERNAL_ERROR envelope (never raises)
    - Every tool call logged with its outcome

Design Decisions:
    - Explicit dict over getattr: every mapping visible in one place
    - Catch-all lives here, not in handlers: handlers only catch RegistryError,
      anything else is a bug that must be logged with traceback
"""

import logging

from user_registry.core.domain_types import ToolName
from user_registry.core.repository_protocols import TextGenerator
from user_registry.services.handle_users import UserHandlers

logger = logging.getLogger(__name__)

# Tools whose handler needs the text generator for the current request
GENERATOR_TOOLS = frozenset({ToolName.CREATE_RANDOM_USER.value})


class ToolDispatch:
    """Routes tool_name -> handler. Explicit registration, no auto-discovery."""

    def __init__(self, handlers: UserHandlers):
        # every mapping explicit — adding a tool requires editing this dict
        self._handlers = {
            ToolName.CREATE_USER.value: handlers.create_user,
            ToolName.CREATE_RANDOM_USER.value: handlers.create_random_user,
        }

    async def execute(
        self,
        tool_name: str,
        input_data: dict,
        generator: TextGenerator | None = None,
    ) -> dict:
        """Route tool_name to handler. Returns envelope dict. Logs every call."""
        handler = self._handlers.get(tool_name)
        if not handler:
            result = {
                "ok": False,
                "error_code": "UNKNOWN_TOOL",
                "message": f"Tool '{tool_name}' does not exist.",
            }
            self._log_tool_call(tool_name, result)
            return result
        try:
            if tool_name in GENERATOR_TOOLS:
                result = await handler(input_data, generator)
            else:
                result = await handler(input_data)
        except Exception as e:
            logger.error(
                f"Unhandled exception in tool '{tool_name}': {e}",
                exc_info=True,
                extra={"tool_name": tool_name, "error_code": "INTERNAL_ERROR"},
            )
            result = {
                "ok": False,
                "error_code": "INTERNAL_ERROR",
                "message": "An unexpected error occurred",
            }
        self._log_tool_call(tool_name, result)
        return result

    def _log_tool_call(self, tool_name: str, result: dict) -> None:
        if result.get("ok"):
            logger.info(
                f"Tool '{tool_name}' succeeded",
                extra={"tool_name": tool_name, "user_id": result.get("id")},
            )
        else:
            logger.info(
                f"Tool '{tool_name}' returned error",
                extra={"tool_name": tool_name, "error_code": result.get("error_code")},
            )
