"""User Tool Definitions — MCP metadata for every tool, resource and prompt the server exposes.

Invariants:
    - Both tools write data: readOnlyHint False, idempotentHint False
    - Neither tool deletes anything: destructiveHint False
    - Wire names here are the only place the strings are spelled out

Design Decisions:
    - Plain dicts of metadata, registered explicitly in main.build_server:
      every name/description visible in one file
"""

from mcp.types import ToolAnnotations

from user_registry.core.domain_types import ToolName

TOOLS_USERS = [
    {
        "name": ToolName.CREATE_USER.value,
        "description": "Create a new user in the system",
        "annotations": ToolAnnotations(
            title="Create User Tool",
            readOnlyHint=False,
            destructiveHint=False,
            idempotentHint=False,
            openWorldHint=True,
        ),
    },
    {
        "name": ToolName.CREATE_RANDOM_USER.value,
        "description": "Create a random user with fake data",
        "annotations": ToolAnnotations(
            title="Create Random User",
            readOnlyHint=False,
            destructiveHint=False,
            idempotentHint=False,
            openWorldHint=True,
        ),
    },
]

RESOURCE_ALL_USERS = {
    "uri": "user://all",
    "name": "Users",
    "title": "Users",
    "description": "Get all users in database",
    "mime_type": "application/json",
}

RESOURCE_USER_DETAILS = {
    "uri": "users://{user_id}/details",
    "name": "user-details",
    "title": "User Details",
    "description": "Get details for a specific user by ID",
    "mime_type": "application/json",
}

PROMPT_FAKE_USER = {
    "name": "generate-fake-user",
    "description": "Generate a fake user profile",
}


def get_tool_definition(name: ToolName) -> dict:
    for tool in TOOLS_USERS:
        if tool["name"] == name.value:
            return tool
    raise KeyError(name.value)
