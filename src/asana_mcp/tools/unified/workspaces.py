"""``asana_workspaces``: list every workspace visible to the token."""

from __future__ import annotations

import logging
from typing import Optional

from mcp.server.fastmcp import FastMCP

from asana_mcp.core.client import AsanaClient
from asana_mcp.core.errors import AsanaError
from asana_mcp.core.fields import WORKSPACE_FIELDS
from asana_mcp.core.naming import canonical_tool
from asana_mcp.core.observability import redact_sensitive_data
from asana_mcp.tools.unified.common import asana_error_envelope, asana_operation, build_request_id, success

logger = logging.getLogger(__name__)

TOOL_NAME = "asana_workspaces"

DESCRIPTION = "List all Asana workspaces accessible to the authenticated user"


async def list_workspaces(client: AsanaClient) -> dict:
    request_id = build_request_id(TOOL_NAME)
    try:
        with asana_operation("Failed to list workspaces"):
            workspaces = await client.get_all("/workspaces", [("opt_fields", WORKSPACE_FIELDS)])
    except AsanaError as exc:
        logger.warning("%s failed: %s", TOOL_NAME, redact_sensitive_data(exc.describe()))
        return asana_error_envelope(exc, action_field="resource_type", action="workspace", request_id=request_id)

    items = [workspace.to_dict() for workspace in workspaces]
    return success(request_id, items=items, count=len(items))


def register_workspaces_tool(mcp: FastMCP, client: AsanaClient, *, default_workspace_gid: Optional[str]) -> None:
    """Register ``asana_workspaces``. The default workspace is not used."""

    @canonical_tool(mcp, canonical_name=TOOL_NAME, description=DESCRIPTION)
    async def asana_workspaces() -> dict:
        return await list_workspaces(client)

    logger.debug("Registered workspaces tool")


__all__ = ["TOOL_NAME", "list_workspaces", "register_workspaces_tool"]
