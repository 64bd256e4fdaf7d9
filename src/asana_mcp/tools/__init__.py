"""MCP tool registration for asana-mcp."""

from __future__ import annotations

import logging
from typing import Callable, Dict, List

from mcp.server.fastmcp import FastMCP

from asana_mcp.config import ServerConfig
from asana_mcp.core.client import AsanaClient
from asana_mcp.tools.unified import (
    register_create_tool,
    register_get_tool,
    register_link_tool,
    register_resource_search_tool,
    register_task_search_tool,
    register_update_tool,
    register_workspaces_tool,
)

logger = logging.getLogger(__name__)

TOOL_REGISTRARS: Dict[str, Callable[..., None]] = {
    "asana_workspaces": register_workspaces_tool,
    "asana_get": register_get_tool,
    "asana_create": register_create_tool,
    "asana_update": register_update_tool,
    "asana_link": register_link_tool,
    "asana_task_search": register_task_search_tool,
    "asana_resource_search": register_resource_search_tool,
}


def register_all_tools(mcp: FastMCP, config: ServerConfig, client: AsanaClient) -> List[str]:
    """Register every tool not listed in ``config.disabled_tools``.

    Returns the names of the registered tools, in registration order.
    """
    registered: List[str] = []
    for name, registrar in TOOL_REGISTRARS.items():
        if not config.is_tool_enabled(name):
            logger.info("Skipping disabled tool: %s", name)
            continue
        registrar(mcp, client, default_workspace_gid=config.default_workspace_gid)
        registered.append(name)

    unknown = sorted(set(config.disabled_tools) - set(TOOL_REGISTRARS))
    if unknown:
        logger.warning("Unknown tool name(s) in disabled_tools: %s", ", ".join(unknown))

    logger.debug("Registered %d tools", len(registered))
    return registered


__all__ = ["TOOL_REGISTRARS", "register_all_tools"]
