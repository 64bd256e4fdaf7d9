"""Unified MCP tools for Asana.

Multi-variant tools route on ``resource_type`` (or ``action`` plus
``relationship``) through
:class:`~asana_mcp.tools.unified.router.ActionRouter`.
"""

from asana_mcp.tools.unified.create import register_create_tool
from asana_mcp.tools.unified.get import register_get_tool
from asana_mcp.tools.unified.link import register_link_tool
from asana_mcp.tools.unified.search import register_resource_search_tool, register_task_search_tool
from asana_mcp.tools.unified.update import register_update_tool
from asana_mcp.tools.unified.workspaces import register_workspaces_tool

__all__ = [
    "register_create_tool",
    "register_get_tool",
    "register_link_tool",
    "register_resource_search_tool",
    "register_task_search_tool",
    "register_update_tool",
    "register_workspaces_tool",
]
