"""Asana MCP server.

Exposes Asana projects, portfolios, tasks and related resources as MCP tools.
Portfolio trees and task lists are expanded recursively to a caller-chosen
depth, and lists are fetched across every page.
"""

from asana_mcp.config.server import _PACKAGE_VERSION as __version__

__all__ = ["__version__"]
