"""Naming helpers for MCP tool registration."""

from __future__ import annotations

from typing import Any, Callable

from mcp.server.fastmcp import FastMCP

from asana_mcp.core.observability import mcp_tool


def canonical_tool(
    mcp: FastMCP,
    *,
    canonical_name: str,
    description: str,
    **tool_kwargs: Any,
) -> Callable[[Callable[..., Any]], Callable[..., Any]]:
    """Register an async handler as ``canonical_name`` with observability applied.

    ``description`` is required so every tool shows a stable one-line summary
    in ``tools/list`` and in ``asana-mcp schema`` output, independent of the
    handler's docstring.
    """

    def decorator(func: Callable[..., Any]) -> Callable[..., Any]:
        return mcp.tool(name=canonical_name, description=description, **tool_kwargs)(
            mcp_tool(tool_name=canonical_name)(func)
        )

    return decorator
