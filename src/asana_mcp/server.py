"""FastMCP server factory for asana-mcp."""

from __future__ import annotations

import logging
from typing import Optional

import click
from mcp.server.fastmcp import FastMCP

from asana_mcp.config import ServerConfig, get_config
from asana_mcp.core.client import AsanaClient
from asana_mcp.core.errors import ConfigurationError
from asana_mcp.tools import register_all_tools

logger = logging.getLogger(__name__)

SERVER_INSTRUCTIONS = (
    "Asana MCP server providing tools for interacting with Asana tasks, projects, and portfolios. "
    "Authenticate with ASANA_TOKEN environment variable."
)


def create_server(config: Optional[ServerConfig] = None) -> FastMCP:
    """Build a FastMCP server with every enabled Asana tool registered.

    Raises:
        ConfigurationError: When no usable API token is configured. This is
            checked once here, before any tool can issue a request.
    """
    config = config or get_config()
    client = AsanaClient.from_config(config)

    mcp = FastMCP(config.server_name, instructions=SERVER_INSTRUCTIONS)
    tools = register_all_tools(mcp, config, client)

    for warning in config.startup_warnings:
        logger.warning("Startup: %s", warning)
    logger.info(
        "Created %s %s with %d tools (default workspace: %s)",
        config.server_name,
        config.server_version,
        len(tools),
        config.default_workspace_gid or "none",
    )
    return mcp


def run_stdio(config: ServerConfig) -> None:
    """Build the server from *config* and serve it over stdio.

    A missing or malformed token is reported on stderr and exits with status 1.
    """
    try:
        server = create_server(config)
    except ConfigurationError as exc:
        click.echo(f"Error: {exc}", err=True)
        raise SystemExit(1) from exc

    server.run(transport="stdio")


def main() -> None:
    """Run the server over stdio using configuration from the environment."""
    config = get_config()
    config.setup_logging()
    run_stdio(config)


__all__ = ["SERVER_INSTRUCTIONS", "create_server", "main", "run_stdio"]
