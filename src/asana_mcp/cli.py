"""Command-line entry point: ``asana-mcp serve`` and ``asana-mcp schema``."""

from __future__ import annotations

import asyncio
import json
import logging
from typing import List, Optional

import click
from mcp.server.fastmcp import FastMCP

from asana_mcp import __version__
from asana_mcp.config import ServerConfig, set_config
from asana_mcp.core.client import AsanaClient
from asana_mcp.server import SERVER_INSTRUCTIONS, run_stdio
from asana_mcp.tools import register_all_tools

logger = logging.getLogger(__name__)

_LOG_LEVELS = ["DEBUG", "INFO", "WARNING", "ERROR", "CRITICAL"]


def _schema_registry() -> FastMCP:
    """Every tool registered against an offline client, for introspection only."""
    mcp = FastMCP("asanamcp", instructions=SERVER_INSTRUCTIONS)
    register_all_tools(mcp, ServerConfig(), AsanaClient(""))
    return mcp


def _matches(tool_name: str, pattern: str) -> bool:
    pattern = pattern.lower()
    name = tool_name.lower()
    return pattern in name or pattern == name.removeprefix("asana_")


@click.group("asana-mcp")
@click.version_option(__version__, prog_name="asana-mcp")
def cli() -> None:
    """Asana MCP server."""


@cli.command("serve")
@click.option(
    "--config",
    "config_file",
    type=click.Path(dir_okay=False),
    default=None,
    help="TOML config file (replaces the XDG, home and project config files).",
)
@click.option(
    "--log-level",
    type=click.Choice(_LOG_LEVELS, case_sensitive=False),
    default=None,
    help="Override the configured log level.",
)
def serve_cmd(config_file: Optional[str], log_level: Optional[str]) -> None:
    """Run the MCP server over stdio."""
    config = ServerConfig.from_env(config_file)
    if log_level:
        config.log_level = log_level.upper()
    config.setup_logging()
    set_config(config)
    run_stdio(config)


@cli.command("schema")
@click.argument("name_filter", metavar="FILTER", required=False)
def schema_cmd(name_filter: Optional[str]) -> None:
    """Print the input schema of each tool, optionally filtered by FILTER."""
    tools = asyncio.run(_schema_registry().list_tools())
    if name_filter:
        selected = [tool for tool in tools if _matches(tool.name, name_filter)]
    else:
        selected = list(tools)

    if not selected:
        available: List[str] = [tool.name for tool in tools]
        click.echo(f"No tool matches '{name_filter}'. Available tools: {', '.join(available)}", err=True)
        raise SystemExit(1)

    for index, tool in enumerate(selected):
        if index:
            click.echo()
        click.echo(f"=== {tool.name} ===")
        first_line = (tool.description or "").splitlines()[0] if tool.description else ""
        click.echo(f"Description: {first_line}")
        click.echo(json.dumps(tool.inputSchema, indent=2))


def main() -> None:
    cli()


if __name__ == "__main__":
    main()
