"""Tests for the asana-mcp command line."""

import asyncio
import json
from unittest.mock import MagicMock, patch

import pytest
from click.testing import CliRunner

from asana_mcp import __version__
from asana_mcp.cli import _matches, _schema_registry, cli
from asana_mcp.config import ServerConfig, set_config


@pytest.fixture
def runner():
    return CliRunner()


@pytest.fixture
def empty_config(tmp_path, monkeypatch):
    """An empty config file and no token in the environment."""
    for var in ("ASANA_TOKEN", "ASANA_ACCESS_TOKEN", "ASANA_MCP_CONFIG_FILE", "ASANA_MCP_LOG_LEVEL"):
        monkeypatch.delenv(var, raising=False)
    monkeypatch.setattr(ServerConfig, "setup_logging", lambda self: None)
    path = tmp_path / "asana-mcp.toml"
    path.write_text("")
    yield str(path)
    set_config(None)


class TestSchemaCommand:
    def test_all_tools(self, runner):
        result = runner.invoke(cli, ["schema"])

        assert result.exit_code == 0
        for name in ("asana_workspaces", "asana_get", "asana_create", "asana_link", "asana_resource_search"):
            assert f"=== {name} ===" in result.output

    def test_filter_by_short_name(self, runner):
        result = runner.invoke(cli, ["schema", "get"])

        assert result.exit_code == 0
        assert result.output.startswith("=== asana_get ===\nDescription: Get any Asana resource by type and GID.")
        schema = json.loads(result.output.split("\n", 2)[2])
        assert "resource_type" in schema["properties"]

    def test_schema_matches_listed_tools(self, runner):
        listed = {tool.name: tool for tool in asyncio.run(_schema_registry().list_tools())}

        result = runner.invoke(cli, ["schema", "link"])

        schema = json.loads(result.output.split("\n", 2)[2])
        assert schema == listed["asana_link"].inputSchema
        assert schema["required"] == ["action", "relationship", "target_gid"]

    def test_filter_substring_matches_several(self, runner):
        result = runner.invoke(cli, ["schema", "SEARCH"])

        assert "=== asana_task_search ===" in result.output
        assert "=== asana_resource_search ===" in result.output
        assert "=== asana_get ===" not in result.output

    def test_no_match(self, runner):
        result = runner.invoke(cli, ["schema", "nope"])

        assert result.exit_code == 1
        assert "No tool matches 'nope'" in result.output
        assert "asana_workspaces" in result.output


class TestServeCommand:
    def test_missing_token_exits(self, runner, empty_config):
        result = runner.invoke(cli, ["serve", "--config", empty_config])

        assert result.exit_code == 1
        assert "Error: ASANA_TOKEN environment variable is not set" in result.output

    def test_runs_stdio(self, runner, empty_config, monkeypatch):
        monkeypatch.setenv("ASANA_TOKEN", "1/123:abc")
        server = MagicMock()

        with patch("asana_mcp.server.create_server", return_value=server) as create:
            result = runner.invoke(cli, ["serve", "--config", empty_config, "--log-level", "debug"])

        assert result.exit_code == 0
        config = create.call_args.args[0]
        assert config.asana_token == "1/123:abc"
        assert config.log_level == "DEBUG"
        server.run.assert_called_once_with(transport="stdio")


class TestCli:
    def test_version(self, runner):
        result = runner.invoke(cli, ["--version"])
        assert __version__ in result.output

    @pytest.mark.parametrize(
        "tool,pattern,expected",
        [
            ("asana_get", "get", True),
            ("asana_get", "asana_get", True),
            ("asana_get", "GET", True),
            ("asana_task_search", "search", True),
            ("asana_link", "get", False),
            ("asana_get", "getx", False),
        ],
    )
    def test_matches(self, tool, pattern, expected):
        assert _matches(tool, pattern) is expected
