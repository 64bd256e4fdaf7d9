"""Tests for asana_task_search and asana_resource_search."""

from __future__ import annotations

import pytest

from asana_mcp.core.errors import RemoteApiError, TransportError
from asana_mcp.core.fields import SEARCH_FIELDS, TYPEAHEAD_FIELDS
from asana_mcp.tools.unified.common import WORKSPACE_REQUIRED_MESSAGE
from asana_mcp.tools.unified.search import build_task_search_query, search_resources, search_tasks


# ---------------------------------------------------------------------------
# Query building
# ---------------------------------------------------------------------------


class TestBuildTaskSearchQuery:
    def test_defaults_only(self):
        assert build_task_search_query({}) == [("opt_fields", SEARCH_FIELDS)]

    def test_filters_translated_in_order(self):
        query = build_task_search_query(
            {
                "sort_ascending": True,
                "completed": False,
                "projects": ["P1", "P2"],
                "assignee": "me",
                "due_on_before": "2026-12-31",
                "modified_at_after": "2026-10-01T00:00:00Z",
                "text": "launch",
            }
        )

        assert query == [
            ("opt_fields", SEARCH_FIELDS),
            ("text", "launch"),
            ("assignee.any", "me"),
            ("projects.any", "P1,P2"),
            ("completed", "false"),
            ("due_on.before", "2026-12-31"),
            ("modified_at.after", "2026-10-01T00:00:00Z"),
            ("sort_ascending", "true"),
        ]

    def test_opt_fields_override(self):
        assert build_task_search_query({"opt_fields": ["name"]})[0] == ("opt_fields", "name")


# ---------------------------------------------------------------------------
# Task search
# ---------------------------------------------------------------------------


class TestSearchTasks:
    @pytest.mark.asyncio
    async def test_default_workspace(self, fake_client):
        client = fake_client(lists={"/workspaces/W/tasks/search": [{"gid": "t1", "name": "Launch"}]})

        result = await search_tasks(client, {"text": "launch"}, default_workspace_gid="W")

        assert result["success"] is True
        assert result["data"] == {"items": [{"gid": "t1", "name": "Launch"}], "count": 1}
        assert client.calls[0][2] == [("opt_fields", SEARCH_FIELDS), ("text", "launch")]

    @pytest.mark.asyncio
    async def test_explicit_workspace_wins(self, fake_client):
        client = fake_client()

        await search_tasks(client, {"workspace_gid": "W2"}, default_workspace_gid="W")

        assert client.paths("get_all") == ["/workspaces/W2/tasks/search"]

    @pytest.mark.asyncio
    async def test_no_workspace(self, fake_client):
        client = fake_client()

        result = await search_tasks(client, {"text": "x"}, default_workspace_gid=None)

        assert result["error"] == WORKSPACE_REQUIRED_MESSAGE
        assert client.calls == []

    @pytest.mark.asyncio
    async def test_invalid_filter_type(self, fake_client):
        result = await search_tasks(fake_client(), {"completed": "yes"}, default_workspace_gid="W")

        assert result["error"] == "completed must be a boolean"

    @pytest.mark.asyncio
    async def test_remote_error(self, fake_client):
        client = fake_client(errors={"/workspaces/W/tasks/search": RemoteApiError("Search is premium only", 402)})

        result = await search_tasks(client, {}, default_workspace_gid="W")

        assert result["error"] == "Failed to search tasks: API error - Search is premium only"
        assert result["data"]["details"]["workspace_gid"] == "W"


# ---------------------------------------------------------------------------
# Resource search
# ---------------------------------------------------------------------------


class TestSearchResources:
    @pytest.mark.asyncio
    async def test_defaults(self, fake_client):
        client = fake_client(lists={"/workspaces/W/typeahead": [{"gid": "p1", "name": "Roadmap"}]})

        result = await search_resources(client, {"query": "road"}, default_workspace_gid="W")

        assert result["data"]["count"] == 1
        assert client.calls[0][2] == [
            ("query", "road"),
            ("resource_type", "project"),
            ("count", "20"),
            ("opt_fields", TYPEAHEAD_FIELDS),
        ]

    @pytest.mark.asyncio
    async def test_count_capped(self, fake_client):
        client = fake_client()

        await search_resources(
            client, {"query": "a", "resource_type": "user", "count": 500}, default_workspace_gid="W"
        )

        params = dict(client.calls[0][2])
        assert params["count"] == "100"
        assert params["resource_type"] == "user"

    @pytest.mark.asyncio
    async def test_count_must_be_positive(self, fake_client):
        result = await search_resources(fake_client(), {"query": "a", "count": 0}, default_workspace_gid="W")
        assert result["error"] == "count must be >= 1"

    @pytest.mark.asyncio
    async def test_unknown_resource_type(self, fake_client):
        result = await search_resources(
            fake_client(), {"query": "a", "resource_type": "task"}, default_workspace_gid="W"
        )

        assert result["success"] is False
        assert result["error"].startswith("resource_type must be one of: goal, portfolio, project")

    @pytest.mark.asyncio
    async def test_workspace_checked_before_query(self, fake_client):
        result = await search_resources(fake_client(), {}, default_workspace_gid=None)
        assert result["error"] == WORKSPACE_REQUIRED_MESSAGE

    @pytest.mark.asyncio
    async def test_query_required(self, fake_client):
        result = await search_resources(fake_client(), {"query": " "}, default_workspace_gid="W")

        assert result["error"] == "query is required"
        assert result["data"]["error_code"] == "MISSING_REQUIRED"

    @pytest.mark.asyncio
    async def test_transport_error(self, fake_client):
        client = fake_client(errors={"/workspaces/W/typeahead": TransportError("timed out")})

        result = await search_resources(client, {"query": "a"}, default_workspace_gid="W")

        assert result["error"] == "Failed to search resources: HTTP error - timed out"
        assert result["data"]["error_type"] == "unavailable"
