"""Tests for the unified asana_update tool."""

from __future__ import annotations

import pytest

from asana_mcp.core.errors import NotFoundError
from asana_mcp.tools.unified.update import _dispatch_update_action


async def _update(client, resource_type, **payload):
    return await _dispatch_update_action(
        resource_type=resource_type,
        payload=payload,
        client=client,
        default_workspace_gid=None,
    )


def _write(client):
    writes = [call for call in client.calls if call[0] == "write"]
    assert len(writes) == 1
    return writes[0][1], writes[0][2]


class TestUpdateFields:
    """Only supplied fields reach the request body."""

    @pytest.mark.asyncio
    async def test_task_complete(self, fake_client):
        client = fake_client(objects={"/tasks/T1": {"gid": "T1", "completed": True}})

        result = await _update(client, "task", gid="T1", completed=True)

        assert result["data"] == {"resource": {"gid": "T1", "completed": True}}
        assert _write(client) == ("/tasks/T1", {"data": {"completed": True}})

    @pytest.mark.asyncio
    async def test_false_values_are_sent(self, fake_client):
        client = fake_client()

        await _update(client, "project", gid="P1", archived=False, color="light-blue")

        assert _write(client) == ("/projects/P1", {"data": {"color": "light-blue", "archived": False}})

    @pytest.mark.asyncio
    async def test_unrelated_fields_ignored(self, fake_client):
        client = fake_client()

        await _update(client, "portfolio", gid="F1", name="Renamed", notes="not a portfolio field", public=True)

        assert _write(client) == ("/portfolios/F1", {"data": {"name": "Renamed", "public": True}})

    @pytest.mark.asyncio
    async def test_tag(self, fake_client):
        client = fake_client()

        await _update(client, "tag", gid="G1", color="dark-red")

        assert _write(client) == ("/tags/G1", {"data": {"color": "dark-red"}})

    @pytest.mark.asyncio
    async def test_section(self, fake_client):
        client = fake_client()

        await _update(client, "section", gid="S1", name="Done")

        assert _write(client) == ("/sections/S1", {"data": {"name": "Done"}})

    @pytest.mark.asyncio
    async def test_section_requires_name(self, fake_client):
        result = await _update(fake_client(), "section", gid="S1")
        assert result["error"] == "name is required for section update"


class TestUpdateContent:
    @pytest.mark.asyncio
    async def test_comment_html_wins(self, fake_client):
        client = fake_client()

        await _update(client, "comment", gid="C1", text="plain", html_text="<body>rich</body>")

        assert _write(client) == ("/stories/C1", {"data": {"html_text": "<body>rich</body>"}})

    @pytest.mark.asyncio
    async def test_comment_requires_text(self, fake_client):
        result = await _update(fake_client(), "comment", gid="C1")
        assert result["error"] == "text or html_text is required for comment update"

    @pytest.mark.asyncio
    async def test_status_update_html_notes_mapped(self, fake_client):
        client = fake_client()

        await _update(client, "status_update", gid="SU1", html_notes="<body>late</body>", status_type="at_risk")

        assert _write(client) == (
            "/status_updates/SU1",
            {"data": {"html_text": "<body>late</body>", "status_type": "at_risk"}},
        )

    @pytest.mark.asyncio
    async def test_status_update_requires_a_field(self, fake_client):
        result = await _update(fake_client(), "status_update", gid="SU1")
        assert result["error"] == "at least one of title, text, html_notes, or status_type is required"

    @pytest.mark.asyncio
    async def test_project_brief(self, fake_client):
        client = fake_client()

        await _update(client, "project_brief", gid="B1", title="Goals")

        assert _write(client) == ("/project_briefs/B1", {"data": {"title": "Goals"}})

    @pytest.mark.asyncio
    async def test_project_brief_requires_a_field(self, fake_client):
        result = await _update(fake_client(), "project_brief", gid="B1")
        assert result["error"] == (
            "at least one of title, text, or html_text is required for project_brief update"
        )


class TestUpdateDispatch:
    @pytest.mark.asyncio
    async def test_gid_required(self, fake_client):
        client = fake_client()

        result = await _update(client, "task", gid="", name="x")

        assert result["error"] == "gid is required for task"
        assert result["data"]["error_code"] == "MISSING_REQUIRED"
        assert client.calls == []

    @pytest.mark.asyncio
    async def test_unsupported_type(self, fake_client):
        result = await _update(fake_client(), "workspace", gid="W")
        assert result["error"].startswith("Unsupported asana_update resource_type 'workspace'")

    @pytest.mark.asyncio
    async def test_not_found(self, fake_client):
        client = fake_client(errors={"/tasks/404": NotFoundError("task: Unknown object: 404")})

        result = await _update(client, "task", gid="404", name="x")

        assert result["error"] == "Failed to update task: resource not found - task: Unknown object: 404"
