"""Tests for log redaction and the mcp_tool decorator."""

import logging

import pytest

from asana_mcp.core.context import get_correlation_id
from asana_mcp.core.observability import mcp_tool, redact_sensitive_data

TOKEN = "1/1200000000000000:abcdef0123456789abcdef"


class TestRedaction:
    def test_bearer_header(self):
        assert redact_sensitive_data(f"Authorization: Bearer {TOKEN}") == "Authorization: [REDACTED:BEARER_TOKEN]"

    def test_bare_personal_access_token(self):
        redacted = redact_sensitive_data(f"token was {TOKEN} today")
        assert TOKEN not in redacted
        assert "[REDACTED:ASANA_TOKEN]" in redacted

    def test_sensitive_keys_replaced(self):
        data = {"Authorization": f"Bearer {TOKEN}", "asana_token": TOKEN, "name": "Launch"}
        assert redact_sensitive_data(data) == {
            "Authorization": "[REDACTED:AUTHORIZATION]",
            "asana_token": "[REDACTED:ASANA_TOKEN]",
            "name": "Launch",
        }

    def test_nested_structures(self):
        data = {"calls": [{"headers": {"authorization": "x"}}, (f"Bearer {TOKEN}",)]}
        redacted = redact_sensitive_data(data)
        assert redacted["calls"][0]["headers"]["authorization"] == "[REDACTED:AUTHORIZATION]"
        assert redacted["calls"][1] == ("[REDACTED:BEARER_TOKEN]",)

    def test_gids_untouched(self):
        assert redact_sensitive_data("/projects/1200000000000000/tasks") == "/projects/1200000000000000/tasks"

    def test_max_depth(self):
        assert redact_sensitive_data({"a": {"b": "c"}}, max_depth=1) == {"a": "[MAX_DEPTH_EXCEEDED]"}


class TestMcpTool:
    """The decorator binds a correlation id and records the outcome."""

    @pytest.mark.asyncio
    async def test_async_binds_correlation_id(self):
        seen = {}

        @mcp_tool(tool_name="asana_get", emit_metrics=False, audit=False)
        async def handler():
            seen["id"] = get_correlation_id()
            return {"success": True}

        assert await handler() == {"success": True}
        assert seen["id"].startswith("asana_get_")
        assert get_correlation_id() == ""

    @pytest.mark.asyncio
    async def test_error_envelope_audited_as_failure(self, caplog):
        @mcp_tool(tool_name="asana_get", emit_metrics=False)
        async def handler():
            return {"success": False, "error": "Failed to get task: resource not found - x"}

        with caplog.at_level(logging.INFO, logger="asana_mcp.core.observability.audit"):
            await handler()

        record = next(r for r in caplog.records if r.name.endswith(".audit"))
        assert record.audit["details"]["tool"] == "asana_get"
        assert record.audit["details"]["success"] is False
        assert record.audit["details"]["error"] == "Failed to get task: resource not found - x"

    @pytest.mark.asyncio
    async def test_exception_propagates(self):
        @mcp_tool(emit_metrics=False, audit=False)
        async def handler():
            raise RuntimeError("boom")

        with pytest.raises(RuntimeError, match="boom"):
            await handler()

    def test_sync_handler(self, caplog):
        @mcp_tool(tool_name="sync_tool", audit=False)
        def handler(value):
            return value * 2

        with caplog.at_level(logging.INFO, logger="asana_mcp.core.observability.metrics"):
            assert handler(4) == 8

        assert any("tool.invocations" in r.getMessage() for r in caplog.records)

    def test_name_defaults_to_function(self):
        @mcp_tool(emit_metrics=False, audit=False)
        def some_handler():
            return None

        assert some_handler.__name__ == "some_handler"
