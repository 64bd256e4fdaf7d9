"""Dispatch contract tests shared by every unified tool router.

Covers the error envelopes produced by ``dispatch_with_standard_errors``
(unsupported action, Asana failures with their operation context, and
unexpected exceptions) and the small request-building helpers.
"""

from __future__ import annotations

import pytest

from asana_mcp.core.context import sync_request_context
from asana_mcp.core.errors import ConfigurationError, NotFoundError, RemoteApiError, TransportError
from asana_mcp.tools.unified.common import (
    asana_error_envelope,
    asana_operation,
    build_request_id,
    compact,
    data_body,
    dispatch_with_standard_errors,
    join_fields,
    make_metric_name,
    make_validation_error_fn,
    resolve_workspace_gid,
    success,
)
from asana_mcp.tools.unified.router import ActionDefinition, ActionRouter

TOKEN = "1/1200000000000000:abcdef0123456789abcdef"


def _router(handler):
    return ActionRouter(tool_name="asana_test", actions=[ActionDefinition(name="project", handler=handler)])


# ---------------------------------------------------------------------------
# dispatch_with_standard_errors
# ---------------------------------------------------------------------------


class TestDispatchWithStandardErrors:
    @pytest.mark.asyncio
    async def test_success_passthrough(self):
        async def handler(**kwargs):
            return success("rid", resource={"gid": kwargs["gid"]})

        result = await dispatch_with_standard_errors(_router(handler), "asana_test", "project", gid="5")

        assert result["success"] is True
        assert result["data"] == {"resource": {"gid": "5"}}

    @pytest.mark.asyncio
    async def test_unsupported_action(self):
        async def handler(**kwargs):
            raise AssertionError("should not be called")

        result = await dispatch_with_standard_errors(
            _router(handler), "asana_test", "goal", action_field="resource_type", request_id="rid"
        )

        assert result["success"] is False
        assert result["error"] == "Unsupported asana_test resource_type 'goal'. Allowed values: project"
        assert result["data"]["error_code"] == "VALIDATION_ERROR"
        assert result["data"]["details"] == {"resource_type": "goal", "allowed": ["project"]}
        assert result["meta"]["request_id"] == "rid"

    @pytest.mark.asyncio
    async def test_asana_error_uses_innermost_context(self):
        async def handler(**kwargs):
            with asana_operation("Failed to get project"):
                raise NotFoundError("Unknown object")

        result = await dispatch_with_standard_errors(
            _router(handler), "asana_test", "project", action_field="resource_type"
        )

        assert result["error"] == "Failed to get project: resource not found - Unknown object"
        assert result["data"]["error_code"] == "NOT_FOUND"
        assert result["data"]["error_type"] == "not_found"
        assert result["data"]["details"] == {
            "operation": "Failed to get project",
            "resource_type": "project",
            "error_kind": "not_found",
        }

    @pytest.mark.asyncio
    async def test_unexpected_exception(self):
        async def handler(**kwargs):
            raise KeyError("gid")

        result = await dispatch_with_standard_errors(_router(handler), "asana_test", "project", request_id="rid")

        assert result["success"] is False
        assert result["error"] == "asana_test action 'project' failed: 'gid'"
        assert result["data"]["error_code"] == "INTERNAL_ERROR"
        assert result["data"]["details"]["error_type"] == "KeyError"

    @pytest.mark.asyncio
    async def test_request_id_from_context(self):
        async def handler(**kwargs):
            raise TransportError("timed out")

        with sync_request_context(correlation_id="tool_abc"):
            result = await dispatch_with_standard_errors(_router(handler), "asana_test", "project")

        assert result["meta"]["request_id"] == "tool_abc"
        assert result["data"]["error_code"] == "TRANSPORT_ERROR"


class TestAsanaOperation:
    def test_outer_context_does_not_override(self):
        with pytest.raises(NotFoundError) as exc_info:
            with asana_operation("Failed to get portfolio"):
                with asana_operation("Failed to get project"):
                    raise NotFoundError("x")
        assert exc_info.value.context == "Failed to get project"

    def test_non_asana_errors_untouched(self):
        with pytest.raises(ValueError):
            with asana_operation("Failed to get project"):
                raise ValueError("bad")


class TestAsanaErrorEnvelope:
    def test_configuration_error(self):
        exc = ConfigurationError.missing_token()
        exc.context = "Failed to list workspaces"

        result = asana_error_envelope(exc, action_field="action", action="list")

        assert result["error"] == "Failed to list workspaces: ASANA_TOKEN environment variable not set"
        assert result["data"]["error_code"] == "CONFIGURATION_ERROR"
        assert "ASANA_TOKEN" in result["data"]["remediation"]

    def test_token_redacted_from_message(self):
        exc = RemoteApiError(f"bad header Bearer {TOKEN}", 401)

        result = asana_error_envelope(exc, action_field="resource_type", action="project")

        assert TOKEN not in result["error"]
        assert result["data"]["details"]["operation"] is None


# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------


class TestHelpers:
    def test_build_request_id_prefers_context(self):
        with sync_request_context(correlation_id="tool_ctx"):
            assert build_request_id("asana_get") == "tool_ctx"
        assert build_request_id("asana_get").startswith("asana_get_")

    def test_make_metric_name(self):
        assert make_metric_name("asana_link", "add-task_tag") == "asana_link.add_task_tag"

    @pytest.mark.parametrize(
        "explicit,default,expected",
        [("1", "2", "1"), (None, "2", "2"), ("", "2", "2"), (None, None, None), (None, "", None)],
    )
    def test_resolve_workspace_gid(self, explicit, default, expected):
        assert resolve_workspace_gid(explicit, default) == expected

    def test_join_fields(self):
        assert join_fields(["name", "notes"], "gid") == "name,notes"
        assert join_fields([], "gid,name") == "gid,name"
        assert join_fields(None, "gid,name") == "gid,name"

    def test_compact_keeps_falsey_values(self):
        assert compact({"a": None, "b": False, "c": "", "d": 0}) == {"b": False, "c": "", "d": 0}

    def test_data_body(self):
        assert data_body({"name": "x", "notes": None}) == {"data": {"name": "x"}}

    def test_validation_error_fn(self):
        validation_error = make_validation_error_fn("asana_create")

        result = validation_error(field="name", action="project", message="name is required for project")

        assert result["error"] == "name is required for project"
        assert result["data"]["details"] == {"field": "name", "action": "asana_create.project"}
        assert result["data"]["remediation"] == "Provide a valid 'name' value"
