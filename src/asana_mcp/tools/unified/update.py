"""Unified ``asana_update`` tool backed by ActionRouter."""

from __future__ import annotations

import logging
from typing import Any, Dict, Optional

from mcp.server.fastmcp import FastMCP

from asana_mcp.core.client import AsanaClient
from asana_mcp.core.naming import canonical_tool
from asana_mcp.core.responses.types import ErrorCode
from asana_mcp.tools.unified.common import (
    ToolContext,
    asana_operation,
    build_request_id,
    compact,
    data_body,
    dispatch_with_standard_errors,
    make_validation_error_fn,
    success,
)
from asana_mcp.tools.unified.param_schema import Bool, Dict_, Str, validate_payload
from asana_mcp.tools.unified.router import ActionDefinition, ActionRouter

logger = logging.getLogger(__name__)

TOOL_NAME = "asana_update"

DESCRIPTION = """Update an existing Asana resource. Supports:
- task: name, assignee, due_on, start_on, notes, html_notes, completed, custom_fields
- project: name, color, notes, html_notes, due_on, start_on, archived, privacy_setting, custom_fields
- portfolio: name, color, public
- section: name (required)
- tag: name, color, notes
- comment: text or html_text (required)
- status_update: title, text, html_notes, status_type (at least one)
- project_brief: title, text, html_text (at least one)

gid is the GID of the resource being updated. Only supplied fields are sent."""

_validation_error = make_validation_error_fn(TOOL_NAME, default_code=ErrorCode.MISSING_REQUIRED)

_UPDATE_SCHEMA = {
    "gid": Str(required=True, error_code=ErrorCode.MISSING_REQUIRED, remediation="Pass the GID of the resource"),
    "name": Str(),
    "assignee": Str(),
    "due_on": Str(),
    "start_on": Str(),
    "notes": Str(strip=False),
    "html_notes": Str(strip=False),
    "text": Str(strip=False),
    "html_text": Str(strip=False),
    "title": Str(),
    "status_type": Str(),
    "color": Str(),
    "privacy_setting": Str(),
    "completed": Bool(),
    "archived": Bool(),
    "public": Bool(),
    "custom_fields": Dict_(),
}


async def _put_resource(ctx: ToolContext, path: str, fields: Dict[str, Any], context: str) -> dict:
    with asana_operation(context):
        resource = await ctx.client.put(path, data_body(fields))
    return success(ctx.request_id, resource=resource.to_dict())


def _pick(payload: Dict[str, Any], *names: str) -> Dict[str, Any]:
    return {name: payload.get(name) for name in names}


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def _handle_task(*, ctx: ToolContext, gid: str, **payload: Any) -> dict:
    fields = _pick(
        payload, "name", "assignee", "due_on", "start_on", "notes", "html_notes", "completed", "custom_fields"
    )
    return await _put_resource(ctx, f"/tasks/{gid}", fields, "Failed to update task")


async def _handle_project(*, ctx: ToolContext, gid: str, **payload: Any) -> dict:
    fields = _pick(
        payload,
        "name",
        "color",
        "notes",
        "html_notes",
        "due_on",
        "start_on",
        "archived",
        "privacy_setting",
        "custom_fields",
    )
    return await _put_resource(ctx, f"/projects/{gid}", fields, "Failed to update project")


async def _handle_portfolio(*, ctx: ToolContext, gid: str, **payload: Any) -> dict:
    fields = _pick(payload, "name", "color", "public")
    return await _put_resource(ctx, f"/portfolios/{gid}", fields, "Failed to update portfolio")


async def _handle_section(*, ctx: ToolContext, gid: str, **payload: Any) -> dict:
    if payload.get("name") is None:
        return _validation_error(
            field="name",
            action="section",
            message="name is required for section update",
            request_id=ctx.request_id,
        )
    return await _put_resource(ctx, f"/sections/{gid}", {"name": payload["name"]}, "Failed to update section")


async def _handle_tag(*, ctx: ToolContext, gid: str, **payload: Any) -> dict:
    fields = _pick(payload, "name", "color", "notes")
    return await _put_resource(ctx, f"/tags/{gid}", fields, "Failed to update tag")


async def _handle_comment(*, ctx: ToolContext, gid: str, **payload: Any) -> dict:
    if payload.get("html_text") is not None:
        fields = {"html_text": payload["html_text"]}
    elif payload.get("text") is not None:
        fields = {"text": payload["text"]}
    else:
        return _validation_error(
            field="text",
            action="comment",
            message="text or html_text is required for comment update",
            request_id=ctx.request_id,
        )
    return await _put_resource(ctx, f"/stories/{gid}", fields, "Failed to update comment")


async def _handle_status_update(*, ctx: ToolContext, gid: str, **payload: Any) -> dict:
    """``html_notes`` is sent to Asana as the status update's ``html_text``."""
    fields = compact(
        {
            "title": payload.get("title"),
            "text": payload.get("text"),
            "html_text": payload.get("html_notes"),
            "status_type": payload.get("status_type"),
        }
    )
    if not fields:
        return _validation_error(
            field="title",
            action="status_update",
            message="at least one of title, text, html_notes, or status_type is required",
            request_id=ctx.request_id,
        )
    return await _put_resource(ctx, f"/status_updates/{gid}", fields, "Failed to update status update")


async def _handle_project_brief(*, ctx: ToolContext, gid: str, **payload: Any) -> dict:
    fields = compact(_pick(payload, "title", "text", "html_text"))
    if not fields:
        return _validation_error(
            field="title",
            action="project_brief",
            message="at least one of title, text, or html_text is required for project_brief update",
            request_id=ctx.request_id,
        )
    return await _put_resource(ctx, f"/project_briefs/{gid}", fields, "Failed to update project brief")


# ---------------------------------------------------------------------------
# Router
# ---------------------------------------------------------------------------

_UPDATE_ROUTER = ActionRouter(
    tool_name=TOOL_NAME,
    actions=[
        ActionDefinition(name="task", handler=_handle_task, summary="Update a task"),
        ActionDefinition(name="project", handler=_handle_project, summary="Update a project"),
        ActionDefinition(name="portfolio", handler=_handle_portfolio, summary="Update a portfolio"),
        ActionDefinition(name="section", handler=_handle_section, summary="Rename a section"),
        ActionDefinition(name="tag", handler=_handle_tag, summary="Update a tag"),
        ActionDefinition(name="comment", handler=_handle_comment, summary="Edit a comment"),
        ActionDefinition(name="status_update", handler=_handle_status_update, summary="Edit a status update"),
        ActionDefinition(name="project_brief", handler=_handle_project_brief, summary="Edit a project brief"),
    ],
)


async def _dispatch_update_action(
    *,
    resource_type: str,
    payload: Dict[str, Any],
    client: AsanaClient,
    default_workspace_gid: Optional[str],
) -> dict:
    request_id = build_request_id(TOOL_NAME)
    if _UPDATE_ROUTER.has_action(resource_type):
        err = validate_payload(
            payload,
            _UPDATE_SCHEMA,
            tool_name=TOOL_NAME,
            action=resource_type,
            request_id=request_id,
        )
        if err:
            return err
    ctx = ToolContext(client=client, default_workspace_gid=default_workspace_gid, request_id=request_id)
    return await dispatch_with_standard_errors(
        _UPDATE_ROUTER,
        TOOL_NAME,
        resource_type,
        action_field="resource_type",
        request_id=request_id,
        ctx=ctx,
        **payload,
    )


def register_update_tool(mcp: FastMCP, client: AsanaClient, *, default_workspace_gid: Optional[str]) -> None:
    """Register the unified ``asana_update`` tool."""

    @canonical_tool(mcp, canonical_name=TOOL_NAME, description=DESCRIPTION)
    async def asana_update(  # noqa: PLR0913 - unified signature spans every resource type
        resource_type: str,
        gid: str,
        name: Optional[str] = None,
        assignee: Optional[str] = None,
        due_on: Optional[str] = None,
        start_on: Optional[str] = None,
        notes: Optional[str] = None,
        html_notes: Optional[str] = None,
        text: Optional[str] = None,
        html_text: Optional[str] = None,
        title: Optional[str] = None,
        status_type: Optional[str] = None,
        color: Optional[str] = None,
        privacy_setting: Optional[str] = None,
        completed: Optional[bool] = None,
        archived: Optional[bool] = None,
        public: Optional[bool] = None,
        custom_fields: Optional[Dict[str, Any]] = None,
    ) -> dict:
        payload = {
            "gid": gid,
            "name": name,
            "assignee": assignee,
            "due_on": due_on,
            "start_on": start_on,
            "notes": notes,
            "html_notes": html_notes,
            "text": text,
            "html_text": html_text,
            "title": title,
            "status_type": status_type,
            "color": color,
            "privacy_setting": privacy_setting,
            "completed": completed,
            "archived": archived,
            "public": public,
            "custom_fields": custom_fields,
        }
        return await _dispatch_update_action(
            resource_type=resource_type,
            payload=payload,
            client=client,
            default_workspace_gid=default_workspace_gid,
        )

    logger.debug("Registered unified update tool")


__all__ = [
    "DESCRIPTION",
    "TOOL_NAME",
    "register_update_tool",
]
