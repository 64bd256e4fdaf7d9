"""Unified ``asana_create`` tool backed by ActionRouter."""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional

from mcp.server.fastmcp import FastMCP

from asana_mcp.core.client import AsanaClient
from asana_mcp.core.models import Job
from asana_mcp.core.naming import canonical_tool
from asana_mcp.core.responses.types import ErrorCode
from asana_mcp.tools.unified.common import (
    WORKSPACE_REQUIRED_MESSAGE,
    ToolContext,
    asana_operation,
    build_request_id,
    data_body,
    dispatch_with_standard_errors,
    make_validation_error_fn,
    resolve_workspace_gid,
    success,
)
from asana_mcp.tools.unified.param_schema import Bool, Dict_, List_, Str, validate_payload
from asana_mcp.tools.unified.router import ActionDefinition, ActionRouter

logger = logging.getLogger(__name__)

TOOL_NAME = "asana_create"

DESCRIPTION = """Create a new Asana resource. Supports:
- task: Create a task (workspace_gid or project_gid, uses default workspace if neither)
- subtask: Create a subtask (task_gid = parent task)
- project: Create a project (workspace_gid or team_gid)
- project_from_template: Instantiate from template (template_gid and name required)
- portfolio: Create a portfolio (uses default workspace if workspace_gid not provided)
- section: Create a section in a project (project_gid required)
- comment: Add a comment to a task (task_gid required)
- status_update: Create a status update (parent_gid = project/portfolio, status_type required)
- tag: Create a tag (uses default workspace if workspace_gid not provided)
- project_duplicate: Duplicate a project (source_gid, name required; include[] for options)
- task_duplicate: Duplicate a task (source_gid, name required; include[] for options)
- project_brief: Create a project brief (project_gid required, html_text with <body> tags)

workspace_gid uses ASANA_DEFAULT_WORKSPACE env var if not provided."""

_validation_error = make_validation_error_fn(TOOL_NAME, default_code=ErrorCode.MISSING_REQUIRED)

_CREATE_SCHEMA = {
    "name": Str(),
    "workspace_gid": Str(),
    "project_gid": Str(),
    "task_gid": Str(),
    "team_gid": Str(),
    "template_gid": Str(),
    "parent_gid": Str(),
    "source_gid": Str(),
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
    "public": Bool(),
    "privacy_setting": Str(),
    "custom_fields": Dict_(),
    "requested_dates": List_(item_type=dict),
    "requested_roles": List_(item_type=dict),
    "include": List_(item_type=str),
}


def _require(payload: Dict[str, Any], field: str, message: str, action: str, ctx: ToolContext) -> Optional[dict]:
    if payload.get(field) is None:
        return _validation_error(field=field, action=action, message=message, request_id=ctx.request_id)
    return None


def _first_error(*errors: Optional[dict]) -> Optional[dict]:
    for err in errors:
        if err is not None:
            return err
    return None


async def _post_resource(ctx: ToolContext, path: str, fields: Dict[str, Any], context: str) -> dict:
    with asana_operation(context):
        resource = await ctx.client.post(path, data_body(fields))
    return success(ctx.request_id, resource=resource.to_dict())


def _task_fields(payload: Dict[str, Any]) -> Dict[str, Any]:
    return {
        "name": payload.get("name"),
        "assignee": payload.get("assignee"),
        "due_on": payload.get("due_on"),
        "start_on": payload.get("start_on"),
        "notes": payload.get("notes"),
        "html_notes": payload.get("html_notes"),
        "custom_fields": payload.get("custom_fields"),
    }


# ---------------------------------------------------------------------------
# Handlers
# ---------------------------------------------------------------------------


async def _handle_task(*, ctx: ToolContext, **payload: Any) -> dict:
    workspace_gid = payload.get("workspace_gid")
    project_gid = payload.get("project_gid")
    if workspace_gid is None and project_gid is None:
        workspace_gid = ctx.default_workspace_gid
        if not workspace_gid:
            return _validation_error(
                field="workspace_gid",
                action="task",
                message=WORKSPACE_REQUIRED_MESSAGE,
                request_id=ctx.request_id,
                remediation="Pass workspace_gid or project_gid, or set ASANA_DEFAULT_WORKSPACE",
            )

    fields = _task_fields(payload)
    fields["workspace"] = workspace_gid
    fields["projects"] = [project_gid] if project_gid else None
    return await _post_resource(ctx, "/tasks", fields, "Failed to create task")


async def _handle_subtask(*, ctx: ToolContext, **payload: Any) -> dict:
    err = _require(payload, "task_gid", "task_gid is required for subtask", "subtask", ctx)
    if err:
        return err
    return await _post_resource(
        ctx,
        f"/tasks/{payload['task_gid']}/subtasks",
        _task_fields(payload),
        "Failed to create subtask",
    )


async def _handle_project(*, ctx: ToolContext, **payload: Any) -> dict:
    err = _require(payload, "name", "name is required for project", "project", ctx)
    if err:
        return err
    fields = {
        "name": payload["name"],
        "workspace": payload.get("workspace_gid"),
        "team": payload.get("team_gid"),
        "color": payload.get("color"),
        "notes": payload.get("notes"),
        "html_notes": payload.get("html_notes"),
        "due_on": payload.get("due_on"),
        "start_on": payload.get("start_on"),
        "privacy_setting": payload.get("privacy_setting"),
    }
    return await _post_resource(ctx, "/projects", fields, "Failed to create project")


async def _handle_project_from_template(*, ctx: ToolContext, **payload: Any) -> dict:
    """Instantiating a template is asynchronous in Asana; the result is a job."""
    err = _first_error(
        _require(payload, "template_gid", "template_gid is required", "project_from_template", ctx),
        _require(payload, "name", "name is required", "project_from_template", ctx),
    )
    if err:
        return err
    fields = {
        "name": payload["name"],
        "team": payload.get("team_gid"),
        "public": payload.get("public"),
        "requested_dates": payload.get("requested_dates"),
        "requested_roles": payload.get("requested_roles"),
    }
    with asana_operation("Failed to instantiate project from template"):
        job = await ctx.client.post(
            f"/project_templates/{payload['template_gid']}/instantiateProject",
            data_body(fields),
            model=Job,
        )
    return success(ctx.request_id, job=job.to_dict())


async def _handle_portfolio(*, ctx: ToolContext, **payload: Any) -> dict:
    workspace_gid = resolve_workspace_gid(payload.get("workspace_gid"), ctx.default_workspace_gid)
    if not workspace_gid:
        return _validation_error(
            field="workspace_gid", action="portfolio", message=WORKSPACE_REQUIRED_MESSAGE, request_id=ctx.request_id
        )
    err = _require(payload, "name", "name is required for portfolio", "portfolio", ctx)
    if err:
        return err
    fields = {
        "name": payload["name"],
        "workspace": workspace_gid,
        "color": payload.get("color"),
        "public": payload.get("public"),
    }
    return await _post_resource(ctx, "/portfolios", fields, "Failed to create portfolio")


async def _handle_section(*, ctx: ToolContext, **payload: Any) -> dict:
    err = _first_error(
        _require(payload, "project_gid", "project_gid is required for section", "section", ctx),
        _require(payload, "name", "name is required for section", "section", ctx),
    )
    if err:
        return err
    return await _post_resource(
        ctx,
        f"/projects/{payload['project_gid']}/sections",
        {"name": payload["name"]},
        "Failed to create section",
    )


async def _handle_comment(*, ctx: ToolContext, **payload: Any) -> dict:
    """``html_text`` wins over ``text``; ``notes`` is accepted as plain text."""
    err = _require(payload, "task_gid", "task_gid is required for comment", "comment", ctx)
    if err:
        return err

    if payload.get("html_text") is not None:
        fields = {"html_text": payload["html_text"]}
    elif payload.get("text") is not None or payload.get("notes") is not None:
        text = payload.get("text")
        fields = {"text": text if text is not None else payload["notes"]}
    else:
        return _validation_error(
            field="text",
            action="comment",
            message="text, html_text, or notes is required for comment",
            request_id=ctx.request_id,
        )
    return await _post_resource(ctx, f"/tasks/{payload['task_gid']}/stories", fields, "Failed to create comment")


async def _handle_status_update(*, ctx: ToolContext, **payload: Any) -> dict:
    err = _first_error(
        _require(payload, "parent_gid", "parent_gid is required for status update", "status_update", ctx),
        _require(payload, "status_type", "status_type is required for status update", "status_update", ctx),
    )
    if err:
        return err
    fields = {
        "parent": payload["parent_gid"],
        "status_type": payload["status_type"],
        "title": payload.get("title"),
        "text": payload.get("text"),
    }
    return await _post_resource(ctx, "/status_updates", fields, "Failed to create status update")


async def _handle_tag(*, ctx: ToolContext, **payload: Any) -> dict:
    workspace_gid = resolve_workspace_gid(payload.get("workspace_gid"), ctx.default_workspace_gid)
    if not workspace_gid:
        return _validation_error(
            field="workspace_gid", action="tag", message=WORKSPACE_REQUIRED_MESSAGE, request_id=ctx.request_id
        )
    err = _require(payload, "name", "name is required for tag", "tag", ctx)
    if err:
        return err
    fields = {
        "name": payload["name"],
        "workspace": workspace_gid,
        "color": payload.get("color"),
        "notes": payload.get("notes"),
    }
    return await _post_resource(ctx, "/tags", fields, "Failed to create tag")


async def _handle_project_duplicate(*, ctx: ToolContext, **payload: Any) -> dict:
    err = _first_error(
        _require(payload, "source_gid", "source_gid is required for project_duplicate", "project_duplicate", ctx),
        _require(payload, "name", "name is required for project_duplicate", "project_duplicate", ctx),
    )
    if err:
        return err
    fields = {
        "name": payload["name"],
        "team": payload.get("team_gid"),
        "include": payload.get("include"),
    }
    return await _post_resource(
        ctx, f"/projects/{payload['source_gid']}/duplicate", fields, "Failed to duplicate project"
    )


async def _handle_task_duplicate(*, ctx: ToolContext, **payload: Any) -> dict:
    err = _first_error(
        _require(payload, "source_gid", "source_gid is required for task_duplicate", "task_duplicate", ctx),
        _require(payload, "name", "name is required for task_duplicate", "task_duplicate", ctx),
    )
    if err:
        return err
    fields = {"name": payload["name"], "include": payload.get("include")}
    return await _post_resource(ctx, f"/tasks/{payload['source_gid']}/duplicate", fields, "Failed to duplicate task")


async def _handle_project_brief(*, ctx: ToolContext, **payload: Any) -> dict:
    err = _require(payload, "project_gid", "project_gid is required for project_brief", "project_brief", ctx)
    if err:
        return err
    if payload.get("text") is None and payload.get("html_text") is None:
        return _validation_error(
            field="html_text",
            action="project_brief",
            message="text or html_text is required for project_brief",
            request_id=ctx.request_id,
        )
    fields = {"text": payload.get("text"), "html_text": payload.get("html_text")}
    return await _post_resource(
        ctx, f"/projects/{payload['project_gid']}/project_briefs", fields, "Failed to create project brief"
    )


# ---------------------------------------------------------------------------
# Router
# ---------------------------------------------------------------------------

_CREATE_ROUTER = ActionRouter(
    tool_name=TOOL_NAME,
    actions=[
        ActionDefinition(name="task", handler=_handle_task, summary="Create a task"),
        ActionDefinition(name="subtask", handler=_handle_subtask, summary="Create a subtask under task_gid"),
        ActionDefinition(name="project", handler=_handle_project, summary="Create a project"),
        ActionDefinition(
            name="project_from_template",
            handler=_handle_project_from_template,
            summary="Instantiate a project from a template",
            aliases=("project_template",),
        ),
        ActionDefinition(name="portfolio", handler=_handle_portfolio, summary="Create a portfolio"),
        ActionDefinition(name="section", handler=_handle_section, summary="Create a section in a project"),
        ActionDefinition(name="comment", handler=_handle_comment, summary="Comment on a task"),
        ActionDefinition(name="status_update", handler=_handle_status_update, summary="Post a status update"),
        ActionDefinition(name="tag", handler=_handle_tag, summary="Create a tag"),
        ActionDefinition(name="project_duplicate", handler=_handle_project_duplicate, summary="Duplicate a project"),
        ActionDefinition(name="task_duplicate", handler=_handle_task_duplicate, summary="Duplicate a task"),
        ActionDefinition(name="project_brief", handler=_handle_project_brief, summary="Create a project brief"),
    ],
)


async def _dispatch_create_action(
    *,
    resource_type: str,
    payload: Dict[str, Any],
    client: AsanaClient,
    default_workspace_gid: Optional[str],
) -> dict:
    request_id = build_request_id(TOOL_NAME)
    if _CREATE_ROUTER.has_action(resource_type):
        err = validate_payload(
            payload,
            _CREATE_SCHEMA,
            tool_name=TOOL_NAME,
            action=resource_type,
            request_id=request_id,
        )
        if err:
            return err
    ctx = ToolContext(client=client, default_workspace_gid=default_workspace_gid, request_id=request_id)
    return await dispatch_with_standard_errors(
        _CREATE_ROUTER,
        TOOL_NAME,
        resource_type,
        action_field="resource_type",
        request_id=request_id,
        ctx=ctx,
        **payload,
    )


def register_create_tool(mcp: FastMCP, client: AsanaClient, *, default_workspace_gid: Optional[str]) -> None:
    """Register the unified ``asana_create`` tool."""

    @canonical_tool(mcp, canonical_name=TOOL_NAME, description=DESCRIPTION)
    async def asana_create(  # noqa: PLR0913 - unified signature spans every resource type
        resource_type: str,
        name: Optional[str] = None,
        workspace_gid: Optional[str] = None,
        project_gid: Optional[str] = None,
        task_gid: Optional[str] = None,
        team_gid: Optional[str] = None,
        template_gid: Optional[str] = None,
        parent_gid: Optional[str] = None,
        source_gid: Optional[str] = None,
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
        public: Optional[bool] = None,
        privacy_setting: Optional[str] = None,
        custom_fields: Optional[Dict[str, Any]] = None,
        requested_dates: Optional[List[Dict[str, Any]]] = None,
        requested_roles: Optional[List[Dict[str, Any]]] = None,
        include: Optional[List[str]] = None,
    ) -> dict:
        payload = {
            "name": name,
            "workspace_gid": workspace_gid,
            "project_gid": project_gid,
            "task_gid": task_gid,
            "team_gid": team_gid,
            "template_gid": template_gid,
            "parent_gid": parent_gid,
            "source_gid": source_gid,
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
            "public": public,
            "privacy_setting": privacy_setting,
            "custom_fields": custom_fields,
            "requested_dates": requested_dates,
            "requested_roles": requested_roles,
            "include": include,
        }
        return await _dispatch_create_action(
            resource_type=resource_type,
            payload=payload,
            client=client,
            default_workspace_gid=default_workspace_gid,
        )

    logger.debug("Registered unified create tool")


__all__ = [
    "DESCRIPTION",
    "TOOL_NAME",
    "register_create_tool",
]
