"""Unified ``asana_get`` tool backed by ActionRouter.

One tool reads every supported resource kind; ``resource_type`` selects the
handler. Plain lookups are table-driven (:class:`_Lookup`); the aggregating
reads (portfolio trees, flattened tasks, favorites, task context) delegate to
:mod:`asana_mcp.core.traversal`.
"""

from __future__ import annotations

import logging
from dataclasses import dataclass
from typing import Any, Dict, List, Optional

from mcp.server.fastmcp import FastMCP

from asana_mcp.core.client import AsanaClient
from asana_mcp.core.fields import (
    CUSTOM_FIELD_SETTINGS_FIELDS,
    PROJECT_BRIEF_FIELDS,
    PROJECT_EMBEDDED_BRIEF_FIELDS,
    PROJECT_FIELDS,
    RECURSIVE_TASK_FIELDS,
    SECTION_FIELDS,
    STATUS_UPDATE_FIELDS,
    STORY_FIELDS,
    SUBTASK_FIELDS,
    TAG_FIELDS,
    TEAM_FIELDS,
    TEMPLATE_FIELDS,
    USER_FIELDS,
    WORKSPACE_FIELDS,
)
from asana_mcp.core.models import Story
from asana_mcp.core.naming import canonical_tool
from asana_mcp.core.observability import get_metrics
from asana_mcp.core.responses.types import ErrorCode
from asana_mcp.core.traversal import (
    depth_to_option,
    expand_portfolio,
    get_task_with_context,
    get_tasks_recursive,
    list_favorites,
    resolve_favorites,
)
from asana_mcp.tools.unified.common import (
    WORKSPACE_REQUIRED_MESSAGE,
    ToolContext,
    asana_operation,
    build_request_id,
    dispatch_with_standard_errors,
    join_fields,
    make_metric_name,
    make_validation_error_fn,
    resolve_workspace_gid,
    success,
)
from asana_mcp.tools.unified.param_schema import Bool, List_, Num, Str, validate_payload
from asana_mcp.tools.unified.router import ActionDefinition, ActionRouter

logger = logging.getLogger(__name__)
_metrics = get_metrics()

TOOL_NAME = "asana_get"

DESCRIPTION = """Get any Asana resource by type and GID. Supports:
- project: Get a project (gid = project GID)
- portfolio: Get a portfolio with nested items (gid = portfolio GID, use depth to control recursion)
- task: Get a task with context (gid = task GID, use include_* flags)
- my_tasks: Get tasks assigned to current user (gid = workspace GID or empty for default)
- workspace_favorites: Get user's favorites (gid = workspace GID or empty for default)
- workspace_projects: List all projects in workspace (gid = workspace GID or empty for default)
- project_tasks: Get all tasks from a project/portfolio (gid = project/portfolio GID, use subtask_depth)
- task_subtasks: Get subtasks of a task (gid = task GID)
- task_comments: Get comments on a task (gid = task GID)
- status_update: Get a single status update by its GID
- status_updates: List status updates posted on a project, portfolio, or goal (gid = parent GID)
- all_workspaces: List all workspaces (gid is ignored)
- workspace: Get a single workspace (gid = workspace GID)
- workspace_templates: List templates (gid = team GID for team templates, or empty for all)
- project_template: Get a single template (gid = template GID)
- project_sections: List sections in a project (gid = project GID)
- section: Get a single section (gid = section GID)
- workspace_tags: List tags (gid = workspace GID or empty for default)
- tag: Get a single tag (gid = tag GID)
- me: Get current authenticated user (gid ignored)
- user: Get a user (gid = user GID)
- workspace_users: List users (gid = workspace GID or empty for default)
- team: Get a team (gid = team GID)
- workspace_teams: List teams (gid = workspace GID or empty for default)
- team_users: List users in a team (gid = team GID)
- project_custom_fields: Get custom fields for a project (gid = project GID)
- project_brief: Get project brief by brief GID (the 'Key Resources' on the Overview tab, not the Note tab)
- project_project_brief: Get a project's brief via the project GID

For workspace-based operations, empty gid uses ASANA_DEFAULT_WORKSPACE env var.
Depth parameters: -1 = unlimited, 0 = none, N = N levels.
opt_fields: Override default fields returned. Curated defaults provided per resource type."""

NO_PROJECT_BRIEF_MESSAGE = (
    "Project does not have a project brief. Use asana_create with resource_type=project_brief to create one."
)

_validation_error = make_validation_error_fn(TOOL_NAME)

_GET_SCHEMA = {
    "gid": Str(),
    "depth": Num(integer_only=True),
    "subtask_depth": Num(integer_only=True),
    "include_subtasks": Bool(default=True),
    "include_dependencies": Bool(default=True),
    "include_comments": Bool(default=True),
    "opt_fields": List_(item_type=str),
}


def _metric_name(action: str) -> str:
    return make_metric_name(TOOL_NAME, action)


def _validate(payload: Dict[str, Any], action: str, ctx: ToolContext) -> Optional[dict]:
    return validate_payload(payload, _GET_SCHEMA, tool_name=TOOL_NAME, action=action, request_id=ctx.request_id)


def _missing_gid(action: str, label: str, ctx: ToolContext) -> dict:
    return _validation_error(
        field="gid",
        action=action,
        message=f"gid is required for {label}",
        request_id=ctx.request_id,
        code=ErrorCode.MISSING_REQUIRED,
    )


def _missing_workspace(action: str, ctx: ToolContext) -> dict:
    return _validation_error(
        field="gid",
        action=action,
        message=WORKSPACE_REQUIRED_MESSAGE,
        request_id=ctx.request_id,
        code=ErrorCode.MISSING_REQUIRED,
        remediation="Pass a workspace gid or set ASANA_DEFAULT_WORKSPACE",
    )


def _list_result(ctx: ToolContext, items: List[Any]) -> dict:
    return success(ctx.request_id, items=[item.to_dict() for item in items], count=len(items))


# ---------------------------------------------------------------------------
# Table-driven lookups
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class _Lookup:
    """A single-endpoint read.

    ``scope`` decides what ``gid`` means: ``"gid"`` (required resource gid),
    ``"workspace"`` (workspace gid, falling back to the default) or
    ``"none"`` (ignored). ``path`` is formatted with ``gid``.
    """

    name: str
    path: str
    fields: str
    context: str
    many: bool = False
    scope: str = "gid"
    label: Optional[str] = None
    aliases: tuple = ()
    summary: Optional[str] = None


_LOOKUPS = (
    _Lookup("project", "/projects/{gid}", PROJECT_FIELDS, "Failed to get project"),
    _Lookup(
        "task_subtasks", "/tasks/{gid}/subtasks", SUBTASK_FIELDS, "Failed to get subtasks",
        many=True, aliases=("subtasks",),
    ),
    _Lookup("status_update", "/status_updates/{gid}", STATUS_UPDATE_FIELDS, "Failed to get status update"),
    _Lookup(
        "all_workspaces", "/workspaces", WORKSPACE_FIELDS, "Failed to list workspaces",
        many=True, scope="none", aliases=("workspaces",),
    ),
    _Lookup("workspace", "/workspaces/{gid}", WORKSPACE_FIELDS, "Failed to get workspace"),
    _Lookup("project_template", "/project_templates/{gid}", TEMPLATE_FIELDS, "Failed to get project template"),
    _Lookup(
        "project_sections", "/projects/{gid}/sections", SECTION_FIELDS, "Failed to list sections",
        many=True, aliases=("sections",),
    ),
    _Lookup("section", "/sections/{gid}", SECTION_FIELDS, "Failed to get section"),
    _Lookup(
        "workspace_tags", "/workspaces/{gid}/tags", TAG_FIELDS, "Failed to list tags",
        many=True, scope="workspace", aliases=("tags",),
    ),
    _Lookup("tag", "/tags/{gid}", TAG_FIELDS, "Failed to get tag"),
    _Lookup(
        "workspace_projects", "/workspaces/{gid}/projects", PROJECT_FIELDS, "Failed to get projects",
        many=True, scope="workspace", aliases=("projects",),
    ),
    _Lookup("me", "/users/me", USER_FIELDS, "Failed to get current user", scope="none", aliases=("current_user",)),
    _Lookup("user", "/users/{gid}", USER_FIELDS, "Failed to get user"),
    _Lookup(
        "workspace_users", "/workspaces/{gid}/users", USER_FIELDS, "Failed to get users",
        many=True, scope="workspace", aliases=("users",),
    ),
    _Lookup("team", "/teams/{gid}", TEAM_FIELDS, "Failed to get team"),
    _Lookup(
        "workspace_teams", "/workspaces/{gid}/teams", TEAM_FIELDS, "Failed to get teams",
        many=True, scope="workspace", aliases=("teams",),
    ),
    _Lookup("team_users", "/teams/{gid}/users", USER_FIELDS, "Failed to get team users", many=True),
    _Lookup(
        "project_custom_fields", "/projects/{gid}/custom_field_settings", CUSTOM_FIELD_SETTINGS_FIELDS,
        "Failed to get custom field settings", many=True, aliases=("custom_fields",),
    ),
    _Lookup(
        "project_brief", "/project_briefs/{gid}", PROJECT_BRIEF_FIELDS, "Failed to get project brief",
        label="project_brief (brief GID)",
    ),
)  # fmt: skip


def _make_lookup_handler(lookup: _Lookup):
    async def _handle(*, ctx: ToolContext, **payload: Any) -> dict:
        err = _validate(payload, lookup.name, ctx)
        if err:
            return err

        gid = payload.get("gid")
        if lookup.scope == "workspace":
            gid = resolve_workspace_gid(gid, ctx.default_workspace_gid)
            if not gid:
                return _missing_workspace(lookup.name, ctx)
        elif lookup.scope == "gid" and not gid:
            return _missing_gid(lookup.name, lookup.label or lookup.name, ctx)

        path = lookup.path.format(gid=gid)
        query = [("opt_fields", join_fields(payload.get("opt_fields"), lookup.fields))]
        with asana_operation(lookup.context):
            if lookup.many:
                items = await ctx.client.get_all(path, query)
                return _list_result(ctx, items)
            resource = await ctx.client.get(path, query)
        return success(ctx.request_id, resource=resource.to_dict())

    _handle.__name__ = f"_handle_{lookup.name}"
    return _handle


# ---------------------------------------------------------------------------
# Aggregating reads
# ---------------------------------------------------------------------------


async def _handle_portfolio(*, ctx: ToolContext, **payload: Any) -> dict:
    err = _validate(payload, "portfolio", ctx)
    if err:
        return err
    gid = payload.get("gid")
    if not gid:
        return _missing_gid("portfolio", "portfolio", ctx)

    depth = depth_to_option(payload.get("depth") or 0)
    with asana_operation("Failed to get portfolio"):
        portfolio = await expand_portfolio(ctx.client, gid, depth)
    return success(ctx.request_id, portfolio=portfolio.to_dict())


async def _handle_task(*, ctx: ToolContext, **payload: Any) -> dict:
    err = _validate(payload, "task", ctx)
    if err:
        return err
    gid = payload.get("gid")
    if not gid:
        return _missing_gid("task", "task", ctx)

    with asana_operation("Failed to get task"):
        task = await get_task_with_context(
            ctx.client,
            gid,
            include_subtasks=payload["include_subtasks"],
            include_dependencies=payload["include_dependencies"],
            include_comments=payload["include_comments"],
        )
    return success(ctx.request_id, task=task.to_dict())


async def _handle_workspace_favorites(*, ctx: ToolContext, **payload: Any) -> dict:
    err = _validate(payload, "workspace_favorites", ctx)
    if err:
        return err
    workspace_gid = resolve_workspace_gid(payload.get("gid"), ctx.default_workspace_gid)
    if not workspace_gid:
        return _missing_workspace("workspace_favorites", ctx)

    depth = depth_to_option(payload.get("depth") or 0)
    with asana_operation("Failed to get favorite projects"):
        projects = await list_favorites(ctx.client, workspace_gid, "project")
    with asana_operation("Failed to get favorite portfolios"):
        portfolios = await list_favorites(ctx.client, workspace_gid, "portfolio")

    favorites = await resolve_favorites(ctx.client, projects, portfolios, depth)
    if favorites.errors:
        _metrics.counter(_metric_name("favorites_unresolved"), value=len(favorites.errors))
    return success(ctx.request_id, **favorites.to_dict())


async def _handle_project_tasks(*, ctx: ToolContext, **payload: Any) -> dict:
    err = _validate(payload, "project_tasks", ctx)
    if err:
        return err
    gid = payload.get("gid")
    if not gid:
        return _missing_gid("project_tasks", "project_tasks", ctx)

    # Absent depths mean "no expansion" for both subtasks and portfolios.
    subtask_depth = payload.get("subtask_depth")
    portfolio_depth = payload.get("depth")
    with asana_operation("Failed to get tasks"):
        tasks = await get_tasks_recursive(
            ctx.client,
            gid,
            depth_to_option(subtask_depth if subtask_depth is not None else 0),
            depth_to_option(portfolio_depth if portfolio_depth is not None else 0),
        )
    return _list_result(ctx, tasks)


async def _handle_task_comments(*, ctx: ToolContext, **payload: Any) -> dict:
    err = _validate(payload, "task_comments", ctx)
    if err:
        return err
    gid = payload.get("gid")
    if not gid:
        return _missing_gid("task_comments", "task_comments", ctx)

    with asana_operation("Failed to get comments"):
        stories = await ctx.client.get_all(
            f"/tasks/{gid}/stories",
            [("opt_fields", join_fields(payload.get("opt_fields"), STORY_FIELDS))],
            model=Story,
        )
    return _list_result(ctx, [story for story in stories if story.is_comment()])


async def _handle_status_updates(*, ctx: ToolContext, **payload: Any) -> dict:
    err = _validate(payload, "status_updates", ctx)
    if err:
        return err
    gid = payload.get("gid")
    if not gid:
        return _missing_gid("status_updates", "status_updates", ctx)

    with asana_operation("Failed to get status updates"):
        updates = await ctx.client.get_all(
            "/status_updates",
            [("parent", gid), ("opt_fields", join_fields(payload.get("opt_fields"), STATUS_UPDATE_FIELDS))],
        )
    return _list_result(ctx, updates)


async def _handle_workspace_templates(*, ctx: ToolContext, **payload: Any) -> dict:
    """Templates are listed per team when ``gid`` names one, otherwise globally."""
    err = _validate(payload, "workspace_templates", ctx)
    if err:
        return err

    query = [("opt_fields", join_fields(payload.get("opt_fields"), TEMPLATE_FIELDS))]
    team_gid = payload.get("gid")
    if team_gid:
        with asana_operation("Failed to list team project templates"):
            templates = await ctx.client.get_all(f"/teams/{team_gid}/project_templates", query)
    else:
        with asana_operation("Failed to list project templates"):
            templates = await ctx.client.get_all("/project_templates", query)
    return _list_result(ctx, templates)


async def _handle_my_tasks(*, ctx: ToolContext, **payload: Any) -> dict:
    err = _validate(payload, "my_tasks", ctx)
    if err:
        return err
    workspace_gid = resolve_workspace_gid(payload.get("gid"), ctx.default_workspace_gid)
    if not workspace_gid:
        return _missing_workspace("my_tasks", ctx)

    with asana_operation("Failed to get user task list"):
        task_list = await ctx.client.get(
            "/users/me/user_task_list",
            [("workspace", workspace_gid), ("opt_fields", "gid")],
        )
    with asana_operation("Failed to get tasks"):
        tasks = await ctx.client.get_all(
            f"/user_task_lists/{task_list.gid}/tasks",
            [("opt_fields", join_fields(payload.get("opt_fields"), RECURSIVE_TASK_FIELDS))],
        )
    return _list_result(ctx, tasks)


async def _handle_project_project_brief(*, ctx: ToolContext, **payload: Any) -> dict:
    err = _validate(payload, "project_project_brief", ctx)
    if err:
        return err
    gid = payload.get("gid")
    if not gid:
        return _missing_gid("project_project_brief", "project_project_brief (project GID)", ctx)

    with asana_operation("Failed to get project"):
        project = await ctx.client.get(f"/projects/{gid}", [("opt_fields", PROJECT_EMBEDDED_BRIEF_FIELDS)])

    brief = project.fields.get("project_brief")
    if brief is None:
        return _validation_error(
            field="gid",
            action="project_project_brief",
            message=NO_PROJECT_BRIEF_MESSAGE,
            request_id=ctx.request_id,
            remediation="Create one with asana_create(resource_type='project_brief')",
        )
    return success(ctx.request_id, resource=brief)


# ---------------------------------------------------------------------------
# Router
# ---------------------------------------------------------------------------

_GET_ROUTER = ActionRouter(
    tool_name=TOOL_NAME,
    actions=[
        ActionDefinition(
            name="portfolio",
            handler=_handle_portfolio,
            summary="Portfolio with nested items expanded to depth",
        ),
        ActionDefinition(
            name="task",
            handler=_handle_task,
            summary="Task with subtasks, dependencies, dependents and comments",
        ),
        ActionDefinition(
            name="workspace_favorites",
            handler=_handle_workspace_favorites,
            summary="Favorite projects and portfolios of the current user",
            aliases=("favorites",),
        ),
        ActionDefinition(
            name="project_tasks",
            handler=_handle_project_tasks,
            summary="All tasks of a project or portfolio, subtasks flattened",
            aliases=("tasks",),
        ),
        ActionDefinition(
            name="task_comments",
            handler=_handle_task_comments,
            summary="Comments on a task",
            aliases=("comments",),
        ),
        ActionDefinition(
            name="status_updates",
            handler=_handle_status_updates,
            summary="Status updates posted on a project, portfolio or goal",
            aliases=("project_status_updates",),
        ),
        ActionDefinition(
            name="workspace_templates",
            handler=_handle_workspace_templates,
            summary="Project templates, optionally for one team",
            aliases=("project_templates",),
        ),
        ActionDefinition(
            name="my_tasks",
            handler=_handle_my_tasks,
            summary="Tasks assigned to the current user",
            aliases=("my_assigned_tasks",),
        ),
        ActionDefinition(
            name="project_project_brief",
            handler=_handle_project_project_brief,
            summary="The brief embedded in a project",
        ),
        *(
            ActionDefinition(
                name=lookup.name,
                handler=_make_lookup_handler(lookup),
                summary=lookup.summary or lookup.context.replace("Failed to ", "").capitalize(),
                aliases=lookup.aliases,
            )
            for lookup in _LOOKUPS
        ),
    ],
)


async def _dispatch_get_action(
    *,
    resource_type: str,
    payload: Dict[str, Any],
    client: AsanaClient,
    default_workspace_gid: Optional[str],
) -> dict:
    request_id = build_request_id(TOOL_NAME)
    ctx = ToolContext(client=client, default_workspace_gid=default_workspace_gid, request_id=request_id)
    return await dispatch_with_standard_errors(
        _GET_ROUTER,
        TOOL_NAME,
        resource_type,
        action_field="resource_type",
        request_id=request_id,
        ctx=ctx,
        **payload,
    )


def register_get_tool(mcp: FastMCP, client: AsanaClient, *, default_workspace_gid: Optional[str]) -> None:
    """Register the unified ``asana_get`` tool."""

    @canonical_tool(mcp, canonical_name=TOOL_NAME, description=DESCRIPTION)
    async def asana_get(  # noqa: PLR0913 - unified signature spans every resource type
        resource_type: str,
        gid: Optional[str] = None,
        depth: Optional[int] = None,
        subtask_depth: Optional[int] = None,
        include_subtasks: Optional[bool] = None,
        include_dependencies: Optional[bool] = None,
        include_comments: Optional[bool] = None,
        opt_fields: Optional[List[str]] = None,
    ) -> dict:
        payload = {
            "gid": gid,
            "depth": depth,
            "subtask_depth": subtask_depth,
            "include_subtasks": include_subtasks,
            "include_dependencies": include_dependencies,
            "include_comments": include_comments,
            "opt_fields": opt_fields,
        }
        return await _dispatch_get_action(
            resource_type=resource_type,
            payload=payload,
            client=client,
            default_workspace_gid=default_workspace_gid,
        )

    logger.debug("Registered unified get tool")


__all__ = [
    "DESCRIPTION",
    "NO_PROJECT_BRIEF_MESSAGE",
    "TOOL_NAME",
    "register_get_tool",
]
