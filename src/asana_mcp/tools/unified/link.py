"""Unified ``asana_link`` tool backed by ActionRouter.

Routes are keyed ``"{action}_{relationship}"`` (``add_task_tag``,
``remove_portfolio_item`` ...). Most relationship endpoints answer with an
empty ``data`` object, so those handlers return a confirmation message; only
``task_parent`` hands back the updated task.
"""

from __future__ import annotations

import logging
from typing import Any, Dict, List, Optional, Union

from mcp.server.fastmcp import FastMCP

from asana_mcp.core.client import AsanaClient
from asana_mcp.core.naming import canonical_tool
from asana_mcp.core.responses.types import ErrorCode
from asana_mcp.tools.unified.common import (
    ToolContext,
    asana_operation,
    build_request_id,
    data_body,
    dispatch_with_standard_errors,
    make_validation_error_fn,
    success,
)
from asana_mcp.tools.unified.param_schema import List_, Str, validate_payload
from asana_mcp.tools.unified.router import ActionDefinition, ActionRouter

logger = logging.getLogger(__name__)

TOOL_NAME = "asana_link"

LINK_ACTIONS = frozenset({"add", "remove"})

DESCRIPTION = """Add or remove relationships between Asana resources.
Use action='add' or action='remove', specify relationship type, target_gid, and item_gid(s).

Relationships (target_gid -> item_gid):
- task_project: task -> project (add/remove task from project)
- task_tag: task -> tag
- task_parent: task -> parent_task (set parent to make subtask)
- task_dependency: task -> blocking_task(s)
- task_dependent: task -> dependent_task(s)
- task_follower: task -> user(s)
- portfolio_item: portfolio -> project
- portfolio_member: portfolio -> user(s)
- project_member: project -> user(s)
- project_follower: project -> user(s)

Use item_gid for single item, item_gids for bulk operations."""

_validation_error = make_validation_error_fn(TOOL_NAME, default_code=ErrorCode.MISSING_REQUIRED)

_LINK_SCHEMA = {
    "action": Str(required=True, choices=LINK_ACTIONS, remediation="Use action='add' or action='remove'"),
    "target_gid": Str(required=True, error_code=ErrorCode.MISSING_REQUIRED),
    "item_gid": Str(),
    "item_gids": List_(item_type=str),
    "section_gid": Str(),
    "insert_before": Str(),
    "insert_after": Str(),
}


def _item_gid(payload: Dict[str, Any], label: str, route: str, ctx: ToolContext) -> Union[str, dict]:
    """Return the single ``item_gid`` or a validation envelope naming *label*."""
    gid = payload.get("item_gid")
    if gid is None:
        return _validation_error(
            field="item_gid",
            action=route,
            message=f"item_gid ({label}) is required",
            request_id=ctx.request_id,
        )
    return gid


def _item_gids(payload: Dict[str, Any], route: str, ctx: ToolContext) -> Union[List[str], dict]:
    """``item_gids`` when supplied (must be non-empty), else ``[item_gid]``."""
    gids = payload.get("item_gids")
    if gids is not None:
        if not gids:
            return _validation_error(
                field="item_gids",
                action=route,
                message="item_gids cannot be empty",
                request_id=ctx.request_id,
                code=ErrorCode.VALIDATION_ERROR,
            )
        return list(gids)
    if payload.get("item_gid") is not None:
        return [payload["item_gid"]]
    return _validation_error(
        field="item_gid",
        action=route,
        message="item_gid or item_gids is required",
        request_id=ctx.request_id,
    )


async def _post_link(ctx: ToolContext, path: str, fields: Dict[str, Any], context: str, message: str) -> dict:
    with asana_operation(context):
        await ctx.client.post_empty(path, data_body(fields))
    return success(ctx.request_id, message=message)


# ---------------------------------------------------------------------------
# Single-item relationships
# ---------------------------------------------------------------------------


async def _add_task_project(*, ctx: ToolContext, target_gid: str, **payload: Any) -> dict:
    project_gid = _item_gid(payload, "project", "add_task_project", ctx)
    if isinstance(project_gid, dict):
        return project_gid
    fields = {"project": project_gid, "section": payload.get("section_gid")}
    return await _post_link(
        ctx, f"/tasks/{target_gid}/addProject", fields, "Failed to add task to project", "Task added to project"
    )


async def _remove_task_project(*, ctx: ToolContext, target_gid: str, **payload: Any) -> dict:
    project_gid = _item_gid(payload, "project", "remove_task_project", ctx)
    if isinstance(project_gid, dict):
        return project_gid
    return await _post_link(
        ctx,
        f"/tasks/{target_gid}/removeProject",
        {"project": project_gid},
        "Failed to remove task from project",
        "Task removed from project",
    )


async def _add_task_tag(*, ctx: ToolContext, target_gid: str, **payload: Any) -> dict:
    tag_gid = _item_gid(payload, "tag", "add_task_tag", ctx)
    if isinstance(tag_gid, dict):
        return tag_gid
    return await _post_link(
        ctx, f"/tasks/{target_gid}/addTag", {"tag": tag_gid}, "Failed to add tag to task", "Tag added to task"
    )


async def _remove_task_tag(*, ctx: ToolContext, target_gid: str, **payload: Any) -> dict:
    tag_gid = _item_gid(payload, "tag", "remove_task_tag", ctx)
    if isinstance(tag_gid, dict):
        return tag_gid
    return await _post_link(
        ctx,
        f"/tasks/{target_gid}/removeTag",
        {"tag": tag_gid},
        "Failed to remove tag from task",
        "Tag removed from task",
    )


async def _add_task_parent(*, ctx: ToolContext, target_gid: str, **payload: Any) -> dict:
    parent_gid = _item_gid(payload, "parent task", "add_task_parent", ctx)
    if isinstance(parent_gid, dict):
        return parent_gid
    with asana_operation("Failed to set task parent"):
        task = await ctx.client.post(f"/tasks/{target_gid}/setParent", data_body({"parent": parent_gid}))
    return success(ctx.request_id, resource=task.to_dict())


async def _remove_task_parent(*, ctx: ToolContext, target_gid: str, **payload: Any) -> dict:
    # An explicit null parent detaches the subtask; data_body would drop it.
    with asana_operation("Failed to remove task parent"):
        task = await ctx.client.post(f"/tasks/{target_gid}/setParent", {"data": {"parent": None}})
    return success(ctx.request_id, resource=task.to_dict())


async def _remove_task_follower(*, ctx: ToolContext, target_gid: str, **payload: Any) -> dict:
    follower_gid = _item_gid(payload, "follower", "remove_task_follower", ctx)
    if isinstance(follower_gid, dict):
        return follower_gid
    return await _post_link(
        ctx,
        f"/tasks/{target_gid}/removeFollowers",
        {"followers": [follower_gid]},
        "Failed to remove follower",
        "Follower removed",
    )


async def _add_portfolio_item(*, ctx: ToolContext, target_gid: str, **payload: Any) -> dict:
    item_gid = _item_gid(payload, "project", "add_portfolio_item", ctx)
    if isinstance(item_gid, dict):
        return item_gid
    fields = {
        "item": item_gid,
        "insert_before": payload.get("insert_before"),
        "insert_after": payload.get("insert_after"),
    }
    return await _post_link(
        ctx,
        f"/portfolios/{target_gid}/addItem",
        fields,
        "Failed to add item to portfolio",
        "Item added to portfolio",
    )


async def _remove_portfolio_item(*, ctx: ToolContext, target_gid: str, **payload: Any) -> dict:
    item_gid = _item_gid(payload, "project", "remove_portfolio_item", ctx)
    if isinstance(item_gid, dict):
        return item_gid
    return await _post_link(
        ctx,
        f"/portfolios/{target_gid}/removeItem",
        {"item": item_gid},
        "Failed to remove item from portfolio",
        "Item removed from portfolio",
    )


# ---------------------------------------------------------------------------
# Bulk relationships
# ---------------------------------------------------------------------------


def _bulk_handler(
    route: str,
    endpoint: str,
    key: str,
    context: str,
    message: str,
    *,
    comma_joined: bool = False,
):
    """Build a handler posting ``{key: gids}`` to ``/{endpoint}`` under the target."""

    async def _handler(*, ctx: ToolContext, target_gid: str, **payload: Any) -> dict:
        gids = _item_gids(payload, route, ctx)
        if isinstance(gids, dict):
            return gids
        value: Union[str, List[str]] = ",".join(gids) if comma_joined else gids
        return await _post_link(ctx, endpoint.format(gid=target_gid), {key: value}, context, message)

    _handler.__name__ = f"_{route}"
    return _handler


_BULK_ROUTES = [
    ("add_task_dependency", "/tasks/{gid}/addDependencies", "dependencies",
     "Failed to add dependencies", "Dependencies added", False),
    ("remove_task_dependency", "/tasks/{gid}/removeDependencies", "dependencies",
     "Failed to remove dependencies", "Dependencies removed", False),
    ("add_task_dependent", "/tasks/{gid}/addDependents", "dependents",
     "Failed to add dependents", "Dependents added", False),
    ("remove_task_dependent", "/tasks/{gid}/removeDependents", "dependents",
     "Failed to remove dependents", "Dependents removed", False),
    ("add_task_follower", "/tasks/{gid}/addFollowers", "followers",
     "Failed to add followers", "Followers added", False),
    ("add_portfolio_member", "/portfolios/{gid}/addMembers", "members",
     "Failed to add portfolio members", "Members added to portfolio", False),
    ("remove_portfolio_member", "/portfolios/{gid}/removeMembers", "members",
     "Failed to remove portfolio members", "Members removed from portfolio", False),
    ("add_project_member", "/projects/{gid}/addMembers", "members",
     "Failed to add project members", "Members added to project", True),
    ("remove_project_member", "/projects/{gid}/removeMembers", "members",
     "Failed to remove project members", "Members removed from project", True),
    ("add_project_follower", "/projects/{gid}/addFollowers", "followers",
     "Failed to add project followers", "Followers added to project", True),
    ("remove_project_follower", "/projects/{gid}/removeFollowers", "followers",
     "Failed to remove project followers", "Followers removed from project", True),
]  # fmt: skip


# ---------------------------------------------------------------------------
# Router
# ---------------------------------------------------------------------------

_LINK_ROUTER = ActionRouter(
    tool_name=TOOL_NAME,
    actions=[
        ActionDefinition(name="add_task_project", handler=_add_task_project, summary="Add a task to a project"),
        ActionDefinition(name="remove_task_project", handler=_remove_task_project, summary="Remove a task from a project"),
        ActionDefinition(name="add_task_tag", handler=_add_task_tag, summary="Tag a task"),
        ActionDefinition(name="remove_task_tag", handler=_remove_task_tag, summary="Untag a task"),
        ActionDefinition(name="add_task_parent", handler=_add_task_parent, summary="Make a task a subtask"),
        ActionDefinition(name="remove_task_parent", handler=_remove_task_parent, summary="Detach a subtask"),
        ActionDefinition(name="remove_task_follower", handler=_remove_task_follower, summary="Remove a task follower"),
        ActionDefinition(name="add_portfolio_item", handler=_add_portfolio_item, summary="Add a project to a portfolio"),
        ActionDefinition(
            name="remove_portfolio_item", handler=_remove_portfolio_item, summary="Remove a project from a portfolio"
        ),
        *(
            ActionDefinition(
                name=route,
                handler=_bulk_handler(route, endpoint, key, context, message, comma_joined=comma_joined),
                summary=message,
            )
            for route, endpoint, key, context, message, comma_joined in _BULK_ROUTES
        ),
    ],
)


async def _dispatch_link_action(
    *,
    relationship: str,
    payload: Dict[str, Any],
    client: AsanaClient,
) -> dict:
    request_id = build_request_id(TOOL_NAME)
    err = validate_payload(
        payload,
        _LINK_SCHEMA,
        tool_name=TOOL_NAME,
        action=relationship,
        request_id=request_id,
    )
    if err:
        return err

    action = payload.pop("action")
    route = f"{action}_{relationship}"
    ctx = ToolContext(client=client, default_workspace_gid=None, request_id=request_id)
    return await dispatch_with_standard_errors(
        _LINK_ROUTER,
        TOOL_NAME,
        route,
        action_field="relationship",
        request_id=request_id,
        ctx=ctx,
        **payload,
    )


def register_link_tool(mcp: FastMCP, client: AsanaClient, *, default_workspace_gid: Optional[str]) -> None:
    """Register the unified ``asana_link`` tool.

    Relationships never need a workspace; ``default_workspace_gid`` is accepted
    so every tool module registers the same way.
    """

    @canonical_tool(mcp, canonical_name=TOOL_NAME, description=DESCRIPTION)
    async def asana_link(  # noqa: PLR0913 - unified signature spans every relationship
        action: str,
        relationship: str,
        target_gid: str,
        item_gid: Optional[str] = None,
        item_gids: Optional[List[str]] = None,
        section_gid: Optional[str] = None,
        insert_before: Optional[str] = None,
        insert_after: Optional[str] = None,
    ) -> dict:
        payload = {
            "action": action.lower() if isinstance(action, str) else action,
            "target_gid": target_gid,
            "item_gid": item_gid,
            "item_gids": item_gids,
            "section_gid": section_gid,
            "insert_before": insert_before,
            "insert_after": insert_after,
        }
        return await _dispatch_link_action(relationship=relationship, payload=payload, client=client)

    logger.debug("Registered unified link tool")


__all__ = [
    "DESCRIPTION",
    "LINK_ACTIONS",
    "TOOL_NAME",
    "register_link_tool",
]
