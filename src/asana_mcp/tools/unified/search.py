"""Search tools: filtered task search and typeahead resource search.

Both are single-purpose tools, so they skip the ActionRouter and register
plain handlers. Workspace resolution and error wrapping reuse the shared
helpers from :mod:`asana_mcp.tools.unified.common`.
"""

from __future__ import annotations

import logging
from dataclasses import asdict
from typing import Any, Dict, List, Optional, Tuple

from mcp.server.fastmcp import FastMCP

from asana_mcp.core.client import AsanaClient
from asana_mcp.core.errors import AsanaError
from asana_mcp.core.fields import SEARCH_FIELDS, TYPEAHEAD_FIELDS
from asana_mcp.core.naming import canonical_tool
from asana_mcp.core.observability import redact_sensitive_data
from asana_mcp.core.responses.builders import error_response
from asana_mcp.core.responses.types import ErrorCode, ErrorType
from asana_mcp.tools.unified.common import (
    WORKSPACE_REQUIRED_MESSAGE,
    asana_error_envelope,
    asana_operation,
    build_request_id,
    join_fields,
    make_validation_error_fn,
    resolve_workspace_gid,
    success,
)
from asana_mcp.tools.unified.param_schema import Bool, List_, Num, Str, validate_payload

logger = logging.getLogger(__name__)

TASK_SEARCH_TOOL = "asana_task_search"
RESOURCE_SEARCH_TOOL = "asana_resource_search"

DEFAULT_TYPEAHEAD_COUNT = 20
MAX_TYPEAHEAD_COUNT = 100

TYPEAHEAD_RESOURCE_TYPES = frozenset({"project", "project_template", "portfolio", "user", "team", "tag", "goal"})

TASK_SEARCH_DESCRIPTION = """Search for tasks in a workspace with filters. For searching other resource types (projects, templates, users, etc.), use asana_resource_search instead.

workspace_gid: Uses ASANA_DEFAULT_WORKSPACE env var if not provided

Filters (all optional, but at least one recommended):
- text: Search in task name and notes
- assignee: User GID, 'me' for current user, or 'null' for unassigned
- projects: Filter by project GID(s)
- tags: Filter by tag GID(s)
- sections: Filter by section GID(s)
- completed: true/false
- due_on, due_on_before, due_on_after: Date filters (YYYY-MM-DD)
- start_on, start_on_before, start_on_after: Start date filters
- modified_at_after, modified_at_before: Datetime filters (ISO 8601)
- portfolios: Filter by portfolio GID(s)
- sort_by: due_date, created_at, completed_at, likes, modified_at
- sort_ascending: true/false

opt_fields: Override default fields returned. Curated defaults provided."""

RESOURCE_SEARCH_DESCRIPTION = """Search for Asana resources by name. Use this to find projects, templates, users, teams, portfolios, goals, or tags by name. For task-specific searching with filters (assignee, due date, completion status), use asana_task_search instead.

Parameters:
- query: The search text (searches resource names)
- resource_type: Type to search for - project, project_template, portfolio, user, team, tag, or goal
- workspace_gid: Uses ASANA_DEFAULT_WORKSPACE env var if not provided
- count: Max results to return (default 20, max 100)"""

_task_search_error = make_validation_error_fn(TASK_SEARCH_TOOL)
_resource_search_error = make_validation_error_fn(RESOURCE_SEARCH_TOOL)

_TASK_SEARCH_SCHEMA = {
    "workspace_gid": Str(),
    "text": Str(),
    "assignee": Str(),
    "projects": List_(item_type=str),
    "tags": List_(item_type=str),
    "sections": List_(item_type=str),
    "completed": Bool(),
    "due_on": Str(),
    "due_on_before": Str(),
    "due_on_after": Str(),
    "start_on": Str(),
    "start_on_before": Str(),
    "start_on_after": Str(),
    "modified_at_after": Str(),
    "modified_at_before": Str(),
    "portfolios": List_(item_type=str),
    "sort_by": Str(),
    "sort_ascending": Bool(),
    "opt_fields": List_(item_type=str),
}

_RESOURCE_SEARCH_SCHEMA = {
    "query": Str(),
    "resource_type": Str(
        choices=TYPEAHEAD_RESOURCE_TYPES,
        remediation="Use one of: goal, portfolio, project, project_template, tag, team, user",
    ),
    "workspace_gid": Str(),
    "count": Num(integer_only=True, min_val=1),
}

# Caller parameter -> Asana search filter, in the order they are sent.
_TASK_FILTERS: Tuple[Tuple[str, str], ...] = (
    ("text", "text"),
    ("assignee", "assignee.any"),
    ("projects", "projects.any"),
    ("tags", "tags.any"),
    ("sections", "sections.any"),
    ("completed", "completed"),
    ("due_on", "due_on"),
    ("due_on_before", "due_on.before"),
    ("due_on_after", "due_on.after"),
    ("start_on", "start_on"),
    ("start_on_before", "start_on.before"),
    ("start_on_after", "start_on.after"),
    ("modified_at_after", "modified_at.after"),
    ("modified_at_before", "modified_at.before"),
    ("portfolios", "portfolios.any"),
    ("sort_by", "sort_by"),
    ("sort_ascending", "sort_ascending"),
)


def _query_value(value: Any) -> str:
    if isinstance(value, bool):
        return "true" if value else "false"
    if isinstance(value, list):
        return ",".join(value)
    return str(value)


def build_task_search_query(payload: Dict[str, Any]) -> List[Tuple[str, str]]:
    """Translate supplied filters into Asana's dotted search parameters.

    ``opt_fields`` always comes first; absent filters are not sent.
    """
    query = [("opt_fields", join_fields(payload.get("opt_fields"), SEARCH_FIELDS))]
    for param, api_name in _TASK_FILTERS:
        value = payload.get(param)
        if value is not None:
            query.append((api_name, _query_value(value)))
    return query


def _unexpected_error(tool_name: str, exc: Exception, request_id: str) -> dict:
    error_msg = str(exc) if str(exc) else exc.__class__.__name__
    return asdict(
        error_response(
            f"{tool_name} failed: {redact_sensitive_data(error_msg)}",
            error_code=ErrorCode.INTERNAL_ERROR,
            error_type=ErrorType.INTERNAL,
            remediation="Check server logs for details.",
            request_id=request_id,
            details={"error_type": exc.__class__.__name__},
        )
    )


async def search_tasks(
    client: AsanaClient,
    payload: Dict[str, Any],
    *,
    default_workspace_gid: Optional[str],
) -> dict:
    request_id = build_request_id(TASK_SEARCH_TOOL)
    err = validate_payload(
        payload, _TASK_SEARCH_SCHEMA, tool_name=TASK_SEARCH_TOOL, action="search", request_id=request_id
    )
    if err:
        return err

    workspace_gid = resolve_workspace_gid(payload.get("workspace_gid"), default_workspace_gid)
    if not workspace_gid:
        return _task_search_error(
            field="workspace_gid",
            action="search",
            message=WORKSPACE_REQUIRED_MESSAGE,
            request_id=request_id,
            code=ErrorCode.MISSING_REQUIRED,
        )

    try:
        with asana_operation("Failed to search tasks"):
            tasks = await client.get_all(
                f"/workspaces/{workspace_gid}/tasks/search",
                build_task_search_query(payload),
            )
    except AsanaError as exc:
        logger.warning("%s failed: %s", TASK_SEARCH_TOOL, redact_sensitive_data(exc.describe()))
        return asana_error_envelope(exc, action_field="workspace_gid", action=workspace_gid, request_id=request_id)
    except Exception as exc:
        logger.exception("%s failed with unexpected error: %s", TASK_SEARCH_TOOL, exc)
        return _unexpected_error(TASK_SEARCH_TOOL, exc, request_id)

    items = [task.to_dict() for task in tasks]
    return success(request_id, items=items, count=len(items))


async def search_resources(
    client: AsanaClient,
    payload: Dict[str, Any],
    *,
    default_workspace_gid: Optional[str],
) -> dict:
    request_id = build_request_id(RESOURCE_SEARCH_TOOL)
    err = validate_payload(
        payload, _RESOURCE_SEARCH_SCHEMA, tool_name=RESOURCE_SEARCH_TOOL, action="search", request_id=request_id
    )
    if err:
        return err

    workspace_gid = resolve_workspace_gid(payload.get("workspace_gid"), default_workspace_gid)
    if not workspace_gid:
        return _resource_search_error(
            field="workspace_gid",
            action="search",
            message=WORKSPACE_REQUIRED_MESSAGE,
            request_id=request_id,
            code=ErrorCode.MISSING_REQUIRED,
        )
    if payload.get("query") is None:
        return _resource_search_error(
            field="query",
            action="search",
            message="query is required",
            request_id=request_id,
            code=ErrorCode.MISSING_REQUIRED,
        )

    resource_type = payload.get("resource_type") or "project"
    count = min(payload.get("count") or DEFAULT_TYPEAHEAD_COUNT, MAX_TYPEAHEAD_COUNT)

    try:
        with asana_operation("Failed to search resources"):
            results = await client.get_all(
                f"/workspaces/{workspace_gid}/typeahead",
                [
                    ("query", payload["query"]),
                    ("resource_type", resource_type),
                    ("count", str(count)),
                    ("opt_fields", TYPEAHEAD_FIELDS),
                ],
            )
    except AsanaError as exc:
        logger.warning("%s failed: %s", RESOURCE_SEARCH_TOOL, redact_sensitive_data(exc.describe()))
        return asana_error_envelope(exc, action_field="resource_type", action=resource_type, request_id=request_id)
    except Exception as exc:
        logger.exception("%s failed with unexpected error: %s", RESOURCE_SEARCH_TOOL, exc)
        return _unexpected_error(RESOURCE_SEARCH_TOOL, exc, request_id)

    items = [result.to_dict() for result in results]
    return success(request_id, items=items, count=len(items))


def register_task_search_tool(mcp: FastMCP, client: AsanaClient, *, default_workspace_gid: Optional[str]) -> None:
    """Register ``asana_task_search``."""

    @canonical_tool(mcp, canonical_name=TASK_SEARCH_TOOL, description=TASK_SEARCH_DESCRIPTION)
    async def asana_task_search(  # noqa: PLR0913 - one parameter per search filter
        workspace_gid: Optional[str] = None,
        text: Optional[str] = None,
        assignee: Optional[str] = None,
        projects: Optional[List[str]] = None,
        tags: Optional[List[str]] = None,
        sections: Optional[List[str]] = None,
        completed: Optional[bool] = None,
        due_on: Optional[str] = None,
        due_on_before: Optional[str] = None,
        due_on_after: Optional[str] = None,
        start_on: Optional[str] = None,
        start_on_before: Optional[str] = None,
        start_on_after: Optional[str] = None,
        modified_at_after: Optional[str] = None,
        modified_at_before: Optional[str] = None,
        portfolios: Optional[List[str]] = None,
        sort_by: Optional[str] = None,
        sort_ascending: Optional[bool] = None,
        opt_fields: Optional[List[str]] = None,
    ) -> dict:
        payload = {
            "workspace_gid": workspace_gid,
            "text": text,
            "assignee": assignee,
            "projects": projects,
            "tags": tags,
            "sections": sections,
            "completed": completed,
            "due_on": due_on,
            "due_on_before": due_on_before,
            "due_on_after": due_on_after,
            "start_on": start_on,
            "start_on_before": start_on_before,
            "start_on_after": start_on_after,
            "modified_at_after": modified_at_after,
            "modified_at_before": modified_at_before,
            "portfolios": portfolios,
            "sort_by": sort_by,
            "sort_ascending": sort_ascending,
            "opt_fields": opt_fields,
        }
        return await search_tasks(client, payload, default_workspace_gid=default_workspace_gid)

    logger.debug("Registered task search tool")


def register_resource_search_tool(
    mcp: FastMCP, client: AsanaClient, *, default_workspace_gid: Optional[str]
) -> None:
    """Register ``asana_resource_search``."""

    @canonical_tool(mcp, canonical_name=RESOURCE_SEARCH_TOOL, description=RESOURCE_SEARCH_DESCRIPTION)
    async def asana_resource_search(
        query: Optional[str] = None,
        resource_type: str = "project",
        workspace_gid: Optional[str] = None,
        count: Optional[int] = None,
    ) -> dict:
        payload = {
            "query": query,
            "resource_type": resource_type,
            "workspace_gid": workspace_gid,
            "count": count,
        }
        return await search_resources(client, payload, default_workspace_gid=default_workspace_gid)

    logger.debug("Registered resource search tool")


__all__ = [
    "RESOURCE_SEARCH_TOOL",
    "TASK_SEARCH_TOOL",
    "build_task_search_query",
    "register_resource_search_tool",
    "register_task_search_tool",
    "search_resources",
    "search_tasks",
]
