"""Recursive aggregation over the Asana resource graph.

Three walks live here, each with its own failure policy:

* :func:`expand_portfolio` builds a depth-bounded portfolio tree. Any error
  aborts the whole expansion.
* :func:`get_tasks_recursive` flattens a project's (or a portfolio's) tasks
  and their subtasks into one depth-first list. Projects inside a portfolio
  that answer 404 are skipped; every other error aborts.
* :func:`resolve_favorites` resolves favorite references one by one and
  records per-item failures instead of raising.

Depths are ``Optional[int]``: ``None`` is unlimited, ``0`` fetches no
children. Use :func:`depth_to_option` to convert a signed caller depth.

All requests are issued sequentially. Nothing here reads configuration; the
workspace and depths are passed in by the caller.
"""

from __future__ import annotations

import logging
from typing import List, Optional, Sequence

from asana_mcp.core.client import AsanaClient
from asana_mcp.core.errors.asana import AsanaError, NotFoundError
from asana_mcp.core.fields import (
    FAVORITE_FIELDS,
    PORTFOLIO_FIELDS,
    PORTFOLIO_ITEMS_FIELDS,
    PROJECT_FIELDS,
    RECURSIVE_TASK_FIELDS,
    STORY_FIELDS,
    SUBTASK_FIELDS,
    TASK_FULL_FIELDS,
    TASK_LINK_FIELDS,
)
from asana_mcp.core.models import (
    ExpandedItem,
    FavoriteError,
    FavoriteItem,
    FavoritesResponse,
    LeafItem,
    NestedItem,
    PortfolioItem,
    PortfolioWithItems,
    Resource,
    Story,
    TaskDependency,
    TaskRef,
    TaskWithContext,
)

logger = logging.getLogger(__name__)


def depth_to_option(depth: int) -> Optional[int]:
    """Negative depth means unlimited (``None``); otherwise the depth itself."""
    if depth < 0:
        return None
    return depth


def _may_descend(current_depth: int, max_depth: Optional[int]) -> bool:
    return max_depth is None or current_depth < max_depth


# ---------------------------------------------------------------------------
# Portfolio tree
# ---------------------------------------------------------------------------


async def expand_portfolio(
    client: AsanaClient,
    portfolio_gid: str,
    max_depth: Optional[int],
    current_depth: int = 0,
) -> PortfolioWithItems:
    """Fetch a portfolio and expand its items down to ``max_depth`` levels.

    At the depth limit the portfolio is returned with no items and its item
    list is never requested. Project items become leaves; portfolio items
    recurse one level deeper. Items of any other type are skipped.
    """
    portfolio = await client.get(
        f"/portfolios/{portfolio_gid}",
        [("opt_fields", PORTFOLIO_FIELDS)],
    )

    if not _may_descend(current_depth, max_depth):
        return PortfolioWithItems(portfolio=portfolio)

    refs = await client.get_all(
        f"/portfolios/{portfolio_gid}/items",
        [("opt_fields", PORTFOLIO_ITEMS_FIELDS)],
        model=PortfolioItem,
    )

    items: List[ExpandedItem] = []
    for ref in refs:
        if ref.resource_type == "project":
            project = await client.get(f"/projects/{ref.gid}", [("opt_fields", PROJECT_FIELDS)])
            items.append(LeafItem(resource=project))
        elif ref.resource_type == "portfolio":
            nested = await expand_portfolio(client, ref.gid, max_depth, current_depth + 1)
            items.append(NestedItem(node=nested))
        else:
            logger.debug("Skipping portfolio item %s of type %s", ref.gid, ref.resource_type)

    return PortfolioWithItems(portfolio=portfolio, items=items)


def collect_project_gids(portfolio: PortfolioWithItems) -> List[str]:
    """Leaf project gids of an expanded portfolio, depth-first."""
    return portfolio.project_gids()


# ---------------------------------------------------------------------------
# Flattened tasks
# ---------------------------------------------------------------------------


def _num_subtasks(task: Resource) -> int:
    value = task.fields.get("num_subtasks")
    if isinstance(value, bool) or not isinstance(value, int):
        return 0
    return value


async def expand_subtasks_flat(
    client: AsanaClient,
    tasks: Sequence[Resource],
    max_depth: Optional[int],
    current_depth: int = 0,
) -> List[Resource]:
    """Insert each task's subtasks right after it, depth-first.

    Subtasks are only requested for tasks whose ``num_subtasks`` hint is
    positive, and only while ``current_depth`` is below ``max_depth``.
    """
    descend = _may_descend(current_depth, max_depth)
    flattened: List[Resource] = []

    for task in tasks:
        flattened.append(task)
        if descend and _num_subtasks(task) > 0:
            subtasks = await client.get_all(
                f"/tasks/{task.gid}/subtasks",
                [("opt_fields", RECURSIVE_TASK_FIELDS)],
            )
            flattened.extend(await expand_subtasks_flat(client, subtasks, max_depth, current_depth + 1))

    return flattened


async def get_project_tasks(
    client: AsanaClient,
    project_gid: str,
    subtask_depth: Optional[int],
) -> List[Resource]:
    """All tasks of one project with subtasks expanded to ``subtask_depth``."""
    tasks = await client.get_all(
        f"/projects/{project_gid}/tasks",
        [("opt_fields", RECURSIVE_TASK_FIELDS)],
    )
    return await expand_subtasks_flat(client, tasks, subtask_depth)


async def get_tasks_recursive(
    client: AsanaClient,
    gid: str,
    subtask_depth: Optional[int],
    portfolio_depth: Optional[int],
) -> List[Resource]:
    """Flatten the tasks under ``gid``, which may name a project or a portfolio.

    The kind is probed by fetching ``gid`` as a project: success takes the
    project path, a 404 takes the portfolio path, any other error propagates.
    On the portfolio path, projects that answer 404 are skipped.
    """
    try:
        await client.get(f"/projects/{gid}", [("opt_fields", "gid")])
    except NotFoundError:
        logger.debug("%s is not a project; expanding it as a portfolio", gid)
    else:
        return await get_project_tasks(client, gid, subtask_depth)

    portfolio = await expand_portfolio(client, gid, portfolio_depth)

    tasks: List[Resource] = []
    for project_gid in collect_project_gids(portfolio):
        try:
            tasks.extend(await get_project_tasks(client, project_gid, subtask_depth))
        except NotFoundError:
            logger.info("Skipping project %s in portfolio %s: not found", project_gid, gid)
    return tasks


# ---------------------------------------------------------------------------
# Task with context
# ---------------------------------------------------------------------------


async def get_task_with_context(
    client: AsanaClient,
    task_gid: str,
    *,
    include_subtasks: bool = True,
    include_dependencies: bool = True,
    include_comments: bool = True,
) -> TaskWithContext:
    """Fetch a task with its direct subtasks, dependencies, dependents and comments."""
    task = await client.get(f"/tasks/{task_gid}", [("opt_fields", TASK_FULL_FIELDS)])

    subtasks: List[TaskRef] = []
    if include_subtasks:
        subtasks = await client.get_all(
            f"/tasks/{task_gid}/subtasks",
            [("opt_fields", SUBTASK_FIELDS)],
            model=TaskRef,
        )

    dependencies: List[TaskDependency] = []
    dependents: List[TaskDependency] = []
    if include_dependencies:
        dependencies = await client.get_all(
            f"/tasks/{task_gid}/dependencies",
            [("opt_fields", TASK_LINK_FIELDS)],
            model=TaskDependency,
        )
        dependents = await client.get_all(
            f"/tasks/{task_gid}/dependents",
            [("opt_fields", TASK_LINK_FIELDS)],
            model=TaskDependency,
        )

    comments: List[Story] = []
    if include_comments:
        stories = await client.get_all(
            f"/tasks/{task_gid}/stories",
            [("opt_fields", STORY_FIELDS)],
            model=Story,
        )
        comments = [story for story in stories if story.is_comment()]

    return TaskWithContext(
        task=task,
        subtasks=subtasks,
        dependencies=dependencies,
        dependents=dependents,
        comments=comments,
    )


# ---------------------------------------------------------------------------
# Favorites
# ---------------------------------------------------------------------------


async def list_favorites(
    client: AsanaClient,
    workspace_gid: str,
    resource_type: str,
) -> List[FavoriteItem]:
    """List the current user's favorites of one kind in a workspace."""
    return await client.get_all(
        "/users/me/favorites",
        [
            ("workspace", workspace_gid),
            ("resource_type", resource_type),
            ("opt_fields", FAVORITE_FIELDS),
        ],
        model=FavoriteItem,
    )


async def resolve_favorites(
    client: AsanaClient,
    projects: Sequence[FavoriteItem],
    portfolios: Sequence[FavoriteItem],
    portfolio_depth: Optional[int],
) -> FavoritesResponse:
    """Resolve favorite references to full detail, isolating per-item failures.

    A reference that fails to resolve is recorded in ``errors`` with the
    error text; the remaining references are still resolved. Order is kept
    within each group.
    """
    result = FavoritesResponse()

    for item in projects:
        try:
            project = await client.get(f"/projects/{item.gid}", [("opt_fields", PROJECT_FIELDS)])
        except AsanaError as exc:
            logger.info("Could not resolve favorite project %s: %s", item.gid, exc)
            result.errors.append(FavoriteError(item=item, error=str(exc)))
        else:
            result.projects.append(project)

    for item in portfolios:
        try:
            portfolio = await expand_portfolio(client, item.gid, portfolio_depth)
        except AsanaError as exc:
            logger.info("Could not resolve favorite portfolio %s: %s", item.gid, exc)
            result.errors.append(FavoriteError(item=item, error=str(exc)))
        else:
            result.portfolios.append(portfolio)

    return result


__all__ = [
    "collect_project_gids",
    "depth_to_option",
    "expand_portfolio",
    "expand_subtasks_flat",
    "get_project_tasks",
    "get_task_with_context",
    "get_tasks_recursive",
    "list_favorites",
    "resolve_favorites",
]
