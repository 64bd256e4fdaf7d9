"""Models for Asana API payloads.

Asana resources vary per kind and per ``opt_fields`` selection, so most of
them are represented by :class:`Resource`: ``gid`` and ``resource_type`` are
typed, every other field is kept verbatim in the model's extra map. The
remaining models are the small typed shapes the traversal code dispatches on
and the aggregate results it builds.
"""

from __future__ import annotations

from typing import Any, Dict, Generic, List, Literal, Optional, TypeVar, Union

from pydantic import BaseModel, ConfigDict, Field

T = TypeVar("T")


class _OpenModel(BaseModel):
    """Base for models that keep unknown fields in arrival order."""

    model_config = ConfigDict(extra="allow")

    @property
    def fields(self) -> Dict[str, Any]:
        """The open map: every field not declared on the model."""
        return dict(self.model_extra or {})

    def to_dict(self) -> Dict[str, Any]:
        """Flatten declared fields and the open map into one JSON-ready dict.

        Declared optional fields are written only when they were present in
        the decoded payload, so decode then ``to_dict()`` reproduces the input.
        """
        data: Dict[str, Any] = {}
        for name in type(self).model_fields:
            if name == "gid" or name in self.model_fields_set:
                value = getattr(self, name)
                data[name] = value.to_dict() if isinstance(value, _OpenModel) else value
        data.update(self.model_extra or {})
        return data


class Resource(_OpenModel):
    """Any Asana resource: typed header plus open field map."""

    gid: str
    resource_type: Optional[str] = None


# ---------------------------------------------------------------------------
# Envelopes
# ---------------------------------------------------------------------------


class NextPage(BaseModel):
    """Pagination cursor returned with a list page."""

    offset: str


class DataEnvelope(BaseModel, Generic[T]):
    """Single-object response: ``{"data": {...}}``."""

    data: T


class ListEnvelope(BaseModel, Generic[T]):
    """List response: ``{"data": [...], "next_page": {"offset": ...} | null}``."""

    data: List[T]
    next_page: Optional[NextPage] = None


# ---------------------------------------------------------------------------
# Typed references
# ---------------------------------------------------------------------------


class PortfolioItem(BaseModel):
    """Minimal portfolio item used to decide how the item expands."""

    gid: str
    resource_type: str
    name: Optional[str] = None


class FavoriteItem(BaseModel):
    """A favorited project or portfolio reference."""

    gid: str
    resource_type: str
    name: Optional[str] = None


class TaskRef(BaseModel):
    gid: str
    name: Optional[str] = None
    completed: bool = False
    num_subtasks: int = 0


class TaskDependency(BaseModel):
    gid: str
    name: Optional[str] = None
    resource_type: Optional[str] = None


class Story(_OpenModel):
    """A task story; only ``comment_added`` stories are user comments."""

    gid: str
    resource_subtype: Optional[str] = None
    text: Optional[str] = None
    html_text: Optional[str] = None

    def is_comment(self) -> bool:
        return self.resource_subtype == "comment_added"


class Job(_OpenModel):
    """Async job returned by project instantiation."""

    gid: str
    status: Optional[str] = None
    new_project: Optional[Resource] = None


# ---------------------------------------------------------------------------
# Aggregates
# ---------------------------------------------------------------------------


class LeafItem(BaseModel):
    """A project inside an expanded portfolio."""

    kind: Literal["project"] = "project"
    resource: Resource

    def to_dict(self) -> Dict[str, Any]:
        data = self.resource.to_dict()
        data.pop("resource_type", None)
        return {"resource_type": "project", **data}


class NestedItem(BaseModel):
    """A sub-portfolio inside an expanded portfolio."""

    kind: Literal["portfolio"] = "portfolio"
    node: "PortfolioWithItems"

    def to_dict(self) -> Dict[str, Any]:
        data = self.node.to_dict()
        data.pop("resource_type", None)
        return {"resource_type": "portfolio", **data}


ExpandedItem = Union[LeafItem, NestedItem]


class PortfolioWithItems(BaseModel):
    """A portfolio and its items, expanded to a bounded depth."""

    portfolio: Resource
    items: List[ExpandedItem] = Field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = self.portfolio.to_dict()
        data["items"] = [item.to_dict() for item in self.items]
        return data

    def project_gids(self) -> List[str]:
        """Leaf project gids, depth-first in item order."""
        gids: List[str] = []
        for item in self.items:
            if isinstance(item, LeafItem):
                gids.append(item.resource.gid)
            else:
                gids.extend(item.node.project_gids())
        return gids


NestedItem.model_rebuild()
PortfolioWithItems.model_rebuild()


class TaskWithContext(BaseModel):
    """A task with subtasks, dependencies, dependents and comments attached."""

    task: Resource
    subtasks: List[TaskRef] = Field(default_factory=list)
    dependencies: List[TaskDependency] = Field(default_factory=list)
    dependents: List[TaskDependency] = Field(default_factory=list)
    comments: List[Story] = Field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        data = self.task.to_dict()
        if self.subtasks:
            data["subtasks"] = [ref.model_dump() for ref in self.subtasks]
        if self.dependencies:
            data["dependencies"] = [dep.model_dump() for dep in self.dependencies]
        if self.dependents:
            data["dependents"] = [dep.model_dump() for dep in self.dependents]
        if self.comments:
            data["comments"] = [story.to_dict() for story in self.comments]
        return data


class FavoriteError(BaseModel):
    item: FavoriteItem
    error: str


class FavoritesResponse(BaseModel):
    """Resolved favorites; per-item failures are data, not raised errors."""

    projects: List[Resource] = Field(default_factory=list)
    portfolios: List[PortfolioWithItems] = Field(default_factory=list)
    errors: List[FavoriteError] = Field(default_factory=list)

    def to_dict(self) -> Dict[str, Any]:
        return {
            "projects": [project.to_dict() for project in self.projects],
            "portfolios": [portfolio.to_dict() for portfolio in self.portfolios],
            "errors": [failure.model_dump() for failure in self.errors],
        }


__all__ = [
    "DataEnvelope",
    "ExpandedItem",
    "FavoriteError",
    "FavoriteItem",
    "FavoritesResponse",
    "Job",
    "LeafItem",
    "ListEnvelope",
    "NestedItem",
    "NextPage",
    "PortfolioItem",
    "PortfolioWithItems",
    "Resource",
    "Story",
    "TaskDependency",
    "TaskRef",
    "TaskWithContext",
]
