"""Tests for the Asana payload models and their JSON shapes."""

import pytest
from pydantic import ValidationError

from asana_mcp.core.models import (
    DataEnvelope,
    FavoriteError,
    FavoriteItem,
    FavoritesResponse,
    Job,
    LeafItem,
    ListEnvelope,
    NestedItem,
    PortfolioWithItems,
    Resource,
    Story,
    TaskDependency,
    TaskRef,
    TaskWithContext,
)


class TestResource:
    """Resource keeps a typed header and an open field map."""

    def test_round_trip_preserves_every_field(self):
        payload = {
            "gid": "12",
            "resource_type": "project",
            "name": "Launch",
            "owner": {"gid": "3", "name": "Sam"},
            "custom_fields": [{"gid": "cf1", "display_value": None}],
            "archived": False,
        }
        assert Resource.model_validate(payload).to_dict() == payload

    def test_absent_resource_type_stays_absent(self):
        resource = Resource.model_validate({"gid": "12", "name": "Launch"})
        assert "resource_type" not in resource.to_dict()

    def test_explicit_null_resource_type_is_kept(self):
        resource = Resource.model_validate({"gid": "12", "resource_type": None})
        assert resource.to_dict() == {"gid": "12", "resource_type": None}

    def test_fields_excludes_header(self):
        resource = Resource.model_validate({"gid": "1", "resource_type": "task", "name": "x"})
        assert resource.fields == {"name": "x"}

    def test_gid_required(self):
        with pytest.raises(ValidationError):
            Resource.model_validate({"name": "orphan"})

    def test_flattened_key_order(self):
        resource = Resource.model_validate({"name": "n", "gid": "1", "resource_type": "tag"})
        assert list(resource.to_dict()) == ["gid", "resource_type", "name"]


class TestEnvelopes:
    def test_data_envelope(self):
        envelope = DataEnvelope[Resource].model_validate_json('{"data": {"gid": "1"}}')
        assert envelope.data.gid == "1"

    def test_list_envelope_without_next_page(self):
        envelope = ListEnvelope[Resource].model_validate_json('{"data": [{"gid": "1"}]}')
        assert envelope.next_page is None

    def test_list_envelope_with_null_next_page(self):
        envelope = ListEnvelope[Resource].model_validate_json('{"data": [], "next_page": null}')
        assert envelope.data == []
        assert envelope.next_page is None


class TestStory:
    def test_only_comment_added_is_comment(self):
        assert Story(gid="1", resource_subtype="comment_added").is_comment()
        assert not Story(gid="2", resource_subtype="assigned").is_comment()
        assert not Story(gid="3").is_comment()


class TestJob:
    def test_new_project_serialized(self):
        job = Job.model_validate(
            {"gid": "j1", "status": "in_progress", "new_project": {"gid": "p1", "name": "Copy"}}
        )
        assert job.to_dict() == {
            "gid": "j1",
            "status": "in_progress",
            "new_project": {"gid": "p1", "name": "Copy"},
        }


class TestPortfolioWithItems:
    """Tree serialization and leaf collection."""

    def _tree(self):
        inner = PortfolioWithItems(
            portfolio=Resource.model_validate({"gid": "P2", "resource_type": "portfolio", "name": "Inner"}),
            items=[LeafItem(resource=Resource.model_validate({"gid": "B", "resource_type": "project"}))],
        )
        return PortfolioWithItems(
            portfolio=Resource.model_validate({"gid": "P1", "resource_type": "portfolio", "name": "Outer"}),
            items=[
                LeafItem(resource=Resource.model_validate({"gid": "A", "resource_type": "project", "name": "a"})),
                NestedItem(node=inner),
            ],
        )

    def test_items_are_tagged(self):
        data = self._tree().to_dict()

        assert data["gid"] == "P1"
        assert data["name"] == "Outer"
        assert data["items"][0] == {"resource_type": "project", "gid": "A", "name": "a"}
        nested = data["items"][1]
        assert nested["resource_type"] == "portfolio"
        assert nested["gid"] == "P2"
        assert nested["items"] == [{"resource_type": "project", "gid": "B"}]

    def test_leaf_tag_added_when_resource_type_absent(self):
        leaf = LeafItem(resource=Resource.model_validate({"gid": "A"}))
        assert leaf.to_dict() == {"resource_type": "project", "gid": "A"}

    def test_unexpanded_portfolio_has_empty_items(self):
        node = PortfolioWithItems(portfolio=Resource.model_validate({"gid": "P1"}))
        assert node.to_dict() == {"gid": "P1", "items": []}

    def test_project_gids_depth_first(self):
        assert self._tree().project_gids() == ["A", "B"]


class TestTaskWithContext:
    def test_empty_lists_omitted(self):
        context = TaskWithContext(task=Resource.model_validate({"gid": "T", "name": "Ship"}))
        assert context.to_dict() == {"gid": "T", "name": "Ship"}

    def test_lists_included_when_present(self):
        context = TaskWithContext(
            task=Resource.model_validate({"gid": "T"}),
            subtasks=[TaskRef(gid="S1", name="child", num_subtasks=2)],
            dependencies=[TaskDependency(gid="D1", name="blocker", resource_type="task")],
            comments=[Story.model_validate({"gid": "C1", "resource_subtype": "comment_added", "text": "hi"})],
        )

        data = context.to_dict()

        assert data["subtasks"] == [{"gid": "S1", "name": "child", "completed": False, "num_subtasks": 2}]
        assert data["dependencies"] == [{"gid": "D1", "name": "blocker", "resource_type": "task"}]
        assert "dependents" not in data
        assert data["comments"] == [{"gid": "C1", "resource_subtype": "comment_added", "text": "hi"}]


class TestFavoritesResponse:
    def test_shape(self):
        response = FavoritesResponse(
            projects=[Resource.model_validate({"gid": "p1"})],
            errors=[
                FavoriteError(
                    item=FavoriteItem(gid="p2", resource_type="project", name="Gone"),
                    error="resource not found: Unknown object",
                )
            ],
        )

        assert response.to_dict() == {
            "projects": [{"gid": "p1"}],
            "portfolios": [],
            "errors": [
                {
                    "item": {"gid": "p2", "resource_type": "project", "name": "Gone"},
                    "error": "resource not found: Unknown object",
                }
            ],
        }
