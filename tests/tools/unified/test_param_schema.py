"""Unit tests for the declarative parameter validation framework."""

from __future__ import annotations

import pytest

from asana_mcp.core.responses import ErrorCode
from asana_mcp.tools.unified.param_schema import (
    AtLeastOne,
    Bool,
    Dict_,
    List_,
    Num,
    Str,
    validate_payload,
)

# ---------------------------------------------------------------------------
# Helpers
# ---------------------------------------------------------------------------

TOOL = "asana_test"
ACTION = "project"
RID = "req_test_123"


def _validate(payload, schema, **kw):
    """Shorthand for validate_payload with test defaults."""
    return validate_payload(payload, schema, tool_name=TOOL, action=ACTION, request_id=RID, **kw)


def _assert_error(result, *, field, code=None):
    """Assert *result* is a validation error dict for *field*."""
    assert result is not None, "Expected a validation error, got None"
    assert result["success"] is False
    assert field in result["error"]
    details = result["data"]["details"]
    assert details["field"] == field
    assert details["action"] == f"{TOOL}.{ACTION}"
    assert result["meta"]["request_id"] == RID
    if code is not None:
        assert result["data"]["error_code"] == code


# ---------------------------------------------------------------------------
# Str
# ---------------------------------------------------------------------------


class TestStr:
    def test_required_missing(self):
        result = _validate({}, {"name": Str(required=True)})
        _assert_error(result, field="name", code="MISSING_REQUIRED")
        assert result["error"] == "name is required for project"

    def test_blank_counts_as_missing(self):
        result = _validate({"name": "   "}, {"name": Str(required=True)})
        _assert_error(result, field="name", code="MISSING_REQUIRED")

    def test_empty_optional_normalised_to_none(self):
        payload = {"notes": ""}
        assert _validate(payload, {"notes": Str()}) is None
        assert payload["notes"] is None

    def test_value_stripped(self):
        payload = {"gid": "  123 "}
        assert _validate(payload, {"gid": Str()}) is None
        assert payload["gid"] == "123"

    def test_allow_empty_keeps_value(self):
        payload = {"notes": ""}
        assert _validate(payload, {"notes": Str(allow_empty=True)}) is None
        assert payload["notes"] == ""

    def test_wrong_type(self):
        _assert_error(_validate({"gid": 12}, {"gid": Str()}), field="gid", code="INVALID_FORMAT")

    def test_choices(self):
        schema = {"action": Str(choices=frozenset({"add", "remove"}))}
        result = _validate({"action": "move"}, schema)
        _assert_error(result, field="action")
        assert result["error"] == "action must be one of: add, remove"
        assert _validate({"action": "add"}, schema) is None

    def test_custom_remediation(self):
        result = _validate({}, {"gid": Str(required=True, remediation="Pass the gid")})
        assert result["data"]["remediation"] == "Pass the gid"


# ---------------------------------------------------------------------------
# Num / Bool / List_ / Dict_
# ---------------------------------------------------------------------------


class TestNum:
    def test_bool_rejected(self):
        _assert_error(_validate({"depth": True}, {"depth": Num()}), field="depth")

    def test_integer_only(self):
        _assert_error(_validate({"depth": 1.5}, {"depth": Num(integer_only=True)}), field="depth")

    def test_integral_float_normalised(self):
        payload = {"depth": 2.0}
        assert _validate(payload, {"depth": Num(integer_only=True)}) is None
        assert payload["depth"] == 2
        assert isinstance(payload["depth"], int)

    def test_negative_allowed_without_bounds(self):
        assert _validate({"depth": -1}, {"depth": Num(integer_only=True)}) is None

    @pytest.mark.parametrize("value,message", [(0, "count must be >= 1"), (101, "count must be <= 100")])
    def test_bounds(self, value, message):
        result = _validate({"count": value}, {"count": Num(min_val=1, max_val=100)})
        _assert_error(result, field="count")
        assert result["error"] == message


class TestBool:
    def test_default_applied(self):
        payload = {}
        assert _validate(payload, {"include_comments": Bool(default=True)}) is None
        assert payload["include_comments"] is True

    def test_explicit_false_kept(self):
        payload = {"include_comments": False}
        assert _validate(payload, {"include_comments": Bool(default=True)}) is None
        assert payload["include_comments"] is False

    def test_string_rejected(self):
        _assert_error(_validate({"completed": "yes"}, {"completed": Bool()}), field="completed")


class TestList:
    def test_item_type(self):
        result = _validate({"opt_fields": ["name", 3]}, {"opt_fields": List_(item_type=str)})
        _assert_error(result, field="opt_fields")
        assert result["error"] == "opt_fields items must be of type str"

    def test_min_items(self):
        _assert_error(_validate({"item_gids": []}, {"item_gids": List_(min_items=1)}), field="item_gids")

    def test_not_a_list(self):
        _assert_error(_validate({"tags": "a,b"}, {"tags": List_()}), field="tags")


class TestDict:
    def test_object_required(self):
        result = _validate({"custom_fields": ["x"]}, {"custom_fields": Dict_()})
        _assert_error(result, field="custom_fields")
        assert result["error"] == "custom_fields must be an object"


# ---------------------------------------------------------------------------
# Cross-field rules
# ---------------------------------------------------------------------------


class TestAtLeastOne:
    def test_default_message(self):
        result = _validate({}, {}, cross_field_rules=[AtLeastOne(fields=("text", "html_text"))])
        _assert_error(result, field="text", code=ErrorCode.MISSING_REQUIRED.value)
        assert result["error"] == "at least one of text, html_text is required for project"

    def test_custom_message(self):
        rule = AtLeastOne(fields=("title", "text"), message="title or text is required")
        result = _validate({"title": ""}, {}, cross_field_rules=[rule])
        assert result["error"] == "title or text is required"

    def test_satisfied(self):
        assert _validate({"text": "hi"}, {}, cross_field_rules=[AtLeastOne(fields=("text", "html_text"))]) is None

    def test_runs_after_field_checks(self):
        result = _validate(
            {"depth": "deep"},
            {"depth": Num()},
            cross_field_rules=[AtLeastOne(fields=("text",))],
        )
        _assert_error(result, field="depth")
