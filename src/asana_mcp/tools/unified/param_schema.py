"""Declarative parameter validation for unified tool handlers.

Each handler declares a schema dict mapping payload keys to type
descriptors, then calls :func:`validate_payload` once before touching the
Asana API. Type and format problems come back as validation envelopes; the
handler keeps only the domain checks (e.g. "name is required for project").

Example::

    _SCHEMA = {
        "gid": Str(required=True, remediation="Pass the project gid"),
        "depth": Num(integer_only=True),
        "include_comments": Bool(default=True),
        "opt_fields": List_(item_type=str),
    }

    async def _handle(*, ctx, **payload):
        err = validate_payload(payload, _SCHEMA, tool_name="asana_get", action="project",
                               request_id=ctx.request_id)
        if err:
            return err
"""

from __future__ import annotations

from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, FrozenSet, List, Mapping, Optional, Tuple, Type, Union

from asana_mcp.core.responses.builders import error_response
from asana_mcp.core.responses.types import ErrorCode, ErrorType

# ---------------------------------------------------------------------------
# Schema types
# ---------------------------------------------------------------------------


@dataclass(frozen=True)
class Str:
    """String parameter. Empty strings count as absent unless ``allow_empty``."""

    required: bool = False
    strip: bool = True
    allow_empty: bool = False
    choices: Optional[FrozenSet[str]] = None
    error_code: ErrorCode = ErrorCode.INVALID_FORMAT
    remediation: Optional[str] = None


@dataclass(frozen=True)
class Num:
    """Numeric parameter (int or float)."""

    required: bool = False
    integer_only: bool = False
    min_val: Optional[Union[int, float]] = None
    max_val: Optional[Union[int, float]] = None
    error_code: ErrorCode = ErrorCode.INVALID_FORMAT
    remediation: Optional[str] = None


@dataclass(frozen=True)
class Bool:
    """Boolean parameter."""

    required: bool = False
    default: Optional[bool] = None
    error_code: ErrorCode = ErrorCode.INVALID_FORMAT
    remediation: Optional[str] = None


@dataclass(frozen=True)
class List_:
    """List parameter, optionally with a uniform item type."""

    required: bool = False
    item_type: Optional[Type[Any]] = None
    min_items: Optional[int] = None
    error_code: ErrorCode = ErrorCode.INVALID_FORMAT
    remediation: Optional[str] = None


@dataclass(frozen=True)
class Dict_:
    """Mapping parameter (e.g. ``custom_fields``)."""

    required: bool = False
    error_code: ErrorCode = ErrorCode.INVALID_FORMAT
    remediation: Optional[str] = None


@dataclass(frozen=True)
class AtLeastOne:
    """Cross-field rule: at least one of *fields* must be supplied."""

    fields: Tuple[str, ...]
    message: Optional[str] = None
    error_code: ErrorCode = ErrorCode.MISSING_REQUIRED
    remediation: Optional[str] = None


FieldSchema = Union[Str, Num, Bool, List_, Dict_]

_ErrorFn = Callable[..., dict]


# ---------------------------------------------------------------------------
# Validation engine
# ---------------------------------------------------------------------------


def validate_payload(
    payload: Dict[str, Any],
    schema: Mapping[str, FieldSchema],
    *,
    tool_name: str,
    action: str,
    request_id: Optional[str] = None,
    cross_field_rules: Optional[List[AtLeastOne]] = None,
) -> Optional[dict]:
    """Validate *payload* against *schema*, returning an error dict or ``None``.

    On success, payload values are **normalised in-place**: strings are
    stripped, empty optional strings become ``None``, integral numbers become
    ``int`` and boolean defaults are applied.

    Order of checks:
      1. Required presence
      2. Type (``bool`` is never accepted as a number)
      3. Format (choices, ranges, list items)
      4. Cross-field rules
    """

    def _error(
        field: str,
        message: str,
        code: ErrorCode = ErrorCode.VALIDATION_ERROR,
        remediation: Optional[str] = None,
    ) -> dict:
        return asdict(
            error_response(
                message,
                error_code=code,
                error_type=ErrorType.VALIDATION,
                remediation=remediation or f"Provide a valid '{field}' value",
                details={"field": field, "action": f"{tool_name}.{action}"},
                request_id=request_id,
            )
        )

    for field_name, spec in schema.items():
        value = payload.get(field_name)

        if isinstance(spec, Str) and isinstance(value, str):
            text = value.strip() if spec.strip else value
            if not text and not spec.allow_empty:
                value = None
            payload[field_name] = value if value is None else text
            value = payload[field_name]

        if isinstance(spec, Bool) and spec.default is not None and value is None:
            payload[field_name] = spec.default
            value = spec.default

        if value is None:
            if spec.required:
                return _error(
                    field_name,
                    f"{field_name} is required for {action}",
                    code=ErrorCode.MISSING_REQUIRED,
                    remediation=spec.remediation,
                )
            continue

        err = _check_type(field_name, value, spec, _error)
        if err is not None:
            return err

        err = _check_format(field_name, value, spec, _error)
        if err is not None:
            return err

        if isinstance(spec, Num) and isinstance(value, float) and spec.integer_only:
            payload[field_name] = int(value)

    for rule in cross_field_rules or ():
        if all(payload.get(name) in (None, "") for name in rule.fields):
            names = ", ".join(rule.fields)
            return _error(
                rule.fields[0],
                rule.message or f"at least one of {names} is required for {action}",
                code=rule.error_code,
                remediation=rule.remediation,
            )

    return None


# ---------------------------------------------------------------------------
# Internal helpers
# ---------------------------------------------------------------------------


def _check_type(field: str, value: Any, spec: FieldSchema, _error: _ErrorFn) -> Optional[dict]:
    """Return an error dict if *value* is not of the type *spec* expects."""
    if isinstance(spec, Str):
        if not isinstance(value, str):
            return _error(field, f"{field} must be a string", code=spec.error_code, remediation=spec.remediation)

    elif isinstance(spec, Num):
        if isinstance(value, bool) or not isinstance(value, (int, float)):
            return _error(field, f"{field} must be a number", code=spec.error_code, remediation=spec.remediation)
        if spec.integer_only and isinstance(value, float) and not value.is_integer():
            return _error(field, f"{field} must be an integer", code=spec.error_code, remediation=spec.remediation)

    elif isinstance(spec, Bool):
        if not isinstance(value, bool):
            return _error(field, f"{field} must be a boolean", code=spec.error_code, remediation=spec.remediation)

    elif isinstance(spec, List_):
        if not isinstance(value, list):
            return _error(field, f"{field} must be a list", code=spec.error_code, remediation=spec.remediation)

    elif isinstance(spec, Dict_):
        if not isinstance(value, dict):
            return _error(field, f"{field} must be an object", code=spec.error_code, remediation=spec.remediation)

    return None


def _check_format(field: str, value: Any, spec: FieldSchema, _error: _ErrorFn) -> Optional[dict]:
    """Return an error dict if *value* fails the range or content checks of *spec*."""
    if isinstance(spec, Str) and spec.choices is not None and value not in spec.choices:
        allowed = ", ".join(sorted(spec.choices))
        return _error(field, f"{field} must be one of: {allowed}", code=spec.error_code, remediation=spec.remediation)

    if isinstance(spec, Num):
        if spec.min_val is not None and value < spec.min_val:
            return _error(field, f"{field} must be >= {spec.min_val}", code=spec.error_code, remediation=spec.remediation)
        if spec.max_val is not None and value > spec.max_val:
            return _error(field, f"{field} must be <= {spec.max_val}", code=spec.error_code, remediation=spec.remediation)

    if isinstance(spec, List_):
        if spec.min_items is not None and len(value) < spec.min_items:
            return _error(
                field,
                f"{field} must have at least {spec.min_items} item(s)",
                code=spec.error_code,
                remediation=spec.remediation,
            )
        if spec.item_type is not None and not all(isinstance(item, spec.item_type) for item in value):
            return _error(
                field,
                f"{field} items must be of type {spec.item_type.__name__}",
                code=spec.error_code,
                remediation=spec.remediation,
            )

    return None


__all__ = [
    "AtLeastOne",
    "Bool",
    "Dict_",
    "FieldSchema",
    "List_",
    "Num",
    "Str",
    "validate_payload",
]
