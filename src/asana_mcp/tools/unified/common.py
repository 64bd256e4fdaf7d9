"""Shared helpers for unified tool routers.

Consolidates per-router boilerplate (request IDs, metric names, validation
errors, workspace resolution, dispatch error handling) into parameterised
functions that each tool module calls with its own tool name.

Imports only from ``asana_mcp.core`` and the standard library.
"""

from __future__ import annotations

import logging
from contextlib import contextmanager
from dataclasses import asdict, dataclass
from typing import Any, Callable, Dict, Iterator, Mapping, Optional, Sequence

from asana_mcp.core.client import AsanaClient
from asana_mcp.core.context import generate_correlation_id, get_correlation_id
from asana_mcp.core.errors import (
    ActionRouterError,
    AsanaError,
    lookup_error_mapping,
)
from asana_mcp.core.observability import redact_sensitive_data
from asana_mcp.core.responses.builders import error_response, success_response
from asana_mcp.core.responses.types import (
    ErrorCode,
    ErrorType,
)
from asana_mcp.tools.unified.router import ActionRouter

logger = logging.getLogger(__name__)

WORKSPACE_REQUIRED_MESSAGE = "workspace_gid is required (or set ASANA_DEFAULT_WORKSPACE env var)"

_REMEDIATIONS: Dict[str, str] = {
    "configuration": "Set ASANA_TOKEN to a valid Asana personal access token and restart the server",
    "not_found": "Check the gid and that the token's user can access the resource",
    "remote_api": "Review the Asana API message and the parameters sent",
    "transport": "Check network connectivity to the Asana API and retry",
}


@dataclass(frozen=True)
class ToolContext:
    """Per-call collaborators handed to every handler.

    ``default_workspace_gid`` is read from configuration once, when the tool
    is registered, and threaded through here so handlers never consult
    global state.
    """

    client: AsanaClient
    default_workspace_gid: Optional[str]
    request_id: str


# ---------------------------------------------------------------------------
# 1. Request ID
# ---------------------------------------------------------------------------


def build_request_id(tool_name: str) -> str:
    """Return an existing correlation ID or generate one with *tool_name* prefix."""
    return get_correlation_id() or generate_correlation_id(prefix=tool_name)


# ---------------------------------------------------------------------------
# 2. Metric name
# ---------------------------------------------------------------------------


def make_metric_name(prefix: str, action: str) -> str:
    """Build a dot-separated metric key, normalising hyphens to underscores.

    Examples::

        make_metric_name("asana_get", "project")        -> "asana_get.project"
        make_metric_name("asana_link", "add-task_tag")  -> "asana_link.add_task_tag"
    """
    return f"{prefix}.{action.replace('-', '_')}"


# ---------------------------------------------------------------------------
# 3. Request building
# ---------------------------------------------------------------------------


def resolve_workspace_gid(explicit: Optional[str], default: Optional[str]) -> Optional[str]:
    """Prefer a non-empty explicit workspace, else the configured default."""
    if explicit:
        return explicit
    return default or None


def join_fields(opt_fields: Optional[Sequence[str]], default: str) -> str:
    """Caller-supplied ``opt_fields`` (comma-joined) replace the curated default."""
    if opt_fields:
        return ",".join(opt_fields)
    return default


def compact(values: Mapping[str, Any]) -> Dict[str, Any]:
    """Drop ``None`` values so request bodies carry only supplied fields."""
    return {key: value for key, value in values.items() if value is not None}


def data_body(values: Mapping[str, Any]) -> Dict[str, Any]:
    """Wrap supplied fields in Asana's ``{"data": {...}}`` request envelope."""
    return {"data": compact(values)}


@contextmanager
def asana_operation(context: str) -> Iterator[None]:
    """Tag any :class:`AsanaError` raised inside the block with *context*.

    The innermost context wins, so a helper that already labelled its
    failure keeps that label.
    """
    try:
        yield
    except AsanaError as exc:
        if exc.context is None:
            exc.context = context
        raise


def success(request_id: str, **fields: Any) -> dict:
    return asdict(success_response(request_id=request_id, **fields))


# ---------------------------------------------------------------------------
# 4. Dispatch with standard errors
# ---------------------------------------------------------------------------


def _unsupported_envelope(
    tool_name: str,
    action_field: str,
    action: Optional[str],
    allowed: Sequence[str],
    request_id: str,
) -> dict:
    allowed_str = ", ".join(allowed)
    return asdict(
        error_response(
            f"Unsupported {tool_name} {action_field} '{action}'. Allowed values: {allowed_str}",
            error_code=ErrorCode.VALIDATION_ERROR,
            error_type=ErrorType.VALIDATION,
            remediation=f"Use one of: {allowed_str}",
            request_id=request_id,
            details={action_field: action, "allowed": list(allowed)},
        )
    )


def asana_error_envelope(
    exc: AsanaError,
    *,
    action_field: str,
    action: str,
    request_id: Optional[str] = None,
) -> dict:
    """Build the error envelope for an Asana failure surfaced by a handler."""
    mapping = lookup_error_mapping(exc)
    code, error_type = mapping if mapping is not None else (ErrorCode.INTERNAL_ERROR, ErrorType.INTERNAL)
    return asdict(
        error_response(
            redact_sensitive_data(exc.describe()),
            error_code=code,
            error_type=error_type,
            remediation=_REMEDIATIONS.get(exc.kind),
            request_id=request_id,
            details={
                "operation": exc.context,
                action_field: action,
                "error_kind": exc.kind,
            },
        )
    )


async def dispatch_with_standard_errors(
    router: ActionRouter,
    tool_name: str,
    action: Optional[str],
    /,
    *,
    action_field: str = "action",
    request_id: Optional[str] = None,
    **kwargs: Any,
) -> dict:
    """Dispatch *action* through *router*, converting exceptions to envelopes.

    Catches :class:`ActionRouterError` (unsupported action),
    :class:`AsanaError` (remote failure, prefixed with the failing
    operation) and generic ``Exception``, and returns a well-formed error
    response dict instead of raising.
    """
    rid = request_id or build_request_id(tool_name)

    if not router.has_action(action):
        return _unsupported_envelope(tool_name, action_field, action, router.allowed_actions(), rid)

    try:
        return await router.dispatch(action, **kwargs)
    except ActionRouterError as exc:
        return _unsupported_envelope(tool_name, action_field, action, exc.allowed_actions, rid)
    except AsanaError as exc:
        logger.warning(
            "%s %s '%s' failed: %s",
            tool_name,
            action_field,
            action,
            redact_sensitive_data(exc.describe()),
        )
        return asana_error_envelope(exc, action_field=action_field, action=str(action), request_id=rid)
    except Exception as exc:
        logger.exception(
            "%s %s '%s' failed with unexpected error: %s",
            tool_name,
            action_field,
            action,
            exc,
        )
        error_msg = str(exc) if str(exc) else exc.__class__.__name__
        return asdict(
            error_response(
                f"{tool_name} {action_field} '{action}' failed: {redact_sensitive_data(error_msg)}",
                error_code=ErrorCode.INTERNAL_ERROR,
                error_type=ErrorType.INTERNAL,
                remediation="Check server logs for details.",
                request_id=rid,
                details={action_field: action, "error_type": exc.__class__.__name__},
            )
        )


# ---------------------------------------------------------------------------
# 5. Validation error factory
# ---------------------------------------------------------------------------


def make_validation_error_fn(
    tool_name: str,
    *,
    default_code: ErrorCode = ErrorCode.VALIDATION_ERROR,
) -> Callable[..., dict]:
    """Return a validation-error builder pre-bound to *tool_name*.

    The returned callable has the signature::

        validation_error(
            *,
            field: str,
            action: str,
            message: str,
            request_id: str | None = None,
            code: ErrorCode = ErrorCode.VALIDATION_ERROR,
            remediation: str | None = None,
        ) -> dict

    ``message`` becomes the envelope's ``error`` text unchanged.
    """

    def _validation_error(
        *,
        field: str,
        action: str,
        message: str,
        request_id: Optional[str] = None,
        code: ErrorCode = default_code,
        remediation: Optional[str] = None,
    ) -> dict:
        effective_remediation = remediation or f"Provide a valid '{field}' value"
        rid = request_id or build_request_id(tool_name)
        return asdict(
            error_response(
                message,
                error_code=code,
                error_type=ErrorType.VALIDATION,
                remediation=effective_remediation,
                details={"field": field, "action": f"{tool_name}.{action}"},
                request_id=rid,
            )
        )

    return _validation_error


__all__ = [
    "WORKSPACE_REQUIRED_MESSAGE",
    "ToolContext",
    "asana_error_envelope",
    "asana_operation",
    "build_request_id",
    "compact",
    "data_body",
    "dispatch_with_standard_errors",
    "join_fields",
    "make_metric_name",
    "make_validation_error_fn",
    "resolve_workspace_gid",
    "success",
]
