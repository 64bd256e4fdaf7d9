"""Unified error hierarchy for asana-mcp.

Exception classes live in domain modules within this package; this
__init__.py re-exports them for convenient access.

Usage:
    from asana_mcp.core.errors import NotFoundError, lookup_error_mapping
"""

# --- Asana client errors ---
from asana_mcp.core.errors.asana import (
    AsanaError,
    ConfigurationError,
    NotFoundError,
    ParseError,
    RemoteApiError,
    TransportError,
)

# --- Base / Registry ---
from asana_mcp.core.errors.base import (
    ERROR_MAPPINGS,
    lookup_error_mapping,
)

# --- Execution errors ---
from asana_mcp.core.errors.execution import ActionRouterError

__all__ = [
    "ERROR_MAPPINGS",
    "ActionRouterError",
    "AsanaError",
    "ConfigurationError",
    "NotFoundError",
    "ParseError",
    "RemoteApiError",
    "TransportError",
    "lookup_error_mapping",
]
