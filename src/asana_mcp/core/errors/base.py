"""Error-to-ErrorCode mapping registry.

Provides a centralized mapping from exception types to (ErrorCode, ErrorType)
tuples, so every tool builds the same envelope for the same failure.

Usage:
    from asana_mcp.core.errors.base import lookup_error_mapping

    mapping = lookup_error_mapping(exc)
    if mapping is not None:
        error_code, error_type = mapping
"""

from __future__ import annotations

from typing import Dict, Optional, Tuple, Type

from asana_mcp.core.errors.asana import (
    ConfigurationError,
    NotFoundError,
    ParseError,
    RemoteApiError,
    TransportError,
)
from asana_mcp.core.errors.execution import ActionRouterError
from asana_mcp.core.responses.types import (
    ErrorCode,
    ErrorType,
)

ERROR_MAPPINGS: Dict[Type[Exception], Tuple[ErrorCode, ErrorType]] = {
    # --- Asana client errors ---
    ConfigurationError: (ErrorCode.CONFIGURATION_ERROR, ErrorType.AUTHENTICATION),
    NotFoundError: (ErrorCode.NOT_FOUND, ErrorType.NOT_FOUND),
    RemoteApiError: (ErrorCode.REMOTE_API_ERROR, ErrorType.INTERNAL),
    TransportError: (ErrorCode.TRANSPORT_ERROR, ErrorType.UNAVAILABLE),
    ParseError: (ErrorCode.PARSE_ERROR, ErrorType.INTERNAL),
    # --- Execution errors ---
    ActionRouterError: (ErrorCode.VALIDATION_ERROR, ErrorType.VALIDATION),
}


def lookup_error_mapping(exc: Exception) -> Optional[Tuple[ErrorCode, ErrorType]]:
    """Return the registered (ErrorCode, ErrorType) for *exc*'s exact type."""
    return ERROR_MAPPINGS.get(type(exc))

