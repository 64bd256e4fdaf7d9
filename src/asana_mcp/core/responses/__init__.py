"""
Standard response contracts for MCP tool operations.

Callers can use ``from asana_mcp.core.responses import success_response``
or import from the sub-modules directly.

Sub-modules:
    types     - ErrorCode, ErrorType, ToolResponse, _build_meta
    builders  - success_response, error_response
"""

from asana_mcp.core.responses.types import (  # noqa: F401
    ErrorCode,
    ErrorType,
    ToolResponse,
    _build_meta,
)
from asana_mcp.core.responses.builders import (  # noqa: F401
    error_response,
    success_response,
)
