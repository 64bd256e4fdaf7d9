"""Configuration package for asana-mcp.

Sub-modules:
    parsing – boolean, number and list parsing helpers
    server  – ServerConfig dataclass, get_config/set_config globals
    loader  – ServerConfig loading/validation mixin (_ServerConfigLoader)
"""

from asana_mcp.config.loader import (  # noqa: F401
    DEFAULT_BASE_URL,
    DEFAULT_TIMEOUT,
    TOKEN_ENV_VARS,
)
from asana_mcp.config.server import (  # noqa: F401
    _PACKAGE_VERSION,
    ServerConfig,
    get_config,
    set_config,
)
