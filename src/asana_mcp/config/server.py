"""ServerConfig dataclass and global configuration state.

This module defines the ``ServerConfig`` class (field declarations and simple
accessor methods) and the global ``get_config`` / ``set_config`` helpers.
Loading and validation logic lives in the ``_ServerConfigLoader`` mixin
(``loader.py``) which ``ServerConfig`` inherits from.
"""

import logging
import sys
from dataclasses import dataclass, field
from importlib.metadata import PackageNotFoundError
from importlib.metadata import version as get_package_version
from typing import List, Optional

from asana_mcp.config.loader import DEFAULT_BASE_URL, DEFAULT_TIMEOUT, _ServerConfigLoader
from asana_mcp.core.errors.asana import ConfigurationError


def _get_version() -> str:
    """Get package version from metadata (single source of truth: pyproject.toml)."""
    try:
        return get_package_version("asana-mcp")
    except PackageNotFoundError:
        return "0.1.0"  # Fallback for dev without install


_PACKAGE_VERSION = _get_version()


@dataclass
class ServerConfig(_ServerConfigLoader):
    """Server configuration with support for env vars and TOML overrides."""

    # Asana connection
    asana_token: Optional[str] = field(default=None, repr=False)
    base_url: str = DEFAULT_BASE_URL
    default_workspace_gid: Optional[str] = None
    request_timeout: float = DEFAULT_TIMEOUT

    # Logging configuration
    log_level: str = "INFO"
    structured_logging: bool = True

    # Server configuration
    server_name: str = "asanamcp"
    server_version: str = field(default_factory=lambda: _PACKAGE_VERSION)

    # Tool registration control
    disabled_tools: List[str] = field(default_factory=list)

    startup_warnings: List[str] = field(default_factory=list, repr=False)

    def _add_startup_warning(self, message: str) -> None:
        if message and message not in self.startup_warnings:
            self.startup_warnings.append(message)

    def require_token(self) -> str:
        """Return the API token, or raise if it cannot be used.

        Raises:
            ConfigurationError: When the token is missing, empty, or contains
                characters that cannot appear in an Authorization header.
        """
        token = self.asana_token
        if not token:
            raise ConfigurationError.missing_token()
        if not token.isprintable() or any(ch.isspace() for ch in token):
            raise ConfigurationError.invalid_token()
        return token

    def is_tool_enabled(self, tool_name: str) -> bool:
        return tool_name not in self.disabled_tools

    def setup_logging(self) -> None:
        """Configure logging based on settings.

        Logs go to stderr; stdout carries the stdio MCP transport.
        """
        level = getattr(logging, self.log_level, logging.INFO)

        if self.structured_logging:
            # JSON-style structured logging
            formatter = logging.Formatter(
                '{"timestamp":"%(asctime)s","level":"%(levelname)s","logger":"%(name)s","message":"%(message)s"}'
            )
        else:
            formatter = logging.Formatter("%(asctime)s - %(name)s - %(levelname)s - %(message)s")

        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(formatter)

        root_logger = logging.getLogger("asana_mcp")
        root_logger.setLevel(level)
        root_logger.addHandler(handler)


# Global configuration instance
_config: Optional[ServerConfig] = None


def get_config() -> ServerConfig:
    """Get the global configuration instance."""
    global _config
    if _config is None:
        _config = ServerConfig.from_env()
    return _config


def set_config(config: ServerConfig) -> None:
    """Set the global configuration instance."""
    global _config
    _config = config
