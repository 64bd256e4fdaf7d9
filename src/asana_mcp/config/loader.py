"""ServerConfig loading and validation logic.

Provides ``_ServerConfigLoader``, a mixin class whose methods are inherited by
``ServerConfig`` (defined in ``server.py``).  Splitting loading/validation
logic into its own module keeps ``server.py`` focused on field definitions and
simple accessor methods.
"""

from __future__ import annotations

import logging
import os
from pathlib import Path
from typing import TYPE_CHECKING, Any, Dict, List, Optional, cast

if TYPE_CHECKING:
    from asana_mcp.config.server import ServerConfig

try:
    import tomllib
except ImportError:
    import tomli as tomllib  # Python < 3.11 fallback

from asana_mcp.config.parsing import (
    _normalize_log_level,
    _parse_bool,
    _parse_csv,
    _parse_float,
)

logger = logging.getLogger(__name__)

DEFAULT_BASE_URL = "https://app.asana.com/api/1.0"
DEFAULT_TIMEOUT = 30.0

TOKEN_ENV_VARS = ("ASANA_TOKEN", "ASANA_ACCESS_TOKEN")


class _ServerConfigLoader:
    """Mixin providing config-loading methods for ``ServerConfig``.

    These methods are inherited by the ``ServerConfig`` dataclass defined in
    ``server.py``.  At runtime ``self`` is always a ``ServerConfig`` instance.
    """

    if TYPE_CHECKING:

        def __init_subclass__(cls, **kwargs: Any) -> None: ...

        asana_token: Optional[str]
        base_url: str
        default_workspace_gid: Optional[str]
        request_timeout: float
        log_level: str
        structured_logging: bool
        server_name: str
        server_version: str
        disabled_tools: List[str]
        startup_warnings: List[str]

        def _add_startup_warning(self, message: str) -> None: ...

    @classmethod
    def from_env(cls, config_file: Optional[str] = None) -> "ServerConfig":
        """
        Create configuration from environment variables and optional TOML file.

        Priority (highest to lowest):
        1. Environment variables
        2. Project TOML config (./asana-mcp.toml or ./.asana-mcp.toml)
        3. User TOML config (~/.asana-mcp.toml)
        4. XDG config (~/.config/asana-mcp/config.toml)
        5. Default values
        """
        config = cls()

        toml_path = config_file or os.environ.get("ASANA_MCP_CONFIG_FILE")
        if toml_path:
            config._load_toml(Path(toml_path))
        else:
            # Layered config loading (lowest to highest priority)
            xdg_config_home = os.environ.get("XDG_CONFIG_HOME", Path.home() / ".config")
            xdg_config = Path(xdg_config_home) / "asana-mcp" / "config.toml"
            if xdg_config.exists():
                config._load_toml(xdg_config)
                logger.debug(f"Loaded XDG config from {xdg_config}")

            home_config = Path.home() / ".asana-mcp.toml"
            if home_config.exists():
                config._load_toml(home_config)
                logger.debug(f"Loaded user config from {home_config}")

            project_config = Path("asana-mcp.toml")
            if project_config.exists():
                config._load_toml(project_config)
                logger.debug(f"Loaded project config from {project_config}")
            else:
                hidden_config = Path(".asana-mcp.toml")
                if hidden_config.exists():
                    config._load_toml(hidden_config)
                    logger.debug(f"Loaded project config from {hidden_config}")

        # Override with environment variables
        config._load_env()
        config._validate_startup_configuration()

        return cast("ServerConfig", config)

    def _load_toml(self, path: Path) -> None:
        """Load configuration from TOML file."""
        if not path.exists():
            logger.warning(f"Config file not found: {path}")
            return

        try:
            with open(path, "rb") as f:
                data = tomllib.load(f)
        except (OSError, tomllib.TOMLDecodeError) as e:
            logger.error(f"Error loading config file {path}: {e}")
            self._add_startup_warning(f"Ignored unreadable config file {path}: {e}")
            return

        if "asana" in data:
            self._apply_asana_table(data["asana"], source=str(path))

        # Logging settings
        if "logging" in data:
            log = data["logging"]
            if "level" in log:
                self.log_level = _normalize_log_level(str(log["level"]))
            if "structured" in log:
                self.structured_logging = _parse_bool(log["structured"])

        # Server settings
        if "server" in data:
            srv = data["server"]
            if "name" in srv:
                self.server_name = srv["name"]
            if "version" in srv:
                self.server_version = srv["version"]

        # Tools configuration
        if "tools" in data:
            tools_cfg = data["tools"]
            if "disabled_tools" in tools_cfg:
                self.disabled_tools = list(tools_cfg["disabled_tools"])

    def _apply_asana_table(self, table: Dict[str, Any], *, source: str) -> None:
        if "token" in table:
            self._add_startup_warning(
                f"Ignoring [asana].token in {source}: set ASANA_TOKEN in the environment instead"
            )
        if "base_url" in table:
            self.base_url = str(table["base_url"]).rstrip("/")
        if "default_workspace" in table:
            self.default_workspace_gid = str(table["default_workspace"]) or None
        if "timeout" in table:
            timeout = _parse_float(table["timeout"])
            if timeout is None:
                self._add_startup_warning(f"Ignoring invalid [asana].timeout in {source}: {table['timeout']!r}")
            else:
                self.request_timeout = timeout

    def _load_env(self) -> None:
        """Load configuration from environment variables."""
        # API token: ASANA_TOKEN wins over ASANA_ACCESS_TOKEN
        for var in TOKEN_ENV_VARS:
            if token := os.environ.get(var):
                self.asana_token = token
                break

        if workspace := os.environ.get("ASANA_DEFAULT_WORKSPACE"):
            self.default_workspace_gid = workspace

        if base_url := os.environ.get("ASANA_BASE_URL"):
            self.base_url = base_url.rstrip("/")

        if timeout_raw := os.environ.get("ASANA_MCP_TIMEOUT"):
            timeout = _parse_float(timeout_raw)
            if timeout is None:
                self._add_startup_warning(f"Ignoring invalid ASANA_MCP_TIMEOUT: {timeout_raw!r}")
            else:
                self.request_timeout = timeout

        # Log level
        if level := os.environ.get("ASANA_MCP_LOG_LEVEL"):
            self.log_level = _normalize_log_level(level)

        if structured := os.environ.get("ASANA_MCP_STRUCTURED_LOGGING"):
            self.structured_logging = _parse_bool(structured)

        if disabled := os.environ.get("ASANA_MCP_DISABLED_TOOLS"):
            self.disabled_tools = _parse_csv(disabled)

    def _validate_startup_configuration(self) -> None:
        """Record non-fatal startup problems as warnings.

        A missing token is not checked here; ``require_token`` raises at
        server construction so ``schema`` and other offline commands work
        without credentials.
        """
        if not self.base_url.startswith(("https://", "http://")):
            self._add_startup_warning(f"base_url does not look like an HTTP address: {self.base_url}")
        elif self.base_url.startswith("http://"):
            self._add_startup_warning("base_url uses plain HTTP; the API token will be sent unencrypted")
