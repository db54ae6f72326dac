"""Application configuration.

Configuration is an explicit :class:`AppConfig` object built once by
:func:`load_config` and passed to whatever needs it. Sources, lowest
precedence first: defaults, YAML file, environment variables, explicit
overrides.
"""

import logging
import os
from pathlib import Path
from typing import Any, Literal

import yaml
from pydantic import BaseModel, Field, ValidationError

from todo_mcp import __version__
from todo_mcp.exceptions import ConfigError

logger = logging.getLogger(__name__)

DEFAULT_CONFIG_DIR = Path.home() / ".todo-mcp"
DEFAULT_CONFIG_FILE = DEFAULT_CONFIG_DIR / "config.yaml"
DEFAULT_DATABASE_PATH = DEFAULT_CONFIG_DIR / "todo.db"

TransportName = Literal["stdio", "http", "openapi", "cli"]
LogLevelName = Literal["debug", "info", "warning", "error"]


class ServerConfig(BaseModel):
    """Identity and bind address for network transports."""

    name: str = "todo-mcp"
    version: str = __version__
    host: str = "localhost"
    port: int = Field(default=3000, ge=1, le=65535)


class DatabaseConfig(BaseModel):
    """Store settings."""

    path: str = str(DEFAULT_DATABASE_PATH)
    require_connection: bool = True


class TransportConfig(BaseModel):
    """Which transport `todo-mcp serve` starts by default."""

    transport: TransportName = "stdio"


class LogConfig(BaseModel):
    """Logging settings."""

    level: LogLevelName = "info"


class AppConfig(BaseModel):
    """Top-level configuration."""

    server: ServerConfig = Field(default_factory=ServerConfig)
    database: DatabaseConfig = Field(default_factory=DatabaseConfig)
    mcp: TransportConfig = Field(default_factory=TransportConfig)
    log: LogConfig = Field(default_factory=LogConfig)

    def to_dict(self) -> dict[str, Any]:
        """Convert to a plain dictionary for display."""
        return self.model_dump()


# Environment variable -> (section, key)
ENV_VARS: dict[str, tuple[str, str]] = {
    "PORT": ("server", "port"),
    "HOST": ("server", "host"),
    "DATABASE_PATH": ("database", "path"),
    "DB_REQUIRED": ("database", "require_connection"),
    "MCP_TRANSPORT": ("mcp", "transport"),
    "LOG_LEVEL": ("log", "level"),
}


def _merge(base: dict[str, Any], overrides: dict[str, Any]) -> dict[str, Any]:
    """Recursively merge overrides into a copy of base."""
    merged = dict(base)
    for key, value in overrides.items():
        if isinstance(value, dict):
            current = merged.get(key)
            merged[key] = _merge(current if isinstance(current, dict) else {}, value)
        elif value is not None:
            merged[key] = value
    return merged


def _read_config_file(path: Path) -> dict[str, Any]:
    """Read a YAML config file.

    Raises:
        ConfigError: If the file cannot be parsed or is not a mapping.
    """
    try:
        with open(path, encoding="utf-8") as f:
            data = yaml.safe_load(f) or {}
    except (OSError, yaml.YAMLError) as e:
        raise ConfigError(f"Could not read config file {path}: {e}") from e

    if not isinstance(data, dict):
        raise ConfigError(f"Config file {path} must contain a mapping")
    return data


def _env_overrides(environ: dict[str, str]) -> dict[str, Any]:
    """Collect overrides from environment variables."""
    result: dict[str, Any] = {}
    for var, (section, key) in ENV_VARS.items():
        value = environ.get(var)
        if value is None or value == "":
            continue
        if var == "DB_REQUIRED":
            result.setdefault(section, {})[key] = value.lower() != "false"
        elif var == "LOG_LEVEL":
            result.setdefault(section, {})[key] = value.lower()
        else:
            result.setdefault(section, {})[key] = value
    return result


def resolve_config_file(config_file: Path | None = None) -> Path | None:
    """Find the config file to load.

    Search order:
    1. Explicit path
    2. TODO_MCP_CONFIG environment variable
    3. ~/.todo-mcp/config.yaml, if it exists

    Returns:
        Path to the config file, or None if there is none.

    Raises:
        ConfigError: If an explicitly named file does not exist.
    """
    if config_file is not None:
        if not config_file.exists():
            raise ConfigError(f"Config file not found: {config_file}")
        return config_file

    env_path = os.environ.get("TODO_MCP_CONFIG")
    if env_path:
        path = Path(env_path).expanduser()
        if not path.exists():
            raise ConfigError(f"TODO_MCP_CONFIG is set but the file does not exist: {path}")
        return path

    if DEFAULT_CONFIG_FILE.exists():
        return DEFAULT_CONFIG_FILE
    return None


def load_config(
    config_file: Path | None = None,
    overrides: dict[str, Any] | None = None,
    environ: dict[str, str] | None = None,
) -> AppConfig:
    """Build the application configuration.

    Args:
        config_file: Optional YAML file. See resolve_config_file for discovery.
        overrides: Nested dictionary applied last, e.g. {"server": {"port": 8080}}.
        environ: Environment mapping. Defaults to os.environ.

    Returns:
        The validated configuration.

    Raises:
        ConfigError: If a source is unreadable or a value is invalid.
    """
    data: dict[str, Any] = {}

    path = resolve_config_file(config_file)
    if path is not None:
        logger.debug("Loading config from %s", path)
        data = _merge(data, _read_config_file(path))

    data = _merge(data, _env_overrides(dict(os.environ if environ is None else environ)))

    if overrides:
        data = _merge(data, overrides)

    try:
        return AppConfig.model_validate(data)
    except ValidationError as e:
        raise ConfigError(f"Invalid configuration: {e}") from e
