"""Unit tests for configuration loading."""

from pathlib import Path

import pytest

from todo_mcp import __version__
from todo_mcp.config import AppConfig, load_config, resolve_config_file
from todo_mcp.exceptions import ConfigError


class TestDefaults:
    """Tests for default values."""

    def test_defaults(self) -> None:
        """With no file and no environment, defaults apply."""
        config = load_config(environ={})

        assert config.server.name == "todo-mcp"
        assert config.server.version == __version__
        assert config.server.host == "localhost"
        assert config.server.port == 3000
        assert config.database.path.endswith("todo.db")
        assert config.database.require_connection is True
        assert config.mcp.transport == "stdio"
        assert config.log.level == "info"

    def test_to_dict(self) -> None:
        """to_dict should expose every section."""
        data = AppConfig().to_dict()
        assert set(data) == {"server", "database", "mcp", "log"}


class TestSources:
    """Tests for layering of file, environment and overrides."""

    def test_yaml_file(self, tmp_path: Path) -> None:
        """Values from a YAML file should be applied."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("server:\n  port: 8080\nmcp:\n  transport: http\n")

        config = load_config(config_file, environ={})

        assert config.server.port == 8080
        assert config.server.host == "localhost"
        assert config.mcp.transport == "http"

    def test_environment(self) -> None:
        """Environment variables should override defaults."""
        config = load_config(
            environ={
                "PORT": "4000",
                "HOST": "0.0.0.0",
                "DATABASE_PATH": ":memory:",
                "DB_REQUIRED": "false",
                "MCP_TRANSPORT": "openapi",
                "LOG_LEVEL": "DEBUG",
            }
        )

        assert config.server.port == 4000
        assert config.server.host == "0.0.0.0"
        assert config.database.path == ":memory:"
        assert config.database.require_connection is False
        assert config.mcp.transport == "openapi"
        assert config.log.level == "debug"

    def test_environment_beats_file(self, tmp_path: Path) -> None:
        """Environment should take precedence over the file."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("server:\n  port: 8080\n")

        config = load_config(config_file, environ={"PORT": "9090"})

        assert config.server.port == 9090

    def test_overrides_win(self) -> None:
        """Explicit overrides should beat the environment; None values are skipped."""
        config = load_config(
            overrides={"server": {"port": 5000, "host": None}},
            environ={"PORT": "4000", "HOST": "example.org"},
        )

        assert config.server.port == 5000
        assert config.server.host == "example.org"

    def test_env_var_config_file(self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch) -> None:
        """TODO_MCP_CONFIG should point at the config file."""
        config_file = tmp_path / "custom.yaml"
        config_file.write_text("log:\n  level: warning\n")
        monkeypatch.setenv("TODO_MCP_CONFIG", str(config_file))

        assert resolve_config_file() == config_file
        assert load_config(environ={}).log.level == "warning"

    def test_no_config_file(self) -> None:
        """Without an explicit or default file, nothing is loaded."""
        assert resolve_config_file() is None


class TestErrors:
    """Tests for invalid configuration."""

    def test_invalid_port(self) -> None:
        """Out-of-range ports should raise ConfigError."""
        with pytest.raises(ConfigError, match="Invalid configuration"):
            load_config(environ={"PORT": "70000"})

    def test_invalid_transport(self) -> None:
        """Unknown transports should raise ConfigError."""
        with pytest.raises(ConfigError):
            load_config(environ={"MCP_TRANSPORT": "carrier-pigeon"})

    def test_missing_explicit_file(self, tmp_path: Path) -> None:
        """A named file that does not exist should raise ConfigError."""
        with pytest.raises(ConfigError, match="not found"):
            load_config(tmp_path / "missing.yaml", environ={})

    def test_malformed_yaml(self, tmp_path: Path) -> None:
        """Unparseable YAML should raise ConfigError."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("server: [unclosed\n")

        with pytest.raises(ConfigError, match="Could not read config file"):
            load_config(config_file, environ={})

    def test_non_mapping_yaml(self, tmp_path: Path) -> None:
        """A YAML file holding a list should raise ConfigError."""
        config_file = tmp_path / "config.yaml"
        config_file.write_text("- one\n- two\n")

        with pytest.raises(ConfigError, match="must contain a mapping"):
            load_config(config_file, environ={})
