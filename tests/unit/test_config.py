"""
Unit tests for configuration.
"""

import pytest

from netlib import ServerConfig, BACKLOG, BUFFER_SIZE


class TestServerConfig:
    """Tests for ServerConfig."""

    def test_constants(self):
        """Test the fixed protocol constants."""
        assert BACKLOG == 30
        assert BUFFER_SIZE == 8096

    def test_defaults(self):
        """Test default values validate."""
        config = ServerConfig()

        assert config.host == "127.0.0.1"
        assert config.port == 12345
        assert config.serve_forever is False
        config.validate()

    @pytest.mark.parametrize("kwargs", [
        {"port": -1},
        {"port": 65536},
        {"host": ""},
        {"log_level": "LOUD"},
    ])
    def test_validate_rejects(self, kwargs):
        """Test fail-fast validation."""
        with pytest.raises(ValueError):
            ServerConfig(**kwargs).validate()

    def test_from_env(self, monkeypatch):
        """Test reading NETLIB_* variables."""
        monkeypatch.setenv("NETLIB_HOST", "0.0.0.0")
        monkeypatch.setenv("NETLIB_PORT", "9000")
        monkeypatch.setenv("NETLIB_LOG_LEVEL", "DEBUG")
        monkeypatch.setenv("NETLIB_SERVE_FOREVER", "true")

        config = ServerConfig.from_env()

        assert config.host == "0.0.0.0"
        assert config.port == 9000
        assert config.log_level == "DEBUG"
        assert config.serve_forever is True

    def test_from_env_defaults(self, monkeypatch):
        """Test from_env without any variables set."""
        for name in ("NETLIB_HOST", "NETLIB_PORT", "NETLIB_LOG_LEVEL", "NETLIB_SERVE_FOREVER"):
            monkeypatch.delenv(name, raising=False)

        assert ServerConfig.from_env() == ServerConfig()
