"""
Unit tests for ServerConfig.
"""

import pytest

from cihttp.config import ServerConfig


class TestDefaults:

    def test_classic_defaults(self):
        """Test that the defaults are the classic fixed constants."""
        config = ServerConfig()

        assert config.host == ""
        assert config.port == 8080
        assert config.content_root == "www"
        assert config.fallback_file == "404.html"
        assert config.server_name == "cihttp"
        assert config.timeout is None

    def test_redesigned_behavior_defaults(self):
        config = ServerConfig()

        assert config.concurrent is True
        assert config.fail_fast is False
        assert config.shutdown_timeout == 5.0


class TestFromEnv:

    def test_reads_environment(self, monkeypatch):
        monkeypatch.setenv("CIHTTP_HOST", "127.0.0.1")
        monkeypatch.setenv("CIHTTP_PORT", "3000")
        monkeypatch.setenv("CIHTTP_ROOT", "public")
        monkeypatch.setenv("CIHTTP_TIMEOUT", "2.5")
        monkeypatch.setenv("CIHTTP_LOG_LEVEL", "DEBUG")

        config = ServerConfig.from_env()

        assert config.host == "127.0.0.1"
        assert config.port == 3000
        assert config.content_root == "public"
        assert config.timeout == 2.5
        assert config.log_level == "DEBUG"

    def test_empty_environment_gives_defaults(self, monkeypatch):
        for name in ("CIHTTP_HOST", "CIHTTP_PORT", "CIHTTP_ROOT",
                     "CIHTTP_TIMEOUT", "CIHTTP_LOG_LEVEL"):
            monkeypatch.delenv(name, raising=False)

        assert ServerConfig.from_env() == ServerConfig()

    def test_invalid_port_value(self, monkeypatch):
        monkeypatch.setenv("CIHTTP_PORT", "eighty")

        with pytest.raises(ValueError):
            ServerConfig.from_env()


class TestValidate:

    def test_defaults_are_valid(self):
        ServerConfig().validate()

    def test_port_zero_allowed(self):
        ServerConfig(port=0).validate()

    @pytest.mark.parametrize("overrides", [
        {"port": -1},
        {"port": 65536},
        {"backlog": 0},
        {"buffer_size": 0},
        {"timeout": 0},
        {"timeout": -1.0},
        {"header_timeout": 0},
        {"shutdown_timeout": -1.0},
        {"max_request_line": 4},
        {"max_header_bytes": -1},
        {"content_root": ""},
    ])
    def test_invalid_values(self, overrides):
        with pytest.raises(ValueError):
            ServerConfig(**overrides).validate()
