"""
Tests for configuration.

Tests cover the environment-backed dataclasses and the YAML loader with
environment variable interpolation.
"""

import pytest

from chat_agent.config import AgentConfig, LangfuseConfig, ServerConfig
from chat_agent.config_loader import load_config, resolve_env_vars


class TestDataclasses:
    """Tests for the config dataclasses."""

    def test_remote_enabled_requires_key(self):
        """Remote reasoning needs a credential."""
        assert AgentConfig(openai_api_key="").remote_enabled is False
        assert AgentConfig(openai_api_key="sk-test").remote_enabled is True

    def test_langfuse_enabled_with_both_keys(self):
        """Tracing auto-enables only with both keys."""
        assert LangfuseConfig(public_key="pk", secret_key="sk").enabled is True
        assert LangfuseConfig(public_key="pk", secret_key="").enabled is False


class TestResolveEnvVars:
    """Tests for ${VAR} interpolation."""

    def test_set_variable(self, monkeypatch):
        """A set variable is substituted."""
        monkeypatch.setenv("CHAT_AGENT_TEST_DIR", "/srv/chats")
        assert resolve_env_vars("${CHAT_AGENT_TEST_DIR}/2024") == "/srv/chats/2024"

    def test_default_value(self, monkeypatch):
        """An unset variable falls back to its default."""
        monkeypatch.delenv("CHAT_AGENT_TEST_PORT", raising=False)
        assert resolve_env_vars("${CHAT_AGENT_TEST_PORT:-3000}") == "3000"

    def test_unset_without_default(self, monkeypatch):
        """An unset variable without default becomes empty."""
        monkeypatch.delenv("CHAT_AGENT_TEST_KEY", raising=False)
        assert resolve_env_vars("key=${CHAT_AGENT_TEST_KEY}") == "key="


class TestLoadConfig:
    """Tests for loading config.yaml."""

    def test_full_file(self, tmp_path, monkeypatch):
        """Every section is read and interpolated."""
        monkeypatch.setenv("CHAT_AGENT_TEST_KEY", "sk-from-env")
        monkeypatch.delenv("CHAT_AGENT_TEST_PORT", raising=False)
        path = tmp_path / "config.yaml"
        path.write_text(
            "agent:\n"
            "  openai_api_key: ${CHAT_AGENT_TEST_KEY}\n"
            "  model: gpt-4o\n"
            "  default_max_steps: 4\n"
            "  run_timeout: 60\n"
            "tools:\n"
            "  chats_dir: /srv/chats\n"
            "server:\n"
            "  port: ${CHAT_AGENT_TEST_PORT:-8080}\n"
            "  reload: 'true'\n"
            "langfuse:\n"
            "  public_key: pk\n"
            "  secret_key: sk\n"
            "logging:\n"
            "  level: DEBUG\n"
        )

        loaded = load_config(str(path))

        assert loaded.agent.openai_api_key == "sk-from-env"
        assert loaded.agent.remote_enabled is True
        assert loaded.agent.model == "gpt-4o"
        assert loaded.agent.default_max_steps == 4
        assert loaded.agent.run_timeout == 60.0
        assert loaded.tools.chats_dir == "/srv/chats"
        assert loaded.server.port == 8080
        assert loaded.server.reload is True
        assert loaded.langfuse.enabled is True
        assert loaded.log_level == "DEBUG"

    def test_missing_keys_keep_defaults(self, tmp_path):
        """Sections and keys absent from the file use the defaults."""
        path = tmp_path / "config.yaml"
        path.write_text("tools:\n  chats_dir: transcripts\n")

        loaded = load_config(str(path))

        assert loaded.tools.chats_dir == "transcripts"
        assert loaded.agent.max_format_retries == AgentConfig().max_format_retries
        assert loaded.server.public_dir == ServerConfig().public_dir

    def test_missing_file(self, tmp_path):
        """A missing file raises FileNotFoundError."""
        with pytest.raises(FileNotFoundError):
            load_config(str(tmp_path / "absent.yaml"))

    def test_empty_file(self, tmp_path):
        """An empty file is rejected."""
        path = tmp_path / "config.yaml"
        path.write_text("")
        with pytest.raises(ValueError):
            load_config(str(path))

    def test_non_mapping_file(self, tmp_path):
        """A top-level list is rejected."""
        path = tmp_path / "config.yaml"
        path.write_text("- agent\n- tools\n")
        with pytest.raises(ValueError):
            load_config(str(path))
