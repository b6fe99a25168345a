"""
Pytest configuration and fixtures for the chat agent tests.
"""

import json
from dataclasses import replace
from unittest.mock import MagicMock

import pytest

from chat_agent.config import AgentConfig, ToolsConfig, config
from chat_agent.tools import ToolRegistry


@pytest.fixture(autouse=True)
def local_only_config(monkeypatch):
    """Never reach a real completion endpoint, whatever the environment holds."""
    monkeypatch.setattr(
        config, "agent", replace(config.agent, openai_api_key="", run_timeout=0)
    )


@pytest.fixture
def chats_dir(tmp_path, monkeypatch):
    """A chats directory holding a.txt with a single 'hello world' line."""
    directory = tmp_path / "chats"
    directory.mkdir()
    (directory / "a.txt").write_text("hello world\n")
    monkeypatch.setattr(config, "tools", ToolsConfig(chats_dir=str(directory)))
    return directory


@pytest.fixture
def missing_chats_dir(tmp_path, monkeypatch):
    """Point CHATS_DIR at a directory that does not exist."""
    directory = tmp_path / "no-such-dir"
    monkeypatch.setattr(config, "tools", ToolsConfig(chats_dir=str(directory)))
    return directory


@pytest.fixture
def remote_config():
    """Agent settings with a credential, so runs start in remote mode."""
    return AgentConfig(
        openai_api_key="test-key",
        default_max_steps=3,
        max_format_retries=2,
        run_timeout=0,
    )


@pytest.fixture
def mock_llm_client():
    """An LLMClient stand-in whose replies are set per test via complete.side_effect."""
    client = MagicMock()
    client.complete.return_value = json.dumps({"tool": "final", "input": "Done.", "notes": ""})
    return client


@pytest.fixture
def restore_registry():
    """Undo any registrations a test makes."""
    saved = ToolRegistry.all_tools()
    yield
    ToolRegistry.clear()
    ToolRegistry._tools.update(saved)
