"""
YAML configuration loader for the chat agent service.

Reads the same sections as the environment-based configuration from a YAML
file, with support for environment variable interpolation. Keys missing from
the file keep their environment defaults.

Example config.yaml::

    agent:
      openai_api_key: ${OPENAI_API_KEY}
      model: gpt-4o-mini
      default_max_steps: 3
    tools:
      chats_dir: /srv/chats
    server:
      port: ${PORT:-3000}
    logging:
      level: DEBUG
"""

import logging
import os
import re
from pathlib import Path
from typing import Any

import yaml

from .config import (
    AgentConfig,
    Config,
    LangfuseConfig,
    ServerConfig,
    ToolsConfig,
)

logger = logging.getLogger(__name__)

# Regex for environment variable interpolation: ${VAR} or ${VAR:-default}
ENV_VAR_PATTERN = re.compile(r"\$\{([^}:]+)(?::-([^}]*))?\}")


def resolve_env_vars(value: str) -> str:
    """
    Resolve environment variable references in a string.

    Supports ${VAR} and ${VAR:-default} syntax.

    Args:
        value: String potentially containing env var references

    Returns:
        String with env vars resolved
    """

    def replace_match(match: re.Match) -> str:
        var_name = match.group(1)
        default_value = match.group(2) if match.group(2) is not None else ""
        return os.environ.get(var_name, default_value)

    return ENV_VAR_PATTERN.sub(replace_match, value)


def _substitute_env_vars_recursive(data: Any) -> Any:
    """Recursively substitute environment variables in a data structure."""
    if isinstance(data, dict):
        return {k: _substitute_env_vars_recursive(v) for k, v in data.items()}
    elif isinstance(data, list):
        return [_substitute_env_vars_recursive(item) for item in data]
    elif isinstance(data, str):
        return resolve_env_vars(data)
    return data


def _as_bool(value: Any) -> bool:
    if isinstance(value, str):
        return value.lower() == "true"
    return bool(value)


def _parse_agent_config(data: dict) -> AgentConfig:
    """Parse agent configuration from dict."""
    defaults = AgentConfig()
    return AgentConfig(
        openai_api_key=data.get("openai_api_key", defaults.openai_api_key) or "",
        base_url=data.get("base_url", defaults.base_url),
        model=data.get("model", defaults.model),
        temperature=float(data.get("temperature", defaults.temperature)),
        request_timeout=float(data.get("request_timeout", defaults.request_timeout)),
        max_retries=int(data.get("max_retries", defaults.max_retries)),
        default_max_steps=int(data.get("default_max_steps", defaults.default_max_steps)),
        max_format_retries=int(data.get("max_format_retries", defaults.max_format_retries)),
        run_timeout=float(data.get("run_timeout", defaults.run_timeout)),
    )


def _parse_tools_config(data: dict) -> ToolsConfig:
    """Parse tools configuration from dict."""
    defaults = ToolsConfig()
    return ToolsConfig(chats_dir=str(data.get("chats_dir", defaults.chats_dir)))


def _parse_server_config(data: dict) -> ServerConfig:
    """Parse server configuration from dict."""
    defaults = ServerConfig()
    return ServerConfig(
        host=data.get("host", defaults.host),
        port=int(data.get("port", defaults.port)),
        workers=int(data.get("workers", defaults.workers)),
        reload=_as_bool(data.get("reload", defaults.reload)),
        public_dir=str(data.get("public_dir", defaults.public_dir)),
    )


def _parse_langfuse_config(data: dict) -> LangfuseConfig:
    """Parse Langfuse configuration from dict."""
    defaults = LangfuseConfig()
    return LangfuseConfig(
        public_key=data.get("public_key", defaults.public_key) or "",
        secret_key=data.get("secret_key", defaults.secret_key) or "",
        host=data.get("host", defaults.host) or "",
        debug=_as_bool(data.get("debug", defaults.debug)),
    )


def load_config(path: str) -> Config:
    """
    Load application configuration from a YAML file.

    Args:
        path: Path to the YAML configuration file.

    Returns:
        Config with every section populated

    Raises:
        FileNotFoundError: If the config file doesn't exist
        ValueError: If the config file is empty or not a mapping
    """
    config_path = Path(path)

    if not config_path.exists():
        raise FileNotFoundError(
            f"Configuration file not found at {config_path}. "
            "Unset CONFIG_PATH to configure from environment variables only."
        )

    logger.info(f"Loading configuration from {config_path}")

    with open(config_path, "r") as f:
        raw_config = yaml.safe_load(f)

    if raw_config is None:
        raise ValueError(f"Configuration file {config_path} is empty")
    if not isinstance(raw_config, dict):
        raise ValueError(f"Configuration file {config_path} must contain a mapping")

    raw_config = _substitute_env_vars_recursive(raw_config)

    logging_data = raw_config.get("logging") or {}
    return Config(
        agent=_parse_agent_config(raw_config.get("agent") or {}),
        tools=_parse_tools_config(raw_config.get("tools") or {}),
        server=_parse_server_config(raw_config.get("server") or {}),
        langfuse=_parse_langfuse_config(raw_config.get("langfuse") or {}),
        log_level=logging_data.get("level", Config().log_level),
    )
