"""
Configuration management for the chat agent service.

Loads all configuration from environment variables with sensible defaults
for local development. When CONFIG_PATH points at a YAML file, the same
sections are read from that file instead (see config_loader).
"""

import os
from dataclasses import dataclass, field

from dotenv import load_dotenv

load_dotenv()


@dataclass
class AgentConfig:
    """Configuration for the agent loop and the remote reasoner."""
    openai_api_key: str = os.getenv("OPENAI_API_KEY", "")
    base_url: str = os.getenv("OPENAI_BASE_URL", "https://api.openai.com/v1")
    model: str = os.getenv("OPENAI_MODEL", "gpt-4o-mini")
    temperature: float = float(os.getenv("OPENAI_TEMPERATURE", "0.2"))
    request_timeout: float = float(os.getenv("OPENAI_TIMEOUT", "30"))
    max_retries: int = int(os.getenv("OPENAI_MAX_RETRIES", "0"))
    default_max_steps: int = int(os.getenv("AGENT_DEFAULT_MAX_STEPS", "3"))
    max_format_retries: int = int(os.getenv("AGENT_MAX_FORMAT_RETRIES", "2"))
    run_timeout: float = float(os.getenv("AGENT_RUN_TIMEOUT", "120"))

    @property
    def remote_enabled(self) -> bool:
        """Remote reasoning is only attempted when a credential is configured."""
        return bool(self.openai_api_key)


@dataclass
class ToolsConfig:
    """Configuration for the agent tools."""
    chats_dir: str = os.getenv("CHATS_DIR", "chats")


@dataclass
class ServerConfig:
    """Configuration for the FastAPI server."""
    host: str = os.getenv("SERVER_HOST", "0.0.0.0")
    port: int = int(os.getenv("PORT", "3000"))
    workers: int = int(os.getenv("SERVER_WORKERS", "1"))
    reload: bool = os.getenv("SERVER_RELOAD", "false").lower() == "true"
    public_dir: str = os.getenv("PUBLIC_DIR", "public")


@dataclass
class LangfuseConfig:
    """Configuration for Langfuse observability.

    Tracing auto-enables when both public_key and secret_key are provided.
    """
    public_key: str = os.getenv("LANGFUSE_PUBLIC_KEY", "")
    secret_key: str = os.getenv("LANGFUSE_SECRET_KEY", "")
    host: str = os.getenv("LANGFUSE_HOST", "")
    debug: bool = os.getenv("LANGFUSE_DEBUG", "false").lower() == "true"

    @property
    def enabled(self) -> bool:
        """Auto-enable when both keys are configured."""
        return bool(self.public_key and self.secret_key)


@dataclass
class Config:
    """Main configuration container."""
    agent: AgentConfig = field(default_factory=AgentConfig)
    tools: ToolsConfig = field(default_factory=ToolsConfig)
    server: ServerConfig = field(default_factory=ServerConfig)
    langfuse: LangfuseConfig = field(default_factory=LangfuseConfig)
    log_level: str = os.getenv("LOG_LEVEL", "INFO")


def get_config() -> Config:
    """Get the application configuration."""
    config_path = os.getenv("CONFIG_PATH", "")
    if config_path:
        from .config_loader import load_config

        return load_config(config_path)
    return Config()


# Global config instance
config = get_config()
