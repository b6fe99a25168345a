"""
LLM Call Interface for the chat agent.

Thin wrapper around the OpenAI SDK for the remote reasoner's chat
completion endpoint. Every failure to obtain a completion is reported as
a ReasonerTransportError so the orchestrator can fall back to local mode.
"""

import logging
from typing import Optional

from openai import OpenAI, OpenAIError

from .config import AgentConfig, config
from .errors import ReasonerTransportError

logger = logging.getLogger(__name__)


class LLMClient:
    """Chat completion client for the remote reasoner."""

    def __init__(self, agent_config: Optional[AgentConfig] = None):
        self.agent_config = agent_config or config.agent
        self.model = self.agent_config.model
        self.base_url = self.agent_config.base_url
        self._client = OpenAI(
            api_key=self.agent_config.openai_api_key,
            base_url=self.base_url,
            timeout=self.agent_config.request_timeout,
            max_retries=self.agent_config.max_retries,
        )

    def complete(
        self,
        messages: list[dict],
        timeout: Optional[float] = None,
    ) -> str:
        """Call the completion endpoint and return the reply text.

        Args:
            messages: List of chat messages
            timeout: Seconds to wait for this call; defaults to the client timeout

        Raises:
            ReasonerTransportError: On network, timeout or HTTP status errors,
                or when the reply carries no content.
        """
        create_kwargs: dict = {
            "model": self.model,
            "messages": messages,
            "temperature": self.agent_config.temperature,
        }
        if timeout is not None:
            create_kwargs["timeout"] = timeout

        try:
            response = self._client.chat.completions.create(**create_kwargs)
        except OpenAIError as e:
            logger.error(f"Completion call to {self.base_url} failed: {e}")
            raise ReasonerTransportError(str(e)) from e

        content = response.choices[0].message.content if response.choices else None
        if not content:
            raise ReasonerTransportError("Completion returned no content")
        return content

    def close(self) -> None:
        """Close the underlying OpenAI client."""
        try:
            self._client.close()
        except Exception as e:
            logger.debug("Error closing OpenAI client: %s", e)
