"""
Chat Agent - transcript search and a bounded tool-using agent.

This package provides:
- Substring search over a directory of plain-text chat transcripts
- A step-limited agent loop with a remote LLM reasoner and a local fallback
- Tools for chat search and arithmetic
- A FastAPI service and an interactive CLI
"""

from .orchestration import AgentOrchestrator, RunResult, run_agent
from .llm_call import LLMClient

__all__ = [
    "AgentOrchestrator",
    "RunResult",
    "LLMClient",
    "run_agent",
]

__version__ = "0.1.0"
