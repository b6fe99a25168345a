"""
Agent orchestration: the decision/observation protocol, the remote and
local reasoners, and the bounded run loop that ties them to the tools.
"""

from .protocol import (
    Decision,
    ReasonerMode,
    RunResult,
    TranscriptEntry,
    parse_decision,
    synthesize_answer,
)
from .reasoners import LocalReasoner, Reasoner, RemoteReasoner, create_reasoner
from .loop import AgentOrchestrator, RunState, clamp_budget, run_agent

__all__ = [
    "Decision",
    "ReasonerMode",
    "RunResult",
    "TranscriptEntry",
    "parse_decision",
    "synthesize_answer",
    "LocalReasoner",
    "Reasoner",
    "RemoteReasoner",
    "create_reasoner",
    "AgentOrchestrator",
    "RunState",
    "clamp_budget",
    "run_agent",
]
