"""
Reasoners: the pluggable source of each step's Decision.

RemoteReasoner asks a chat completion endpoint and keeps the run's message
history. LocalReasoner is a deterministic heuristic that never fails. Both
are created per run, so no reasoning state is shared between runs.
"""

import json
import logging
import re
from abc import ABC, abstractmethod
from typing import Optional

from ..llm_call import LLMClient
from ..tools import FINAL_TOOL, ToolRegistry
from .protocol import Decision, Observation, ReasonerMode, TranscriptEntry, parse_decision

logger = logging.getLogger(__name__)

SYSTEM_PROMPT = "Reply ONLY with a single JSON object in the protocol format."

PROTOCOL_HINT = 'Reply format: {"tool":"...","input":"...","notes":""}'

CORRECTION_PROMPT = (
    "Your reply was not a valid decision. Return strictly one JSON object: "
    + PROTOCOL_HINT
)

LOCAL_FINAL_ANSWER = "Done. See the results above."

# Goal ends in a run of digits, operators, parentheses and whitespace.
MATH_LIKE = re.compile(r"[0-9][0-9+\-*/().\s]+$")


class Reasoner(ABC):
    """Decides the next action for a run."""

    mode: ReasonerMode

    @abstractmethod
    def decide(
        self,
        goal: str,
        step_index: int,
        transcript: list[TranscriptEntry],
        timeout: Optional[float] = None,
    ) -> Decision:
        """Return the next Decision for ``goal`` at ``step_index`` (1-based)."""

    def observe(self, decision: Decision, observation: Observation) -> None:
        """Record a dispatched step's outcome."""

    def request_correction(self, reply: Optional[str]) -> None:
        """Ask for a well-formed reply on the next call."""


class LocalReasoner(Reasoner):
    """
    Deterministic heuristic with no external calls.

    Step 1 calculates when the goal looks like arithmetic and searches the
    chats otherwise; every later step finishes.
    """

    mode = ReasonerMode.LOCAL

    def decide(
        self,
        goal: str,
        step_index: int,
        transcript: list[TranscriptEntry],
        timeout: Optional[float] = None,
    ) -> Decision:
        if step_index > 1:
            return Decision(tool=FINAL_TOOL, input=LOCAL_FINAL_ANSWER)
        if MATH_LIKE.search(goal):
            return Decision(tool="calculate", input=goal, notes="local: looks like math")
        return Decision(tool="searchChats", input=goal, notes="local: searching chats")


class RemoteReasoner(Reasoner):
    """
    Asks the remote completion endpoint for each decision.

    Messages start with the protocol instruction and the goal with the tool
    list; every dispatched step appends the decision and its observation.
    """

    mode = ReasonerMode.REMOTE

    def __init__(self, llm_client: LLMClient, goal: str):
        self.llm_client = llm_client
        self.messages: list[dict] = [
            {"role": "system", "content": SYSTEM_PROMPT},
            {"role": "user", "content": build_goal_prompt(goal)},
        ]

    def decide(
        self,
        goal: str,
        step_index: int,
        transcript: list[TranscriptEntry],
        timeout: Optional[float] = None,
    ) -> Decision:
        """
        Raises:
            ReasonerTransportError: The endpoint could not be reached.
            ReasonerFormatError: The reply is not a valid decision.
        """
        logger.debug("Step %d: asking remote reasoner", step_index)
        content = self.llm_client.complete(self.messages, timeout=timeout)
        return parse_decision(content)

    def observe(self, decision: Decision, observation: Observation) -> None:
        self.messages.append(
            {"role": "assistant", "content": json.dumps(decision.to_dict())}
        )
        self.messages.append({
            "role": "user",
            "content": (
                f"Observation: {json.dumps(observation)}. "
                "Pick the next tool if needed, otherwise reply "
                f'{{"tool":"{FINAL_TOOL}","input":"<answer>","notes":""}}'
            ),
        })

    def request_correction(self, reply: Optional[str]) -> None:
        if reply:
            self.messages.append({"role": "assistant", "content": reply})
        self.messages.append({"role": "user", "content": CORRECTION_PROMPT})


def build_goal_prompt(goal: str) -> str:
    """Build the opening user message: goal, tools and reply format."""
    return "\n".join([
        f"Goal: {goal}",
        "Tools:",
        ToolRegistry.get_tools_summary(),
        PROTOCOL_HINT,
    ])


def create_reasoner(
    mode: ReasonerMode,
    goal: str,
    llm_client: Optional[LLMClient] = None,
) -> Reasoner:
    """Build the reasoner for ``mode``; remote mode requires an LLM client."""
    if mode is ReasonerMode.REMOTE:
        if llm_client is None:
            raise ValueError("Remote reasoning requires an LLM client")
        return RemoteReasoner(llm_client, goal)
    return LocalReasoner()
