"""
Decision/observation protocol shared by the reasoners and the orchestrator.

A reasoner answers each step with a Decision naming one tool. Dispatching
that tool yields an Observation, a plain dict in one of three shapes:

    {"matches": [...]}              search results
    {"result": "..."}               calculation result
    {"error": "...", "detail": ...} any tool failure (detail optional)

Replies from the remote reasoner are untrusted and go through
``parse_decision`` before they become a Decision.
"""

import json
import re
from dataclasses import dataclass, field
from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, ValidationError, field_validator

from ..tools.final import FINAL_TOOL
from ..errors import ReasonerFormatError

DEFAULT_ANSWER = "Done."

Observation = dict[str, Any]

_CODE_FENCE = re.compile(r"^```(?:json)?\s*(.*?)\s*```$", re.DOTALL)


class ReasonerMode(str, Enum):
    """Which reasoner variant is driving the run."""

    REMOTE = "openai"
    LOCAL = "local"


@dataclass(frozen=True)
class Decision:
    """The reasoner's chosen next action."""

    tool: str
    input: str = ""
    notes: str = ""

    @property
    def tool_name(self) -> str:
        """Tool name normalized for case-insensitive lookup."""
        return self.tool.strip().lower()

    @property
    def is_final(self) -> bool:
        return self.tool_name == FINAL_TOOL

    def to_dict(self) -> dict:
        return {"tool": self.tool, "input": self.input, "notes": self.notes}


@dataclass(frozen=True)
class TranscriptEntry:
    """One dispatched step. The terminal ``final`` entry has no observation."""

    step: int
    decision: Decision
    observation: Optional[Observation] = None

    def to_dict(self) -> dict:
        entry: dict = {"step": self.step, "decision": self.decision.to_dict()}
        if self.observation is not None:
            entry["observation"] = dict(self.observation)
        return entry


@dataclass(frozen=True)
class RunResult:
    """Outcome of one agent run."""

    goal: str
    answer: str
    mode: ReasonerMode
    transcript: tuple[TranscriptEntry, ...] = field(default_factory=tuple)

    @property
    def steps(self) -> int:
        return len(self.transcript)

    def to_dict(self) -> dict:
        return {
            "goal": self.goal,
            "steps": self.steps,
            "transcript": [entry.to_dict() for entry in self.transcript],
            "answer": self.answer,
            "llm": self.mode.value,
        }


class DecisionPayload(BaseModel):
    """Strict schema for a decision object sent by the remote reasoner."""

    model_config = ConfigDict(strict=True, extra="ignore")

    tool: str
    input: str = ""
    notes: str = ""

    @field_validator("input", "notes", mode="before")
    @classmethod
    def coerce_optional_text(cls, value: Any) -> Any:
        """Treat null as empty and render plain numbers as text."""
        if value is None:
            return ""
        if isinstance(value, (int, float)) and not isinstance(value, bool):
            return str(value)
        return value


def parse_decision(content: str) -> Decision:
    """
    Validate a remote reply and coerce it into a Decision.

    The reply must be a single JSON object with a non-empty string ``tool``
    and optional string ``input`` and ``notes``. ``null`` for those two
    means empty, and a bare number is taken as its text. A surrounding
    markdown code fence is tolerated.

    Raises:
        ReasonerFormatError: If the reply does not match the schema.
    """
    text = content.strip()
    fence = _CODE_FENCE.match(text)
    if fence:
        text = fence.group(1)

    try:
        data = json.loads(text)
    except json.JSONDecodeError as e:
        raise ReasonerFormatError(f"Reply is not valid JSON: {e}", reply=content) from e

    if not isinstance(data, dict):
        raise ReasonerFormatError("Reply is not a JSON object", reply=content)

    try:
        payload = DecisionPayload.model_validate(data)
    except ValidationError as e:
        raise ReasonerFormatError(
            f"Reply does not match the decision schema: {e.error_count()} error(s)",
            reply=content,
        ) from e

    if not payload.tool.strip():
        raise ReasonerFormatError("Reply names no tool", reply=content)

    return Decision(tool=payload.tool, input=payload.input, notes=payload.notes)


def synthesize_answer(transcript: list[TranscriptEntry]) -> str:
    """
    Derive an answer from the last observation when no ``final`` was chosen.

    Precedence: non-empty match list, then calculation result, then error,
    then a generic completion message.
    """
    observation = transcript[-1].observation if transcript else None
    if not observation:
        return DEFAULT_ANSWER

    matches = observation.get("matches")
    if matches:
        return f"Found {len(matches)} matches."
    if observation.get("result"):
        return f"Calculation result: {observation['result']}"
    if observation.get("error"):
        return f"Error: {observation['error']}"
    return DEFAULT_ANSWER
