"""
Pydantic schemas for the chat agent API.
"""

from typing import Any, Literal, Optional

from pydantic import BaseModel, ConfigDict, Field


class QuestionRequest(BaseModel):
    """Request body for POST /api/question."""

    question: Optional[str] = Field(
        default=None, description="Text to look for in the chat transcripts"
    )

    model_config = {
        "json_schema_extra": {"example": {"question": "invoice"}}
    }


class SearchMatch(BaseModel):
    """A transcript line containing the query."""

    file: str = Field(..., description="Transcript file name")
    line: int = Field(..., description="1-based line number")
    text: str = Field(..., description="The matching line, trimmed")


class QuestionResponse(BaseModel):
    """Response body for POST /api/question."""

    matches: list[SearchMatch] = Field(default_factory=list)
    note: Optional[str] = Field(
        default=None, description="Set when the chats directory is missing"
    )


class AgentRequest(BaseModel):
    """Request body for POST /api/agent."""

    model_config = ConfigDict(
        populate_by_name=True,
        json_schema_extra={"example": {"goal": "2*(3+4)", "maxSteps": 3}},
    )

    goal: Optional[str] = Field(default=None, description="What the agent should achieve")
    max_steps: Optional[int] = Field(
        default=None,
        alias="maxSteps",
        description="Step budget, clamped into [1, 5]",
    )


class DecisionModel(BaseModel):
    """The tool chosen for a step."""

    tool: str
    input: str = ""
    notes: str = ""


class TranscriptEntryModel(BaseModel):
    """One recorded step of an agent run."""

    step: int = Field(..., description="Budget slot the step was dispatched in")
    decision: DecisionModel
    observation: Optional[dict[str, Any]] = Field(
        default=None, description="Tool result; absent on the final step"
    )


class AgentResponse(BaseModel):
    """Response body for POST /api/agent."""

    goal: str
    steps: int = Field(..., description="Number of transcript entries")
    transcript: list[TranscriptEntryModel]
    answer: str
    llm: Literal["openai", "local"] = Field(
        ..., description="Reasoner active when the run finished"
    )


class HealthResponse(BaseModel):
    """Response body for /health endpoint."""

    status: Literal["ok"] = "ok"


class ErrorResponse(BaseModel):
    """Error body shared by every endpoint."""

    error: str
    detail: Optional[Any] = None
