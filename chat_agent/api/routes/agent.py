"""
Agent endpoint.

POST /api/agent runs one bounded agent loop for the given goal and returns
its transcript and answer. The handler is a plain ``def`` so FastAPI runs
it in the worker thread pool; a run's blocking tool and network calls never
hold up other requests.
"""

import logging
import uuid
from typing import Union

from fastapi import APIRouter
from fastapi.responses import JSONResponse

from ..schemas import AgentRequest, AgentResponse, ErrorResponse
from ...errors import CallerInputError, RunCancelledError
from ...orchestration import AgentOrchestrator
from ...tracing import TracingContext, get_tracing_client

logger = logging.getLogger(__name__)

router = APIRouter()


@router.post(
    "/api/agent",
    response_model=AgentResponse,
    response_model_exclude_none=True,
    responses={
        400: {"model": ErrorResponse, "description": "Goal is missing"},
        504: {"model": ErrorResponse, "description": "Run exceeded its deadline"},
    },
    summary="Run the agent",
    description=(
        "Pursue a goal with up to maxSteps tool calls (clamped into [1, 5]). "
        "Uses the remote reasoner when a credential is configured and falls "
        "back to the local heuristic otherwise."
    ),
)
def run_agent_endpoint(request: AgentRequest) -> Union[AgentResponse, JSONResponse]:
    """Run the agent loop and return the RunResult."""
    if not request.goal:
        return JSONResponse(status_code=400, content={"error": "goal is required"})

    execution_id = f"run-{uuid.uuid4().hex[:8]}"
    logger.info(f"[{execution_id}] Processing agent request: {request.goal[:100]}")

    tracing_context = TracingContext(execution_id=execution_id)
    tracing_context.start_trace(
        name="agent_run",
        input={"goal": request.goal, "maxSteps": request.max_steps},
    )

    orchestrator = AgentOrchestrator(
        execution_id=execution_id,
        tracing_context=tracing_context,
    )

    try:
        result = orchestrator.run(request.goal, request.max_steps)
    except CallerInputError as e:
        tracing_context.end_trace(output=str(e), status="error")
        _flush_tracing()
        return JSONResponse(status_code=400, content={"error": str(e)})
    except RunCancelledError as e:
        logger.warning(f"[{execution_id}] Agent run cancelled: {e}")
        tracing_context.end_trace(output=str(e), status="cancelled")
        _flush_tracing()
        return JSONResponse(status_code=504, content={"error": str(e)})
    except Exception as e:
        logger.exception(f"[{execution_id}] Agent run failed: {e}")
        tracing_context.end_trace(output=str(e), status="error")
        _flush_tracing()
        return JSONResponse(status_code=500, content={"error": "Agent error"})

    tracing_context.end_trace(
        output=result.answer,
        status="success",
        metadata={"steps": result.steps, "llm": result.mode.value},
    )
    _flush_tracing()

    return AgentResponse.model_validate(result.to_dict())


def _flush_tracing() -> None:
    """Flush tracing client if available."""
    client = get_tracing_client()
    if client:
        client.flush()
