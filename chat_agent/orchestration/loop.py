"""
Agent orchestration loop.

Drives one run through an explicit state machine::

    REASON   -> ask the active reasoner for a Decision
    DISPATCH -> end on ``final``, otherwise run the tool and record the step
    DONE     -> terminal; no further reasoner or tool calls

The run starts in remote mode when a credential is configured. The first
transport failure switches it to local mode for good, and the same step is
retried locally. A malformed remote reply costs the step's budget slot and
is retried with a corrective prompt, up to ``max_format_retries`` times in a
row. The loop ends on ``final`` or once the slot counter passes the budget.
"""

import logging
import time
from dataclasses import dataclass, field
from enum import Enum
from typing import Optional

from ..config import AgentConfig, config
from ..errors import (
    CallerInputError,
    ReasonerFormatError,
    ReasonerTransportError,
    RunCancelledError,
)
from ..llm_call import LLMClient
from ..tools import ToolRegistry
from ..tracing import TracingContext
from .protocol import (
    DEFAULT_ANSWER,
    Decision,
    Observation,
    ReasonerMode,
    RunResult,
    TranscriptEntry,
    synthesize_answer,
)
from .reasoners import LocalReasoner, Reasoner, create_reasoner

logger = logging.getLogger(__name__)

MIN_STEPS = 1
MAX_STEPS = 5


class RunState(str, Enum):
    """States of a single agent run."""

    REASON = "reason"
    DISPATCH = "dispatch"
    DONE = "done"


def clamp_budget(requested: Optional[int], default: int = 3) -> int:
    """Clamp a requested step budget into [MIN_STEPS, MAX_STEPS]."""
    budget = default if requested is None else int(requested)
    return max(MIN_STEPS, min(MAX_STEPS, budget))


@dataclass
class AgentRun:
    """Mutable state owned by exactly one run."""

    goal: str
    budget: int
    mode: ReasonerMode
    reasoner: Reasoner
    deadline: Optional[float] = None
    slot: int = 1
    format_failures: int = 0
    retries_exhausted: bool = False
    answer: Optional[str] = None
    transcript: list[TranscriptEntry] = field(default_factory=list)

    def downgrade(self) -> None:
        """Switch to local reasoning for the rest of the run."""
        self.mode = ReasonerMode.LOCAL
        self.reasoner = LocalReasoner()

    def remaining_time(self) -> Optional[float]:
        if self.deadline is None:
            return None
        return self.deadline - time.monotonic()


class AgentOrchestrator:
    """
    Runs the bounded decide-dispatch-observe loop for one goal.

    Each run builds its own AgentRun, so one orchestrator holds no state
    between runs; the HTTP layer still creates one per request.
    """

    def __init__(
        self,
        agent_config: Optional[AgentConfig] = None,
        llm_client: Optional[LLMClient] = None,
        execution_id: Optional[str] = None,
        tracing_context: Optional[TracingContext] = None,
    ):
        """
        Initialize the orchestrator.

        Args:
            agent_config: Agent settings; defaults to the global config
            llm_client: Client for the remote reasoner; built on demand when
                a credential is configured
            execution_id: Optional ID for correlating logs across the run
            tracing_context: Optional tracing context for Langfuse observability
        """
        self.agent_config = agent_config or config.agent
        self.llm_client = llm_client
        self.execution_id = execution_id
        self.tracing_context = tracing_context

    @property
    def _prefix(self) -> str:
        return f"[{self.execution_id}] " if self.execution_id else ""

    def run(
        self,
        goal: str,
        max_steps: Optional[int] = None,
        timeout: Optional[float] = None,
    ) -> RunResult:
        """
        Pursue ``goal`` within a clamped step budget.

        Args:
            goal: Non-empty goal text
            max_steps: Requested budget, clamped into [1, 5]
            timeout: Seconds before the run is cancelled; defaults to
                AGENT_RUN_TIMEOUT (0 disables the deadline)

        Raises:
            CallerInputError: If the goal is empty.
            RunCancelledError: If the deadline passes mid-run.
        """
        if not goal:
            raise CallerInputError("goal is required")

        run = self._start_run(goal, max_steps, timeout)
        logger.info(
            "%sAgent run started: mode=%s budget=%d goal=%s",
            self._prefix, run.mode.value, run.budget, goal[:100],
        )

        state = RunState.REASON
        decision: Optional[Decision] = None
        while state is not RunState.DONE:
            if state is RunState.REASON:
                if run.slot > run.budget or run.retries_exhausted:
                    state = RunState.DONE
                    continue
                decision = self._reason(run)
                if decision is not None:
                    state = RunState.DISPATCH
            else:
                state = self._dispatch(run, decision)

        answer = run.answer if run.answer is not None else synthesize_answer(run.transcript)
        self._log_trace_summary(run)
        return RunResult(
            goal=goal,
            answer=answer,
            mode=run.mode,
            transcript=tuple(run.transcript),
        )

    def _start_run(
        self, goal: str, max_steps: Optional[int], timeout: Optional[float]
    ) -> AgentRun:
        budget = clamp_budget(max_steps, default=self.agent_config.default_max_steps)

        if timeout is None:
            timeout = self.agent_config.run_timeout
        deadline = time.monotonic() + timeout if timeout and timeout > 0 else None

        mode = ReasonerMode.LOCAL
        if self.agent_config.remote_enabled:
            mode = ReasonerMode.REMOTE
            if self.llm_client is None:
                self.llm_client = LLMClient(self.agent_config)

        return AgentRun(
            goal=goal,
            budget=budget,
            mode=mode,
            reasoner=create_reasoner(mode, goal, self.llm_client),
            deadline=deadline,
        )

    def _check_deadline(self, run: AgentRun) -> None:
        remaining = run.remaining_time()
        if remaining is not None and remaining <= 0:
            raise RunCancelledError(f"Agent run exceeded its deadline at step {run.slot}")

    def _reason(self, run: AgentRun) -> Optional[Decision]:
        """
        REASON state: return a Decision, or None when a malformed reply used
        up the current slot.
        """
        self._check_deadline(run)
        try:
            decision = self._decide(run)
        except ReasonerTransportError as e:
            remaining = run.remaining_time()
            if remaining is not None and remaining <= 0:
                raise RunCancelledError(
                    f"Agent run exceeded its deadline at step {run.slot}"
                ) from e
            logger.warning(
                "%sRemote reasoner failed at step %d, switching to local mode: %s",
                self._prefix, run.slot, e,
            )
            run.downgrade()
            decision = self._decide(run)
        except ReasonerFormatError as e:
            run.format_failures += 1
            logger.warning(
                "%sMalformed reasoner reply at step %d (%d in a row): %s",
                self._prefix, run.slot, run.format_failures, e,
            )
            run.reasoner.request_correction(e.reply)
            run.slot += 1
            if run.format_failures > self.agent_config.max_format_retries:
                logger.warning(
                    "%sGiving up after %d malformed replies",
                    self._prefix, run.format_failures,
                )
                run.retries_exhausted = True
            return None

        run.format_failures = 0
        logger.info(
            "%sStep %d decision: %s(%s)",
            self._prefix, run.slot, decision.tool, decision.input[:100],
        )
        return decision

    def _decide(self, run: AgentRun) -> Decision:
        """Ask the active reasoner, inside a generation span for remote calls."""
        history = list(run.transcript)
        if not self.tracing_context or run.mode is ReasonerMode.LOCAL:
            return run.reasoner.decide(run.goal, run.slot, history, run.remaining_time())

        with self.tracing_context.generation(
            name=f"reasoner_step_{run.slot}",
            model=self.agent_config.model,
            input=getattr(run.reasoner, "messages", None),
            metadata={"step": run.slot},
            model_parameters={"temperature": self.agent_config.temperature},
        ) as gen:
            try:
                decision = run.reasoner.decide(
                    run.goal, run.slot, history, run.remaining_time()
                )
            except (ReasonerTransportError, ReasonerFormatError) as e:
                gen.set_status("error")
                gen.set_output(str(e))
                raise
            gen.set_output(decision.to_dict())
            return decision

    def _dispatch(self, run: AgentRun, decision: Decision) -> RunState:
        """DISPATCH state: finish on ``final``, otherwise run the tool."""
        if decision.is_final:
            run.transcript.append(TranscriptEntry(step=run.slot, decision=decision))
            run.answer = decision.input or DEFAULT_ANSWER
            return RunState.DONE

        observation = self._execute_tool(decision.tool, decision.input or run.goal, run.slot)
        run.transcript.append(
            TranscriptEntry(step=run.slot, decision=decision, observation=observation)
        )
        run.reasoner.observe(decision, observation)
        run.slot += 1
        return RunState.DONE if run.slot > run.budget else RunState.REASON

    def _execute_tool(self, tool_name: str, tool_input: str, step: int) -> Observation:
        """Dispatch through the registry, inside a span when tracing."""
        logger.debug("%sStep %d: executing tool '%s'", self._prefix, step, tool_name)
        if not self.tracing_context:
            return ToolRegistry.dispatch(tool_name, tool_input)

        with self.tracing_context.span(
            name=f"tool:{tool_name}",
            input={"input": tool_input},
            metadata={"step": step},
        ) as span:
            observation = ToolRegistry.dispatch(tool_name, tool_input)
            if "error" in observation:
                span.set_status("error")
            span.set_output(observation)
            return observation

    def _log_trace_summary(self, run: AgentRun) -> None:
        """Log a compact trace summary."""
        logger.info("%s%s", self._prefix, "─" * 50)
        logger.info("%sTRACE SUMMARY (mode=%s)", self._prefix, run.mode.value)
        for entry in run.transcript:
            if entry.observation is None:
                logger.info("%sStep %d [FINAL]", self._prefix, entry.step)
                continue
            preview = str(entry.observation)
            if len(preview) > 80:
                preview = preview[:80] + "..."
            logger.info(
                "%sStep %d: %s -> %s", self._prefix, entry.step, entry.decision.tool, preview
            )


def run_agent(goal: str, max_steps: Optional[int] = None) -> RunResult:
    """
    Convenience function to run a single goal with the global configuration.

    Args:
        goal: The goal to pursue
        max_steps: Requested step budget

    Returns:
        The run's RunResult
    """
    return AgentOrchestrator().run(goal, max_steps)
