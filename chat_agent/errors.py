"""Exceptions raised inside an agent run."""

from typing import Optional


class AgentError(Exception):
    """Base class for agent run errors."""


class CallerInputError(AgentError, ValueError):
    """The caller supplied an unusable goal or question."""


class ReasonerError(AgentError):
    """The remote reasoner could not produce a decision."""


class ReasonerTransportError(ReasonerError):
    """Network, timeout or HTTP status failure talking to the remote reasoner."""


class ReasonerFormatError(ReasonerError):
    """The remote reasoner replied, but not with a valid decision object."""

    def __init__(self, message: str, reply: Optional[str] = None):
        super().__init__(message)
        self.reply = reply


class RunCancelledError(AgentError):
    """The run's deadline passed before it could finish."""
