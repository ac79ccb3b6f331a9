"""Exception hierarchy for the agent."""


class AgentError(Exception):
    """Base class for agent errors."""


class InvalidActionError(AgentError, ValueError):
    """An action is missing fields its type requires, or has an unknown type."""


class PlanningError(AgentError):
    """The language model response could not be turned into a TaskProgress."""

    def __init__(self, reason: str, message: str) -> None:
        super().__init__(message)
        self.reason = reason


class AgentBusyError(AgentError):
    """The agent is already executing a task."""
