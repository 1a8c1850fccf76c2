# errors.py
# Exception taxonomy shared by every layer of the agent.
#
# Fatal for a run:  ConfigurationError, GenerationError, ParseError
# Recorded per step: ToolError (the orchestrator appends it to history)


class AgentError(Exception):
    """Base class for all agent failures."""


class ConfigurationError(AgentError):
    """Raised when a required credential or setting is missing."""


class GenerationError(AgentError):
    """Raised on backend transport failure, non-success status or malformed payload."""


class ParseError(AgentError):
    """Raised when plan or decision text cannot be interpreted."""


class ToolError(AgentError):
    """Raised by the dispatcher when an action fails against the outside world."""


class InvalidAction(AgentError):
    """Raised when an action that cannot be dispatched directly is dispatched."""


class RunAborted(AgentError):
    """Raised by the orchestrator when a run cannot continue."""

    def __init__(self, stage: str, cause: Exception, step_index: int | None = None) -> None:
        self.stage = stage
        self.cause = cause
        self.step_index = step_index
        super().__init__(f"{stage} failed: {cause}")
