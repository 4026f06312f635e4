"""Shared error types for agentloop.

Every error carries a ``kind`` tag so the outermost caller can report a
structured ``kind + message`` pair without inspecting concrete classes.

Fatal errors (configuration, backend, empty response, tool-round cap,
sub-agent propagation, cancellation, failing callbacks) escape
``process()``.  Tool errors are raised only inside tool dispatch and are
converted into error-shaped function responses before they can reach the
caller.
"""

from __future__ import annotations


class AgentError(Exception):
    """Base error for all agentloop failures."""

    kind: str = "agent"


class ConfigurationError(AgentError):
    """An agent, workflow or registry is wired incorrectly."""

    kind = "configuration"


class ModelBackendError(AgentError):
    """The model backend call failed; the turn is aborted."""

    kind = "backend"

    def __init__(self, detail: str = "") -> None:
        self.detail = detail
        super().__init__("LLM interaction failed" + (f": {detail}" if detail else ""))


class EmptyResponseError(AgentError):
    """The backend (or an after-model callback) produced a missing or zero-part message."""

    kind = "empty_response"

    def __init__(self, agent_name: str) -> None:
        self.agent_name = agent_name
        super().__init__(f"LLM returned no content for agent '{agent_name}'")


class MaxToolRoundsExceededError(AgentError):
    """The tool-calling loop hit its round cap without a final answer."""

    kind = "max_tool_rounds"

    def __init__(self, agent_name: str, max_rounds: int) -> None:
        self.agent_name = agent_name
        self.max_rounds = max_rounds
        super().__init__(f"exceeded maximum tool calls ({max_rounds}) in a single turn")


class SubAgentError(AgentError):
    """A child agent of a workflow failed.

    ``stage`` names where in the parent the failure happened, for example
    ``sequential step 2/3`` or ``loop iteration 4/5``.
    """

    kind = "sub_agent"

    def __init__(self, parent: str, child: str, stage: str, cause: BaseException) -> None:
        self.parent = parent
        self.child = child
        self.stage = stage
        self.cause = cause
        super().__init__(f"sub-agent '{child}' failed in {stage} of '{parent}': {cause}")

    @property
    def root_cause(self) -> BaseException:
        """Walk nested sub-agent errors down to the originating failure."""
        cause: BaseException = self.cause
        while isinstance(cause, SubAgentError):
            cause = cause.cause
        return cause


class AgentCancelledError(AgentError):
    """The invocation's cancellation signal was observed."""

    kind = "cancelled"

    def __init__(self, agent_name: str, where: str = "") -> None:
        self.agent_name = agent_name
        self.where = where
        msg = f"agent '{agent_name}' was cancelled"
        if where:
            msg += f" ({where})"
        super().__init__(msg)


class CallbackError(AgentError):
    """A user callback raised; the turn is aborted."""

    kind = "callback"

    def __init__(self, hook: str, cause: BaseException) -> None:
        self.hook = hook
        self.cause = cause
        super().__init__(f"{hook} callback failed: {cause}")


# ---------------------------------------------------------------------------
# Tool errors: converted to error-shaped function responses, never fatal
# ---------------------------------------------------------------------------


class ToolError(AgentError):
    """Base error for tool dispatch failures."""

    kind = "tool"

    def __init__(self, name: str, message: str) -> None:
        self.name = name
        super().__init__(message)


class ToolNotFoundError(ToolError):
    def __init__(self, name: str) -> None:
        super().__init__(name, f"tool '{name}' not found")


class ToolExecutionError(ToolError):
    def __init__(self, name: str, detail: str = "") -> None:
        self.detail = detail
        super().__init__(name, f"tool '{name}' execution failed: {detail}")


class ToolResultSchemaError(ToolError):
    def __init__(self, name: str, result_type: str) -> None:
        self.result_type = result_type
        super().__init__(name, f"tool '{name}' result is not a mapping, but {result_type}")


class ToolTimeoutError(ToolError):
    def __init__(self, name: str, timeout: float) -> None:
        self.timeout = timeout
        super().__init__(name, f"tool '{name}' timed out after {timeout}s")


# ---------------------------------------------------------------------------
# Outer-surface errors
# ---------------------------------------------------------------------------


class SessionNotFoundError(AgentError):
    kind = "session"

    def __init__(self, session_id: str) -> None:
        self.session_id = session_id
        super().__init__(f"session with ID '{session_id}' not found")


class WorkflowValidationError(AgentError):
    """Raised when a workflow YAML fails parsing or validation."""

    kind = "workflow"
