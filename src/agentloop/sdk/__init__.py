"""SDK: YAML workflow definitions and the registry builder."""

from agentloop.errors import WorkflowValidationError
from agentloop.sdk.models import AgentSpec, RunnerSettings, TelemetrySettings, WorkflowSpec
from agentloop.sdk.workflow import WorkflowLoader, build_agent, build_registry

__all__ = [
    "AgentSpec",
    "RunnerSettings",
    "TelemetrySettings",
    "WorkflowLoader",
    "WorkflowSpec",
    "WorkflowValidationError",
    "build_agent",
    "build_registry",
]
