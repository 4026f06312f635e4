"""Workflow loading and agent construction for the agentloop SDK."""

from __future__ import annotations

import logging
import os
from collections.abc import Callable
from pathlib import Path
from typing import TYPE_CHECKING, Any

import yaml
from pydantic import ValidationError

from agentloop.agents.llm_agent import LlmAgent
from agentloop.agents.workflows.loop import LoopAgent, stop_when_text_contains
from agentloop.agents.workflows.parallel import ParallelAgent
from agentloop.agents.workflows.sequential import SequentialAgent
from agentloop.core.interface.client import LiteLLMProvider
from agentloop.core.interface.config import ModelConfig
from agentloop.errors import AgentError, ConfigurationError, WorkflowValidationError
from agentloop.registry import AgentRegistry
from agentloop.sdk.models import WorkflowSpec
from agentloop.tools.base import load_tool

if TYPE_CHECKING:
    from agentloop.agents.base import Agent
    from agentloop.core.interface.provider import ModelProvider
    from agentloop.sdk.models import AgentSpec

logger = logging.getLogger(__name__)

ProviderFactory = Callable[[ModelConfig], "ModelProvider"]


class WorkflowLoader:
    """Turn a workflow YAML file into a validated :class:`WorkflowSpec`.

    ``$VAR`` and ``${VAR}`` references are expanded from the environment
    before parsing, so credentials can stay out of the file.  Unset
    variables are left as written.
    """

    def __init__(self, path: str | os.PathLike[str]) -> None:
        self._path = Path(path)

    @property
    def path(self) -> Path:
        return self._path

    def load(self) -> WorkflowSpec:
        """Raises :class:`WorkflowValidationError` for any unreadable or invalid file."""
        try:
            text = self._path.read_text(encoding="utf-8")
        except OSError as exc:
            raise WorkflowValidationError(f"cannot read workflow file {self._path}: {exc}") from exc
        return self.parse(text, source=str(self._path))

    @staticmethod
    def parse(text: str, *, source: str = "<string>") -> WorkflowSpec:
        """Validate workflow YAML given as a string."""
        try:
            data: Any = yaml.safe_load(os.path.expandvars(text))
        except yaml.YAMLError as exc:
            raise WorkflowValidationError(f"{source}: invalid YAML: {exc}") from exc

        if not isinstance(data, dict):
            kind = "empty" if data is None else type(data).__name__
            raise WorkflowValidationError(f"{source}: expected a mapping at the top level, got {kind}")

        try:
            return WorkflowSpec.model_validate(data)
        except ValidationError as exc:
            raise WorkflowValidationError(f"{source}: {_describe(exc)}") from exc


def _describe(exc: ValidationError) -> str:
    problems: list[str] = []
    for error in exc.errors():
        where = ".".join(str(part) for part in error["loc"]) or "workflow"
        problems.append(f"{where}: {error['msg']}")
    return "; ".join(problems)


def build_registry(
    spec: WorkflowSpec,
    *,
    provider_factory: ProviderFactory | None = None,
) -> AgentRegistry:
    """Construct every agent in *spec* into a fresh :class:`AgentRegistry`.

    An agent that cannot be built (missing model, bad tool path, broken
    sub-agent) is registered with its error instead of aborting the rest.
    """
    factory = provider_factory or LiteLLMProvider
    registry = AgentRegistry()
    built: dict[str, Agent] = {}
    failed: dict[str, str] = {}

    for name in spec.agents:
        try:
            agent = build_agent(name, spec, factory, built, failed)
        except AgentError as exc:
            failed[name] = str(exc)
            registry.register(name, None, error=exc)
        else:
            registry.register(name, agent)
    return registry


def build_agent(
    name: str,
    spec: WorkflowSpec,
    provider_factory: ProviderFactory,
    built: dict[str, Agent],
    failed: dict[str, str],
) -> Agent:
    """Build agent *name*, reusing already-built sub-agents from *built*."""
    if name in built:
        return built[name]
    if name in failed:
        raise ConfigurationError(f"agent '{name}' failed to initialize: {failed[name]}")

    agent_spec = spec.agents[name]
    children: list[Agent] = []
    for child in agent_spec.sub_agents:
        try:
            children.append(build_agent(child, spec, provider_factory, built, failed))
        except AgentError as exc:
            failed.setdefault(child, str(exc))
            raise ConfigurationError(f"sub-agent '{child}' of '{name}' failed to initialize") from exc

    agent = _construct(name, agent_spec, spec, provider_factory, children)
    built[name] = agent
    logger.debug("Built %s agent '%s'", agent_spec.type, name)
    return agent


def _construct(
    name: str,
    agent_spec: AgentSpec,
    spec: WorkflowSpec,
    provider_factory: ProviderFactory,
    children: list[Agent],
) -> Agent:
    if agent_spec.type == "sequential":
        return SequentialAgent(name, children, description=agent_spec.description)

    if agent_spec.type == "loop":
        assert agent_spec.max_iterations is not None
        stop = stop_when_text_contains(agent_spec.stop_phrase) if agent_spec.stop_phrase else None
        return LoopAgent(
            name,
            children,
            max_iterations=agent_spec.max_iterations,
            stop_condition=stop,
            description=agent_spec.description,
        )

    model_cfg = _model_config(name, agent_spec, spec)
    provider = provider_factory(model_cfg)

    if agent_spec.type == "parallel":
        return ParallelAgent(
            name,
            children,
            synthesis_model=model_cfg.model,
            synthesis_provider=provider,
            synthesis_instruction=agent_spec.synthesis_instruction,
            description=agent_spec.description,
        )

    return LlmAgent(
        name,
        model_identifier=model_cfg.model,
        provider=provider,
        description=agent_spec.description,
        system_instruction=agent_spec.instruction,
        tools=[load_tool(path) for path in agent_spec.tools],
        max_tool_rounds=agent_spec.max_tool_rounds,
        tool_timeout=agent_spec.tool_timeout,
    )


def _model_config(name: str, agent_spec: AgentSpec, spec: WorkflowSpec) -> ModelConfig:
    """Per-agent model override, else the workflow-level default."""
    raw = agent_spec.model or spec.model
    if not raw:
        raise ConfigurationError(f"agent '{name}' has no model configured")
    try:
        return ModelConfig(**raw)
    except ValidationError as exc:
        raise ConfigurationError(f"agent '{name}' has an invalid model config: {exc}") from exc
