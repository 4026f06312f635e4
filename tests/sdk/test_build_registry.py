"""Tests for building agents and registries from a workflow spec."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

from agentloop.agents.llm_agent import LlmAgent
from agentloop.agents.workflows.loop import LoopAgent
from agentloop.agents.workflows.parallel import ParallelAgent
from agentloop.agents.workflows.sequential import SequentialAgent
from agentloop.core.interface.client import LiteLLMProvider
from agentloop.core.interface.config import ModelConfig
from agentloop.core.interface.models import Message
from agentloop.sdk.models import WorkflowSpec
from agentloop.sdk.workflow import build_registry


def _spec(agents: dict[str, Any], model: dict[str, Any] | None = None) -> WorkflowSpec:
    return WorkflowSpec.model_validate(
        {"model": {"model": "openai/gpt-4o"} if model is None else model, "agents": agents}
    )


class _Factory:
    def __init__(self) -> None:
        self.configs: list[ModelConfig] = []

    def __call__(self, config: ModelConfig) -> Any:
        self.configs.append(config)
        return MagicMock(name=f"provider-{config.model}")


class TestBuildRegistry:
    def test_llm_agent(self) -> None:
        spec = _spec(
            {
                "weather": {
                    "description": "Weather lookups",
                    "instruction": "Answer weather questions.",
                    "tools": ["os.path:basename"],
                    "max_tool_rounds": 4,
                    "tool_timeout": 2.5,
                }
            }
        )

        agent = build_registry(spec, provider_factory=_Factory()).get("weather")

        assert isinstance(agent, LlmAgent)
        assert agent.model_identifier == "openai/gpt-4o"
        assert agent.description == "Weather lookups"
        assert agent.system_instruction == Message.system("Answer weather questions.")
        assert [t.name for t in agent.tools] == ["basename"]
        assert agent.max_tool_rounds == 4
        assert agent.tool_timeout == 2.5

    def test_default_provider_is_litellm(self) -> None:
        agent = build_registry(_spec({"a": {}})).get("a")
        assert isinstance(agent.provider, LiteLLMProvider)

    def test_per_agent_model_override(self) -> None:
        factory = _Factory()
        spec = _spec({"a": {}, "b": {"model": {"model": "gemini/gemini-2.5-flash"}}})

        registry = build_registry(spec, provider_factory=factory)

        assert registry.get("a").model_identifier == "openai/gpt-4o"
        assert registry.get("b").model_identifier == "gemini/gemini-2.5-flash"
        assert sorted(c.model for c in factory.configs) == ["gemini/gemini-2.5-flash", "openai/gpt-4o"]

    def test_workflow_agents(self) -> None:
        spec = _spec(
            {
                "draft": {},
                "review": {},
                "pipe": {"type": "sequential", "sub_agents": ["draft", "review"]},
                "fan": {"type": "parallel", "sub_agents": ["draft", "review"], "synthesis_instruction": "Merge."},
                "retry": {"type": "loop", "sub_agents": ["pipe"], "max_iterations": 3, "stop_phrase": "done"},
            }
        )

        registry = build_registry(spec, provider_factory=_Factory())

        pipe = registry.get("pipe")
        assert isinstance(pipe, SequentialAgent)
        assert [a.name for a in pipe.sub_agents] == ["draft", "review"]
        assert pipe.sub_agents[0] is registry.get("draft")

        fan = registry.get("fan")
        assert isinstance(fan, ParallelAgent)
        assert fan.synthesis_model == "openai/gpt-4o"
        assert fan.synthesis_instruction == Message.system("Merge.")

        retry = registry.get("retry")
        assert isinstance(retry, LoopAgent)
        assert retry.max_iterations == 3
        assert retry.stop_condition(Message.model("All DONE"))
        assert retry.sub_agents[0] is pipe

    def test_missing_model_is_recorded(self) -> None:
        registry = build_registry(_spec({"a": {}}, model={}), provider_factory=_Factory())

        assert "a" not in registry
        assert "no model configured" in (registry.definitions()[0].init_error or "")

    def test_bad_tool_fails_dependents_only(self) -> None:
        spec = _spec(
            {
                "broken": {"tools": ["no_such_module_xyz:tool"]},
                "fine": {},
                "pipe": {"type": "sequential", "sub_agents": ["fine", "broken"]},
            }
        )

        registry = build_registry(spec, provider_factory=_Factory())

        assert registry.names() == ["fine"]
        errors = {d.name: d.init_error for d in registry.definitions()}
        assert errors["broken"] is not None and "cannot import tool module" in errors["broken"]
        assert errors["pipe"] == "sub-agent 'broken' of 'pipe' failed to initialize"
