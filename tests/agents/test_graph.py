"""Tests for DOT graph rendering."""

from __future__ import annotations

from typing import Any
from unittest.mock import MagicMock

from agentloop.agents.graph import build_dot, sanitize_id
from agentloop.agents.llm_agent import LlmAgent
from agentloop.agents.workflows.loop import LoopAgent
from agentloop.agents.workflows.parallel import ParallelAgent
from agentloop.agents.workflows.sequential import SequentialAgent
from agentloop.tools.base import FunctionTool


def lookup(city: str) -> dict[str, Any]:
    return {"city": city}


def _leaf(name: str, tools: list[Any] | None = None) -> LlmAgent:
    return LlmAgent(name, model_identifier="m", provider=MagicMock(), tools=tools or [])


class TestSanitizeId:
    def test_replaces_separators(self) -> None:
        assert sanitize_id("my agent-v1.2") == "my_agent_v1_2"


class TestBuildDot:
    def test_llm_agent_with_tool(self) -> None:
        dot = build_dot(_leaf("weather", [FunctionTool.from_callable(lookup)]))

        assert dot.startswith("digraph G {")
        assert dot.rstrip().endswith("}")
        assert 'weather [label="weather\\n(LLM Agent)", fillcolor="#e0eafc"];' in dot
        assert 'lookup [label="lookup\\n(Tool)", shape=cylinder, fillcolor="#fff3cd"];' in dot
        assert "weather -> lookup;" in dot

    def test_sequential_edges(self) -> None:
        dot = build_dot(SequentialAgent("pipe", [_leaf("a"), _leaf("b"), _leaf("c")]))

        assert 'pipe [label="pipe\\n(Sequential Workflow)", fillcolor="#d1e7dd"];' in dot
        assert 'pipe -> a [label="start"];' in dot
        assert 'a -> b [label="next"];' in dot
        assert 'b -> c [label="next"];' in dot

    def test_parallel_edges(self) -> None:
        agent = ParallelAgent("fan", [_leaf("x"), _leaf("y")], synthesis_model="m", synthesis_provider=MagicMock())
        dot = build_dot(agent)

        assert 'fan -> x [label="concurrent"];' in dot
        assert 'fan -> y [label="concurrent"];' in dot

    def test_loop_has_repeat_edge(self) -> None:
        dot = build_dot(LoopAgent("retry-loop", [_leaf("draft"), _leaf("review")], max_iterations=3))

        assert 'retry_loop -> draft [label="start loop"];' in dot
        assert 'draft -> review [label="next"];' in dot
        assert 'review -> draft [label="repeat", style=dashed, constraint=false];' in dot

    def test_nested_workflows(self) -> None:
        inner = SequentialAgent("inner", [_leaf("leaf")])
        dot = build_dot(SequentialAgent("outer", [inner]))

        assert 'outer -> inner [label="start"];' in dot
        assert 'inner -> leaf [label="start"];' in dot
