"""Graphviz DOT rendering of an agent hierarchy.

Works purely from :meth:`describe` output, so any agent honouring the
contract can be drawn without the renderer knowing its class.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

if TYPE_CHECKING:
    from agentloop.agents.base import Agent, AgentStructure

_KIND_LABELS = {
    "llm": "LLM Agent",
    "sequential": "Sequential Workflow",
    "parallel": "Parallel Workflow",
    "loop": "Loop Workflow",
}
_LLM_FILL = "#e0eafc"
_WORKFLOW_FILL = "#d1e7dd"
_TOOL_FILL = "#fff3cd"


def build_dot(agent: Agent) -> str:
    """Return a DOT ``digraph`` describing *agent* and everything below it."""
    lines = [
        "digraph G {",
        "  rankdir=TB;",
        '  bgcolor="#f8f9fa";',
        '  node [shape=box, style="rounded,filled", fillcolor="#ffffff", fontname="Inter"];',
        '  edge [fontname="Inter"];',
        "",
    ]
    _emit(lines, agent.describe())
    lines.append("}")
    return "\n".join(lines) + "\n"


def sanitize_id(name: str) -> str:
    """DOT ids cannot contain spaces, dashes or dots."""
    return name.replace(" ", "_").replace("-", "_").replace(".", "_")


def _emit(lines: list[str], node: AgentStructure) -> None:
    node_id = sanitize_id(node.name)
    fill = _LLM_FILL if node.kind == "llm" else _WORKFLOW_FILL
    lines.append(f'  {node_id} [label="{node.name}\\n({_KIND_LABELS[node.kind]})", fillcolor="{fill}"];')

    for tool_name in node.tools:
        tool_id = sanitize_id(tool_name)
        lines.append(
            f'  {tool_id} [label="{tool_name}\\n(Tool)", shape=cylinder, fillcolor="{_TOOL_FILL}"];'
        )
        lines.append(f"  {node_id} -> {tool_id};")

    previous: str | None = None
    for child in node.children:
        child_id = sanitize_id(child.name)
        _emit(lines, child)
        if node.kind == "sequential":
            if previous is None:
                lines.append(f'  {node_id} -> {child_id} [label="start"];')
            else:
                lines.append(f'  {previous} -> {child_id} [label="next"];')
            previous = child_id
        elif node.kind == "parallel":
            lines.append(f'  {node_id} -> {child_id} [label="concurrent"];')
        elif node.kind == "loop":
            if previous is None:
                lines.append(f'  {node_id} -> {child_id} [label="start loop"];')
            else:
                lines.append(f'  {previous} -> {child_id} [label="next"];')
            previous = child_id

    if node.kind == "loop" and node.children:
        first = sanitize_id(node.children[0].name)
        last = sanitize_id(node.children[-1].name)
        lines.append(f'  {last} -> {first} [label="repeat", style=dashed, constraint=false];')
