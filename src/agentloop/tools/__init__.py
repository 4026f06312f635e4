"""Tools: the callable capabilities an agent can offer its model."""

from agentloop.tools.base import FunctionTool, Tool, load_tool, tool

__all__ = [
    "FunctionTool",
    "Tool",
    "load_tool",
    "tool",
]
