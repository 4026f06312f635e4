"""Tests for FunctionTool, the tool decorator and tool loading."""

from __future__ import annotations

import asyncio
import sys
import types
from typing import Any

import pytest

from agentloop.errors import ConfigurationError
from agentloop.tools.base import FunctionTool, Tool, load_tool, tool


def get_weather(city: str, unit: str = "celsius") -> dict[str, Any]:
    """Current weather for a city."""
    return {"city": city, "unit": unit}


async def async_echo(text: str) -> dict[str, Any]:
    await asyncio.sleep(0)
    return {"text": text}


@tool(name="lookup", description="Look something up.")
def decorated(query: str) -> dict[str, Any]:
    return {"query": query}


@tool
def bare(x: int) -> dict[str, Any]:
    """Bare decorator."""
    return {"x": x}


class TestFunctionTool:
    def test_metadata_from_callable(self) -> None:
        weather = FunctionTool.from_callable(get_weather)

        assert weather.name == "get_weather"
        assert weather.description == "Current weather for a city."
        assert isinstance(weather, Tool)

    def test_parameters_schema(self) -> None:
        params = FunctionTool.from_callable(get_weather).parameters

        assert "title" not in params
        assert params["type"] == "object"
        assert params["properties"]["city"]["type"] == "string"
        assert params["properties"]["unit"]["default"] == "celsius"
        assert params["required"] == ["city"]

    def test_overrides(self) -> None:
        weather = FunctionTool.from_callable(get_weather, name="wx", description="Weather.")
        assert weather.name == "wx"
        assert weather.description == "Weather."

    async def test_execute_sync(self) -> None:
        result = await FunctionTool.from_callable(get_weather).execute({"city": "Oslo"})
        assert result == {"city": "Oslo", "unit": "celsius"}

    async def test_execute_async(self) -> None:
        assert await FunctionTool.from_callable(async_echo).execute({"text": "hi"}) == {"text": "hi"}

    async def test_arguments_are_coerced(self) -> None:
        assert await bare.execute({"x": "3"}) == {"x": 3}

    async def test_invalid_arguments_raise(self) -> None:
        with pytest.raises(ValueError):
            await FunctionTool.from_callable(get_weather).execute({})


class TestToolDecorator:
    def test_with_overrides(self) -> None:
        assert isinstance(decorated, FunctionTool)
        assert decorated.name == "lookup"
        assert decorated.description == "Look something up."

    def test_bare(self) -> None:
        assert bare.name == "bare"
        assert bare.description == "Bare decorator."


class TestLoadTool:
    def test_colon_path_wraps_callable(self) -> None:
        loaded = load_tool("os.path:basename")
        assert isinstance(loaded, FunctionTool)
        assert loaded.name == "basename"

    def test_dotted_path(self) -> None:
        assert load_tool("os.path.dirname").name == "dirname"

    def test_tool_instances_are_returned_as_is(self, monkeypatch: pytest.MonkeyPatch) -> None:
        module = types.ModuleType("weather_tools")
        module.lookup = decorated  # type: ignore[attr-defined]
        monkeypatch.setitem(sys.modules, "weather_tools", module)

        assert load_tool("weather_tools:lookup") is decorated

    def test_missing_module(self) -> None:
        with pytest.raises(ConfigurationError, match="cannot import tool module"):
            load_tool("no_such_module_xyz:thing")

    def test_missing_attribute(self) -> None:
        with pytest.raises(ConfigurationError, match="has no attribute"):
            load_tool("os.path:no_such_function")

    def test_invalid_path(self) -> None:
        with pytest.raises(ConfigurationError, match="invalid tool path"):
            load_tool("nodots")

    def test_non_callable(self) -> None:
        with pytest.raises(ConfigurationError, match="neither a Tool nor a callable"):
            load_tool("os:sep")
