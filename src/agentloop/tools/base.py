"""Tool protocol and the callable-backed :class:`FunctionTool`.

A tool is a named, described, schema-carrying async callable.  Tools in one
agent's table may be executed concurrently, so an implementation must not
share mutable state with other tools unless it synchronizes it itself.
"""

from __future__ import annotations

import asyncio
import importlib
import inspect
import typing
from collections.abc import Callable, Mapping
from typing import Any, Protocol, runtime_checkable

from pydantic import BaseModel, create_model

from agentloop.errors import ConfigurationError


@runtime_checkable
class Tool(Protocol):
    """A capability the model can request by name."""

    @property
    def name(self) -> str: ...

    @property
    def description(self) -> str: ...

    @property
    def parameters(self) -> dict[str, Any]:
        """JSON schema of the accepted arguments (opaque to the engine)."""
        ...

    async def execute(self, args: Mapping[str, Any]) -> Any:
        """Run the tool.  A well-behaved tool returns a string-keyed mapping."""
        ...


class FunctionTool:
    """Expose a plain Python callable as a :class:`Tool`.

    The argument schema is derived from the callable's signature and the
    incoming arguments are validated against it before the call.  Sync
    callables run in a worker thread so concurrent dispatch does not block
    the event loop.

    Usage::

        def get_weather(city: str, unit: str = "celsius") -> dict[str, str]:
            # docstring becomes the tool description
            ...

        weather = FunctionTool.from_callable(get_weather)
    """

    def __init__(
        self,
        func: Callable[..., Any],
        *,
        name: str,
        description: str,
        args_model: type[BaseModel],
    ) -> None:
        self._func = func
        self._name = name
        self._description = description
        self._args_model = args_model

    @classmethod
    def from_callable(
        cls,
        func: Callable[..., Any],
        *,
        name: str | None = None,
        description: str | None = None,
    ) -> FunctionTool:
        tool_name = name or getattr(func, "__name__", None)
        if not tool_name:
            raise ConfigurationError(f"cannot derive a tool name from {func!r}")
        doc = description if description is not None else inspect.getdoc(func) or ""
        return cls(
            func,
            name=tool_name,
            description=doc,
            args_model=_args_model_for(func, tool_name),
        )

    @property
    def name(self) -> str:
        return self._name

    @property
    def description(self) -> str:
        return self._description

    @property
    def parameters(self) -> dict[str, Any]:
        schema = self._args_model.model_json_schema()
        schema.pop("title", None)
        return schema

    async def execute(self, args: Mapping[str, Any]) -> Any:
        validated = self._args_model.model_validate(dict(args))
        kwargs = {field: getattr(validated, field) for field in type(validated).model_fields}

        if inspect.iscoroutinefunction(self._func):
            return await self._func(**kwargs)

        result = await asyncio.to_thread(self._func, **kwargs)
        if inspect.isawaitable(result):
            result = await result
        return result

    def __repr__(self) -> str:
        return f"FunctionTool(name={self._name!r})"


def tool(
    func: Callable[..., Any] | None = None,
    *,
    name: str | None = None,
    description: str | None = None,
) -> Any:
    """Decorator form of :meth:`FunctionTool.from_callable`.

    Works bare (``@tool``) or with overrides (``@tool(name="lookup")``).
    """

    def wrap(f: Callable[..., Any]) -> FunctionTool:
        return FunctionTool.from_callable(f, name=name, description=description)

    if func is not None:
        return wrap(func)
    return wrap


def load_tool(path: str) -> Tool:
    """Resolve ``"package.module:attr"`` (or ``package.module.attr``) to a tool.

    Plain callables are wrapped in a :class:`FunctionTool`.
    """
    module_name, sep, attr = path.partition(":")
    if not sep:
        module_name, _, attr = path.rpartition(".")
    if not module_name or not attr:
        raise ConfigurationError(f"invalid tool path '{path}', expected 'module:attr'")

    try:
        module = importlib.import_module(module_name)
    except ImportError as exc:
        raise ConfigurationError(f"cannot import tool module '{module_name}': {exc}") from exc

    obj = getattr(module, attr, None)
    if obj is None:
        raise ConfigurationError(f"module '{module_name}' has no attribute '{attr}'")
    if isinstance(obj, Tool):
        return obj
    if callable(obj):
        return FunctionTool.from_callable(obj)
    raise ConfigurationError(f"'{path}' is neither a Tool nor a callable")


def _args_model_for(func: Callable[..., Any], tool_name: str) -> type[BaseModel]:
    """Build a pydantic model mirroring *func*'s keyword-callable parameters."""
    signature = inspect.signature(func)
    hints: dict[str, Any] = {}
    if inspect.isfunction(func) or inspect.ismethod(func):
        hints = typing.get_type_hints(func)

    fields: dict[str, Any] = {}
    for param_name, param in signature.parameters.items():
        if param.kind in (inspect.Parameter.VAR_POSITIONAL, inspect.Parameter.VAR_KEYWORD):
            continue
        annotation = hints.get(param_name, Any)
        default = ... if param.default is inspect.Parameter.empty else param.default
        fields[param_name] = (annotation, default)

    return create_model(f"{tool_name}_args", **fields)
