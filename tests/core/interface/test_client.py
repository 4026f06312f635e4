"""Tests for LiteLLMProvider: unit tests with mocked LiteLLM."""

from __future__ import annotations

from typing import Any
from unittest.mock import AsyncMock, MagicMock, patch

import pytest

from agentloop.core.interface.client import LiteLLMProvider
from agentloop.core.interface.config import ModelConfig
from agentloop.core.interface.models import Message
from agentloop.tools.base import FunctionTool


def _make_mock_response(
    content: str | None = "Hello!",
    tool_calls: list[Any] | None = None,
    finish_reason: str = "stop",
) -> MagicMock:
    """Create a mock LiteLLM response object."""
    message = MagicMock()
    message.content = content
    message.tool_calls = tool_calls

    choice = MagicMock()
    choice.message = message
    choice.finish_reason = finish_reason

    usage = MagicMock()
    usage.prompt_tokens = 10
    usage.completion_tokens = 5
    usage.total_tokens = 15

    response = MagicMock()
    response.choices = [choice]
    response.usage = usage
    return response


def ping(host: str) -> dict[str, Any]:
    """Ping a host."""
    return {"host": host}


class TestModelConfig:
    def test_provider_extraction(self) -> None:
        assert ModelConfig(model="gemini/gemini-2.5-flash").provider == "gemini"

    def test_provider_no_prefix(self) -> None:
        assert ModelConfig(model="gpt-4o").provider == "openai"

    def test_completion_kwargs_omits_unset_credentials(self) -> None:
        kwargs = ModelConfig(model="gemini/gemini-2.5-flash", extra={"temperature": 0}).completion_kwargs()
        assert kwargs == {"model": "gemini/gemini-2.5-flash", "temperature": 0}

    def test_completion_kwargs_model_override(self) -> None:
        config = ModelConfig(model="openai/gpt-4o", api_key="sk-test")
        kwargs = config.completion_kwargs("openai/gpt-4o-mini")
        assert kwargs["model"] == "openai/gpt-4o-mini"
        assert kwargs["api_key"] == "sk-test"

    def test_extra_cannot_override_model(self) -> None:
        config = ModelConfig(model="openai/gpt-4o", extra={"model": "other"})
        assert config.completion_kwargs()["model"] == "openai/gpt-4o"


class TestLiteLLMProvider:
    @pytest.fixture
    def acompletion(self) -> Any:
        with patch(
            "agentloop.core.interface.client.litellm.acompletion",
            new_callable=AsyncMock,
            return_value=_make_mock_response(),
        ) as mock:
            yield mock

    async def test_basic_call(self, acompletion: AsyncMock) -> None:
        provider = LiteLLMProvider(ModelConfig(model="openai/gpt-4o", api_key="sk-test"))

        result = await provider.generate_content(
            "openai/gpt-4o", Message.system("Be brief."), [], [], Message.user("hi")
        )

        assert result.role == "model"
        assert result.text == "Hello!"
        kwargs = acompletion.await_args.kwargs
        assert kwargs["model"] == "openai/gpt-4o"
        assert kwargs["api_key"] == "sk-test"
        assert kwargs["messages"] == [
            {"role": "system", "content": "Be brief."},
            {"role": "user", "content": "hi"},
        ]
        assert "tools" not in kwargs
        assert "api_base" not in kwargs

    async def test_per_call_model_wins(self, acompletion: AsyncMock) -> None:
        provider = LiteLLMProvider(ModelConfig(model="openai/gpt-4o"))

        await provider.generate_content("anthropic/claude-sonnet", None, [], [], Message.user("hi"))

        assert acompletion.await_args.kwargs["model"] == "anthropic/claude-sonnet"

    async def test_falls_back_to_config_model(self, acompletion: AsyncMock) -> None:
        provider = LiteLLMProvider(ModelConfig(model="openai/gpt-4o"))

        await provider.generate_content("", None, [], [], Message.user("hi"))

        assert acompletion.await_args.kwargs["model"] == "openai/gpt-4o"

    async def test_tools_and_extra_kwargs(self, acompletion: AsyncMock) -> None:
        config = ModelConfig(model="openai/gpt-4o", api_base="http://localhost:4000", extra={"temperature": 0.2})
        provider = LiteLLMProvider(config)

        await provider.generate_content(
            "openai/gpt-4o", None, [FunctionTool.from_callable(ping)], [], Message.user("ping x")
        )

        kwargs = acompletion.await_args.kwargs
        assert kwargs["temperature"] == 0.2
        assert kwargs["api_base"] == "http://localhost:4000"
        assert kwargs["tools"][0]["function"]["name"] == "ping"

    async def test_errors_propagate(self) -> None:
        provider = LiteLLMProvider(ModelConfig(model="openai/gpt-4o"))
        with patch(
            "agentloop.core.interface.client.litellm.acompletion",
            new_callable=AsyncMock,
            side_effect=RuntimeError("rate limited"),
        ):
            with pytest.raises(RuntimeError, match="rate limited"):
                await provider.generate_content("openai/gpt-4o", None, [], [], Message.user("hi"))
