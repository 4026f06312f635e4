"""Interface layer: message model, model-backend contract, LiteLLM backend."""

from agentloop.core.interface.config import ModelConfig
from agentloop.core.interface.models import (
    FunctionCallPart,
    FunctionResponsePart,
    Message,
    Part,
    TextPart,
    truncate_history,
)
from agentloop.core.interface.provider import ModelProvider

__all__ = [
    "FunctionCallPart",
    "FunctionResponsePart",
    "Message",
    "ModelConfig",
    "ModelProvider",
    "Part",
    "TextPart",
    "truncate_history",
]
