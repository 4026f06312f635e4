"""Per-agent model settings handed to a :class:`ModelProvider` factory."""

from typing import Any

from pydantic import BaseModel, ConfigDict, Field


class ModelConfig(BaseModel):
    """Which model an agent talks to and how to reach it.

    ``model`` follows LiteLLM naming (``gemini/gemini-2.5-flash``,
    ``openai/gpt-4o``).  Anything in ``extra`` (temperature, max_tokens,
    timeout, ...) is passed through to the completion call untouched.
    """

    model_config = ConfigDict(frozen=True)

    model: str
    api_key: str | None = None
    api_base: str | None = None
    extra: dict[str, Any] = Field(default_factory=lambda: dict[str, Any]())

    @property
    def provider(self) -> str:
        """Backend prefix of ``model``; bare names are OpenAI's."""
        prefix, sep, _ = self.model.partition("/")
        return prefix if sep else "openai"

    def completion_kwargs(self, model: str | None = None) -> dict[str, Any]:
        """Keyword arguments for one completion call.

        *model* overrides ``self.model``; credentials are only included when set.
        """
        kwargs: dict[str, Any] = {**self.extra, "model": model or self.model}
        for key in ("api_key", "api_base"):
            value = getattr(self, key)
            if value:
                kwargs[key] = value
        return kwargs
