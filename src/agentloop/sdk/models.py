"""Pydantic models for the workflow YAML schema consumed by ``agentloop``.

Example::

    version: "1"
    model:
      model: gemini/gemini-2.5-flash
      api_key: ${GEMINI_API_KEY}
    runner:
      max_history_turns: 10
      sessions_dir: .sessions
    agents:
      weather:
        type: llm
        instruction: You answer weather questions.
        tools: [my_tools.weather:get_weather]
      summary:
        type: llm
        instruction: Summarise the forecast in one line.
      forecast:
        type: sequential
        sub_agents: [weather, summary]
"""

from __future__ import annotations

from typing import Any, Literal

from pydantic import BaseModel, Field, model_validator


class TelemetrySettings(BaseModel):
    """Optional telemetry configuration."""

    enabled: bool = False
    otlp_endpoint: str | None = None


class RunnerSettings(BaseModel):
    """How the interactive runner keeps sessions."""

    max_history_turns: int = Field(default=10, ge=1)
    sessions_dir: str = ".sessions"


class AgentSpec(BaseModel):
    """One agent definition; which fields apply depends on ``type``."""

    type: Literal["llm", "sequential", "parallel", "loop"] = "llm"
    description: str = ""

    # llm (model also configures parallel synthesis)
    instruction: str | None = None
    model: dict[str, Any] | None = None
    tools: list[str] = []
    max_tool_rounds: int = Field(default=10, ge=1)
    tool_timeout: float | None = Field(default=None, gt=0)

    # workflows
    sub_agents: list[str] = []
    max_iterations: int | None = None
    stop_phrase: str | None = None
    synthesis_instruction: str | None = None

    @model_validator(mode="after")
    def _validate_kind(self) -> AgentSpec:
        if self.type == "llm":
            if self.sub_agents:
                msg = "llm agents cannot declare 'sub_agents'"
                raise ValueError(msg)
            return self

        if not self.sub_agents:
            msg = f"{self.type} agents require 'sub_agents'"
            raise ValueError(msg)
        if self.type == "loop":
            if self.max_iterations is None or self.max_iterations < 1:
                msg = "loop agents require 'max_iterations' >= 1"
                raise ValueError(msg)
        elif self.max_iterations is not None or self.stop_phrase is not None:
            msg = "'max_iterations' and 'stop_phrase' only apply to loop agents"
            raise ValueError(msg)
        return self


class WorkflowSpec(BaseModel):
    """A whole workflow file: default model, runner settings and named agents."""

    version: str = "1"
    name: str = ""
    model: dict[str, Any] = Field(default_factory=dict)
    runner: RunnerSettings = Field(default_factory=RunnerSettings)
    telemetry: TelemetrySettings | None = None
    agents: dict[str, AgentSpec]

    @model_validator(mode="after")
    def _validate_references(self) -> WorkflowSpec:
        names = set(self.agents)
        for agent_name, spec in self.agents.items():
            for child in spec.sub_agents:
                if child not in names:
                    msg = f"agent '{agent_name}' references unknown sub-agent '{child}'"
                    raise ValueError(msg)
                if child == agent_name:
                    msg = f"agent '{agent_name}' cannot contain itself"
                    raise ValueError(msg)

        for agent_name in self.agents:
            self._check_cycle(agent_name, [])
        return self

    def _check_cycle(self, name: str, path: list[str]) -> None:
        if name in path:
            cycle = " -> ".join([*path[path.index(name) :], name])
            msg = f"workflow contains a cycle: {cycle}"
            raise ValueError(msg)
        for child in self.agents[name].sub_agents:
            self._check_cycle(child, [*path, name])
