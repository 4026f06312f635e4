"""Tracing for agentloop, on top of the OpenTelemetry API.

Library code only ever calls :func:`get_tracer`; with no SDK installed (or
none configured) every span is a no-op.  Front ends that want real traces
call :func:`configure_telemetry` once, which needs the ``otel`` extra
(``pip install agentloop[otel]``).

Span names used across the package: ``agent.process``, ``agent.round``,
``tool.execute``, ``model.generate``, ``workflow.sequential``,
``workflow.parallel`` and ``workflow.loop``.
"""

from __future__ import annotations

from typing import Any

from opentelemetry import trace
from opentelemetry.trace import Status, StatusCode

ATTR_AGENT_NAME = "agentloop.agent.name"
ATTR_AGENT_KIND = "agentloop.agent.kind"
ATTR_INVOCATION_ID = "agentloop.invocation.id"
ATTR_ROUND = "agentloop.round"
ATTR_MAX_ROUNDS = "agentloop.max_rounds"
ATTR_ITERATION = "agentloop.iteration"
ATTR_MAX_ITERATIONS = "agentloop.max_iterations"
ATTR_SUB_AGENTS = "agentloop.sub_agents"
ATTR_TOOL_CALLS = "agentloop.tool_calls"
ATTR_TOOL_NAME = "agentloop.tool.name"
ATTR_TOOL_ERROR = "agentloop.tool.error"
ATTR_MODEL = "agentloop.model"
ATTR_TOKENS_PROMPT = "agentloop.tokens.prompt"
ATTR_TOKENS_COMPLETION = "agentloop.tokens.completion"
ATTR_TOKENS_TOTAL = "agentloop.tokens.total"
ATTR_FINISH_REASON = "agentloop.finish_reason"
ATTR_ERROR_KIND = "agentloop.error.kind"

_INSTRUMENTATION_NAME = "agentloop"


def get_tracer(name: str | None = None) -> trace.Tracer:
    return trace.get_tracer(name or _INSTRUMENTATION_NAME)


def record_error(span: trace.Span, exc: BaseException) -> None:
    """Mark *span* as failed with *exc*, tagging agentloop's error kind if any."""
    span.record_exception(exc)
    span.set_status(Status(StatusCode.ERROR, str(exc)))
    kind = getattr(exc, "kind", None)
    if isinstance(kind, str):
        span.set_attribute(ATTR_ERROR_KIND, kind)


def configure_telemetry(
    *,
    service_name: str = "agentloop",
    export_to_console: bool = False,
    otlp_endpoint: str | None = None,
) -> None:
    """Install an SDK tracer provider with the requested exporters.

    Console export is synchronous (one span per line as it ends); OTLP
    export is batched.  With neither exporter requested the provider is
    still installed, so spans get real ids for log correlation.

    Raises:
        ImportError: If ``opentelemetry-sdk`` (or, for *otlp_endpoint*,
            ``opentelemetry-exporter-otlp``) is missing.
    """
    try:
        from opentelemetry.sdk.resources import Resource  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
        from opentelemetry.sdk.trace import TracerProvider  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
    except ImportError as exc:
        raise ImportError(
            "opentelemetry-sdk is required for configure_telemetry(); "
            "install it with: pip install agentloop[otel]"
        ) from exc

    provider = TracerProvider(resource=Resource.create({"service.name": service_name}))  # pyright: ignore[reportUnknownVariableType]
    for processor in _span_processors(export_to_console, otlp_endpoint):
        provider.add_span_processor(processor)  # pyright: ignore[reportUnknownMemberType]
    trace.set_tracer_provider(provider)  # pyright: ignore[reportUnknownArgumentType]


def _span_processors(export_to_console: bool, otlp_endpoint: str | None) -> list[Any]:
    from opentelemetry.sdk.trace.export import (  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
        BatchSpanProcessor,
        ConsoleSpanExporter,
        SimpleSpanProcessor,
    )

    processors: list[Any] = []
    if export_to_console:
        processors.append(SimpleSpanProcessor(ConsoleSpanExporter()))
    if otlp_endpoint:
        try:
            from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import (  # pyright: ignore[reportMissingImports,reportUnknownVariableType]
                OTLPSpanExporter,
            )
        except ImportError as exc:
            raise ImportError(
                "opentelemetry-exporter-otlp is required to export to "
                f"{otlp_endpoint}; install it with: pip install agentloop[otel]"
            ) from exc
        processors.append(BatchSpanProcessor(OTLPSpanExporter(endpoint=otlp_endpoint)))
    return processors
