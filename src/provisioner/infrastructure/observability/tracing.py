"""OpenTelemetry tracing configuration."""

from __future__ import annotations

from opentelemetry import trace
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource, SERVICE_NAME, SERVICE_VERSION
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import (
    BatchSpanProcessor,
    ConsoleSpanExporter,
)

from provisioner.config import ObservabilitySettings


def setup_tracing(settings: ObservabilitySettings, console: bool = False) -> None:
    """Configure OpenTelemetry tracing.

    Without this call the global no-op tracer provider stays in place and
    spans opened by the runner cost nothing.
    """
    if not settings.tracing_enabled:
        return

    resource = Resource.create({
        SERVICE_NAME: settings.service_name,
        SERVICE_VERSION: "1.0.0",
    })

    provider = TracerProvider(resource=resource)
    provider.add_span_processor(
        BatchSpanProcessor(OTLPSpanExporter(endpoint=settings.otlp_endpoint))
    )
    if console:
        provider.add_span_processor(BatchSpanProcessor(ConsoleSpanExporter()))

    trace.set_tracer_provider(provider)


def get_tracer(name: str = "provisioner") -> trace.Tracer:
    """Get a tracer instance."""
    return trace.get_tracer(name)
