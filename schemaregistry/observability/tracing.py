"""
OpenTelemetry tracing initialization and tracer helper.
"""

from opentelemetry import trace
from opentelemetry.sdk.trace import TracerProvider
from opentelemetry.sdk.trace.export import BatchSpanProcessor
from opentelemetry.trace import Tracer

from schemaregistry.observability.otlp_exporter import (
    SERVICE_NAME_VALUE,
    build_resource,
    build_trace_exporter,
)


def init_tracing() -> None:
    """
    Install a global TracerProvider exporting spans over OTLP.

    Until this is called, tracers returned by `get_tracer` are no-ops.
    """
    provider = TracerProvider(resource=build_resource())
    provider.add_span_processor(BatchSpanProcessor(build_trace_exporter()))
    trace.set_tracer_provider(provider)


def get_tracer(name: str | None = None) -> Tracer:
    """
    Get a Tracer for the given instrumentation scope.

    Args:
        name: Scope name for the tracer. Defaults to the service name.
    """
    return trace.get_tracer(name or SERVICE_NAME_VALUE)
