"""
Factory functions for OTLP exporters (gRPC logging, metrics, trace) and the
shared OpenTelemetry resource describing this process.
"""

import os
from typing import Dict, Optional

from opentelemetry.exporter.otlp.proto.grpc._log_exporter import OTLPLogExporter
from opentelemetry.exporter.otlp.proto.grpc.metric_exporter import OTLPMetricExporter
from opentelemetry.exporter.otlp.proto.grpc.trace_exporter import OTLPSpanExporter
from opentelemetry.sdk.resources import Resource
from opentelemetry.semconv.attributes.service_attributes import SERVICE_NAME

SERVICE_NAME_VALUE: str = os.getenv("OTEL_SERVICE_NAME", "schemaregistry-client")
RESOURCE_ATTRIBUTES: str = os.getenv(
    "OTEL_RESOURCE_ATTRIBUTES",
    "deployment.environment=local",
)
DEFAULT_ENDPOINT: str = os.getenv("OTEL_EXPORTER_OTLP_ENDPOINT", "http://otel-collector:4317")
DEFAULT_HEADERS: Optional[str] = os.getenv("OTEL_EXPORTER_OTLP_HEADERS")


def _parse_pairs(raw: Optional[str]) -> Dict[str, str]:
    """Parse a `k1=v1,k2=v2` string, skipping malformed entries."""
    if not raw:
        return {}
    return {
        kv.split("=", 1)[0].strip(): kv.split("=", 1)[1].strip()
        for kv in raw.split(",")
        if "=" in kv
    }


def build_resource() -> Resource:
    """
    Build the Resource attached to every log, span and metric.

    Returns:
        A Resource carrying the service name plus OTEL_RESOURCE_ATTRIBUTES.
    """
    return Resource.create(
        {SERVICE_NAME: SERVICE_NAME_VALUE, **_parse_pairs(RESOURCE_ATTRIBUTES)}
    )


def _common_kwargs() -> Dict[str, object]:
    """
    Build common keyword arguments for all OTLP exporters.

    Returns:
        A dictionary containing endpoint, headers and insecure flag.
    """
    return {
        "endpoint": DEFAULT_ENDPOINT,
        "headers": _parse_pairs(DEFAULT_HEADERS) or None,
        "insecure": True,
    }


def build_trace_exporter() -> OTLPSpanExporter:
    """Create an OTLP span exporter."""
    return OTLPSpanExporter(**_common_kwargs())


def build_metric_exporter() -> OTLPMetricExporter:
    """Create an OTLP metric exporter."""
    return OTLPMetricExporter(**_common_kwargs())


def build_log_exporter() -> OTLPLogExporter:
    """Create an OTLP log exporter."""
    return OTLPLogExporter(**_common_kwargs())
