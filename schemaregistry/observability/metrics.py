"""
Metrics initialization and meter provider for OpenTelemetry.
"""

from typing import NamedTuple, Optional

from opentelemetry import metrics
from opentelemetry.metrics import Counter, Meter
from opentelemetry.sdk.metrics import MeterProvider
from opentelemetry.sdk.metrics.export import PeriodicExportingMetricReader

from schemaregistry.observability.otlp_exporter import (
    SERVICE_NAME_VALUE,
    build_metric_exporter,
    build_resource,
)

_provider: Optional[MeterProvider] = None


class RegistryInstruments(NamedTuple):
    """Counters emitted by the registry cache and synchronizers."""

    cache_hits: Counter
    cache_misses: Counter
    schemas_added: Counter


def init_metrics() -> None:
    """
    Install a global MeterProvider with a periodic OTLP exporter.

    Idempotent; later calls keep the first provider.
    """
    global _provider

    if _provider is not None:
        return

    reader = PeriodicExportingMetricReader(build_metric_exporter())
    _provider = MeterProvider(resource=build_resource(), metric_readers=[reader])
    metrics.set_meter_provider(_provider)


def get_meter() -> Meter:
    """
    Retrieve the Meter for this service.

    Instruments created before `init_metrics` are bound through the API's
    proxy provider and start recording once a provider is installed.
    """
    return metrics.get_meter(SERVICE_NAME_VALUE)


def get_registry_instruments() -> RegistryInstruments:
    """
    Create the counters used by Registry and the synchronizers.
    """
    meter = get_meter()

    return RegistryInstruments(
        cache_hits=meter.create_counter(
            name="schema_cache_hits",
            description="Schema id lookups answered from the local cache",
            unit="1",
        ),
        cache_misses=meter.create_counter(
            name="schema_cache_misses",
            description="Schema id lookups that required a registry refresh",
            unit="1",
        ),
        schemas_added=meter.create_counter(
            name="schema_sync_added",
            description="Schema versions discovered by background sync",
            unit="1",
        ),
    )
