"""
Observability bootstrap for processes embedding the registry client.
"""

import logging

from schemaregistry.observability.logging import init_logging
from schemaregistry.observability.metrics import init_metrics
from schemaregistry.observability.tracing import init_tracing


def init_observability(level: int = logging.INFO, export: bool = True) -> None:
    """
    Initialize logging, tracing, and metrics for the current process.

    Call once during startup.

    Args:
        level: Logging verbosity level for the root logger.
        export: Wire the OTLP exporters; False keeps JSON stdout logging only.
    """
    init_logging(level=level, export=export)
    if export:
        init_tracing()
        init_metrics()
