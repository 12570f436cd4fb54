"""
Entrypoint: keep a schema cache warm and report what it holds.

Registers the subjects listed in REGISTRY__SUBJECTS, starts the configured
background sync and runs until SIGINT/SIGTERM. Useful to verify registry
and storage-topic connectivity for a deployment.
"""

import logging
import signal
import threading
from typing import Any

from schemaregistry.config import AppConfig
from schemaregistry.formats import Unmarshaler
from schemaregistry.models import Version
from schemaregistry.observability import get_logger, init_observability
from schemaregistry.registry import Registry


def _record(unmarshaler: Unmarshaler) -> Any:
    return unmarshaler.unmarshal()


def main() -> None:
    config = AppConfig.load()
    level = getattr(logging, config.service.log_level.upper(), logging.INFO)
    init_observability(level=level)
    log = get_logger("schemaregistry.main")

    registry = Registry.from_config(config)
    for name, version in config.registry.subject_versions():
        registry.register(name, Version.ALL if version is None else version, _record)

    stopped = threading.Event()

    def _stop(*_: object) -> None:
        log.info("Shutdown signal received.")
        stopped.set()

    signal.signal(signal.SIGINT, _stop)
    signal.signal(signal.SIGTERM, _stop)

    with registry:
        registry.start_background_sync()
        log.info(
            "Schema registry client running",
            extra={"url": config.registry.url, "sync_mode": config.registry.sync_mode},
        )
        stopped.wait()


if __name__ == "__main__":
    main()
