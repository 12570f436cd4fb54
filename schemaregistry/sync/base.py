"""
BaseSynchronizer: lifecycle shared by the background discovery strategies.

Each synchronizer runs on one daemon thread, so passes never overlap, and
is torn down with `stop()`, which signals the loop and joins the thread.
"""

from __future__ import annotations

import threading
from abc import ABC, abstractmethod
from typing import TYPE_CHECKING, Optional

from schemaregistry.observability import get_logger, get_registry_instruments, get_tracer

if TYPE_CHECKING:
    from schemaregistry.registry import Registry


class BaseSynchronizer(ABC):
    """
    Abstract base for background synchronizers.

    Subclasses implement `_run()`, looping until `self._stop_event` is set,
    and may override `_on_start()` / `_on_stop()` for resource handling.
    """

    def __init__(self, registry: "Registry", name: str) -> None:
        self._registry = registry
        self._name = name
        self._log = get_logger(f"schemaregistry.sync.{name}")
        self._tracer = get_tracer(f"schemaregistry.sync.{name}")
        self._instruments = get_registry_instruments()

        self._stop_event = threading.Event()
        self._synced = threading.Event()
        self._thread: Optional[threading.Thread] = None

    @property
    def running(self) -> bool:
        return self._thread is not None and self._thread.is_alive()

    @property
    def synced(self) -> bool:
        return self._synced.is_set()

    def start(self) -> None:
        """Start the background thread. A no-op while already running."""
        if self.running:
            return

        self._stop_event.clear()
        self._on_start()
        self._thread = threading.Thread(
            target=self._run_forever,
            name=f"schemaregistry-{self._name}-sync",
            daemon=True,
        )
        self._thread.start()
        self._log.debug("Background sync started", extra={"strategy": self._name})

    def stop(self, timeout: Optional[float] = 10.0) -> None:
        """Signal the loop to finish, wait for it, then release resources."""
        self._stop_event.set()
        thread, self._thread = self._thread, None
        if thread is not None:
            thread.join(timeout)
            if thread.is_alive():
                self._log.warning(
                    "Background sync did not stop in time",
                    extra={"strategy": self._name, "timeout_sec": timeout},
                )
        self._on_stop()
        self._log.info("Background sync stopped", extra={"strategy": self._name})

    def wait_until_synced(self, timeout: Optional[float] = None) -> bool:
        """Block until the initial sync completed; False on timeout."""
        return self._synced.wait(timeout)

    def _run_forever(self) -> None:
        try:
            self._run()
        except Exception:  # noqa: BLE001
            self._log.exception("Background sync crashed", extra={"strategy": self._name})

    def _on_start(self) -> None:
        return None

    def _on_stop(self) -> None:
        return None

    @abstractmethod
    def _run(self) -> None:
        raise NotImplementedError
