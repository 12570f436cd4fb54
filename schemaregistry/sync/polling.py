"""
Polling synchronizer: periodically diff the registry's listings against the cache.
"""

from __future__ import annotations

from typing import TYPE_CHECKING

from schemaregistry.sync.base import BaseSynchronizer

if TYPE_CHECKING:
    from schemaregistry.registry import Registry


class PollingSynchronizer(BaseSynchronizer):
    """
    Every `interval_sec`, look for versions of locally registered subjects
    that the cache does not hold yet and add them with the decode callback
    of the nearest lower cached version. Versions below every cached one
    fall back to the callback on file. Subjects never registered locally
    are ignored.
    """

    def __init__(self, registry: "Registry", interval_sec: float) -> None:
        super().__init__(registry, "poll")
        if interval_sec <= 0:
            raise ValueError("interval_sec must be positive")
        self._interval = interval_sec
        # Polling has no backlog to wait for.
        self._synced.set()

    @property
    def interval_sec(self) -> float:
        return self._interval

    def _run(self) -> None:
        while not self._stop_event.wait(self._interval):
            self.sync_once()

    def sync_once(self) -> int:
        """
        Run one discovery pass.

        Returns:
            Number of schema versions added to the cache.
        """
        client = self._registry.client
        cache = self._registry.cache
        added = 0

        self._log.debug("Looking for new schemas")
        with self._tracer.start_as_current_span("sync.poll_pass"):
            try:
                subjects = client.list_subjects()
            except Exception as exc:  # noqa: BLE001
                self._log.error("Error getting subjects", extra={"error": str(exc)})
                return 0

            for name in subjects:
                if not cache.is_registered(name):
                    continue

                try:
                    versions = client.list_versions(name)
                except Exception as exc:  # noqa: BLE001
                    self._log.error(
                        "Error getting schema versions",
                        extra={"subject": name, "error": str(exc)},
                    )
                    continue

                for version in versions:
                    if cache.has_version(name, version):
                        continue
                    try:
                        record = client.get_schema(name, version)
                        if record.subject is None:
                            record = record.model_copy(update={"subject": name})
                        previous = cache.previous_version(name, version)
                        inherited = previous.unmarshaler_func if previous is not None else None
                        entry = self._registry.add_schema(record, unmarshaler_func=inherited)
                    except Exception as exc:  # noqa: BLE001
                        self._log.error(
                            "New schema add failed",
                            extra={"subject": name, "version": version, "error": str(exc)},
                        )
                        continue

                    added += 1
                    self._instruments.schemas_added.add(1, {"strategy": "poll"})
                    self._log.info(
                        "New schema registered",
                        extra={"subject": name, "version": int(entry.version), "schema_id": entry.id},
                    )
                    self._registry.print_subjects(entry)

        self._log.debug("Looking for new schemas completed", extra={"added": added})
        return added
