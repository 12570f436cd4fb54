"""
Change-log synchronizer: tail the registry's compacted storage topic.

    STARTING -> CATCHING_UP -> STEADY

The backlog is replayed from the earliest offset. Reaching the end of the
partition moves the state to STEADY and releases `wait_until_synced`;
later records are applied the same way without any signal.

A new version inherits the decode callback of the nearest lower cached
version of its subject. This assumes forward compatibility between versions
and is not checked against the registry's compatibility settings.
"""

from __future__ import annotations

from enum import Enum
from typing import TYPE_CHECKING, Optional

from pydantic import ValidationError

from schemaregistry.infra.changelog import ChangeLogSource
from schemaregistry.models.schema import RegisteredSchema, SchemaLogKey, SchemaLogValue
from schemaregistry.models.subject import Subject
from schemaregistry.sync.base import BaseSynchronizer

if TYPE_CHECKING:
    from schemaregistry.registry import Registry

SCHEMA_KEYTYPE = "SCHEMA"


class SyncState(str, Enum):
    STARTING = "starting"
    CATCHING_UP = "catching_up"
    STEADY = "steady"
    STOPPED = "stopped"


class ChangeLogSynchronizer(BaseSynchronizer):
    def __init__(
        self,
        registry: "Registry",
        source: ChangeLogSource,
        poll_timeout_sec: float = 1.0,
    ) -> None:
        super().__init__(registry, "changelog")
        self._source = source
        self._poll_timeout = poll_timeout_sec
        self._state = SyncState.STARTING

    @property
    def state(self) -> SyncState:
        return self._state

    def _on_start(self) -> None:
        self._state = SyncState.STARTING
        self._synced.clear()
        self._log.info("Background sync started")
        self._source.open()
        self._state = SyncState.CATCHING_UP

    def _on_stop(self) -> None:
        self._source.close()
        self._state = SyncState.STOPPED

    def _run(self) -> None:
        while not self._stop_event.is_set():
            try:
                event = self._source.poll(self._poll_timeout)
            except Exception as exc:  # noqa: BLE001
                self._log.error("Change-log poll failed", extra={"error": str(exc)})
                self._stop_event.wait(self._poll_timeout)
                continue

            if event is None:
                continue
            if event.partition_end:
                self._mark_synced()
                continue
            self.apply(event.key, event.value)

    def _mark_synced(self) -> None:
        if self._state is SyncState.STEADY:
            return
        self._state = SyncState.STEADY
        self._synced.set()
        self._log.info("Background sync done", extra={"subjects": len(self._registry.cache)})
        self._registry.print_subjects()

    def apply(self, key: Optional[bytes], value: Optional[bytes]) -> Optional[Subject]:
        """
        Apply one storage-topic record to the cache.

        Returns:
            The Subject added, or None when the record was ignored.
        """
        if not key or not value:
            return None

        try:
            log_key = SchemaLogKey.model_validate_json(key)
            log_value = SchemaLogValue.model_validate_json(value)
        except ValidationError as exc:
            self._log.error("Cannot decode change-log record", extra={"error": str(exc)})
            return None

        if log_key.keytype != SCHEMA_KEYTYPE or not log_value.subject or log_value.deleted:
            return None

        cache = self._registry.cache
        name, version = log_value.subject, log_value.version
        if not cache.is_registered(name) or cache.has_version(name, version):
            return None

        previous = cache.previous_version(name, version)
        if previous is None or previous.unmarshaler_func is None:
            return None

        try:
            record = RegisteredSchema(
                id=log_value.id,
                schema_str=log_value.schema_str,
                schema_type=log_value.schema_type,
                subject=name,
                version=version,
            )
            entry = self._registry.add_schema(record, unmarshaler_func=previous.unmarshaler_func)
        except Exception as exc:  # noqa: BLE001
            self._log.error(
                "New schema add failed",
                extra={"subject": name, "version": version, "error": str(exc)},
            )
            return None

        self._instruments.schemas_added.add(1, {"strategy": "changelog"})
        self._log.info(
            "New schema registered",
            extra={"subject": name, "version": version, "schema_id": entry.id, "inherited_from": int(previous.version)},
        )
        if self._state is SyncState.STEADY:
            self._registry.print_subjects(entry)
        return entry
