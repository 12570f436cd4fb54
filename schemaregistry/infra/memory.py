"""
In-memory stand-ins for the registry service and the change-log topic.

Used by the test-suite and by examples that run without a registry. The
registry double follows the real service's id rules: an identical schema
body keeps its id across subjects and versions.
"""

from __future__ import annotations

import json
import queue
import threading
from collections import Counter
from typing import Dict, List, Optional, Tuple

from schemaregistry.errors import NotRegisteredError
from schemaregistry.infra.changelog import ChangeLogEvent, ChangeLogSource
from schemaregistry.infra.registry_client import BaseRegistryClient, SubjectVersion
from schemaregistry.models.schema import RegisteredSchema, SchemaType


class InMemoryRegistryClient(BaseRegistryClient):
    """Thread-safe registry double. `calls` counts invocations per operation."""

    def __init__(self) -> None:
        self._lock = threading.Lock()
        self._subjects: Dict[str, Dict[int, RegisteredSchema]] = {}
        self._ids: Dict[int, RegisteredSchema] = {}
        self._next_id = 1
        self.calls: Counter = Counter()

    def set_schema(
        self,
        subject: str,
        schema: str,
        version: int,
        schema_id: Optional[int] = None,
        schema_type: SchemaType = SchemaType.AVRO,
    ) -> RegisteredSchema:
        """
        Store `schema` under an explicit (subject, version).

        Without `schema_id` the id is reused for a known body or allocated.
        """
        with self._lock:
            if schema_id is None:
                schema_id = self._id_for(schema)
            self._next_id = max(self._next_id, schema_id + 1)
            record = RegisteredSchema(
                id=schema_id,
                schema_str=schema,
                schema_type=schema_type,
                subject=subject,
                version=version,
            )
            self._subjects.setdefault(subject, {})[version] = record
            self._ids.setdefault(schema_id, record)
            return record

    def _id_for(self, schema: str) -> int:
        for schema_id, record in self._ids.items():
            if record.schema_str == schema:
                return schema_id
        return self._next_id

    def _versions(self, subject: str) -> Dict[int, RegisteredSchema]:
        versions = self._subjects.get(subject)
        if not versions:
            raise NotRegisteredError(f"subject {subject!r} not found")
        return versions

    def list_subjects(self) -> List[str]:
        with self._lock:
            self.calls["list_subjects"] += 1
            return sorted(self._subjects)

    def list_versions(self, subject: str) -> List[int]:
        with self._lock:
            self.calls["list_versions"] += 1
            return sorted(self._versions(subject))

    def get_schema(self, subject: str, version: int) -> RegisteredSchema:
        with self._lock:
            self.calls["get_schema"] += 1
            versions = self._versions(subject)
            if int(version) not in versions:
                raise NotRegisteredError(f"version {version} of {subject!r} not found")
            return versions[int(version)]

    def get_latest_schema(self, subject: str) -> RegisteredSchema:
        with self._lock:
            self.calls["get_latest_schema"] += 1
            versions = self._versions(subject)
            return versions[max(versions)]

    def get_schema_by_id(self, schema_id: int) -> RegisteredSchema:
        with self._lock:
            self.calls["get_schema_by_id"] += 1
            record = self._ids.get(schema_id)
            if record is None:
                raise NotRegisteredError(f"schema id {schema_id} not found")
            return RegisteredSchema(
                id=record.id,
                schema_str=record.schema_str,
                schema_type=record.schema_type,
            )

    def get_subject_versions_for_id(self, schema_id: int) -> List[SubjectVersion]:
        with self._lock:
            self.calls["get_subject_versions_for_id"] += 1
            entries = [
                SubjectVersion(subject=subject, version=version)
                for subject, versions in sorted(self._subjects.items())
                for version, record in sorted(versions.items())
                if record.id == schema_id
            ]
            if not entries:
                raise NotRegisteredError(f"schema id {schema_id} not found")
            return entries

    def register_schema(
        self,
        subject: str,
        schema: str,
        schema_type: SchemaType = SchemaType.AVRO,
    ) -> int:
        with self._lock:
            versions = self._subjects.get(subject, {})
            for record in versions.values():
                if record.schema_str == schema:
                    return record.id
            next_version = max(versions, default=0) + 1
        return self.set_schema(subject, schema, next_version, schema_type=schema_type).id


class InMemoryChangeLogSource(ChangeLogSource):
    """
    Queue-backed change-log.

    Records appended before `mark_end()` form the initial backlog; the
    partition-end marker is delivered after them.
    """

    def __init__(self) -> None:
        self._events: "queue.Queue[ChangeLogEvent]" = queue.Queue()
        self._offset = 0
        self.opened = False
        self.closed = False

    def append(self, key: Optional[bytes], value: Optional[bytes]) -> None:
        self._events.put(ChangeLogEvent(key=key, value=value, offset=self._offset))
        self._offset += 1

    def append_schema(
        self,
        subject: str,
        version: int,
        schema_id: int,
        schema: str,
        keytype: str = "SCHEMA",
        deleted: bool = False,
    ) -> None:
        """Append a record shaped like the registry's own storage records."""
        key, value = schema_record(subject, version, schema_id, schema, keytype, deleted)
        self.append(key, value)

    def mark_end(self) -> None:
        self._events.put(ChangeLogEvent(offset=self._offset, partition_end=True))

    def open(self) -> None:
        self.opened = True

    def poll(self, timeout: float) -> Optional[ChangeLogEvent]:
        try:
            return self._events.get(timeout=timeout)
        except queue.Empty:
            return None

    def close(self) -> None:
        self.closed = True


def schema_record(
    subject: str,
    version: int,
    schema_id: int,
    schema: str,
    keytype: str = "SCHEMA",
    deleted: bool = False,
) -> Tuple[bytes, bytes]:
    """Build JSON key/value bytes for a storage-topic SCHEMA record."""
    key = {"keytype": keytype, "subject": subject, "version": version, "magic": 1}
    value = {
        "subject": subject,
        "version": version,
        "id": schema_id,
        "schema": schema,
        "deleted": deleted,
    }
    return json.dumps(key).encode("utf-8"), json.dumps(value).encode("utf-8")
