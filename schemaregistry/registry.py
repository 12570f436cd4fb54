"""
Registry: the public face of the schema registry client.

Responsibilities:
- Resolve subjects through the registry service and cache them (register)
- Hand out encode/decode handles for cached subjects
- Decode any enveloped message, fetching an unknown schema id at most once
- Own the background synchronizer that discovers new versions
"""

from __future__ import annotations

import logging
import threading
from typing import Any, List, Optional, Union

from schemaregistry.config import AppConfig, KafkaConfig, RegistrySettings
from schemaregistry.core import envelope
from schemaregistry.core.cache import SubjectCache
from schemaregistry.encoder import Encoder, GenericDecoder
from schemaregistry.errors import NotRegisteredError, UnregisteredSubjectError
from schemaregistry.formats import UnmarshalerFunc, build_adapter
from schemaregistry.infra.changelog import ChangeLogSource, KafkaChangeLogSource
from schemaregistry.infra.registry_client import BaseRegistryClient, RegistryClient
from schemaregistry.models.schema import RegisteredSchema
from schemaregistry.models.subject import Subject
from schemaregistry.models.version import Version
from schemaregistry.observability import get_logger, get_registry_instruments, get_tracer
from schemaregistry.sync import BaseSynchronizer, ChangeLogSynchronizer, PollingSynchronizer

tracer = get_tracer("schemaregistry.registry")


class Registry:
    """
    Subject/version/id cache in front of a schema registry service.

    Example:

        registry = Registry(RegistryClient("http://schema-registry:8081"))
        registry.register("orders-value", Version.ALL, lambda u: u.unmarshal(Order))

        data = registry.with_latest_schema("orders-value").encode(order)
        order = registry.generic_decoder().decode(data)
    """

    def __init__(
        self,
        client: BaseRegistryClient,
        settings: Optional[RegistrySettings] = None,
        logger: Optional[logging.Logger] = None,
        change_log_source: Optional[ChangeLogSource] = None,
    ) -> None:
        """
        Args:
            client: Registry service client.
            settings: Sync configuration; defaults to no background sync.
            logger: Logger for structured logging.
            change_log_source: Storage-topic reader, required for sync_mode="changelog".
        """
        self._client = client
        self._settings = settings or RegistrySettings()
        self._log = logger or get_logger("schemaregistry.registry")
        self._cache = SubjectCache()
        self._change_log_source = change_log_source
        self._instruments = get_registry_instruments()

        self._sync_lock = threading.Lock()
        self._synchronizer: Optional[BaseSynchronizer] = None

    @classmethod
    def from_config(cls, config: Optional[AppConfig] = None) -> "Registry":
        """
        Build a Registry talking to the service described by `config`.

        Args:
            config: Application config; defaults to AppConfig.load().
        """
        config = config or AppConfig.load()
        settings = config.registry
        auth = (
            (settings.username, settings.password or "")
            if settings.username
            else None
        )
        client = RegistryClient(settings.url, timeout_sec=settings.timeout_sec, auth=auth)

        source: Optional[ChangeLogSource] = None
        if settings.sync_mode == "changelog":
            source = _build_change_log_source(config.kafka)

        return cls(client, settings=settings, change_log_source=source)

    @property
    def client(self) -> BaseRegistryClient:
        return self._client

    @property
    def cache(self) -> SubjectCache:
        return self._cache

    @property
    def settings(self) -> RegistrySettings:
        return self._settings

    @property
    def logger(self) -> logging.Logger:
        return self._log

    # Registration

    def register(
        self,
        subject: str,
        version: Union[Version, int],
        unmarshaler_func: Optional[UnmarshalerFunc] = None,
    ) -> None:
        """
        Fetch `subject` at `version` from the registry service and cache it.

        Args:
            subject: Subject name.
            version: A concrete version, Version.LATEST or Version.ALL.
            unmarshaler_func: Decode callback; None registers an encode-only subject.

        Raises:
            NotRegisteredError: The registry does not know the subject/version.
            NetworkError: The registry is unreachable.
            SchemaParseError: The schema cannot be compiled.
        """
        version = Version(version)

        if version == Version.ALL:
            versions = self._client.list_versions(subject)
            for v in versions:
                self.register(subject, v, unmarshaler_func)
            return

        with tracer.start_as_current_span("registry.register") as span:
            span.set_attribute("schema.subject", subject)
            span.set_attribute("schema.version", str(version))

            if version == Version.LATEST:
                record = self._client.get_latest_schema(subject)
            else:
                record = self._client.get_schema(subject, version)

            entry = self._build_subject(record, subject, unmarshaler_func)
            previous = self._cache.insert(entry, bind_unmarshaler=True)

        if previous is not None:
            self._log.warning(
                "Subject already registered; replacing",
                extra={"subject": subject, "version": int(entry.version)},
            )
        self._log.info(
            "Subject registered",
            extra={"subject": subject, "version": int(entry.version), "schema_id": entry.id},
        )

    def add_schema(
        self,
        record: RegisteredSchema,
        unmarshaler_func: Optional[UnmarshalerFunc] = None,
    ) -> Subject:
        """
        Cache a schema discovered after registration.

        Used by on-demand refresh and the synchronizers. Without an explicit
        callback the one on file for the subject name is reused.

        Raises:
            NotRegisteredError: The subject name was never registered locally.
            SchemaParseError: The schema cannot be compiled.
        """
        name = record.subject or ""
        if not self._cache.is_registered(name):
            raise NotRegisteredError(
                f"schema id {record.id} cannot be added: subject {name!r} not registered"
            )
        if unmarshaler_func is None:
            unmarshaler_func = self._cache.unmarshaler_for(name)

        entry = self._build_subject(record, name, unmarshaler_func)
        self._cache.insert(entry)
        return entry

    @staticmethod
    def _build_subject(
        record: RegisteredSchema,
        name: str,
        unmarshaler_func: Optional[UnmarshalerFunc],
    ) -> Subject:
        if record.version is None:
            raise NotRegisteredError(f"schema id {record.id} has no version for {name!r}")
        version = Version(record.version)
        adapter = build_adapter(record.schema_type, record.schema_str, label=f"{name}#{version}")
        return Subject(
            name=name,
            version=version,
            id=record.id,
            schema=record.schema_str,
            adapter=adapter,
            schema_type=record.schema_type,
            unmarshaler_func=unmarshaler_func,
        )

    # Handles

    def with_schema(self, subject: str, version: Union[Version, int]) -> Encoder:
        """
        Handle for a registered (subject, version).

        Raises:
            UnregisteredSubjectError: The pair was never registered (programmer error).
        """
        entry = self._cache.lookup_by_version(subject, version)
        if entry is None:
            raise UnregisteredSubjectError(f"unregistered subject {subject}:{version}")
        return Encoder(self, entry)

    def with_latest_schema(self, subject: str) -> Encoder:
        """
        Handle for the highest cached version of `subject`.

        Raises:
            UnregisteredSubjectError: The subject was never registered (programmer error).
        """
        entry = self._cache.lookup_latest(subject)
        if entry is None:
            raise UnregisteredSubjectError(f"unregistered subject [{subject}]")
        return Encoder(self, entry)

    def generic_decoder(self) -> GenericDecoder:
        return GenericDecoder(self)

    def encode(self, subject: str, version: Union[Version, int], value: Any) -> bytes:
        return self.with_schema(subject, version).encode(value)

    # Decoding

    def decode(self, data: bytes) -> Any:
        """
        Decode an enveloped message with the decode callback of its subject.

        Raises:
            EnvelopeError: The message has no valid envelope.
            NotRegisteredError: The schema id is unknown after one refresh, or
                its subject has no decode callback.
            NetworkError: The refresh could not reach the registry.
        """
        schema_id, payload = envelope.decode(data)
        entry = self._resolve_id(schema_id)

        if entry.unmarshaler_func is None:
            raise NotRegisteredError(f"decoder does not exist for {entry}")
        return entry.unmarshaler_func(entry.adapter.new_unmarshaler(payload))

    def _resolve_id(self, schema_id: int) -> Subject:
        """Lookup, refresh once on miss, lookup again."""
        for attempt in range(2):
            entry = self._cache.lookup_by_id(schema_id)
            if entry is not None:
                self._instruments.cache_hits.add(1)
                return entry
            if attempt == 0:
                self._instruments.cache_misses.add(1)
                self._refresh_id(schema_id)

        raise NotRegisteredError(f"schema id [{schema_id}] is not registered")

    def _refresh_id(self, schema_id: int) -> None:
        with tracer.start_as_current_span("registry.refresh") as span:
            span.set_attribute("schema.id", schema_id)

            record = self._client.get_schema_by_id(schema_id)
            entries = self._client.get_subject_versions_for_id(schema_id)

        owner = next((e for e in entries if self._cache.is_registered(e.subject)), None)
        if owner is None:
            names = ", ".join(sorted({e.subject for e in entries})) or "<none>"
            raise NotRegisteredError(
                f"schema id {schema_id} cannot be added to the registry; "
                f"subject {names} not registered"
            )

        entry = self.add_schema(
            record.model_copy(update={"subject": owner.subject, "version": owner.version})
        )
        self._log.info(
            "Schema fetched on demand",
            extra={"subject": entry.name, "version": int(entry.version), "schema_id": schema_id},
        )

    # Background sync

    def start_background_sync(self) -> Optional[BaseSynchronizer]:
        """
        Start the synchronizer selected by `settings.sync_mode`.

        For the change-log strategy this blocks until the initial backlog is
        applied (bounded by `initial_sync_timeout_sec`). Calling it again
        while a synchronizer runs returns the running one.
        """
        with self._sync_lock:
            if self._synchronizer is not None and self._synchronizer.running:
                return self._synchronizer

            mode = self._settings.sync_mode
            synchronizer: BaseSynchronizer
            if mode == "poll":
                synchronizer = PollingSynchronizer(self, self._settings.sync_interval_sec)
            elif mode == "changelog":
                if self._change_log_source is None:
                    raise RuntimeError("sync_mode is 'changelog' but no change-log source is configured")
                synchronizer = ChangeLogSynchronizer(self, self._change_log_source)
            else:
                self._log.debug("Background sync disabled")
                return None

            synchronizer.start()
            self._synchronizer = synchronizer

        if mode == "changelog":
            timeout = self._settings.initial_sync_timeout_sec
            if not synchronizer.wait_until_synced(timeout):
                self._log.warning(
                    "Change-log backlog not applied within timeout",
                    extra={"timeout_sec": timeout},
                )

        self.print_subjects()
        return synchronizer

    @property
    def synchronizer(self) -> Optional[BaseSynchronizer]:
        return self._synchronizer

    def wait_until_synced(self, timeout: Optional[float] = None) -> bool:
        synchronizer = self._synchronizer
        if synchronizer is None:
            return True
        return synchronizer.wait_until_synced(timeout)

    def close(self) -> None:
        """Stop the background synchronizer, if one is running."""
        with self._sync_lock:
            synchronizer, self._synchronizer = self._synchronizer, None
        if synchronizer is not None:
            synchronizer.stop()

    def __enter__(self) -> "Registry":
        return self

    def __exit__(self, *_: object) -> None:
        self.close()

    # Reporting

    def describe(self, subject: Optional[Subject] = None) -> str:
        """Render cached subjects (or just `subject`) as a text table."""
        rows: List[List[str]] = [["Schema Id", "Subject", "Version", "Decoder"]]
        entries = [subject] if subject is not None else self._cache.subjects()
        for entry in entries:
            rows.append([str(entry.id), entry.name, str(entry.version), str(entry.can_decode)])

        widths = [max(len(row[i]) for row in rows) for i in range(len(rows[0]))]
        border = "+" + "+".join("-" * (w + 2) for w in widths) + "+"
        lines = [border]
        for index, row in enumerate(rows):
            lines.append("| " + " | ".join(c.ljust(w) for c, w in zip(row, widths)) + " |")
            if index == 0:
                lines.append(border)
        lines.append(border)
        return "\n".join(lines)

    def print_subjects(self, subject: Optional[Subject] = None) -> None:
        self._log.info("Schemas\n%s", self.describe(subject))


def _build_change_log_source(kafka: KafkaConfig) -> ChangeLogSource:
    return KafkaChangeLogSource(
        bootstrap_servers=kafka.bootstrap_servers,
        topic=kafka.storage_topic,
        group_id=kafka.consumer_group,
    )
