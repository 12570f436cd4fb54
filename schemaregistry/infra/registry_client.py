"""
Schema Registry client.

The registry facade only needs a handful of read operations; this module
defines that surface (BaseRegistryClient) and implements it on top of
confluent_kafka's SchemaRegistryClient, which speaks the Confluent REST API:

    GET  /subjects
    GET  /subjects/{subject}/versions
    GET  /subjects/{subject}/versions/{version|latest}
    GET  /schemas/ids/{id}
    GET  /schemas/ids/{id}/versions
    POST /subjects/{subject}/versions
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from typing import Any, Callable, Dict, List, Optional, Tuple, TypeVar

from confluent_kafka.schema_registry import Schema, SchemaRegistryClient
from confluent_kafka.schema_registry.error import SchemaRegistryError as ClientError
from pydantic import BaseModel, ValidationError

from schemaregistry.errors import NetworkError, NotRegisteredError, SchemaRegistryError
from schemaregistry.models.schema import RegisteredSchema, SchemaType
from schemaregistry.observability import get_logger, get_tracer

tracer = get_tracer("schemaregistry.client")

T = TypeVar("T")


class SubjectVersion(BaseModel):
    """One (subject, version) pair a schema id is registered under."""

    subject: str
    version: int


class BaseRegistryClient(ABC):
    """Registry service operations consumed by the registry facade."""

    @abstractmethod
    def list_subjects(self) -> List[str]:
        raise NotImplementedError

    @abstractmethod
    def list_versions(self, subject: str) -> List[int]:
        raise NotImplementedError

    @abstractmethod
    def get_schema(self, subject: str, version: int) -> RegisteredSchema:
        raise NotImplementedError

    @abstractmethod
    def get_latest_schema(self, subject: str) -> RegisteredSchema:
        raise NotImplementedError

    @abstractmethod
    def get_schema_by_id(self, schema_id: int) -> RegisteredSchema:
        raise NotImplementedError

    @abstractmethod
    def get_subject_versions_for_id(self, schema_id: int) -> List[SubjectVersion]:
        raise NotImplementedError

    @abstractmethod
    def register_schema(
        self,
        subject: str,
        schema: str,
        schema_type: SchemaType = SchemaType.AVRO,
    ) -> int:
        raise NotImplementedError

    def get_subject_for_id(self, schema_id: int) -> str:
        """Name of the first subject `schema_id` is registered under."""
        entries = self.get_subject_versions_for_id(schema_id)
        if not entries:
            raise NotRegisteredError(f"schema id {schema_id} has no subject")
        return entries[0].subject


class RegistryClient(BaseRegistryClient):
    """
    Adapter over confluent_kafka's SchemaRegistryClient.

    Error mapping:
        404                      -> NotRegisteredError
        5xx, transport failure   -> NetworkError
        other registry errors    -> SchemaRegistryError
    """

    def __init__(
        self,
        base_url: str,
        timeout_sec: float = 5.0,
        auth: Optional[Tuple[str, str]] = None,
        client: Optional[SchemaRegistryClient] = None,
        logger: Optional[logging.Logger] = None,
    ) -> None:
        """
        Args:
            base_url: Registry URL (e.g. http://schema-registry:8081). A missing
                scheme defaults to http.
            timeout_sec: Timeout for every HTTP request, in seconds.
            auth: Optional basic auth (user, password).
            client: Prebuilt SchemaRegistryClient; built from the other
                arguments when omitted.
            logger: Logger for structured logging.
        """
        if not base_url.startswith(("http://", "https://")):
            base_url = f"http://{base_url}"
        self._base_url = base_url.rstrip("/")

        if client is None:
            conf: Dict[str, Any] = {"url": self._base_url, "timeout": timeout_sec}
            if auth is not None:
                conf["basic.auth.user.info"] = f"{auth[0]}:{auth[1]}"
            client = SchemaRegistryClient(conf)
        self._client = client
        self._log = logger or get_logger("schemaregistry.client")

    @property
    def base_url(self) -> str:
        return self._base_url

    def _call(self, operation: str, func: Callable[..., T], *args: Any) -> T:
        """
        Run one library call inside a span and map its errors.

        Args:
            operation: Logical operation name used for spans and logs.
            func: Bound SchemaRegistryClient method.
        """
        with tracer.start_as_current_span(f"registry.{operation}") as span:
            span.set_attribute("registry.url", self._base_url)
            try:
                return func(*args)
            except ClientError as exc:
                status = exc.http_status_code
                span.set_attribute("http.status_code", status)
                if status == 404:
                    raise NotRegisteredError(f"{operation}: {exc.error_message}") from exc
                self._log.error(
                    "Schema registry returned an error",
                    extra={
                        "operation": operation,
                        "status_code": status,
                        "error_code": exc.error_code,
                        "error": exc.error_message,
                    },
                )
                if status >= 500:
                    raise NetworkError(f"{operation}: registry returned {status}") from exc
                raise SchemaRegistryError(
                    f"{operation}: registry returned {status}: {exc.error_message}"
                ) from exc
            except Exception as exc:  # noqa: BLE001
                self._log.error(
                    "Schema registry request failed",
                    extra={"operation": operation, "url": self._base_url, "error": str(exc)},
                )
                raise NetworkError(
                    f"{operation}: registry unreachable at {self._base_url}"
                ) from exc

    @staticmethod
    def _to_record(schema: Schema, **fields: Any) -> RegisteredSchema:
        try:
            return RegisteredSchema(
                schema_str=schema.schema_str,
                schema_type=schema.schema_type,
                **fields,
            )
        except ValidationError as exc:
            raise SchemaRegistryError(f"malformed schema response: {exc}") from exc

    def _registered(self, found: Any, subject: str) -> RegisteredSchema:
        return self._to_record(
            found.schema,
            id=found.schema_id,
            subject=found.subject or subject,
            version=found.version,
        )

    def list_subjects(self) -> List[str]:
        return list(self._call("list_subjects", self._client.get_subjects))

    def list_versions(self, subject: str) -> List[int]:
        versions = self._call("list_versions", self._client.get_versions, subject)
        return [int(v) for v in versions]

    def get_schema(self, subject: str, version: int) -> RegisteredSchema:
        found = self._call("get_schema", self._client.get_version, subject, int(version))
        return self._registered(found, subject)

    def get_latest_schema(self, subject: str) -> RegisteredSchema:
        found = self._call("get_latest_schema", self._client.get_latest_version, subject)
        return self._registered(found, subject)

    def get_schema_by_id(self, schema_id: int) -> RegisteredSchema:
        schema = self._call("get_schema_by_id", self._client.get_schema, int(schema_id))
        return self._to_record(schema, id=schema_id)

    def get_subject_versions_for_id(self, schema_id: int) -> List[SubjectVersion]:
        entries = self._call(
            "get_subject_versions_for_id", self._client.get_schema_versions, int(schema_id)
        )
        return [SubjectVersion(subject=e.subject, version=e.version) for e in entries]

    def register_schema(
        self,
        subject: str,
        schema: str,
        schema_type: SchemaType = SchemaType.AVRO,
    ) -> int:
        schema_id = self._call(
            "register_schema",
            self._client.register_schema,
            subject,
            Schema(schema, schema_type.value),
        )
        self._log.info("Schema registered", extra={"subject": subject, "schema_id": schema_id})
        return int(schema_id)
