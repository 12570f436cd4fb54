"""
Avro adapter backed by fastavro.
"""

from __future__ import annotations

import dataclasses
import json
from io import BytesIO
from typing import Any, Mapping, Optional

import fastavro
from pydantic import BaseModel

from schemaregistry.errors import SchemaParseError, SerializationError
from schemaregistry.formats.base import FormatAdapter, Unmarshaler


def _to_record(value: Any) -> Any:
    """Convert supported value shapes into the dict fastavro writes."""
    if isinstance(value, BaseModel):
        return value.model_dump()
    if dataclasses.is_dataclass(value) and not isinstance(value, type):
        return dataclasses.asdict(value)
    return value


def _check_records(node: Any) -> None:
    """Reject record definitions without a field list, which fastavro lets through."""
    if isinstance(node, list):
        for branch in node:
            _check_records(branch)
        return
    if not isinstance(node, Mapping):
        return
    if node.get("type") in ("record", "error"):
        fields = node.get("fields")
        if not isinstance(fields, list):
            raise ValueError(f"record {node.get('name')!r} has no fields list")
        for field in fields:
            if isinstance(field, Mapping):
                _check_records(field.get("type"))
    for key in ("type", "items", "values"):
        child = node.get(key)
        if isinstance(child, (Mapping, list)):
            _check_records(child)


def _from_record(record: Any, target: Optional[Any]) -> Any:
    if target is None:
        return record
    if isinstance(target, type) and issubclass(target, BaseModel):
        return target.model_validate(record)
    if isinstance(record, Mapping):
        return target(**record)
    return target(record)


class AvroUnmarshaler(Unmarshaler):
    def __init__(self, adapter: "AvroAdapter", data: bytes) -> None:
        self._adapter = adapter
        self._data = data

    def unmarshal(self, target: Optional[Any] = None) -> Any:
        """
        Read the payload and optionally build `target` from it.

        Args:
            target: None for the raw record, a pydantic model class, or any
                callable accepting the record fields as keyword arguments.
        """
        record = self._adapter.read(self._data)
        try:
            return _from_record(record, target)
        except Exception as exc:  # noqa: BLE001
            raise SerializationError(
                f"cannot build {target!r} from record of {self._adapter.label}"
            ) from exc


class AvroAdapter(FormatAdapter):
    """Serializes values against one parsed Avro schema."""

    def __init__(self, schema: str, label: str = "") -> None:
        super().__init__(schema, label)
        self._parsed: Any = None

    def init(self) -> None:
        try:
            raw = json.loads(self._schema)
            _check_records(raw)
            self._parsed = fastavro.parse_schema(raw)
        except Exception as exc:  # noqa: BLE001
            raise SchemaParseError(
                f"schema parsing error for {self.label}: {exc}"
            ) from exc

    def _parsed_schema(self) -> Any:
        if self._parsed is None:
            self.init()
        return self._parsed

    def serialize(self, value: Any) -> bytes:
        buf = BytesIO()
        try:
            fastavro.schemaless_writer(buf, self._parsed_schema(), _to_record(value))
        except SchemaParseError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise SerializationError(
                f"avro encoding failed for {self.label}: {exc}"
            ) from exc
        return buf.getvalue()

    def read(self, data: bytes) -> Any:
        try:
            return fastavro.schemaless_reader(BytesIO(data), self._parsed_schema())
        except SchemaParseError:
            raise
        except Exception as exc:  # noqa: BLE001
            raise SerializationError(
                f"avro decoding failed for {self.label}: {exc}"
            ) from exc

    def new_unmarshaler(self, data: bytes) -> Unmarshaler:
        return AvroUnmarshaler(self, data)
