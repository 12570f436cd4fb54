"""
Format adapters and the factory choosing one from the registry's schema type.
"""

from typing import Optional, Union

from schemaregistry.errors import SchemaParseError
from schemaregistry.formats.avro import AvroAdapter
from schemaregistry.formats.base import FormatAdapter, Unmarshaler, UnmarshalerFunc
from schemaregistry.formats.protobuf import ProtobufAdapter
from schemaregistry.models.schema import SchemaType


def build_adapter(
    schema_type: Optional[Union[SchemaType, str]],
    schema: str,
    label: str = "",
) -> FormatAdapter:
    """
    Construct and initialize the adapter for a schema body.

    A missing schema type means Avro, as in the registry's own responses.

    Raises:
        SchemaParseError: If the schema type is unsupported or the schema is invalid.
    """
    try:
        kind = SchemaType(schema_type.upper()) if schema_type else SchemaType.AVRO
    except ValueError as exc:
        raise SchemaParseError(f"unknown schema type {schema_type!r}") from exc

    adapter: FormatAdapter
    if kind is SchemaType.AVRO:
        adapter = AvroAdapter(schema, label)
    elif kind is SchemaType.PROTOBUF:
        adapter = ProtobufAdapter(schema, label)
    else:
        raise SchemaParseError(f"schema type {kind.value} is not supported")

    adapter.init()
    return adapter


__all__ = [
    "AvroAdapter",
    "FormatAdapter",
    "ProtobufAdapter",
    "Unmarshaler",
    "UnmarshalerFunc",
    "build_adapter",
]
