"""
Pydantic models for payloads exchanged with the registry service.

Covers the REST responses (RegisteredSchema) and the JSON records the
registry writes to its compacted storage topic (SchemaLogKey/SchemaLogValue).
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, ConfigDict, Field, field_validator


class SchemaType(str, Enum):
    AVRO = "AVRO"
    PROTOBUF = "PROTOBUF"
    JSON = "JSON"


def _coerce_schema_type(value: Any) -> Any:
    # The registry omits schemaType for Avro schemas.
    if value is None or value == "":
        return SchemaType.AVRO
    if isinstance(value, str):
        return value.upper()
    return value


class RegisteredSchema(BaseModel):
    """
    A schema as returned by the registry REST API.

    `subject` and `version` are absent when the schema was fetched by id.
    """

    id: int = Field(ge=0)
    schema_str: str = Field(alias="schema")
    schema_type: SchemaType = Field(default=SchemaType.AVRO, alias="schemaType")
    subject: Optional[str] = None
    version: Optional[int] = Field(default=None, ge=1)

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    normalize_type = field_validator("schema_type", mode="before")(_coerce_schema_type)


class SchemaLogKey(BaseModel):
    """Key of a record on the registry's storage topic."""

    subject: str = ""
    keytype: str = ""
    version: int = 0

    model_config = ConfigDict(extra="ignore")


class SchemaLogValue(BaseModel):
    """Value of a SCHEMA record on the registry's storage topic."""

    subject: str = ""
    version: int = 0
    id: int = 0
    schema_str: str = Field(default="", alias="schema")
    deleted: bool = False
    schema_type: SchemaType = Field(default=SchemaType.AVRO, alias="schemaType")

    model_config = ConfigDict(populate_by_name=True, extra="ignore")

    normalize_type = field_validator("schema_type", mode="before")(_coerce_schema_type)
