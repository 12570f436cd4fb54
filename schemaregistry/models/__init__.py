"""
Data models for the schema registry client.
"""

from schemaregistry.models.schema import (
    RegisteredSchema,
    SchemaLogKey,
    SchemaLogValue,
    SchemaType,
)
from schemaregistry.models.subject import Subject
from schemaregistry.models.version import Version

__all__ = [
    "RegisteredSchema",
    "SchemaLogKey",
    "SchemaLogValue",
    "SchemaType",
    "Subject",
    "Version",
]
