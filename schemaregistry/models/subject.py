"""
Subject: one registered (subject name, version) pair held by the cache.
"""

from __future__ import annotations

from dataclasses import dataclass, field
from typing import TYPE_CHECKING, Optional

from schemaregistry.models.schema import SchemaType
from schemaregistry.models.version import Version

if TYPE_CHECKING:
    from schemaregistry.formats.base import FormatAdapter, UnmarshalerFunc


@dataclass(frozen=True)
class Subject:
    """
    Immutable cache entry for a registered schema version.

    A new Subject replaces an old one on update; fields are never mutated,
    so readers holding a reference always see a consistent record.
    """

    name: str
    version: Version
    id: int
    schema: str
    adapter: "FormatAdapter" = field(repr=False, compare=False)
    schema_type: SchemaType = SchemaType.AVRO
    unmarshaler_func: Optional["UnmarshalerFunc"] = field(
        default=None, repr=False, compare=False
    )

    def __str__(self) -> str:
        return f"{self.name}#{self.version}(Schema ID:{self.id})"

    @property
    def can_decode(self) -> bool:
        return self.unmarshaler_func is not None
