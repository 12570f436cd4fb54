"""
Encode/decode handles returned by the Registry.
"""

from __future__ import annotations

from typing import TYPE_CHECKING, Any

from schemaregistry.core import envelope
from schemaregistry.errors import UnsupportedOperationError
from schemaregistry.models.subject import Subject

if TYPE_CHECKING:
    from schemaregistry.registry import Registry


class GenericDecoder:
    """
    Decode-only handle.

    Decodes any message whose schema id is cached (or resolvable through
    one registry refresh) and returns whatever the subject's decode
    callback produces.
    """

    def __init__(self, registry: "Registry") -> None:
        self._registry = registry

    def decode(self, data: bytes) -> Any:
        return self._registry.decode(data)

    def encode(self, value: Any) -> bytes:
        raise UnsupportedOperationError("generic decoder does not support encoding of messages")


class Encoder(GenericDecoder):
    """
    Handle bound to one (subject, version).

    `encode` always uses the bound schema; `decode` follows the schema id
    embedded in the message, so it also reads other versions.
    """

    def __init__(self, registry: "Registry", subject: Subject) -> None:
        super().__init__(registry)
        self._subject = subject

    @property
    def subject(self) -> Subject:
        return self._subject

    @property
    def schema(self) -> str:
        return self._subject.schema

    def encode(self, value: Any) -> bytes:
        """
        Serialize `value` with the bound schema and prepend the wire envelope.

        Raises:
            SerializationError: The value does not fit the schema.
            TypeMismatchError: The value is not of the kind the format requires.
        """
        payload = self._subject.adapter.serialize(value)
        return envelope.encode(self._subject.id, payload)

    def __repr__(self) -> str:
        return f"Encoder({self._subject})"
