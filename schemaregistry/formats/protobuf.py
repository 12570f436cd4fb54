"""
Protobuf adapter.

Messages travel wrapped in `google.protobuf.Any`, so one decode path can
hand differently-typed messages to callers: the Any's type URL says what is
inside and `unmarshal(target)` unpacks into whatever message the caller asks for.
"""

from __future__ import annotations

from typing import Any, Optional

from google.protobuf import any_pb2
from google.protobuf.message import DecodeError, EncodeError, Message

from schemaregistry.errors import SerializationError, TypeMismatchError
from schemaregistry.formats.base import FormatAdapter, Unmarshaler


class ProtobufUnmarshaler(Unmarshaler):
    def __init__(self, adapter: "ProtobufAdapter", data: bytes) -> None:
        self._adapter = adapter
        self._data = data

    def unmarshal(self, target: Optional[Any] = None) -> Message:
        """
        Unpack the payload into `target`.

        Args:
            target: A protobuf message instance (filled in place) or a message
                class (instantiated).

        Raises:
            TypeMismatchError: If target is not a protobuf message.
            SerializationError: If the payload is not an Any or holds another type.
        """
        if isinstance(target, type) and issubclass(target, Message):
            target = target()
        if not isinstance(target, Message):
            raise TypeMismatchError(
                f"protobuf target must be a protocol message, got {type(target).__name__}"
            )

        wrapper = any_pb2.Any()
        try:
            wrapper.ParseFromString(self._data)
        except DecodeError as exc:
            raise SerializationError(
                f"failed to unmarshal Any wrapper for {self._adapter.label}"
            ) from exc

        if not wrapper.Unpack(target):
            raise SerializationError(
                f"payload holds {wrapper.type_url}, "
                f"not {target.DESCRIPTOR.full_name}"
            )
        return target


class ProtobufAdapter(FormatAdapter):
    """Wraps messages in Any before serializing."""

    def init(self) -> None:
        # Messages carry their own descriptors; the registry text is not compiled.
        return None

    def serialize(self, value: Any) -> bytes:
        if not isinstance(value, Message):
            raise TypeMismatchError(
                f"protobuf value must be a protocol message, got {type(value).__name__}"
            )
        wrapper = any_pb2.Any()
        try:
            wrapper.Pack(value)
            return wrapper.SerializeToString()
        except EncodeError as exc:
            raise SerializationError(
                f"failed to marshal message into Any for {self.label}"
            ) from exc

    def new_unmarshaler(self, data: bytes) -> Unmarshaler:
        return ProtobufUnmarshaler(self, data)
