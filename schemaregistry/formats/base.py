"""
Format adapter interface.

A FormatAdapter owns the compiled form of one schema body and turns values
into payload bytes and back. Decoding is two-step: the registry hands an
Unmarshaler (payload bound to the adapter) to the caller's decode callback,
and the callback picks the destination type by calling `unmarshal(target)`.
"""

from __future__ import annotations

from abc import ABC, abstractmethod
from typing import Any, Callable, Optional


class Unmarshaler(ABC):
    """Payload bytes bound to the adapter that can read them."""

    @abstractmethod
    def unmarshal(self, target: Optional[Any] = None) -> Any:
        """
        Decode the bound payload.

        Args:
            target: Destination type or instance; its meaning is format specific.

        Returns:
            The decoded value.
        """
        raise NotImplementedError


UnmarshalerFunc = Callable[[Unmarshaler], Any]


class FormatAdapter(ABC):
    """
    Serialization strategy for one schema format.

    `init` is called once after construction and before any other method.
    """

    def __init__(self, schema: str, label: str = "") -> None:
        self._schema = schema
        self._label = label

    @property
    def schema(self) -> str:
        return self._schema

    @property
    def label(self) -> str:
        return self._label or "<anonymous schema>"

    @abstractmethod
    def init(self) -> None:
        """Parse and cache the schema. Raises SchemaParseError."""
        raise NotImplementedError

    @abstractmethod
    def serialize(self, value: Any) -> bytes:
        """Encode `value` into payload bytes (without the wire envelope)."""
        raise NotImplementedError

    @abstractmethod
    def new_unmarshaler(self, data: bytes) -> Unmarshaler:
        """Bind payload bytes (without the wire envelope) for decoding."""
        raise NotImplementedError
