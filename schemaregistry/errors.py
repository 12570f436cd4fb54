"""
Exception hierarchy for the schema registry client.

Runtime data errors derive from SchemaRegistryError and are expected to be
handled by callers. Programmer errors (asking for an encoder of a subject
that was never registered, encoding through a decode-only handle) are
separate so they are not swallowed by a broad `except SchemaRegistryError`.
"""


class SchemaRegistryError(Exception):
    """Base class for runtime schema registry errors."""


class SchemaParseError(SchemaRegistryError):
    """Raised when a schema definition cannot be parsed or compiled."""


class NetworkError(SchemaRegistryError):
    """Raised when the registry service or change-log topic is unreachable."""


class EnvelopeError(SchemaRegistryError):
    """Raised when a payload does not carry a valid wire envelope."""


class NotRegisteredError(SchemaRegistryError):
    """Raised when a subject, version or schema id cannot be resolved."""


class TypeMismatchError(SchemaRegistryError, TypeError):
    """Raised when a value does not satisfy the format adapter's requirements."""


class SerializationError(SchemaRegistryError):
    """Raised when the format codec fails to encode or decode a payload."""


class UnregisteredSubjectError(LookupError):
    """Raised when an encoder is requested for a subject that was never registered."""


class UnsupportedOperationError(NotImplementedError):
    """Raised when a handle is used for an operation it does not support."""
