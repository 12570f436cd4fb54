"""
schemaregistry: client-side schema cache and Confluent wire-format codec.

Producers and consumers register the subjects they care about once; the
Registry caches every (subject, version, id), encodes values behind the
5-byte wire envelope and decodes any enveloped message back through the
caller's decode callback. A background synchronizer (registry polling or
storage-topic tailing) picks up new versions without a restart.
"""

from schemaregistry.config import AppConfig, KafkaConfig, RegistrySettings
from schemaregistry.core.envelope import decode, encode
from schemaregistry.encoder import Encoder, GenericDecoder
from schemaregistry.errors import (
    EnvelopeError,
    NetworkError,
    NotRegisteredError,
    SchemaParseError,
    SchemaRegistryError,
    SerializationError,
    TypeMismatchError,
    UnregisteredSubjectError,
    UnsupportedOperationError,
)
from schemaregistry.formats import Unmarshaler, UnmarshalerFunc
from schemaregistry.infra import (
    InMemoryChangeLogSource,
    InMemoryRegistryClient,
    KafkaChangeLogSource,
    RegistryClient,
)
from schemaregistry.models import SchemaType, Subject, Version
from schemaregistry.registry import Registry

__all__ = [
    "AppConfig",
    "Encoder",
    "EnvelopeError",
    "GenericDecoder",
    "InMemoryChangeLogSource",
    "InMemoryRegistryClient",
    "KafkaChangeLogSource",
    "KafkaConfig",
    "NetworkError",
    "NotRegisteredError",
    "Registry",
    "RegistryClient",
    "RegistrySettings",
    "SchemaParseError",
    "SchemaRegistryError",
    "SchemaType",
    "SerializationError",
    "Subject",
    "TypeMismatchError",
    "Unmarshaler",
    "UnmarshalerFunc",
    "UnregisteredSubjectError",
    "UnsupportedOperationError",
    "Version",
    "decode",
    "encode",
]
