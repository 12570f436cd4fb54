"""
Collaborators at the edge of the client: registry REST API and change-log topic.
"""

from schemaregistry.infra.changelog import ChangeLogEvent, ChangeLogSource, KafkaChangeLogSource
from schemaregistry.infra.memory import InMemoryChangeLogSource, InMemoryRegistryClient
from schemaregistry.infra.registry_client import BaseRegistryClient, RegistryClient, SubjectVersion

__all__ = [
    "BaseRegistryClient",
    "ChangeLogEvent",
    "ChangeLogSource",
    "InMemoryChangeLogSource",
    "InMemoryRegistryClient",
    "KafkaChangeLogSource",
    "RegistryClient",
    "SubjectVersion",
]
