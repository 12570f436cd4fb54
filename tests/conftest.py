"""
Shared fixtures. Everything runs against in-memory doubles; no registry,
broker or OTLP collector is required.
"""

from __future__ import annotations

from typing import Iterator

import pytest

from schemaregistry.config import RegistrySettings
from schemaregistry.infra.memory import InMemoryChangeLogSource, InMemoryRegistryClient
from schemaregistry.registry import Registry
from tests.support import SampleV1


@pytest.fixture
def sample() -> SampleV1:
    return SampleV1(field1=100, field2=10.11, field3="text")


@pytest.fixture
def client() -> InMemoryRegistryClient:
    return InMemoryRegistryClient()


@pytest.fixture
def registry(client: InMemoryRegistryClient) -> Iterator[Registry]:
    reg = Registry(client, settings=RegistrySettings(sync_mode="none"))
    yield reg
    reg.close()


@pytest.fixture
def change_log() -> InMemoryChangeLogSource:
    return InMemoryChangeLogSource()
