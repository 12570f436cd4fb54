"""Tests for the registry client adapter against a mocked SchemaRegistryClient."""

from __future__ import annotations

from unittest import mock

import pytest
from confluent_kafka.schema_registry import Schema
from confluent_kafka.schema_registry.error import SchemaRegistryError as ClientError

from schemaregistry.errors import NetworkError, NotRegisteredError, SchemaRegistryError
from schemaregistry.infra.registry_client import RegistryClient
from schemaregistry.models import SchemaType
from tests.support import AVRO_V1, PROTO_SCHEMA


def registered(schema_id: int, schema: Schema, subject: str, version: int) -> mock.Mock:
    return mock.Mock(schema_id=schema_id, schema=schema, subject=subject, version=version)


@pytest.fixture
def sr_client() -> mock.Mock:
    return mock.Mock()


@pytest.fixture
def rest(sr_client) -> RegistryClient:
    return RegistryClient("http://registry:8081/", client=sr_client)


class TestRegistryClient:
    def test_builds_library_client(self):
        with mock.patch("schemaregistry.infra.registry_client.SchemaRegistryClient") as factory:
            client = RegistryClient("registry:8081", timeout_sec=2.5, auth=("user", "secret"))

        assert client.base_url == "http://registry:8081"
        factory.assert_called_once_with(
            {
                "url": "http://registry:8081",
                "timeout": 2.5,
                "basic.auth.user.info": "user:secret",
            }
        )

    def test_no_auth_by_default(self):
        with mock.patch("schemaregistry.infra.registry_client.SchemaRegistryClient") as factory:
            RegistryClient("https://registry:8081")

        (conf,), _ = factory.call_args
        assert conf["url"] == "https://registry:8081"
        assert "basic.auth.user.info" not in conf

    def test_list_subjects(self, rest, sr_client):
        sr_client.get_subjects.return_value = ["a", "b"]

        assert rest.list_subjects() == ["a", "b"]

    def test_list_versions(self, rest, sr_client):
        sr_client.get_versions.return_value = [1, 2]

        assert rest.list_versions("orders/value") == [1, 2]
        sr_client.get_versions.assert_called_once_with("orders/value")

    def test_get_schema(self, rest, sr_client):
        sr_client.get_version.return_value = registered(42, Schema(AVRO_V1, "AVRO"), "orders", 3)

        record = rest.get_schema("orders", 3)

        sr_client.get_version.assert_called_once_with("orders", 3)
        assert (record.subject, record.version, record.id) == ("orders", 3, 42)
        assert record.schema_str == AVRO_V1
        assert record.schema_type is SchemaType.AVRO

    def test_get_latest_schema(self, rest, sr_client):
        sr_client.get_latest_version.return_value = registered(
            7, Schema(PROTO_SCHEMA, "PROTOBUF"), None, 5
        )

        record = rest.get_latest_schema("orders")

        assert record.subject == "orders"
        assert record.version == 5
        assert record.schema_type is SchemaType.PROTOBUF

    def test_get_schema_by_id(self, rest, sr_client):
        sr_client.get_schema.return_value = Schema(AVRO_V1, None)

        record = rest.get_schema_by_id(42)

        sr_client.get_schema.assert_called_once_with(42)
        assert record.id == 42
        assert record.schema_type is SchemaType.AVRO
        assert record.subject is None and record.version is None

    def test_subject_versions_for_id(self, rest, sr_client):
        sr_client.get_schema_versions.return_value = [
            mock.Mock(subject="a", version=1),
            mock.Mock(subject="b", version=4),
        ]

        entries = rest.get_subject_versions_for_id(42)

        assert [(e.subject, e.version) for e in entries] == [("a", 1), ("b", 4)]
        assert rest.get_subject_for_id(42) == "a"

    def test_register_avro(self, rest, sr_client):
        sr_client.register_schema.return_value = 9

        assert rest.register_schema("orders", AVRO_V1) == 9

        subject, schema = sr_client.register_schema.call_args.args
        assert subject == "orders"
        assert (schema.schema_str, schema.schema_type) == (AVRO_V1, "AVRO")

    def test_register_protobuf(self, rest, sr_client):
        sr_client.register_schema.return_value = 10

        rest.register_schema("orders", PROTO_SCHEMA, SchemaType.PROTOBUF)

        _, schema = sr_client.register_schema.call_args.args
        assert schema.schema_type == "PROTOBUF"


class TestErrorMapping:
    def test_not_found(self, rest, sr_client):
        sr_client.get_version.side_effect = ClientError(404, 40401, "Subject 'orders' not found.")

        with pytest.raises(NotRegisteredError, match="not found"):
            rest.get_schema("orders", 1)

    def test_server_error(self, rest, sr_client):
        sr_client.get_subjects.side_effect = ClientError(500, 50001, "boom")

        with pytest.raises(NetworkError, match="500"):
            rest.list_subjects()

    def test_client_error(self, rest, sr_client):
        sr_client.register_schema.side_effect = ClientError(422, 42201, "Invalid schema")

        with pytest.raises(SchemaRegistryError, match="Invalid schema") as info:
            rest.register_schema("orders", "{")
        assert not isinstance(info.value, (NetworkError, NotRegisteredError))

    def test_transport_error(self, rest, sr_client):
        sr_client.get_subjects.side_effect = ConnectionError("refused")

        with pytest.raises(NetworkError, match="unreachable"):
            rest.list_subjects()

    def test_malformed_schema_response(self, rest, sr_client):
        sr_client.get_schema.return_value = Schema(AVRO_V1, "AVRO")

        with pytest.raises(SchemaRegistryError, match="malformed"):
            rest.get_schema_by_id(-1)
