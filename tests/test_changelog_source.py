"""Tests for the Kafka-backed change-log source and config-driven wiring."""

from __future__ import annotations

from unittest import mock

import pytest
from confluent_kafka import OFFSET_BEGINNING, KafkaError, KafkaException

from schemaregistry.config import AppConfig, KafkaConfig, RegistrySettings
from schemaregistry.errors import NetworkError
from schemaregistry.infra.changelog import KafkaChangeLogSource
from schemaregistry.infra.registry_client import RegistryClient
from schemaregistry.registry import Registry


def message(key=b"k", value=b"v", offset=0, error=None) -> mock.Mock:
    msg = mock.Mock()
    msg.key.return_value = key
    msg.value.return_value = value
    msg.offset.return_value = offset
    msg.error.return_value = error
    return msg


def kafka_error(code: int, fatal: bool = False) -> mock.Mock:
    err = mock.Mock()
    err.code.return_value = code
    err.fatal.return_value = fatal
    return err


@pytest.fixture
def consumer():
    with mock.patch("schemaregistry.infra.changelog.Consumer") as factory:
        yield factory.return_value


@pytest.fixture
def source(consumer) -> KafkaChangeLogSource:
    src = KafkaChangeLogSource("kafka:9092", topic="_schemas", group_id="sync-test")
    src.open()
    return src


class TestKafkaChangeLogSource:
    def test_open_assigns_partition_zero_from_beginning(self, source, consumer):
        (partitions,), _ = consumer.assign.call_args

        assert len(partitions) == 1
        assert partitions[0].topic == "_schemas"
        assert partitions[0].partition == 0
        assert partitions[0].offset == OFFSET_BEGINNING

    def test_consumer_settings(self):
        with mock.patch("schemaregistry.infra.changelog.Consumer") as factory:
            KafkaChangeLogSource("kafka:9092", group_id="sync-test").open()

        (conf,), _ = factory.call_args
        assert conf["bootstrap.servers"] == "kafka:9092"
        assert conf["group.id"] == "sync-test"
        assert conf["enable.partition.eof"] is True
        assert conf["enable.auto.commit"] is False

    def test_open_failure(self):
        with mock.patch(
            "schemaregistry.infra.changelog.Consumer",
            side_effect=KafkaException("no brokers"),
        ):
            with pytest.raises(NetworkError):
                KafkaChangeLogSource("kafka:9092").open()

    def test_poll_record(self, source, consumer):
        consumer.poll.return_value = message(b"key", b"value", offset=4)

        event = source.poll(0.1)

        assert (event.key, event.value, event.offset) == (b"key", b"value", 4)
        assert not event.partition_end
        consumer.poll.assert_called_once_with(0.1)

    def test_poll_nothing(self, source, consumer):
        consumer.poll.return_value = None

        assert source.poll(0.1) is None

    def test_partition_end(self, source, consumer):
        consumer.poll.return_value = message(
            offset=12, error=kafka_error(KafkaError._PARTITION_EOF)
        )

        event = source.poll(0.1)

        assert event.partition_end
        assert event.offset == 12

    def test_transient_error_is_skipped(self, source, consumer):
        consumer.poll.return_value = message(error=kafka_error(KafkaError._TRANSPORT))

        assert source.poll(0.1) is None

    def test_fatal_error(self, source, consumer):
        consumer.poll.return_value = message(error=kafka_error(KafkaError._FATAL, fatal=True))

        with pytest.raises(NetworkError):
            source.poll(0.1)

    def test_poll_before_open(self):
        with pytest.raises(RuntimeError):
            KafkaChangeLogSource("kafka:9092").poll(0.1)

    def test_close(self, source, consumer):
        source.close()
        source.close()

        consumer.close.assert_called_once_with()


class TestRegistryFromConfig:
    def test_rest_client_with_basic_auth(self):
        config = AppConfig(
            registry=RegistrySettings(url="registry:8081", username="svc", password="pw")
        )

        with mock.patch("schemaregistry.infra.registry_client.SchemaRegistryClient") as factory:
            registry = Registry.from_config(config)

        assert isinstance(registry.client, RegistryClient)
        assert registry.client.base_url == "http://registry:8081"
        (conf,), _ = factory.call_args
        assert conf["basic.auth.user.info"] == "svc:pw"
        assert registry.settings.sync_mode == "none"
        assert registry.start_background_sync() is None

    def test_changelog_mode_builds_kafka_source(self):
        config = AppConfig(
            registry=RegistrySettings(sync_mode="changelog"),
            kafka=KafkaConfig(bootstrap_servers="broker:9092", storage_topic="_schemas_dc1"),
        )

        with mock.patch("schemaregistry.registry.KafkaChangeLogSource") as source_cls, mock.patch(
            "schemaregistry.infra.registry_client.SchemaRegistryClient"
        ):
            Registry.from_config(config)

        source_cls.assert_called_once_with(
            bootstrap_servers="broker:9092",
            topic="_schemas_dc1",
            group_id="schemaregistry-sync",
        )
