"""
Change-log transport: the registry's compacted storage topic.

The registry persists every schema registration as a JSON record on a
single-partition compacted topic (`_schemas` by default). Reading it from
the beginning replays the full registry state; staying subscribed yields
new versions as they are registered.
"""

from __future__ import annotations

import logging
from abc import ABC, abstractmethod
from dataclasses import dataclass
from typing import Optional

from confluent_kafka import OFFSET_BEGINNING, Consumer, KafkaError, KafkaException, TopicPartition

from schemaregistry.errors import NetworkError
from schemaregistry.observability import get_logger


@dataclass(frozen=True)
class ChangeLogEvent:
    """A record from the topic, or the marker for reaching its end."""

    key: Optional[bytes] = None
    value: Optional[bytes] = None
    offset: int = -1
    partition_end: bool = False


class ChangeLogSource(ABC):
    """Position-tracking reader over the change-log topic."""

    @abstractmethod
    def open(self) -> None:
        """Start reading from the earliest offset."""
        raise NotImplementedError

    @abstractmethod
    def poll(self, timeout: float) -> Optional[ChangeLogEvent]:
        """Next event, or None if nothing arrived within `timeout` seconds."""
        raise NotImplementedError

    @abstractmethod
    def close(self) -> None:
        raise NotImplementedError


class KafkaChangeLogSource(ChangeLogSource):
    """
    Reads partition 0 of the storage topic with a confluent_kafka Consumer.

    Offsets are never committed: every process replays the topic from the
    beginning to rebuild its view of the registry.
    """

    def __init__(
        self,
        bootstrap_servers: str,
        topic: str = "_schemas",
        group_id: str = "schemaregistry-sync",
        logger: Optional[logging.Logger] = None,
    ) -> None:
        self._bootstrap = bootstrap_servers
        self._topic = topic
        self._group_id = group_id
        self._log = logger or get_logger("schemaregistry.changelog")
        self._consumer: Optional[Consumer] = None

    def open(self) -> None:
        try:
            consumer = Consumer(
                {
                    "bootstrap.servers": self._bootstrap,
                    "group.id": self._group_id,
                    "enable.auto.commit": False,
                    "enable.partition.eof": True,
                    "auto.offset.reset": "earliest",
                }
            )
            consumer.assign([TopicPartition(self._topic, 0, OFFSET_BEGINNING)])
        except KafkaException as exc:
            raise NetworkError(f"cannot open change-log topic {self._topic}") from exc

        self._consumer = consumer
        self._log.info(
            "Change-log consumer assigned",
            extra={"topic": self._topic, "bootstrap": self._bootstrap},
        )

    def poll(self, timeout: float) -> Optional[ChangeLogEvent]:
        if self._consumer is None:
            raise RuntimeError("change-log source is not open")

        msg = self._consumer.poll(timeout)
        if msg is None:
            return None

        err = msg.error()
        if err is not None:
            if err.code() == KafkaError._PARTITION_EOF:
                return ChangeLogEvent(offset=msg.offset(), partition_end=True)
            if err.fatal():
                raise NetworkError(f"change-log consumer failed: {err}")
            self._log.error(
                "Change-log message error",
                extra={"topic": self._topic, "error": str(err)},
            )
            return None

        return ChangeLogEvent(key=msg.key(), value=msg.value(), offset=msg.offset())

    def close(self) -> None:
        if self._consumer is not None:
            self._consumer.close()
            self._consumer = None
