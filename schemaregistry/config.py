"""
Configuration for the schema registry client.

Settings are read from the environment (and an optional `.env` file in the
working directory) using nested keys:

    REGISTRY__URL=http://schema-registry:8081
    REGISTRY__SYNC_MODE=poll
    REGISTRY__SYNC_INTERVAL_SEC=10
    REGISTRY__SUBJECTS=orders-value,payments-value:2

    KAFKA__BOOTSTRAP_SERVERS=kafka:9092
    KAFKA__STORAGE_TOPIC=_schemas

    SERVICE__LOG_LEVEL=INFO
"""

from __future__ import annotations

from functools import lru_cache
from pathlib import Path
from typing import List, Literal, Optional, Tuple

from pydantic import Field, ValidationError
from pydantic_settings import BaseSettings, SettingsConfigDict

DEFAULT_ENV_PATH: Path = Path.cwd() / ".env"

SyncMode = Literal["none", "poll", "changelog"]


class RegistrySettings(BaseSettings):
    """Registry service connection and background sync settings."""

    url: str = Field(
        default="http://schema-registry:8081",
        description="Base URL of the schema registry REST API.",
    )
    username: Optional[str] = Field(default=None, description="Basic auth user.")
    password: Optional[str] = Field(default=None, description="Basic auth password.")
    timeout_sec: float = Field(
        default=5.0,
        gt=0.0,
        description="Timeout applied to every registry HTTP request.",
    )

    sync_mode: SyncMode = Field(
        default="none",
        description="Background discovery strategy: none, poll or changelog.",
    )
    sync_interval_sec: float = Field(
        default=10.0,
        gt=0.0,
        description="Interval between polling passes.",
    )
    initial_sync_timeout_sec: Optional[float] = Field(
        default=30.0,
        description="How long start_background_sync waits for the change-log backlog.",
    )

    subjects: str = Field(
        default="",
        description="Comma separated subjects to register at startup (name or name:version).",
    )

    model_config = SettingsConfigDict(env_prefix="REGISTRY__", extra="ignore")

    def subject_versions(self) -> List[Tuple[str, Optional[int]]]:
        """
        Parse `subjects` into (name, version) pairs.

        A missing version means "all versions".
        """
        pairs: List[Tuple[str, Optional[int]]] = []
        for entry in self.subjects.split(","):
            entry = entry.strip()
            if not entry:
                continue
            name, _, version = entry.partition(":")
            pairs.append((name.strip(), int(version) if version.strip() else None))
        return pairs


class KafkaConfig(BaseSettings):
    """Kafka settings used by the change-log synchronizer."""

    bootstrap_servers: str = Field(default="kafka:9092")
    storage_topic: str = Field(
        default="_schemas",
        description="Compacted topic the registry stores its schemas in.",
    )
    consumer_group: str = Field(default="schemaregistry-sync")

    model_config = SettingsConfigDict(env_prefix="KAFKA__", extra="ignore")


class ServiceConfig(BaseSettings):
    """Generic process-level config."""

    log_level: str = Field(default="INFO")
    environment: str = Field(default="local")

    model_config = SettingsConfigDict(env_prefix="SERVICE__", extra="ignore")


class AppConfig(BaseSettings):
    """Root configuration object."""

    registry: RegistrySettings = Field(default_factory=RegistrySettings)
    kafka: KafkaConfig = Field(default_factory=KafkaConfig)
    service: ServiceConfig = Field(default_factory=ServiceConfig)

    model_config = SettingsConfigDict(
        env_nested_delimiter="__",
        extra="ignore",
    )

    @classmethod
    @lru_cache(maxsize=1)
    def load(cls) -> "AppConfig":
        try:
            env_file = str(DEFAULT_ENV_PATH) if DEFAULT_ENV_PATH.exists() else None
            return cls(_env_file=env_file)
        except ValidationError as exc:
            raise RuntimeError("Invalid configuration values.") from exc

