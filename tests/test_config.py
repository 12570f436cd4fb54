"""Tests for environment-driven configuration."""

from __future__ import annotations

import os

import pytest
from pydantic import ValidationError

from schemaregistry.config import AppConfig, RegistrySettings


@pytest.fixture(autouse=True)
def clean_env(monkeypatch):
    for prefix in ("REGISTRY__", "KAFKA__", "SERVICE__"):
        for key in list(os.environ):
            if key.startswith(prefix):
                monkeypatch.delenv(key)


class TestAppConfig:
    def test_defaults(self):
        config = AppConfig()

        assert config.registry.url == "http://schema-registry:8081"
        assert config.registry.sync_mode == "none"
        assert config.kafka.storage_topic == "_schemas"
        assert config.service.log_level == "INFO"

    def test_nested_environment(self, monkeypatch):
        monkeypatch.setenv("REGISTRY__URL", "http://registry.internal:8081")
        monkeypatch.setenv("REGISTRY__SYNC_MODE", "changelog")
        monkeypatch.setenv("REGISTRY__SYNC_INTERVAL_SEC", "2.5")
        monkeypatch.setenv("KAFKA__BOOTSTRAP_SERVERS", "broker-1:9092,broker-2:9092")
        monkeypatch.setenv("SERVICE__LOG_LEVEL", "DEBUG")

        config = AppConfig()

        assert config.registry.url == "http://registry.internal:8081"
        assert config.registry.sync_mode == "changelog"
        assert config.registry.sync_interval_sec == 2.5
        assert config.kafka.bootstrap_servers == "broker-1:9092,broker-2:9092"
        assert config.service.log_level == "DEBUG"

    def test_invalid_sync_mode(self, monkeypatch):
        monkeypatch.setenv("REGISTRY__SYNC_MODE", "sometimes")

        with pytest.raises(ValidationError):
            RegistrySettings()

    def test_interval_must_be_positive(self):
        with pytest.raises(ValidationError):
            RegistrySettings(sync_interval_sec=0)


class TestSubjectVersions:
    def test_parses_names_and_versions(self):
        settings = RegistrySettings(subjects=" orders-value, payments-value:2 ,,")

        assert settings.subject_versions() == [("orders-value", None), ("payments-value", 2)]

    def test_empty(self):
        assert RegistrySettings().subject_versions() == []
