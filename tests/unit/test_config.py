"""Tests for settings loading and logging setup."""

from __future__ import annotations

import json
import logging
from collections.abc import Iterator
from pathlib import Path

import pytest
import structlog

from docbridge.config.settings import ObservabilitySettings, Settings, StoreSettings
from docbridge.observability.logging import HANDLER_NAME, setup_logging


class TestSettings:
    def test_defaults(self) -> None:
        settings = Settings(_env_file=None)  # type: ignore[call-arg]
        assert settings.store.hosts == ["http://localhost:9200"]
        assert settings.store.refresh == "true"
        assert settings.observability.log_format == "json"

    def test_hosts_from_json_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DOCBRIDGE_STORE__HOSTS", '["http://a:9200", "http://b:9200"]')
        settings = Settings(_env_file=None)  # type: ignore[call-arg]
        assert settings.store.hosts == ["http://a:9200", "http://b:9200"]

    def test_single_host_string(self) -> None:
        assert StoreSettings(hosts="http://only:9200").hosts == ["http://only:9200"]  # type: ignore[arg-type]

    def test_nested_env(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("DOCBRIDGE_STORE__REFRESH", "wait_for")
        monkeypatch.setenv("DOCBRIDGE_OBSERVABILITY__LOG_LEVEL", "debug")
        settings = Settings(_env_file=None)  # type: ignore[call-arg]
        assert settings.store.refresh == "wait_for"
        assert settings.observability.log_level == "debug"

    def test_from_yaml(self, tmp_path: Path) -> None:
        config = tmp_path / "docbridge.yaml"
        config.write_text(
            "store:\n"
            "  hosts: ['https://es.internal:9200']\n"
            "  indices:\n"
            "    User: people\n"
            "observability:\n"
            "  log_format: console\n"
        )
        settings = Settings.from_yaml(config)
        assert settings.store.hosts == ["https://es.internal:9200"]
        assert settings.store.indices == {"User": "people"}
        assert settings.observability.log_format == "console"

    def test_from_yaml_missing_file(self, tmp_path: Path) -> None:
        with pytest.raises(FileNotFoundError):
            Settings.from_yaml(tmp_path / "absent.yaml")


@pytest.fixture
def restore_logging() -> Iterator[None]:
    root = logging.getLogger()
    level = root.level
    yield
    for handler in list(root.handlers):
        if handler.get_name() == HANDLER_NAME:
            root.removeHandler(handler)
    root.setLevel(level)
    structlog.reset_defaults()


@pytest.mark.usefixtures("restore_logging")
class TestLogging:
    def test_stdlib_records_rendered_as_json(self, capsys: pytest.CaptureFixture[str]) -> None:
        setup_logging(ObservabilitySettings(log_level="info", log_format="json"))

        logging.getLogger("docbridge.store.repository").info("[%s] %s; version=%d", "users", "created", 1)

        record = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert record["event"] == "[users] created; version=1"
        assert record["level"] == "info"
        assert record["logger"] == "docbridge.store.repository"
        assert "timestamp" in record

    def test_structlog_loggers_share_the_handler(self, capsys: pytest.CaptureFixture[str]) -> None:
        setup_logging(ObservabilitySettings(log_level="info", log_format="json"))

        structlog.get_logger("docbridge.app").info("store ready", index="users")

        record = json.loads(capsys.readouterr().out.strip().splitlines()[-1])
        assert record["event"] == "store ready"
        assert record["index"] == "users"

    def test_console_format(self, capsys: pytest.CaptureFixture[str]) -> None:
        setup_logging(ObservabilitySettings(log_level="debug", log_format="console"))

        logging.getLogger("docbridge.test").debug("configured")

        assert "configured" in capsys.readouterr().out

    def test_level_filters_records(self, capsys: pytest.CaptureFixture[str]) -> None:
        setup_logging(ObservabilitySettings(log_level="warning", log_format="json"))

        logging.getLogger("docbridge.test").info("hidden")

        assert "hidden" not in capsys.readouterr().out

    def test_setup_replaces_previous_handler(self) -> None:
        setup_logging()
        handler = setup_logging()

        installed = [h for h in logging.getLogger().handlers if h.get_name() == HANDLER_NAME]
        assert installed == [handler]
