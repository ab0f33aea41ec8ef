"""Unit tests for ConfigStore resolution, fallback and runtime settings."""

import logging
from pathlib import Path
from unittest.mock import patch

import pytest

from harness.core.config import ConfigStore, HarnessSettings, get_config
from harness.core.errors import ConfigurationError
from tests.helpers import write_properties


class TestResolution:
    def test_reads_environment_file(self, tmp_path: Path) -> None:
        write_properties(tmp_path, "qa", {"api.base.url": "http://x"})
        store = ConfigStore(env="qa", config_dir=tmp_path)

        assert store.get("api.base.url") == "http://x"

    def test_override_takes_precedence(self, tmp_path: Path) -> None:
        write_properties(tmp_path, "qa", {"api.base.url": "http://x"})
        store = ConfigStore(env="qa", config_dir=tmp_path)

        store.set_override("api.base.url", "http://override")

        assert store.get("api.base.url") == "http://override"

    def test_removing_override_restores_file_value(self, tmp_path: Path) -> None:
        write_properties(tmp_path, "qa", {"api.base.url": "http://x"})
        store = ConfigStore(env="qa", config_dir=tmp_path)
        store.set_override("api.base.url", "http://override")

        store.set_override("api.base.url", None)

        assert store.get("api.base.url") == "http://x"

    def test_environment_variable_override(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        write_properties(tmp_path, "qa", {"api.base.url": "http://x"})
        monkeypatch.setenv("API_BASE_URL", "http://from-env")
        store = ConfigStore(env="qa", config_dir=tmp_path)

        assert store.get("api.base.url") == "http://from-env"

    def test_missing_key_returns_default(self, tmp_path: Path) -> None:
        write_properties(tmp_path, "qa", {"api.base.url": "http://x"})
        store = ConfigStore(env="qa", config_dir=tmp_path)

        assert store.get("db.url") is None
        assert store.get("db.url", "fallback") == "fallback"

    def test_typed_lookups(self, tmp_path: Path) -> None:
        write_properties(tmp_path, "qa", {"timeout.ms": "2500", "feature.on": "yes"})
        store = ConfigStore(env="qa", config_dir=tmp_path)

        assert store.get_int("timeout.ms") == 2500
        assert store.get_int("absent", 7) == 7
        assert store.get_bool("feature.on") is True
        assert store.get_bool("absent") is False

    def test_get_int_rejects_garbage(self, tmp_path: Path) -> None:
        write_properties(tmp_path, "qa", {"timeout.ms": "soon"})
        store = ConfigStore(env="qa", config_dir=tmp_path)

        with pytest.raises(ConfigurationError):
            store.get_int("timeout.ms")

    def test_require_missing_key_raises(self, tmp_path: Path) -> None:
        write_properties(tmp_path, "qa", {})
        store = ConfigStore(env="qa", config_dir=tmp_path)

        with pytest.raises(ConfigurationError) as exc_info:
            store.require("api.base.url")
        assert exc_info.value.details["key"] == "api.base.url"


class TestLoading:
    def test_missing_environment_falls_back_to_qa(
        self, tmp_path: Path, caplog: pytest.LogCaptureFixture
    ) -> None:
        write_properties(tmp_path, "qa", {"api.base.url": "http://qa"})
        store = ConfigStore(env="staging", config_dir=tmp_path)

        with caplog.at_level(logging.WARNING, logger="harness.core.config"):
            assert store.get("api.base.url") == "http://qa"

        assert "config-staging.properties" in caplog.text
        assert store.source == tmp_path / "config-qa.properties"

    def test_no_files_resolves_everything_to_none(self, tmp_path: Path) -> None:
        store = ConfigStore(env="staging", config_dir=tmp_path)

        assert store.get("api.base.url") is None
        assert store.source is None

    def test_unreadable_file_is_fatal(self, tmp_path: Path) -> None:
        (tmp_path / "config-qa.properties").write_bytes(b"\xff\xfe\x00broken")
        store = ConfigStore(env="qa", config_dir=tmp_path)

        with pytest.raises(ConfigurationError):
            store.get("api.base.url")

    def test_loads_once(self, tmp_path: Path) -> None:
        write_properties(tmp_path, "qa", {"api.base.url": "http://x"})
        store = ConfigStore(env="qa", config_dir=tmp_path)

        with patch(
            "harness.core.config.load_properties_file",
            return_value={"api.base.url": "http://x"},
        ) as loader:
            store.get("api.base.url")
            store.get("db.url")

        assert loader.call_count == 1

    def test_reset_reloads_from_new_environment(self, tmp_path: Path) -> None:
        write_properties(tmp_path, "qa", {"api.base.url": "http://qa"})
        write_properties(tmp_path, "dev", {"api.base.url": "http://dev"})
        store = ConfigStore(env="qa", config_dir=tmp_path)
        assert store.get("api.base.url") == "http://qa"

        store.reset(env="dev", config_dir=tmp_path)

        assert store.get("api.base.url") == "http://dev"

    def test_environment_selected_from_settings(
        self, tmp_path: Path, monkeypatch: pytest.MonkeyPatch
    ) -> None:
        write_properties(tmp_path, "qa", {"api.base.url": "http://qa"})
        write_properties(tmp_path, "dev", {"api.base.url": "http://dev"})
        monkeypatch.setenv("HARNESS_ENV", "DEV")
        monkeypatch.setenv("HARNESS_CONFIG_DIR", str(tmp_path))

        store = ConfigStore()

        assert store.env == "dev"
        assert store.get("api.base.url") == "http://dev"


class TestHarnessSettings:
    def test_defaults(self) -> None:
        settings = HarnessSettings()

        assert settings.harness_env == "qa"
        assert settings.harness_config_dir == Path("config")
        assert settings.harness_http_timeout_seconds is None
        assert settings.harness_verify_tls is True

    def test_blank_env_falls_back_to_baseline(self, monkeypatch: pytest.MonkeyPatch) -> None:
        monkeypatch.setenv("HARNESS_ENV", "  ")

        assert HarnessSettings().harness_env == "qa"

    def test_get_config_returns_singleton(self) -> None:
        assert get_config() is get_config()
