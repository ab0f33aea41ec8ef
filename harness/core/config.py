"""Harness configuration.

Two layers:

* ``HarnessSettings`` (Pydantic Settings) holds process-level runtime flags
  read from environment variables: which environment to target, where the
  property files live, log level.
* ``ConfigStore`` resolves test-target settings (base URLs, DB credentials)
  from ``config-{env}.properties``, with runtime overrides taking precedence.

Usage:
    from harness.core.config import config

    base_url = config.get("api.base.url")
    timeout = config.get_int("api.timeout.ms", 5000)
"""

from __future__ import annotations

import logging
import os
import threading
from pathlib import Path

from pydantic import field_validator
from pydantic_settings import BaseSettings, SettingsConfigDict

from harness.core.errors import ConfigurationError
from harness.core.properties import load_properties_file

logger = logging.getLogger(__name__)

BASELINE_ENV = "qa"
CONFIG_FILE_TEMPLATE = "config-{env}.properties"

_TRUTHY = ("true", "1", "yes", "on")


class HarnessSettings(BaseSettings):
    """
    Runtime flags for a harness process.

    Loaded from environment variables (``HARNESS_ENV``, ``HARNESS_CONFIG_DIR``,
    ``HARNESS_LOG_LEVEL`` ...).
    """

    model_config = SettingsConfigDict(env_prefix="", extra="ignore")

    harness_env: str = BASELINE_ENV
    harness_config_dir: Path = Path("config")
    harness_log_level: str = "INFO"
    harness_structured_logs: bool = False

    # None keeps the httpx default timeout
    harness_http_timeout_seconds: float | None = None
    harness_verify_tls: bool = True

    @field_validator("harness_env", mode="before")
    @classmethod
    def normalize_env(cls, v: str | None) -> str:
        """Blank or missing environment names fall back to the baseline."""
        if v is None or not str(v).strip():
            return BASELINE_ENV
        return str(v).strip().lower()


def get_settings() -> HarnessSettings:
    """Read runtime flags from the current process environment."""
    return HarnessSettings()


def _env_var_name(key: str) -> str:
    """``api.base.url`` -> ``API_BASE_URL``."""
    return key.upper().replace(".", "_").replace("-", "_")


class ConfigStore:
    """
    Environment-specific key/value settings with override and fallback.

    Resolution order for ``get(key)``:
      1. explicit runtime overrides (``set_override``)
      2. environment variables named ``key`` or its upper-snake form
      3. properties loaded from ``config-{env}.properties``

    Properties are loaded lazily on first lookup and memoised. A missing
    environment file falls back to ``config-qa.properties``; if that is
    missing too, every property lookup resolves to None. A file that exists
    but cannot be read raises ``ConfigurationError``.
    """

    def __init__(
        self,
        env: str | None = None,
        config_dir: str | Path | None = None,
    ):
        self._env = env
        self._config_dir = Path(config_dir) if config_dir is not None else None
        self._properties: dict[str, str] | None = None
        self._overrides: dict[str, str] = {}
        self._source: Path | None = None
        self._lock = threading.RLock()

    @property
    def env(self) -> str:
        """The selected environment name."""
        if self._env is None:
            self._env = get_settings().harness_env
        return self._env

    @property
    def config_dir(self) -> Path:
        if self._config_dir is None:
            self._config_dir = get_settings().harness_config_dir
        return self._config_dir

    @property
    def source(self) -> Path | None:
        """The property file actually loaded (None if nothing was found)."""
        self._ensure_loaded()
        return self._source

    def get(self, key: str, default: str | None = None) -> str | None:
        """Resolve a setting, returning ``default`` when it is absent."""
        override = self._lookup_override(key)
        if override is not None:
            return override

        properties = self._ensure_loaded()
        value = properties.get(key)
        return value if value is not None else default

    def get_int(self, key: str, default: int | None = None) -> int | None:
        value = self.get(key)
        if value is None or not value.strip():
            return default
        try:
            return int(value.strip())
        except ValueError:
            raise ConfigurationError(
                f"Setting '{key}' must be an integer, got '{value}'",
                details={"key": key, "value": value},
            )

    def get_bool(self, key: str, default: bool = False) -> bool:
        value = self.get(key)
        if value is None or not value.strip():
            return default
        return value.strip().lower() in _TRUTHY

    def require(self, key: str) -> str:
        """Resolve a setting that must be present."""
        value = self.get(key)
        if value is None or not value.strip():
            raise ConfigurationError(
                f"Required setting '{key}' is not configured for environment '{self.env}'",
                details={"key": key, "env": self.env},
            )
        return value

    def set_override(self, key: str, value: str | None) -> None:
        """Register a runtime override; ``None`` removes it."""
        with self._lock:
            if value is None:
                self._overrides.pop(key, None)
            else:
                self._overrides[key] = str(value)

    def update_overrides(self, values: dict[str, str]) -> None:
        for key, value in values.items():
            self.set_override(key, value)

    def reset(self, env: str | None = None, config_dir: str | Path | None = None) -> None:
        """Forget loaded properties and overrides (re-read on next lookup)."""
        with self._lock:
            self._env = env
            self._config_dir = Path(config_dir) if config_dir is not None else None
            self._properties = None
            self._overrides = {}
            self._source = None

    def _lookup_override(self, key: str) -> str | None:
        with self._lock:
            if key in self._overrides:
                return self._overrides[key]

        env_value = os.environ.get(key)
        if env_value is None:
            env_value = os.environ.get(_env_var_name(key))
        return env_value

    def _ensure_loaded(self) -> dict[str, str]:
        with self._lock:
            if self._properties is None:
                self._properties = self._load()
            return self._properties

    def _load(self) -> dict[str, str]:
        env = self.env
        path = self.config_dir / CONFIG_FILE_TEMPLATE.format(env=env)

        logger.info(
            "Loading API config for environment: %s (file: %s)", env, path.name
        )

        if not path.is_file():
            fallback = self.config_dir / CONFIG_FILE_TEMPLATE.format(env=BASELINE_ENV)
            logger.warning(
                "Config file '%s' not found, trying %s", path.name, fallback.name
            )
            path = fallback

        if not path.is_file():
            logger.warning("No config file found in %s; all settings are unset", self.config_dir)
            return {}

        try:
            properties = load_properties_file(path)
        except (OSError, UnicodeDecodeError) as exc:
            raise ConfigurationError(
                f"Could not load config: {path}",
                details={"path": str(path), "error": str(exc)},
            ) from exc

        self._source = path
        logger.info("Config loaded. Base URL: %s", properties.get("api.base.url"))
        return properties


config = ConfigStore()


def get_config() -> ConfigStore:
    """Return the process-wide configuration store."""
    return config
