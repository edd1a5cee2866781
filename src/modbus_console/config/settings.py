from __future__ import annotations

import os
from dataclasses import dataclass
from pathlib import Path

from dotenv import load_dotenv
from platformdirs import user_cache_dir, user_config_dir

APP_NAME = "ModbusConsole"
ENV_PREFIX = "MODBUS_CONSOLE_"
ENV_FILE_NAME = "settings.env"

DEFAULT_API_BASE_URL = "https://localhost:7136"
DEFAULT_REQUEST_TIMEOUT = 10.0
DEFAULT_LANGUAGE = "en"


def _config_dir() -> Path:
    path = Path(user_config_dir(APP_NAME, roaming=True))
    path.mkdir(parents=True, exist_ok=True)
    return path


def _cache_dir() -> Path:
    path = Path(user_cache_dir(APP_NAME))
    path.mkdir(parents=True, exist_ok=True)
    return path


def config_dir() -> Path:
    return _config_dir()


def cache_dir() -> Path:
    return _cache_dir()


def log_dir() -> Path:
    path = cache_dir() / "logs"
    path.mkdir(parents=True, exist_ok=True)
    return path


def _env_file_path(explicit: Path | None) -> Path:
    if explicit is not None:
        return explicit
    return _config_dir() / ENV_FILE_NAME


@dataclass(slots=True)
class Settings:
    """Connection and presentation settings for the console backend API."""

    api_base_url: str = DEFAULT_API_BASE_URL
    request_timeout: float = DEFAULT_REQUEST_TIMEOUT
    verify_tls: bool = True
    log_level: str = "INFO"
    log_directory: Path | None = None
    log_to_file: bool = True
    language: str = DEFAULT_LANGUAGE

    @property
    def is_configured(self) -> bool:
        """True when an API base URL is available."""
        return bool(self.api_base_url)

    def api_url(self, path: str) -> str:
        """Join a relative API path onto the configured base URL."""
        base = self.api_base_url.rstrip("/")
        if not path.startswith("/"):
            path = "/" + path
        return f"{base}{path}"


class SettingsManager:
    """Load and persist console settings with environment overrides."""

    def __init__(self, env_file: Path | None = None) -> None:
        self._env_file = _env_file_path(env_file)

    @property
    def env_file(self) -> Path:
        return self._env_file

    def load(self) -> Settings:
        """Load settings from environment, falling back to persisted file."""
        load_dotenv(self._env_file, override=False)

        settings = Settings()

        base_url = self._get_env("API_BASE_URL")
        if base_url:
            settings.api_base_url = base_url

        timeout = self._get_env("REQUEST_TIMEOUT")
        if timeout:
            try:
                settings.request_timeout = float(timeout)
            except ValueError:
                pass

        verify = self._get_env("VERIFY_TLS")
        if verify is not None:
            settings.verify_tls = _is_truthy(verify)

        log_level = self._get_env("LOG_LEVEL")
        if log_level:
            settings.log_level = log_level.upper()

        log_directory = self._get_env("LOG_DIR")
        if log_directory:
            settings.log_directory = Path(log_directory).expanduser()

        log_to_file = self._get_env("LOG_TO_FILE")
        if log_to_file is not None:
            settings.log_to_file = _is_truthy(log_to_file)

        language = self._get_env("LANGUAGE")
        if language:
            settings.language = language.lower()

        return settings

    def save(self, settings: Settings) -> None:
        """Persist settings to the managed env file."""
        self._env_file.parent.mkdir(parents=True, exist_ok=True)
        content = [
            f"{ENV_PREFIX}API_BASE_URL={settings.api_base_url}",
            f"{ENV_PREFIX}REQUEST_TIMEOUT={settings.request_timeout}",
            f"{ENV_PREFIX}VERIFY_TLS={'true' if settings.verify_tls else 'false'}",
            f"{ENV_PREFIX}LOG_LEVEL={settings.log_level}",
            f"{ENV_PREFIX}LOG_TO_FILE={'true' if settings.log_to_file else 'false'}",
            f"{ENV_PREFIX}LANGUAGE={settings.language}",
        ]
        if settings.log_directory is not None:
            content.append(f"{ENV_PREFIX}LOG_DIR={settings.log_directory}")
        self._env_file.write_text("\n".join(content) + "\n", encoding="utf-8")

    def _get_env(self, name: str) -> str | None:
        return os.getenv(f"{ENV_PREFIX}{name}") or None


def _is_truthy(value: str) -> bool:
    return value.strip().lower() not in {"0", "false", "no", "off"}


__all__ = [
    "APP_NAME",
    "ENV_PREFIX",
    "Settings",
    "SettingsManager",
    "cache_dir",
    "config_dir",
    "log_dir",
]
