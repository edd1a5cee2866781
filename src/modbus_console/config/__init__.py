"""Configuration helpers for the Modbus console."""

from .settings import ENV_PREFIX, Settings, SettingsManager

__all__ = [
    "ENV_PREFIX",
    "Settings",
    "SettingsManager",
]
