"""Shared utility helpers for the Modbus console."""

from .logging import LoggingOptions, configure_logging, get_logger

__all__ = [
    "LoggingOptions",
    "configure_logging",
    "get_logger",
]
