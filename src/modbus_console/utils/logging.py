from __future__ import annotations

import logging
import sys
from dataclasses import dataclass
from pathlib import Path
from typing import TYPE_CHECKING, cast

import structlog
from loguru import logger as loguru_logger
from structlog.exceptions import DropEvent
from structlog.stdlib import BoundLogger
from structlog.typing import EventDict, WrappedLogger

from modbus_console.config.settings import log_dir

if TYPE_CHECKING:
    from modbus_console.config.settings import Settings


LOG_FILENAME = "modbus-console.log"
LOG_FORMAT = "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {message} | {extra}"
LOG_ROTATION = "5 MB"
LOG_RETENTION = 5
LEVELS = ("DEBUG", "INFO", "WARNING", "ERROR")

_configured = False


@dataclass(slots=True)
class LoggingOptions:
    """Where console events go and how verbose they are.

    ``directory`` defaults to the platform log directory. Leaving
    ``file_sink`` off keeps output on stderr only, which is what tests and
    the import-time fallback use.
    """

    level: str = "INFO"
    directory: Path | None = None
    file_sink: bool = True

    @classmethod
    def from_settings(cls, settings: Settings) -> LoggingOptions:
        level = settings.log_level.upper()
        return cls(
            level=level if level in LEVELS else "INFO",
            directory=settings.log_directory,
            file_sink=settings.log_to_file,
        )

    @property
    def log_path(self) -> Path:
        return (self.directory or log_dir()) / LOG_FILENAME


def configure_logging(options: LoggingOptions | None = None) -> Path | None:
    """Route structlog events into loguru sinks.

    Returns the log file path, or ``None`` when only stderr is used.
    """

    global _configured

    opts = options or LoggingOptions()
    level = opts.level.upper()

    loguru_logger.remove()
    loguru_logger.add(sys.stderr, level=level, colorize=True, format=LOG_FORMAT)

    log_path: Path | None = None
    if opts.file_sink:
        log_path = opts.log_path
        log_path.parent.mkdir(parents=True, exist_ok=True)
        loguru_logger.add(
            log_path,
            level=level,
            rotation=LOG_ROTATION,
            retention=LOG_RETENTION,
            encoding="utf-8",
            format=LOG_FORMAT,
        )

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            structlog.processors.add_log_level,
            structlog.processors.TimeStamper(fmt="iso", utc=True),
            structlog.processors.format_exc_info,
            _forward_to_loguru,
        ],
        wrapper_class=structlog.make_filtering_bound_logger(
            getattr(logging, level, logging.INFO)
        ),
        cache_logger_on_first_use=False,
    )
    _configured = True
    return log_path


def _forward_to_loguru(
    _: WrappedLogger,
    __: str,
    event_dict: EventDict,
) -> EventDict:
    level = str(event_dict.pop("level", "info")).upper()
    message = str(event_dict.pop("event", ""))
    exception = event_dict.pop("exception", None)
    if exception:
        message = f"{message}\n{exception}"
    loguru_logger.bind(**event_dict).opt(depth=6).log(level, message)
    raise DropEvent


def get_logger(*initial_values: object, **initial_kw: object) -> BoundLogger:
    if not _configured:
        configure_logging(LoggingOptions(file_sink=False))
    return cast(BoundLogger, structlog.get_logger(*initial_values, **initial_kw))


__all__ = ["LoggingOptions", "configure_logging", "get_logger"]
