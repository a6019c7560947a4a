"""Logging for the abacus: structlog event dicts rendered by stdlib handlers.

The console handler follows LOG_FORMAT ("json", or "console"/unset for
human-readable output). When a log directory is configured, every run
appends JSON lines to the same ``abacus.log`` there. LOG_LEVEL picks the
root level (default INFO).
"""

from __future__ import annotations

import logging
import os
import sys
from collections.abc import Mapping
from enum import Enum
from pathlib import Path
from typing import TYPE_CHECKING

import structlog

if TYPE_CHECKING:
    from collections.abc import MutableMapping
    from typing import Any

    from structlog.typing import Processor

LOG_FILE_NAME = "abacus.log"

_LOG_FORMATS = {"json", "console", ""}


def _plain(value: object) -> object:
    if isinstance(value, Enum):
        return value.value
    if isinstance(value, (list, tuple)):
        return [_plain(v) for v in value]
    if isinstance(value, Mapping):
        return {k: _plain(v) for k, v in value.items()}
    return value


def enum_values(
    _logger: object,
    _method_name: str,
    event_dict: MutableMapping[str, Any],
) -> MutableMapping[str, Any]:
    """Replace match modes, phases and other enums with their stored tags, nested ones included."""
    for key, value in event_dict.items():
        event_dict[key] = _plain(value)
    return event_dict


def json_output_from_env() -> bool:
    value = os.environ.get("LOG_FORMAT", "").lower()
    if value not in _LOG_FORMATS:
        msg = f"Invalid LOG_FORMAT={value!r}. Must be 'json', 'console', or unset."
        raise ValueError(msg)
    return value == "json"


def log_level_from_env() -> int:
    value = os.environ.get("LOG_LEVEL", "INFO").upper()
    level = logging.getLevelNamesMapping().get(value)
    if level is None or value == "NOTSET":
        msg = f"Invalid LOG_LEVEL={value!r}. Must be DEBUG, INFO, WARNING, ERROR, or CRITICAL."
        raise ValueError(msg)
    return level


def configure_structlog() -> None:
    """Route structlog through stdlib logging; handlers decide how events are rendered."""
    processors: list[Processor] = [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.filter_by_level,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        enum_values,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.UnicodeDecoder(),
        structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
    ]
    structlog.configure(
        processors=processors,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=False,
    )


def _formatter(renderer: Processor) -> logging.Formatter:
    # Tracebacks are rendered here, once per handler.
    return structlog.stdlib.ProcessorFormatter(
        processors=[
            structlog.stdlib.ProcessorFormatter.remove_processors_meta,
            structlog.processors.format_exc_info,
            renderer,
        ],
    )


def setup_logging(
    log_dir: Path | str | None = None,
    level: int | None = None,
) -> Path | None:
    """Configure console output and, with ``log_dir``, the shared log file.

    Returns the log file path, or None when only the console is used.
    Calling it again replaces the handlers of the previous call.
    """
    json_output = json_output_from_env()
    if level is None:
        level = log_level_from_env()

    configure_structlog()

    root_logger = logging.getLogger()
    root_logger.setLevel(level)
    for handler in root_logger.handlers[:]:
        root_logger.removeHandler(handler)
        handler.close()

    # slow-callback warnings are the only asyncio output worth keeping
    logging.getLogger("asyncio").setLevel(logging.WARNING)

    console_renderer = (
        structlog.processors.JSONRenderer()
        if json_output
        else structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())
    )
    console_handler = logging.StreamHandler(sys.stdout)
    console_handler.setFormatter(_formatter(console_renderer))
    root_logger.addHandler(console_handler)

    if log_dir is None:
        return None

    file_path = Path(log_dir) / LOG_FILE_NAME
    file_path.parent.mkdir(parents=True, exist_ok=True)
    file_handler = logging.FileHandler(file_path, mode="a", encoding="utf-8")
    file_handler.setFormatter(_formatter(structlog.processors.JSONRenderer()))
    root_logger.addHandler(file_handler)
    return file_path
