"""
Logging - Logger tree and formatters for Pattern Responder
==========================================================

Every module logs through ``get_logger("<component>")``, which places it
under the ``responder`` logger. ``setup_logging`` attaches handlers once
per process: a coloured console stream and, given a log directory,
``responder.log`` plus an errors-only JSON ``errors.log``.

The web layer tags each request with ``set_log_context(request_id=...)``
and the tag is copied onto every record emitted while the request runs,
including work Starlette hands to its threadpool.
"""

import json
import logging
import sys
from contextvars import ContextVar
from datetime import datetime, timezone
from pathlib import Path
from typing import Any, Dict, Optional


ROOT_LOGGER_NAME = "responder"

PLAIN_FORMAT = "%(asctime)s | %(levelname)-8s | %(name)s:%(lineno)d | %(message)s"

_log_context: ContextVar[Dict[str, Any]] = ContextVar("responder_log_context", default={})


class JSONFormatter(logging.Formatter):
    """One JSON object per record; bound and request context go under ``data``."""

    def format(self, record: logging.LogRecord) -> str:
        created = datetime.fromtimestamp(record.created, timezone.utc)
        entry = {
            "timestamp": created.isoformat().replace("+00:00", "Z"),
            "level": record.levelname,
            "logger": record.name,
            "message": record.getMessage(),
            "location": f"{record.module}.{record.funcName}:{record.lineno}",
        }

        data = getattr(record, "extra_data", None)
        if data:
            entry["data"] = data

        if record.exc_info:
            entry["exception"] = self.formatException(record.exc_info)

        return json.dumps(entry, default=str)


class ColoredFormatter(logging.Formatter):
    """Console line: coloured level, time, component and request id."""

    LEVEL_COLORS = {
        logging.DEBUG: "\033[36m",
        logging.INFO: "\033[32m",
        logging.WARNING: "\033[33m",
        logging.ERROR: "\033[31m",
        logging.CRITICAL: "\033[35m",
    }
    RESET = "\033[0m"

    def __init__(self):
        super().__init__(datefmt="%H:%M:%S")

    def format(self, record: logging.LogRecord) -> str:
        color = self.LEVEL_COLORS.get(record.levelno, "")
        component = record.name
        if component.startswith(ROOT_LOGGER_NAME + "."):
            component = component[len(ROOT_LOGGER_NAME) + 1:]

        request_id = (getattr(record, "extra_data", None) or {}).get("request_id")
        tag = f"[{request_id}] " if request_id else ""

        line = (
            f"{color}{record.levelname:<8}{self.RESET} "
            f"{self.formatTime(record, self.datefmt)} {component}: "
            f"{tag}{record.getMessage()}"
        )
        if record.exc_info:
            line += "\n" + self.formatException(record.exc_info)
        return line


class RequestContextFilter(logging.Filter):
    """Merges the current request context into ``record.extra_data``."""

    def filter(self, record: logging.LogRecord) -> bool:
        context = _log_context.get()
        if context:
            record.extra_data = {**(getattr(record, "extra_data", None) or {}), **context}
        return True


class ComponentAdapter(logging.LoggerAdapter):
    """Adds the values bound by ``get_logger(name, **extra)`` to ``extra_data``."""

    def process(self, msg: str, kwargs: Dict[str, Any]) -> tuple:
        extra = dict(kwargs.get("extra") or {})
        data = {**self.extra, **extra.pop("extra_data", {})}
        if data:
            extra["extra_data"] = data
        kwargs["extra"] = extra
        return msg, kwargs


_configured = False


def _file_handler(path: Path, level: int, formatter: logging.Formatter) -> logging.Handler:
    handler = logging.FileHandler(path, encoding="utf-8")
    handler.setLevel(level)
    handler.setFormatter(formatter)
    return handler


def setup_logging(
    log_dir: Optional[str] = None,
    log_level: str = "INFO",
    json_format: bool = False,
    console_output: bool = True
) -> None:
    """
    Attach handlers to the ``responder`` logger. Only the first call has effect.

    Args:
        log_dir: Directory for ``responder.log`` and ``errors.log``;
            no files are written when omitted
        log_level: Level name for the ``responder`` logger
        json_format: Write ``responder.log`` as JSON lines instead of text
        console_output: Also log to stdout

    Example:
        setup_logging(log_dir="~/.local/share/pattern-responder/logs", json_format=True)
    """
    global _configured

    if _configured:
        return

    logger = logging.getLogger(ROOT_LOGGER_NAME)
    logger.setLevel(getattr(logging, log_level.upper(), logging.INFO))
    logger.handlers.clear()

    handlers = []

    if console_output:
        console = logging.StreamHandler(sys.stdout)
        console.setFormatter(ColoredFormatter())
        handlers.append(console)

    if log_dir:
        path = Path(log_dir).expanduser()
        path.mkdir(parents=True, exist_ok=True)

        main_formatter = JSONFormatter() if json_format else logging.Formatter(PLAIN_FORMAT)
        handlers.append(_file_handler(path / "responder.log", logging.DEBUG, main_formatter))
        handlers.append(_file_handler(path / "errors.log", logging.ERROR, JSONFormatter()))

    context_filter = RequestContextFilter()
    for handler in handlers:
        handler.addFilter(context_filter)
        logger.addHandler(handler)

    _configured = True


def get_logger(name: str, **extra) -> logging.LoggerAdapter:
    """
    Logger for a component, e.g. ``get_logger("matching.engine")``.

    Names are placed under ``responder.`` unless they already are; keyword
    arguments are attached to every record the adapter emits.
    """
    if name != ROOT_LOGGER_NAME and not name.startswith(ROOT_LOGGER_NAME + "."):
        name = f"{ROOT_LOGGER_NAME}.{name}"
    return ComponentAdapter(logging.getLogger(name), extra)


def set_log_context(**kwargs) -> None:
    """Add values to the context of the current request or task."""
    _log_context.set({**_log_context.get(), **kwargs})


def clear_log_context() -> None:
    _log_context.set({})
