"""Structured logging setup using structlog.

Features:
- Colored console logs in dev, compact JSON lines in prod
- Automatic command injection (which CLI script emitted the line)
- Supports logging via stdlib logging OR structlog logger
"""

from __future__ import annotations

import contextvars
import logging
import os
import sys
from typing import Any, MutableMapping
import structlog
from datetime import datetime, timezone

from ncbackup.core.config import get_settings

_command_ctx: contextvars.ContextVar[str | None] = contextvars.ContextVar("ncb_command", default=None)

_RECORD_ATTRS = {
    "name", "msg", "args", "levelname", "levelno", "pathname", "filename", "module",
    "exc_info", "exc_text", "stack_info", "lineno", "funcName", "created", "msecs", "relativeCreated",
    "thread", "threadName", "processName", "process", "message", "taskName",
}


def bind_command(name: str) -> None:
    _command_ctx.set(name)


def get_command() -> str | None:
    return _command_ctx.get()


def _add_command(logger: Any, method: str, event_dict: MutableMapping[str, Any]):  # structlog processor
    event_dict.setdefault("command", get_command() or "-")
    return event_dict


def _add_timestamp(logger: Any, method: str, event_dict: MutableMapping[str, Any]):
    event_dict["ts"] = datetime.now(timezone.utc).isoformat(timespec="milliseconds")
    return event_dict


def _add_log_level(logger: Any, method: str, event_dict: MutableMapping[str, Any]):
    event_dict.setdefault("level", method.upper())
    return event_dict


def _rename_event_key(logger: Any, method: str, event_dict: MutableMapping[str, Any]):
    # structlog uses "event" by default; rename to message for consistency
    if "event" in event_dict:
        event_dict["message"] = event_dict.pop("event")
    return event_dict


def _stderr_logger_factory(*args: Any) -> structlog.PrintLogger:
    # sys.stderr is looked up per logger, not captured once at setup time
    return structlog.PrintLogger(sys.stderr)


class _StructlogHandler(logging.Handler):  # minimal; structlog renders and writes the line
    def emit(self, record: logging.LogRecord) -> None:
        try:
            logger = structlog.get_logger(record.name)
            kwargs = {k: v for k, v in record.__dict__.items() if k not in _RECORD_ATTRS}
            if record.exc_info:
                kwargs["exc_info"] = record.exc_info
            logger.log(record.levelno, record.getMessage(), **kwargs)
        except Exception:
            self.handleError(record)


def setup_logging(env: str | None = None) -> None:
    env = (env or get_settings().ncb_env or "dev").lower()
    is_dev = env != "prod"

    # Reset any existing configuration to avoid duplicate handlers when called twice
    for h in list(logging.root.handlers):
        logging.root.removeHandler(h)

    shared_processors: list[structlog.types.Processor] = [
        _add_timestamp,
        _add_command,
        _add_log_level,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
        _rename_event_key,
    ]

    if is_dev:
        renderer: structlog.types.Processor = structlog.dev.ConsoleRenderer(colors=sys.stderr.isatty())
    else:
        renderer = structlog.processors.JSONRenderer()

    structlog.configure(
        processors=[
            structlog.contextvars.merge_contextvars,
            *shared_processors,
            renderer,
        ],
        # stderr keeps stdout free for the scripts' own output (listings, progress)
        logger_factory=_stderr_logger_factory,
        wrapper_class=structlog.make_filtering_bound_logger(logging.DEBUG if is_dev else logging.INFO),
        cache_logger_on_first_use=False,
    )

    # Bridge stdlib logging -> structlog
    handler = _StructlogHandler()
    root_level = "DEBUG" if is_dev else "INFO"
    logging.basicConfig(handlers=[handler], level=root_level, force=True)

    # Reduce noise from requests/urllib3 in prod
    if not is_dev:
        for noisy in ("urllib3", "urllib3.connectionpool", "requests"):
            logging.getLogger(noisy).setLevel(os.getenv("NCB_LOG_LIB_LEVEL", "WARNING"))

    structlog.get_logger(__name__).debug("logging_configured", env=env)


__all__ = ["bind_command", "get_command", "setup_logging"]
