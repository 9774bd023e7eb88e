"""Logging pipeline implementation."""

from __future__ import annotations

import logging
import queue
from datetime import UTC, datetime
from logging.handlers import QueueHandler, QueueListener
from pathlib import Path

from timeloop.api.logging import LoggingConfig
from timeloop.runtime.config import LoopRuntimeConfig, load_loop_config
from timeloop.state.json_codec import dumps_text

_QUEUE_LISTENER: QueueListener | None = None

_STANDARD_RECORD_FIELDS = frozenset(
    {
        "name",
        "msg",
        "args",
        "levelname",
        "levelno",
        "pathname",
        "filename",
        "module",
        "exc_info",
        "exc_text",
        "stack_info",
        "lineno",
        "funcName",
        "created",
        "msecs",
        "relativeCreated",
        "thread",
        "threadName",
        "processName",
        "process",
        "taskName",
        "message",
    }
)


class JsonFormatter(logging.Formatter):
    """JSON-lines formatter with extra-field preservation."""

    def format(self, record: logging.LogRecord) -> str:
        payload: dict[str, object] = {
            "ts": datetime.now(UTC).isoformat(),
            "level": record.levelname,
            "logger": record.name,
            "msg": record.getMessage(),
        }
        extras = {
            key: value if isinstance(value, (str, int, float, bool, type(None))) else repr(value)
            for key, value in record.__dict__.items()
            if key not in _STANDARD_RECORD_FIELDS
        }
        if extras:
            payload["fields"] = extras
        if record.exc_info:
            payload["exc_info"] = self.formatException(record.exc_info)
        return dumps_text(payload)


def logging_config_from(config: LoopRuntimeConfig) -> LoggingConfig:
    """Derive the logging pipeline settings from loop runtime configuration."""
    return LoggingConfig(
        level_name=config.log_level,
        console_format=config.log_format,
        file_path=config.log_file,
        file_format="json",
    )


def configure_logging(config: LoggingConfig) -> None:
    """Install handlers on the root logger; a file sink runs behind a queue listener."""
    _stop_listener()
    root = logging.getLogger()
    root.handlers.clear()
    root.setLevel(getattr(logging, config.level_name.upper(), logging.INFO))

    console = _make_handler(logging.StreamHandler(), config.console_format)
    if not config.file_path:
        root.addHandler(console)
        return
    sinks = [console, _make_handler(_open_file_handler(Path(config.file_path)), config.file_format)]
    _start_listener(root, sinks)


def setup_logging(runtime_config: LoopRuntimeConfig | None = None) -> None:
    """Configure logging from runtime config unless the host already did."""
    if logging.getLogger().handlers:
        return
    resolved = runtime_config if runtime_config is not None else load_loop_config()
    configure_logging(logging_config_from(resolved))


def _make_handler(handler: logging.Handler, kind: str) -> logging.Handler:
    if kind.strip().lower() == "json":
        handler.setFormatter(JsonFormatter())
    else:
        handler.setFormatter(logging.Formatter("%(asctime)s %(levelname)s %(name)s: %(message)s"))
    return handler


def _open_file_handler(path: Path) -> logging.FileHandler:
    path.parent.mkdir(parents=True, exist_ok=True)
    return logging.FileHandler(path, mode="a", encoding="utf-8", delay=True)


def _start_listener(root: logging.Logger, sinks: list[logging.Handler]) -> None:
    global _QUEUE_LISTENER

    records: queue.SimpleQueue[logging.LogRecord] = queue.SimpleQueue()
    root.addHandler(QueueHandler(records))
    _QUEUE_LISTENER = QueueListener(records, *sinks, respect_handler_level=True)
    _QUEUE_LISTENER.start()


def _stop_listener() -> None:
    global _QUEUE_LISTENER

    if _QUEUE_LISTENER is not None:
        _QUEUE_LISTENER.stop()
        _QUEUE_LISTENER = None
