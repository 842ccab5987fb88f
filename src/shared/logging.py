"""Logging for the web app and the Engine workers.

structlog builds the event dict and stdlib logging owns the handlers.
Records from libraries that log through stdlib (Protean, uvicorn, redis)
run through the same processors via ``ProcessorFormatter``, so a process
writes a single format to the console and to its log files.
"""

import logging
import logging.handlers
import os
import sys
from pathlib import Path
from typing import Any

import structlog

LEVELS = {
    "production": "INFO",
    "staging": "INFO",
    "development": "DEBUG",
    "test": "WARNING",
}
STRUCTURED_ENVIRONMENTS = ("production", "staging")
QUIET_LOGGERS = ("uvicorn.access", "asyncio", "redis")

MAX_BYTES = 10 * 1024 * 1024
BACKUP_COUNT = 5


def environment() -> str:
    for name in ("ENV", "ENVIRONMENT", "PROTEAN_ENV"):
        if os.getenv(name):
            return os.environ[name].lower()
    return "development"


def get_log_level() -> str:
    """``LOG_LEVEL`` wins; otherwise the level follows the environment."""
    return os.getenv("LOG_LEVEL", LEVELS.get(environment(), "INFO")).upper()


def structured_output() -> bool:
    return os.getenv("LOG_FORMAT", "").lower() == "json" or environment() in STRUCTURED_ENVIRONMENTS


def _shared_processors() -> list:
    return [
        structlog.contextvars.merge_contextvars,
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso", utc=True),
        structlog.processors.StackInfoRenderer(),
    ]


def _formatter() -> structlog.stdlib.ProcessorFormatter:
    if structured_output():
        rendering = [structlog.processors.format_exc_info, structlog.processors.JSONRenderer()]
    else:
        rendering = [structlog.dev.ConsoleRenderer(colors=sys.stdout.isatty())]

    return structlog.stdlib.ProcessorFormatter(
        foreign_pre_chain=_shared_processors(),
        processors=[structlog.stdlib.ProcessorFormatter.remove_processors_meta, *rendering],
    )


def _rotating(path: Path, level) -> logging.Handler:
    handler = logging.handlers.RotatingFileHandler(
        filename=path,
        maxBytes=MAX_BYTES,
        backupCount=BACKUP_COUNT,
        encoding="utf-8",
    )
    handler.setLevel(level)
    return handler


def configure_logging(process: str = "web", log_dir: str | Path | None = None) -> None:
    """Send every log record to the console and to ``<process>.log``.

    Errors are also written to ``<process>_error.log``. The web app and the
    Engine runner use different process names so their files never
    interleave. ``LOG_DIR`` moves the files out of ``./logs``.
    """
    level = get_log_level()
    log_dir = Path(log_dir or os.getenv("LOG_DIR", "logs"))
    log_dir.mkdir(parents=True, exist_ok=True)

    formatter = _formatter()
    root = logging.getLogger()
    for handler in root.handlers:
        handler.close()
    root.handlers = []
    root.setLevel(level)

    for handler in (
        logging.StreamHandler(sys.stdout),
        _rotating(log_dir / f"{process}.log", level),
        _rotating(log_dir / f"{process}_error.log", logging.ERROR),
    ):
        handler.setFormatter(formatter)
        root.addHandler(handler)

    for name in QUIET_LOGGERS:
        logging.getLogger(name).setLevel(logging.WARNING)

    structlog.configure(
        processors=[
            structlog.stdlib.filter_by_level,
            *_shared_processors(),
            structlog.stdlib.PositionalArgumentsFormatter(),
            structlog.processors.UnicodeDecoder(),
            structlog.stdlib.ProcessorFormatter.wrap_for_formatter,
        ],
        wrapper_class=structlog.stdlib.BoundLogger,
        logger_factory=structlog.stdlib.LoggerFactory(),
        cache_logger_on_first_use=True,
    )


def add_context(**kwargs: Any) -> None:
    """Bind key/values to every event logged from the current context."""
    structlog.contextvars.bind_contextvars(**kwargs)


def clear_context() -> None:
    structlog.contextvars.clear_contextvars()
