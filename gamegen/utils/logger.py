"""
Logging helpers for gamegen.

All loggers live under the ``gamegen`` namespace. Console output goes to
stderr; stdout is left to the CLI, which prints only the artifact path
(or the JSON result).
"""

import logging
import sys
import time
from pathlib import Path
from typing import Any, Dict, Optional


DEFAULT_FORMAT = "%(asctime)s [%(levelname)s] %(name)s: %(message)s"
DEFAULT_DATE_FORMAT = "%Y-%m-%d %H:%M:%S"

ROOT_LOGGER_NAME = "gamegen"

_configured = False


def setup_logging(
    level: str = "INFO",
    format_string: Optional[str] = None,
    log_file: Optional[Path | str] = None,
    console: bool = True,
) -> None:
    """
    Configure the ``gamegen`` logger tree.

    Calling it again replaces the previous handlers, so the CLI can apply
    the level and file from the loaded config after import-time defaults.

    Args:
        level: Level name; unknown names fall back to INFO
        format_string: Record format (DEFAULT_FORMAT if None)
        log_file: Also append records to this file
        console: Emit records on stderr
    """
    global _configured

    numeric_level = getattr(logging, level.upper(), logging.INFO)
    formatter = logging.Formatter(format_string or DEFAULT_FORMAT, datefmt=DEFAULT_DATE_FORMAT)

    handlers = []
    if console:
        handlers.append(logging.StreamHandler(sys.stderr))
    if log_file:
        log_path = Path(log_file)
        log_path.parent.mkdir(parents=True, exist_ok=True)
        handlers.append(logging.FileHandler(log_path, encoding='utf-8'))

    root_logger = reset_logging()
    root_logger.setLevel(numeric_level)
    for handler in handlers:
        handler.setLevel(numeric_level)
        handler.setFormatter(formatter)
        root_logger.addHandler(handler)

    _configured = True


def reset_logging() -> logging.Logger:
    """Detach and close every handler on the ``gamegen`` logger; returns it."""
    root_logger = logging.getLogger(ROOT_LOGGER_NAME)
    for handler in list(root_logger.handlers):
        root_logger.removeHandler(handler)
        handler.close()
    return root_logger


def get_logger(name: str) -> logging.Logger:
    """
    Get a logger inside the ``gamegen`` namespace.

    Module names already under ``gamegen.`` are used as-is; anything else
    is prefixed. Logging is configured with defaults on first use.
    """
    if not _configured:
        setup_logging()

    if name == ROOT_LOGGER_NAME or name.startswith(ROOT_LOGGER_NAME + "."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER_NAME}.{name}")


def _format_fields(fields: Dict[str, Any]) -> str:
    return ", ".join(f"{key}={value}" for key, value in fields.items())


class LogContext:
    """
    Log the start, end and duration of one operation.

    Fields given at construction appear on the start line; fields added
    with ``add`` while the block runs appear on the completion line.

    Example:
        with LogContext(logger, "Generating spec", project="demo") as op:
            path = writer.write(...)
            op.add(output=path)
    """

    def __init__(self, logger: logging.Logger, operation: str, **fields):
        self.logger = logger
        self.operation = operation
        self.fields = fields
        self.results: Dict[str, Any] = {}
        self._started: Optional[float] = None

    def add(self, **fields) -> None:
        """Attach fields to the completion line."""
        self.results.update(fields)

    @property
    def elapsed(self) -> float:
        return time.monotonic() - self._started if self._started is not None else 0.0

    def __enter__(self) -> 'LogContext':
        self._started = time.monotonic()
        self.logger.info(f"Starting: {self.operation} ({_format_fields(self.fields)})")
        return self

    def __exit__(self, exc_type, exc_val, exc_tb):
        if exc_type is None:
            suffix = f" {_format_fields(self.results)}" if self.results else ""
            self.logger.info(f"Completed: {self.operation} ({self.elapsed:.2f}s){suffix}")
        else:
            kind = getattr(exc_val, "kind", exc_type.__name__)
            self.logger.error(f"Failed: {self.operation} ({self.elapsed:.2f}s) [{kind}] {exc_val}")
        return False


class ProgressLogger:
    """
    Count steps of a fixed-size batch and log them.

    Example:
        progress = ProgressLogger(logger, "Uploading files", total=3)
        for document in documents:
            progress.step(document.display_name)
        progress.complete()
    """

    def __init__(self, logger: logging.Logger, operation: str, total: int, every: int = 1):
        self.logger = logger
        self.operation = operation
        self.total = total
        self.every = max(every, 1)
        self.done = 0
        self._started = time.monotonic()

    def step(self, label: Optional[str] = None) -> None:
        """Record one finished step; logs every ``every`` steps and on the last."""
        self.done += 1
        if self.done % self.every == 0 or self.done == self.total:
            line = f"{self.operation} {self.done}/{self.total}"
            self.logger.info(f"{line}: {label}" if label else line)

    def complete(self) -> None:
        self.logger.info(
            f"{self.operation}: {self.done}/{self.total} done "
            f"({time.monotonic() - self._started:.2f}s)"
        )


def log_exception(logger: logging.Logger, message: str, exc: BaseException) -> None:
    """Log ``exc`` with its traceback at ERROR level."""
    logger.error(f"{message}: {type(exc).__name__}: {exc}", exc_info=exc)
