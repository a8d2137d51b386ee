"""Logging setup for cruxctl.

Log records go to stderr so they never mix with command output on stdout.
Messages carry ``key=value`` context, e.g. ``Started deployment [id=... node=edge-1]``.
"""

import logging
import sys
from enum import Enum
from typing import Any

from rich.console import Console
from rich.logging import RichHandler

ROOT_LOGGER = "cruxctl"

# HTTP stacks that log every request at INFO
NOISY_LOGGERS = ("httpx", "httpcore", "urllib3")

PLAIN_FORMAT = "%(asctime)s %(levelname)-8s %(name)s: %(message)s"


class LogLevel(str, Enum):
    """Log level enumeration."""

    DEBUG = "debug"
    INFO = "info"
    WARNING = "warning"
    ERROR = "error"

    def to_logging(self) -> int:
        return logging.getLevelName(self.value.upper())


def _make_handler(rich_output: bool) -> logging.Handler:
    if rich_output:
        handler: logging.Handler = RichHandler(
            console=Console(stderr=True),
            show_path=False,
            rich_tracebacks=True,
        )
        handler.setFormatter(logging.Formatter("%(message)s"))
    else:
        handler = logging.StreamHandler(sys.stderr)
        handler.setFormatter(logging.Formatter(PLAIN_FORMAT, datefmt="%Y-%m-%d %H:%M:%S"))
    return handler


def setup_logging(level: LogLevel = LogLevel.WARNING, rich_output: bool = True) -> logging.Logger:
    """Install a single stderr handler on the root logger.

    Calling it again replaces the previous handler, so the CLI can be invoked
    repeatedly in one process (tests) without duplicated lines.
    """
    log_level = level.to_logging()

    root = logging.getLogger()
    for handler in list(root.handlers):
        root.removeHandler(handler)
    root.addHandler(_make_handler(rich_output))
    root.setLevel(log_level)

    for name in NOISY_LOGGERS:
        logging.getLogger(name).setLevel(max(log_level, logging.WARNING))

    logger = logging.getLogger(ROOT_LOGGER)
    logger.setLevel(log_level)
    return logger


def get_logger(name: str) -> logging.Logger:
    """Logger under the ``cruxctl`` namespace; module names are used as-is."""
    if name == ROOT_LOGGER or name.startswith(f"{ROOT_LOGGER}."):
        return logging.getLogger(name)
    return logging.getLogger(f"{ROOT_LOGGER}.{name}")


class StructuredLogger:
    """Logger that appends ``key=value`` context to each message."""

    def __init__(self, name: str, **context: Any):
        self._logger = get_logger(name)
        self._context = context

    def bind(self, **kwargs: Any) -> "StructuredLogger":
        """Logger sharing this one's name with extra context."""
        return StructuredLogger(self._logger.name, **{**self._context, **kwargs})

    def _log(self, level: int, message: str, fields: dict[str, Any]) -> None:
        if not self._logger.isEnabledFor(level):
            return
        context = {**self._context, **fields}
        if context:
            message = f"{message} [{' '.join(f'{k}={v}' for k, v in context.items())}]"
        self._logger.log(level, message)

    def debug(self, message: str, **kwargs: Any) -> None:
        self._log(logging.DEBUG, message, kwargs)

    def info(self, message: str, **kwargs: Any) -> None:
        self._log(logging.INFO, message, kwargs)

    def warning(self, message: str, **kwargs: Any) -> None:
        self._log(logging.WARNING, message, kwargs)
