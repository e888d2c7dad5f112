"""
Structured Logging with Rich.

Every handler installed here prints the run id of the record (or "-"),
so log lines from concurrent analysis runs can be told apart.
"""

import logging
from functools import lru_cache

from rich.console import Console
from rich.logging import RichHandler

# Chatty third-party loggers held at WARNING
QUIET_LOGGERS: tuple[str, ...] = ("httpx", "httpcore", "uvicorn.access")

LOG_FORMAT = "%(name)s [%(run_id)s] | %(message)s"


class _RunIdDefault(logging.Filter):
    """Fill in `run_id` for records logged outside a LogContext."""

    def filter(self, record: logging.LogRecord) -> bool:
        if not hasattr(record, "run_id"):
            record.run_id = "-"
        return True


def setup_logging(level: str = "INFO", quiet: tuple[str, ...] = QUIET_LOGGERS) -> None:
    """
    Install a Rich handler on the root logger.

    Args:
        level: Logging level name
        quiet: Logger names lowered to WARNING
    """
    handler = RichHandler(
        console=Console(stderr=True),
        rich_tracebacks=True,
        show_time=True,
        show_path=False,
    )
    handler.addFilter(_RunIdDefault())

    logging.basicConfig(level=level, format=LOG_FORMAT, datefmt="[%X]", handlers=[handler])

    for name in quiet:
        logging.getLogger(name).setLevel(logging.WARNING)


@lru_cache(maxsize=128)
def get_logger(name: str) -> logging.Logger:
    return logging.getLogger(name)


class _ContextFilter(logging.Filter):
    def __init__(self, context: dict[str, str | int | float]) -> None:
        super().__init__()
        self.context = context

    def filter(self, record: logging.LogRecord) -> bool:
        for key, value in self.context.items():
            setattr(record, key, value)
        return True


class LogContext:
    """
    Stamp extra fields on records emitted by one logger.

    Only `logger` is affected; other loggers and other threads logging
    through different loggers are left alone.

    Usage:
        with LogContext(logger, run_id="1697712000000_ab12cd34e"):
            logger.info("Finalizing analysis run")
    """

    def __init__(self, logger: logging.Logger, **context: str | int | float) -> None:
        self.logger = logger
        self._filter = _ContextFilter(context)

    def __enter__(self) -> "LogContext":
        self.logger.addFilter(self._filter)
        return self

    def __exit__(self, *args: object) -> None:
        self.logger.removeFilter(self._filter)
