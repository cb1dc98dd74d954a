"""
Logging configuration for Proxy Printer.

All modules log through loguru. ``get_logger(__name__)`` tags each record
with the emitting module so console lines read ``engine.resolver | ...``
instead of the loguru call site of shared helpers.
"""

import sys
import time
from contextlib import contextmanager
from typing import Iterator

from loguru import logger

from proxy_printer.config import settings as settings_module

PACKAGE_PREFIX = "proxy_printer."

CONSOLE_FORMAT = (
    "<green>{time:HH:mm:ss}</green> | <level>{level: <8}</level> | "
    "<cyan>{extra[module]}</cyan> - <level>{message}</level>"
)
FILE_FORMAT = (
    "{time:YYYY-MM-DD HH:mm:ss.SSS} | {level: <8} | {thread.name} | "
    "{extra[module]}:{function}:{line} - {message}"
)


def setup_logging(level: str | None = None) -> None:
    """Install the console sink and, if enabled, the rotating file sink.

    Call once at startup; calling again replaces the sinks.

    Args:
        level: Console level override (defaults to settings.log_level)
    """
    settings = settings_module.settings
    console_level = level or settings.log_level

    logger.remove()
    logger.configure(extra={"module": "proxy_printer"})

    logger.add(sys.stderr, level=console_level, format=CONSOLE_FORMAT, colorize=True)

    if settings.log_to_file:
        settings.logs_dir.mkdir(parents=True, exist_ok=True)
        # Lookups and downloads log from worker threads
        logger.add(
            settings.logs_dir / "proxy-printer_{time:YYYY-MM-DD}.log",
            level="DEBUG",
            format=FILE_FORMAT,
            rotation=settings.log_rotation,
            retention=settings.log_retention,
            compression="gz",
            enqueue=True,
        )

    logger.debug("Logging initialized (console level={})", console_level)


def get_logger(name: str):
    """Return the loguru logger bound to a module.

    Example:
        >>> logger = get_logger(__name__)
        >>> logger.info("Resolving card: {}", card_name)
    """
    if name.startswith(PACKAGE_PREFIX):
        name = name[len(PACKAGE_PREFIX) :]
    return logger.bind(module=name)


@contextmanager
def log_operation(operation: str, **context) -> Iterator[None]:
    """Log the start, duration and outcome of an operation.

    Exceptions are logged and re-raised.

    Example:
        >>> with log_operation("Materializing deck", deck="Elves"):
        ...     materializer.materialize(deck)
        # Logs: "Materializing deck [deck=Elves] completed in 2.34s"
    """
    label = f"{operation} [{' '.join(f'{k}={v}' for k, v in context.items())}]"
    started = time.perf_counter()
    logger.info("{} starting...", label)
    try:
        yield
    except Exception as error:
        logger.error(
            "{} failed after {:.2f}s: {}", label, time.perf_counter() - started, error
        )
        raise
    logger.info("{} completed in {:.2f}s", label, time.perf_counter() - started)
