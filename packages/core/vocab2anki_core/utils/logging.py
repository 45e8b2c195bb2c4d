"""Logging for the export engine.

Every module logs through ``get_logger(__name__)``. Records go to stdout at
the level named by ``VOCAB2ANKI_LOG_LEVEL`` (``INFO`` when unset or unknown).
"""

import logging
import os
import sys
from functools import wraps
from typing import Any, Callable, TypeVar

LOG_LEVEL_ENV = "VOCAB2ANKI_LOG_LEVEL"
_LOG_FORMAT = "%(asctime)s - %(name)s - %(levelname)s - %(message)s"

F = TypeVar("F", bound=Callable[..., Any])


def configured_level() -> int:
    """Log level from the environment, falling back to INFO."""
    level = logging.getLevelName(os.environ.get(LOG_LEVEL_ENV, "INFO").strip().upper())
    return level if isinstance(level, int) else logging.INFO


def get_logger(name: str, level: int | None = None) -> logging.Logger:
    """Get a logger with a single stdout handler.

    Args:
        name: Logger name (typically __name__)
        level: Optional log level override

    Returns:
        Configured logger
    """
    logger = logging.getLogger(name)

    if not logger.handlers:
        handler = logging.StreamHandler(sys.stdout)
        handler.setFormatter(logging.Formatter(_LOG_FORMAT))
        logger.addHandler(handler)

    if level is not None:
        logger.setLevel(level)
    elif logger.level == logging.NOTSET:
        logger.setLevel(configured_level())

    return logger


def log_exceptions(logger: logging.Logger, operation: str | None = None) -> Callable[[F], F]:
    """Log failures of a serialization step with its traceback, then re-raise.

    Args:
        logger: Logger to report to
        operation: Label used in the message (defaults to the function name)
    """

    def decorator(func: F) -> F:
        label = operation or func.__name__

        @wraps(func)
        def wrapper(*args: Any, **kwargs: Any) -> Any:
            try:
                return func(*args, **kwargs)
            except Exception as e:
                logger.exception(f"{label} failed: {type(e).__name__}: {e}")
                raise

        return wrapper  # type: ignore

    return decorator
