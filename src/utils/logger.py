import logging
import sys
from collections.abc import Callable
from enum import Enum
from functools import wraps
from itertools import chain
from typing import Any, Final

from loguru import logger
from returns.io import IOFailure, IOResult, IOSuccess
from returns.result import Failure, Result, Success

VERBOSE: Final[bool] = False


def _debug_function_signature(func: Callable[..., Any], *args, **kwargs) -> None:
    signature = ", ".join(
        chain(
            (repr(arg) for arg in args),
            (f"{key}={value!r}" for key, value in kwargs.items()),
        )
    )
    logger.debug(f"Calling {func.__name__}({signature})")


class FailureLevel(Enum):
    WARNING = logging.WARNING
    ERROR = logging.ERROR
    CRITICAL = logging.CRITICAL


def log_failure(failure_message: str, failure_level: FailureLevel, error: str) -> None:
    logger.debug(f"{failure_message}: {error}")
    match failure_level:
        case FailureLevel.WARNING:
            logger.warning(failure_message)
        case FailureLevel.ERROR:
            logger.error(failure_message)
        case FailureLevel.CRITICAL:
            logger.critical(failure_message)


def _log_outcome(
    result: Result | IOResult,
    failure_message: str,
    success_message: str | None,
    failure_level: FailureLevel,
) -> None:
    match result:
        case IOSuccess() | Success():
            if success_message:
                logger.info(success_message)
        case IOFailure(Failure(error)) | Failure(error):
            log_failure(failure_message, failure_level, str(error))


def log_railway_function(
    failure_message: str,
    success_message: str | None = None,
    failure_level: FailureLevel = FailureLevel.ERROR,
):
    """
    Log the outcome of a function returning a `Result` or `IOResult` container.

    Successes are logged at INFO level when a `success_message` is given. Failures
    log the error detail at DEBUG level and the `failure_message` at `failure_level`.
    Values that are not containers are passed through without logging.
    """

    def decorator(func):
        @wraps(func)
        def wrapper(*args, **kwargs):
            if VERBOSE:
                _debug_function_signature(func, *args, **kwargs)
            result = func(*args, **kwargs)
            if isinstance(result, Result | IOResult):
                _log_outcome(result, failure_message, success_message, failure_level)
            return result

        return wrapper

    return decorator


def configure_logging(level: str) -> int:
    """Replace the default loguru sink with a stderr sink at `level` and return its handler id."""
    logger.remove()
    return logger.add(sys.stderr, level=level.upper())
