"""Logging utilities."""

import inspect
import logging
import sys
from datetime import datetime
from functools import wraps
from typing import Any, Callable, Optional, TypeVar, cast

import structlog
from structlog.types import EventDict, Processor

# Type variables for decorators
F = TypeVar("F", bound=Callable[..., Any])


def add_caller_info(_: logging.Logger, __: str, event_dict: EventDict) -> EventDict:
    """Add caller information to log event."""
    frame = sys._getframe()
    while frame:
        module = frame.f_globals.get("__name__", "")
        if module.startswith("meme_hustle") and module != __name__:
            event_dict.update(
                {"module": module, "function": frame.f_code.co_name, "line": frame.f_lineno}
            )
            break
        frame = frame.f_back
    return event_dict


def setup_logging(
    level: str = "INFO", json_format: bool = True, log_file: Optional[str] = None
) -> None:
    """
    Set up structured logging.

    Args:
        level: Log level
        json_format: Whether to output logs in JSON format
        log_file: Optional file to write logs to
    """
    processors: list[Processor] = [
        structlog.stdlib.add_logger_name,
        structlog.stdlib.add_log_level,
        structlog.processors.TimeStamper(fmt="iso"),
        add_caller_info,
        structlog.processors.StackInfoRenderer(),
        structlog.processors.format_exc_info,
    ]

    if json_format:
        processors.append(structlog.processors.JSONRenderer())
    else:
        processors.append(structlog.dev.ConsoleRenderer())

    structlog.configure(
        processors=processors,
        context_class=dict,
        logger_factory=structlog.stdlib.LoggerFactory(),
        wrapper_class=structlog.stdlib.BoundLogger,
        cache_logger_on_first_use=True,
    )

    logging.basicConfig(format="%(message)s", stream=sys.stdout, level=level.upper())

    if log_file:
        file_handler = logging.FileHandler(log_file)
        file_handler.setFormatter(logging.Formatter("%(message)s"))
        logging.getLogger().addHandler(file_handler)


def get_logger(name: str) -> structlog.stdlib.BoundLogger:
    """
    Get a structured logger.

    Args:
        name: Logger name (usually __name__)

    Returns:
        Structured logger instance
    """
    return structlog.get_logger(name)


def log_performance(func: F) -> F:
    """
    Decorator to log how long a function call took.

    Args:
        func: Function to decorate

    Returns:
        Decorated function
    """
    logger = get_logger(func.__module__)

    @wraps(func)
    async def async_wrapper(*args: Any, **kwargs: Any) -> Any:
        start_time = datetime.now()
        try:
            result = await func(*args, **kwargs)
        except Exception as e:
            duration = (datetime.now() - start_time).total_seconds()
            logger.warning(
                "function_error_performance",
                function=func.__name__,
                duration_seconds=duration,
                error=str(e),
            )
            raise
        duration = (datetime.now() - start_time).total_seconds()
        logger.debug("function_performance", function=func.__name__, duration_seconds=duration)
        return result

    @wraps(func)
    def sync_wrapper(*args: Any, **kwargs: Any) -> Any:
        start_time = datetime.now()
        try:
            result = func(*args, **kwargs)
        except Exception as e:
            duration = (datetime.now() - start_time).total_seconds()
            logger.warning(
                "function_error_performance",
                function=func.__name__,
                duration_seconds=duration,
                error=str(e),
            )
            raise
        duration = (datetime.now() - start_time).total_seconds()
        logger.debug("function_performance", function=func.__name__, duration_seconds=duration)
        return result

    return cast(F, async_wrapper if inspect.iscoroutinefunction(func) else sync_wrapper)
