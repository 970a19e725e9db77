"""
Exception logging helpers for faults raised while serving a fan-out request.
"""

import logging


def _safe_str(obj) -> str:
    """
    Convert an object to string, falling back to repr or the type name when
    __str__ itself raises.
    """
    try:
        return str(obj)
    except Exception:
        try:
            return repr(obj)
        except Exception:
            return f"<{type(obj).__name__} object (string conversion failed)>"


def log_exception_with_details(
    logger: logging.Logger,
    prefix: str,
    exception: BaseException,
    level: int = logging.ERROR,
) -> None:
    """
    Log an exception with its traceback. Never raises: a failing logger or a
    broken exception object only degrades the message.

    Args:
        logger: The logger instance to use
        prefix: Prefix for the log message (e.g., "[Forward]")
        exception: The exception to log
        level: The logging level to use (default: ERROR)
    """
    try:
        logger.log(
            level,
            f"{prefix} Exception: {_safe_str(exception)}",
            exc_info=exception if exception is not None else False,
        )
    except Exception:
        try:
            logger.log(logging.ERROR, f"{prefix} Exception (logging failed)")
        except Exception:
            pass


def format_exception_message(exception: BaseException) -> str:
    """Format an exception as "Type: message" for log lines."""
    return f"{type(exception).__name__}: {_safe_str(exception)}"
