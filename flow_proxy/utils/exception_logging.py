"""
Helpers for turning proxy failures into log lines and error envelope details.
"""

import logging


def _safe_str(obj) -> str:
    """
    Safely convert an object to string, handling cases where __str__ or __repr__ might fail.

    Args:
        obj: The object to convert to string

    Returns:
        A string representation of the object, falling back to safe alternatives
    """
    try:
        return str(obj)
    except Exception:
        try:
            return repr(obj)
        except Exception:
            try:
                return f"<{type(obj).__name__} object (string conversion failed)>"
            except Exception:
                return "<object (all string conversions failed)>"


def _root_cause(exception: BaseException):
    """Follow explicit ``raise ... from`` chains down to the original error."""
    seen = set()
    current = exception
    while current.__cause__ is not None and id(current) not in seen:
        seen.add(id(current))
        current = current.__cause__
    return current


def format_exception_message(exception: Exception) -> str:
    """
    Format an exception message for an error envelope.

    Falls back to the type name of the underlying cause when the exception
    carries no message of its own, so the caller always gets something to
    diagnose with. Never raises.
    """
    if exception is None:
        return "None"
    try:
        message = _safe_str(exception)
        if message:
            return message
        cause = _root_cause(exception)
        cause_message = _safe_str(cause)
        if cause_message:
            return f"{type(cause).__name__}: {cause_message}"
        return type(cause).__name__
    except Exception:
        return "<exception (formatting failed)>"


def log_exception_with_details(
    logger: logging.Logger,
    prefix: str,
    exception: Exception,
    level: int = logging.ERROR,
) -> None:
    """
    Log an exception together with its underlying cause.
    This function is designed to never throw exceptions itself, even when dealing with
    broken exception objects or logger failures.

    Args:
        logger: The logger instance to use
        prefix: Prefix for the log message (e.g., "Proxy error:")
        exception: The exception to log
        level: The logging level to use (default: ERROR)
    """
    try:
        safe_prefix = _safe_str(prefix) if prefix is not None else ""
        safe_exception_str = format_exception_message(exception)

        try:
            logger.log(
                level,
                f"{safe_prefix} {safe_exception_str}",
                exc_info=exception if exception is not None else False,
            )
        except Exception:
            # If logging with exc_info fails, try without it
            try:
                logger.log(level, f"{safe_prefix} {safe_exception_str}")
            except Exception:
                pass

        if exception is None:
            return
        cause = _root_cause(exception)
        if cause is not exception:
            try:
                logger.log(
                    level,
                    f"{safe_prefix} Caused by {type(cause).__name__}: {_safe_str(cause)}",
                )
            except Exception:
                pass
    except Exception:
        # One last minimal attempt, never propagate
        try:
            if logger is not None:
                logger.log(logging.ERROR, "Exception logging failed")
        except Exception:
            pass
