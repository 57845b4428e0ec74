"""
Exception logging helpers that never raise themselves.

Exception groups are expanded so every member gets its own log line.
"""

import logging


def _safe_str(obj) -> str:
    try:
        return str(obj)
    except Exception:
        try:
            return repr(obj)
        except Exception:
            return f"<{type(obj).__name__} (string conversion failed)>"


def _sub_exceptions(exception) -> list:
    try:
        return list(getattr(exception, "exceptions", None) or [])
    except Exception:
        return []


def describe_exception(exception) -> str:
    """``TypeName: message``, or just the type name when the message is empty."""
    if exception is None:
        return "None"
    message = _safe_str(exception)
    name = type(exception).__name__
    return f"{name}: {message}" if message else name


def log_exception_with_details(
    logger: logging.Logger,
    prefix: str,
    exception: BaseException,
    level: int = logging.ERROR,
    with_traceback: bool = True,
) -> None:
    """
    Log an exception, expanding exception groups into one line per member.

    Args:
        logger: The logger instance to use
        prefix: Prefix for the log message (e.g. "[Proxy]", "[Startup]")
        exception: The exception to log
        level: The logging level to use (default: ERROR)
        with_traceback: Attach exc_info to the records
    """
    try:
        sub_exceptions = _sub_exceptions(exception)
        if sub_exceptions:
            logger.log(
                level,
                f"{prefix} Exception with {len(sub_exceptions)} sub-exceptions: "
                f"{_safe_str(exception)}",
            )
            for i, sub_exc in enumerate(sub_exceptions):
                logger.log(
                    level,
                    f"{prefix} Sub-exception {i + 1}: {describe_exception(sub_exc)}",
                    exc_info=sub_exc if with_traceback else False,
                )
            return

        logger.log(
            level,
            f"{prefix} Exception: {describe_exception(exception)}",
            exc_info=exception if (with_traceback and exception is not None) else False,
        )
    except Exception:
        try:
            logger.log(logging.ERROR, f"{prefix} Exception (logging failed)")
        except Exception:
            pass

