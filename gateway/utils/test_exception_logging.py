import logging
from unittest.mock import Mock

import httpx

from gateway.utils.exception_logging import (
    describe_exception,
    log_exception_with_details,
)


class BrokenStrException(Exception):
    def __str__(self):
        raise RuntimeError("Cannot convert to string!")

    def __repr__(self):
        return "BrokenStrException()"


def test_describe_exception_includes_type():
    assert describe_exception(ValueError("bad")) == "ValueError: bad"
    assert describe_exception(ValueError()) == "ValueError"
    assert describe_exception(None) == "None"


def test_describe_httpx_error():
    request = httpx.Request("GET", "http://upstream.invalid/")
    error = httpx.ConnectError("connection refused", request=request)
    assert describe_exception(error) == "ConnectError: connection refused"


def test_log_regular_exception():
    logger = Mock(spec=logging.Logger)
    exc = ValueError("boom")

    log_exception_with_details(logger, "[Proxy]", exc, level=logging.WARNING)

    logger.log.assert_called_once()
    level, message = logger.log.call_args.args
    assert level == logging.WARNING
    assert message == "[Proxy] Exception: ValueError: boom"
    assert logger.log.call_args.kwargs["exc_info"] is exc


def test_log_without_traceback():
    logger = Mock(spec=logging.Logger)

    log_exception_with_details(
        logger, "[Proxy]", ValueError("boom"), with_traceback=False
    )

    assert logger.log.call_args.kwargs["exc_info"] is False


def test_log_exception_group_logs_each_member():
    logger = Mock(spec=logging.Logger)
    group = ExceptionGroup("startup", [OSError("port in use"), KeyError("x")])

    log_exception_with_details(logger, "[Startup]", group)

    assert logger.log.call_count == 3
    messages = [call.args[1] for call in logger.log.call_args_list]
    assert "2 sub-exceptions" in messages[0]
    assert messages[1] == "[Startup] Sub-exception 1: OSError: port in use"
    assert messages[2].startswith("[Startup] Sub-exception 2: KeyError")


def test_log_never_raises_when_logger_fails():
    logger = Mock(spec=logging.Logger)
    logger.log.side_effect = RuntimeError("logger down")

    log_exception_with_details(logger, "[Proxy]", ValueError("boom"))


def test_describe_broken_str():
    assert describe_exception(BrokenStrException()) == (
        "BrokenStrException: BrokenStrException()"
    )
