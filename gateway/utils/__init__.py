from .exception_logging import describe_exception, log_exception_with_details

__all__ = ["describe_exception", "log_exception_with_details"]
