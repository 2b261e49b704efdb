import logging

logger = logging.getLogger(__name__)

INTERNAL_ERROR = "Internal server error"


class CounterError(Exception):
    pass


class ConfigError(CounterError):
    pass


class StoreError(CounterError):
    """A store call failed (connectivity, throttling, missing table, ...).

    The underlying botocore exception is kept as ``__cause__``.
    """


class InvalidCountError(CounterError, ValueError):
    pass


def format_exception_response(exc: Exception) -> tuple[int, dict]:
    """Log ``exc`` and build the fixed error body for it.

    Returns (status_code, body_dict)
    """
    message = str(exc) or exc.__class__.__name__
    logger.error("request failed: %s", message, exc_info=(type(exc), exc, exc.__traceback__))
    return 500, {"error": INTERNAL_ERROR, "message": message}
