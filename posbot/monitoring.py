"""Monitoring utilities: retry logic, error tracking."""

import logging
from collections.abc import Awaitable, Callable
from functools import wraps
from typing import ParamSpec, TypeVar

import sentry_sdk
from tenacity import (
    retry,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential,
)

from posbot.api.errors import NetworkError
from posbot.config import get_settings

logger = logging.getLogger(__name__)

P = ParamSpec("P")
T = TypeVar("T")


def capture_exception(error: Exception, context: dict | None = None) -> None:
    """Capture exception to Sentry if configured."""
    settings = get_settings()
    if settings.sentry_dsn:
        with sentry_sdk.new_scope() as scope:
            if context:
                for key, value in context.items():
                    scope.set_extra(key, value)
            sentry_sdk.capture_exception(error)
    logger.error("error_captured", extra={"error_type": type(error).__name__, "error": str(error)}, exc_info=error)


# Only idempotent lookups (tenant, store list) are retried; count calls never are.
lookup_retry = retry(
    stop=stop_after_attempt(3),
    wait=wait_exponential(multiplier=0.5, min=0.5, max=5),
    retry=retry_if_exception_type(NetworkError),
    reraise=True,
    before_sleep=lambda retry_state: logger.warning(
        f"Retrying {retry_state.fn.__name__} after error: {retry_state.outcome.exception()}, "
        f"attempt {retry_state.attempt_number}/3"
    ),
)


def with_error_capture(func: Callable[P, Awaitable[T]]) -> Callable[P, Awaitable[T]]:
    """Decorator to capture errors to Sentry for async functions."""

    @wraps(func)
    async def wrapper(*args: P.args, **kwargs: P.kwargs) -> T:
        try:
            return await func(*args, **kwargs)
        except Exception as e:
            capture_exception(e, {"function": func.__name__})
            raise

    return wrapper
