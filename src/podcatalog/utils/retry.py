"""Retry utilities for upstream episode requests.

Implements exponential backoff with jitter for transient failures. Works for
both plain functions and coroutine functions, since page requests are async.
"""

import inspect
import logging
from collections.abc import Callable
from functools import wraps

import httpx
from tenacity import (
    AsyncRetrying,
    RetryCallState,
    Retrying,
    retry_if_exception_type,
    stop_after_attempt,
    wait_exponential_jitter,
)
from tenacity.wait import wait_base

logger = logging.getLogger(__name__)


# Error classification: Which errors should trigger retries?

class RetryableError(Exception):
    """Base class for errors that should trigger retries."""

    pass


class RateLimitError(RetryableError):
    """Upstream rate limit exceeded (HTTP 429)."""

    def __init__(self, message: str, retry_after: float | None = None) -> None:
        super().__init__(message)
        self.retry_after = retry_after


class TimeoutError(RetryableError):
    """Request timeout."""

    pass


class ConnectionError(RetryableError):
    """Network connection error."""

    pass


class ServerError(RetryableError):
    """Server-side error (5xx)."""

    pass


class NonRetryableError(Exception):
    """Base class for errors that should NOT trigger retries."""

    pass


class AuthenticationError(NonRetryableError):
    """Invalid client credentials or expired token."""

    pass


class InvalidRequestError(NonRetryableError):
    """Invalid request parameters (4xx), e.g. an unknown show id."""

    pass


RETRYABLE_ERRORS: tuple[type[Exception], ...] = (
    RateLimitError,
    TimeoutError,
    ConnectionError,
    ServerError,
)


class RetryConfig:
    """Configuration for retry behavior."""

    def __init__(
        self,
        max_attempts: int = 3,
        max_wait_seconds: float = 30,
        min_wait_seconds: float = 1,
        jitter: bool = True,
    ):
        """Initialize retry configuration.

        Args:
            max_attempts: Maximum number of attempts (including initial)
            max_wait_seconds: Maximum wait time between retries
            min_wait_seconds: Minimum wait time between retries
            jitter: Whether to add jitter to wait times
        """
        self.max_attempts = max_attempts
        self.max_wait_seconds = max_wait_seconds
        self.min_wait_seconds = min_wait_seconds
        self.jitter = jitter


DEFAULT_RETRY_CONFIG = RetryConfig(
    max_attempts=3,
    max_wait_seconds=30,
    min_wait_seconds=1,
    jitter=True,
)

# Fast configuration for testing (minimal delays)
TEST_RETRY_CONFIG = RetryConfig(
    max_attempts=3,
    max_wait_seconds=0.01,
    min_wait_seconds=0.001,
    jitter=False,
)


def log_retry_attempt(retry_state: RetryCallState) -> None:
    """Log retry attempts for debugging.

    Args:
        retry_state: Tenacity retry state
    """
    if retry_state.outcome and retry_state.outcome.failed:
        exception = retry_state.outcome.exception()
        attempt_number = retry_state.attempt_number

        logger.debug(
            f"Retry attempt {attempt_number} failed: {type(exception).__name__}: {exception}"
        )


class wait_retry_after(wait_base):
    """Wait for the server's Retry-After hint when the error carries one.

    The hint is capped at ``max_wait``; errors without a hint use ``fallback``.
    """

    def __init__(self, fallback: wait_base, max_wait: float) -> None:
        self.fallback = fallback
        self.max_wait = max_wait

    def __call__(self, retry_state: RetryCallState) -> float:
        outcome = retry_state.outcome
        if outcome is not None and outcome.failed:
            retry_after = getattr(outcome.exception(), "retry_after", None)
            if retry_after is not None:
                return min(max(float(retry_after), 0.0), self.max_wait)
        return self.fallback(retry_state)


def _retry_kwargs(config: RetryConfig, retry_on: tuple[type[Exception], ...]) -> dict:
    backoff = wait_exponential_jitter(
        initial=config.min_wait_seconds,
        max=config.max_wait_seconds,
        jitter=config.max_wait_seconds if config.jitter else 0,
    )
    return {
        "stop": stop_after_attempt(config.max_attempts),
        "wait": wait_retry_after(backoff, config.max_wait_seconds),
        "retry": retry_if_exception_type(retry_on),
        "before_sleep": log_retry_attempt,
        "reraise": True,
    }


def with_retry(
    config: RetryConfig | None = None,
    retry_on: tuple[type[Exception], ...] | None = None,
) -> Callable:
    """Decorator for adding retry logic with exponential backoff.

    Coroutine functions are retried with tenacity's ``AsyncRetrying`` so the
    backoff sleeps do not block the event loop.

    Usage:
        @with_retry()
        async def get_page(show_id, offset, limit):
            ...

        fetch = with_retry(config=RetryConfig(max_attempts=5))(source.get_page)

    Args:
        config: Retry configuration (uses DEFAULT_RETRY_CONFIG if None)
        retry_on: Exception types to retry on (all RetryableError subclasses if None)

    Returns:
        Decorated function with retry logic
    """
    # Resolved at call time so tests can patch DEFAULT_RETRY_CONFIG
    if retry_on is None:
        retry_on = RETRYABLE_ERRORS

    def decorator(func: Callable) -> Callable:
        name = getattr(func, "__name__", repr(func))

        if inspect.iscoroutinefunction(func):

            @wraps(func)
            async def async_wrapper(*args, **kwargs):
                effective = config or DEFAULT_RETRY_CONFIG
                try:
                    async for attempt in AsyncRetrying(**_retry_kwargs(effective, retry_on)):
                        with attempt:
                            return await func(*args, **kwargs)
                except Exception as e:
                    logger.debug(
                        f"{name} gave up after {effective.max_attempts} attempts: "
                        f"{type(e).__name__}: {e}"
                    )
                    raise

            return async_wrapper

        @wraps(func)
        def wrapper(*args, **kwargs):
            effective = config or DEFAULT_RETRY_CONFIG
            try:
                for attempt in Retrying(**_retry_kwargs(effective, retry_on)):
                    with attempt:
                        return func(*args, **kwargs)
            except Exception as e:
                logger.debug(
                    f"{name} gave up after {effective.max_attempts} attempts: "
                    f"{type(e).__name__}: {e}"
                )
                raise

        return wrapper

    return decorator


# Error classification helpers

def classify_http_error(
    status_code: int, error_message: str = "", retry_after: float | None = None
) -> Exception:
    """Classify an HTTP error status into a retryable or non-retryable error.

    Args:
        status_code: HTTP status code
        error_message: Error message from the API
        retry_after: Value of the Retry-After header, if any

    Returns:
        Appropriate exception instance

    Example:
        if response.is_error:
            raise classify_http_error(response.status_code, response.text)
    """
    if status_code == 429:
        return RateLimitError(f"Rate limit exceeded: {error_message}", retry_after=retry_after)

    if 500 <= status_code < 600:
        return ServerError(f"Server error (HTTP {status_code}): {error_message}")

    if status_code == 408:
        return TimeoutError(f"Request timeout: {error_message}")

    if status_code in (401, 403):
        return AuthenticationError(f"Authentication failed (HTTP {status_code}): {error_message}")

    if 400 <= status_code < 500:
        return InvalidRequestError(f"Invalid request (HTTP {status_code}): {error_message}")

    return NonRetryableError(f"HTTP error {status_code}: {error_message}")


def classify_transport_error(exception: httpx.RequestError) -> Exception:
    """Map an httpx transport failure onto the retry taxonomy.

    Args:
        exception: Error raised by httpx before a response arrived

    Returns:
        TimeoutError for timeouts, ConnectionError otherwise
    """
    if isinstance(exception, httpx.TimeoutException):
        return TimeoutError(f"Request timed out: {exception}")
    return ConnectionError(f"Network error: {exception}")
