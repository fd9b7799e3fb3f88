"""Exponential backoff retry for provider and LLM calls."""

import functools
import time
from dataclasses import dataclass

from .log import get_logger


@dataclass(frozen=True)
class RetryPolicy:
    """How often and how slowly to retry.

    Delays: base_delay * 2^attempt (2s -> 4s -> 8s by default).
    Only exceptions matching `retry_on` are retried; anything else propagates
    on the first failure.
    """
    max_retries: int = 3
    base_delay: float = 2.0
    retry_on: tuple = (Exception,)

    def delay(self, attempt: int) -> float:
        return self.base_delay * (2 ** attempt)


def call_with_retry(func, policy: RetryPolicy = None, *args, **kwargs):
    """Call func(*args, **kwargs), retrying per policy. Re-raises the last error."""
    policy = policy or RetryPolicy()
    logger = get_logger()
    name = getattr(func, "__name__", repr(func))
    attempts = policy.max_retries + 1

    for attempt in range(attempts):
        try:
            return func(*args, **kwargs)
        except policy.retry_on as e:
            if attempt == policy.max_retries:
                logger.error("%s failed after %d attempts: %s", name, attempts, e)
                raise
            delay = policy.delay(attempt)
            logger.warning(
                "%s failed (attempt %d/%d): %s - retrying in %.1fs",
                name, attempt + 1, attempts, e, delay,
            )
            time.sleep(delay)


def with_retry(max_retries: int = 3, base_delay: float = 2.0, retry_on: tuple = (Exception,)):
    """Decorator form of call_with_retry."""
    policy = RetryPolicy(max_retries=max_retries, base_delay=base_delay, retry_on=retry_on)

    def decorator(func):
        @functools.wraps(func)
        def wrapper(*args, **kwargs):
            return call_with_retry(func, policy, *args, **kwargs)
        wrapper.retry_policy = policy
        return wrapper
    return decorator
