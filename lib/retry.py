# =============================================================================
# lib/retry.py - Retry with Exponential Backoff
# =============================================================================
# Wraps calls to external services (Stripe, OAuth providers) so transient
# failures are retried: network errors and 5xx responses only.
#
# Usage:
#   customer = with_retry(lambda: stripe.Customer.create(email=email))
# =============================================================================

import logging
import random
import time
from typing import Any, Callable, TypeVar

import httpx
import stripe

logger = logging.getLogger(__name__)

T = TypeVar("T")

MAX_RETRIES = 3
INITIAL_DELAY_SECONDS = 1.0
MAX_DELAY_SECONDS = 10.0
BACKOFF_MULTIPLIER = 2


def is_retryable_error(error: BaseException) -> bool:
    """Network failures and 5xx responses are retryable; everything else isn't."""
    if isinstance(error, (httpx.TransportError, stripe.APIConnectionError)):
        return True
    if isinstance(error, httpx.HTTPStatusError):
        return 500 <= error.response.status_code < 600
    if isinstance(error, stripe.StripeError):
        status = getattr(error, "http_status", None)
        return status is not None and 500 <= status < 600
    return isinstance(error, (TimeoutError, ConnectionError))


def with_retry(
    fn: Callable[[], T],
    max_retries: int = MAX_RETRIES,
    initial_delay: float = INITIAL_DELAY_SECONDS,
    max_delay: float = MAX_DELAY_SECONDS,
    is_retryable: Callable[[BaseException], bool] = is_retryable_error,
    sleep: Callable[[float], Any] = time.sleep,
) -> T:
    """
    Call `fn`, retrying retryable failures with exponential backoff.

    Delay starts at `initial_delay`, doubles per attempt (±10% jitter) and is
    capped at `max_delay`. The last error is re-raised once retries run out.
    """
    delay = initial_delay
    attempt = 0
    while True:
        try:
            return fn()
        except Exception as e:
            if attempt >= max_retries or not is_retryable(e):
                raise
            jitter = delay * 0.1 * (random.random() * 2 - 1)
            actual_delay = min(delay + jitter, max_delay)
            attempt += 1
            logger.warning(f"Retry {attempt}/{max_retries} in {actual_delay:.2f}s after error: {e}")
            sleep(actual_delay)
            delay = min(delay * BACKOFF_MULTIPLIER, max_delay)
