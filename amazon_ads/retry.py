"""Retry policies for upstream calls.

Two policies, both built on tenacity and both re-raising the last error
unchanged once they give up:

* general backoff: retries transient failures (5xx, transport) with
  ``min(initial_delay * multiplier ** attempt, max_delay)`` between attempts;
* rate-limit backoff: retries only HTTP 429, waiting the server's
  Retry-After when given, else ``2 ** attempt`` seconds.

Only idempotent calls go through here. Report submission does not.
"""
import logging
import time
from dataclasses import dataclass
from typing import Callable, Optional, TypeVar

from tenacity import RetryCallState, Retrying, retry_if_exception, stop_after_attempt, wait_exponential

from amazon_ads import config
from amazon_ads.errors import AmazonAdsError, RateLimitedError

logger = logging.getLogger(__name__)

T = TypeVar("T")
Sleep = Callable[[float], None]

RATE_LIMIT_MAX_ATTEMPTS = 3


@dataclass(frozen=True)
class RetryPolicy:
    max_attempts: int = config.RETRY_MAX_ATTEMPTS
    initial_delay: float = config.RETRY_INITIAL_DELAY
    max_delay: float = config.RETRY_MAX_DELAY
    multiplier: float = config.RETRY_BACKOFF_MULTIPLIER
    rate_limit_attempts: int = RATE_LIMIT_MAX_ATTEMPTS


DEFAULT_POLICY = RetryPolicy()


def _is_transient(exc: BaseException) -> bool:
    return isinstance(exc, AmazonAdsError) and exc.retryable


def _is_rate_limited(exc: BaseException) -> bool:
    return isinstance(exc, RateLimitedError)


def _rate_limit_wait(retry_state: RetryCallState) -> float:
    exc = retry_state.outcome.exception() if retry_state.outcome else None
    if isinstance(exc, RateLimitedError) and exc.retry_after is not None:
        return max(0.0, exc.retry_after)
    return 1.0 * 2 ** (retry_state.attempt_number - 1)


def _log_retry(label: str, max_attempts: int):
    def before_sleep(retry_state: RetryCallState) -> None:
        exc = retry_state.outcome.exception() if retry_state.outcome else None
        delay = retry_state.next_action.sleep if retry_state.next_action else 0
        logger.warning(
            "%s: attempt %d/%d failed (%s), retrying in %.1fs",
            label, retry_state.attempt_number, max_attempts, exc, delay,
        )
    return before_sleep


def retry_with_backoff(fn: Callable[[], T], policy: RetryPolicy = DEFAULT_POLICY,
                       sleep: Optional[Sleep] = None) -> T:
    """Run ``fn`` under the general exponential backoff policy.

    Auth, forbidden, rate-limit, application (4xx) and validation errors are
    raised on the first occurrence.
    """
    retrying = Retrying(
        stop=stop_after_attempt(max(1, policy.max_attempts)),
        wait=wait_exponential(
            multiplier=policy.initial_delay,
            exp_base=policy.multiplier,
            max=policy.max_delay,
        ),
        retry=retry_if_exception(_is_transient),
        before_sleep=_log_retry("Transient upstream error", policy.max_attempts),
        sleep=sleep or time.sleep,
        reraise=True,
    )
    return retrying(fn)


def retry_rate_limit(fn: Callable[[], T], max_attempts: int = RATE_LIMIT_MAX_ATTEMPTS,
                     sleep: Optional[Sleep] = None) -> T:
    """Run ``fn``, retrying only when it is rate limited."""
    retrying = Retrying(
        stop=stop_after_attempt(max(1, max_attempts)),
        wait=_rate_limit_wait,
        retry=retry_if_exception(_is_rate_limited),
        before_sleep=_log_retry("Rate limit hit", max_attempts),
        sleep=sleep or time.sleep,
        reraise=True,
    )
    return retrying(fn)


def call_with_retries(fn: Callable[[], T], policy: RetryPolicy = DEFAULT_POLICY,
                      sleep: Optional[Sleep] = None) -> T:
    """Both policies: rate-limit retries nested inside general backoff."""
    return retry_with_backoff(
        lambda: retry_rate_limit(fn, policy.rate_limit_attempts, sleep=sleep), policy, sleep=sleep
    )
