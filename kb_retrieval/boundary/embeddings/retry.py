"""
Retry policy for embedding calls.

Classifies backend failures as transient or permanent with pure
predicates and runs a call inside a bounded exponential-backoff loop.
Only TransientProviderError is retried; everything else surfaces on the
first occurrence.

Dependencies: tenacity, httpx
System role: Resilience policy for the embedding boundary
"""

import logging
import time
from dataclasses import dataclass
from typing import Callable, TypeVar

import httpx
from tenacity import (
    RetryCallState,
    Retrying,
    retry_if_exception,
    stop_after_attempt,
)

from kb_retrieval.core.exceptions import (
    PermanentProviderError,
    ProviderError,
    TransientProviderError,
)

logger = logging.getLogger(__name__)

T = TypeVar("T")


@dataclass(frozen=True)
class RetryPolicy:
    """Bounds of the backoff loop."""

    max_attempts: int = 3
    min_backoff_seconds: float = 1.0
    max_backoff_seconds: float = 10.0

    def __post_init__(self) -> None:
        if self.max_attempts < 1:
            raise ValueError("max_attempts must be >= 1")
        if self.min_backoff_seconds < 0 or self.max_backoff_seconds < self.min_backoff_seconds:
            raise ValueError("backoff bounds must satisfy 0 <= min <= max")

    def delay_for(self, attempt_number: int) -> float:
        """Delay slept after the given failed attempt (1-based)."""
        delay = self.min_backoff_seconds * (2 ** (attempt_number - 1))
        return max(self.min_backoff_seconds, min(delay, self.max_backoff_seconds))


def is_retryable_status(status_code: int) -> bool:
    """5xx responses are transient; every other status is not."""
    return 500 <= status_code <= 599


def is_retryable_provider_error(exc: BaseException) -> bool:
    """Retry predicate: only transient provider failures are retried."""
    return isinstance(exc, TransientProviderError)


def classify_transport_error(exc: httpx.HTTPError) -> ProviderError:
    """
    Map an httpx transport failure onto the provider error taxonomy.

    Timeouts, connection resets/refusals and protocol breaks mid-response
    are transient. Anything else (bad URL, unsupported scheme) is a
    configuration problem and permanent.

    Args:
        exc: Exception raised by httpx while sending the request

    Returns:
        ProviderError: TransientProviderError or PermanentProviderError
    """
    if isinstance(exc, httpx.TimeoutException):
        return TransientProviderError(f"Embedding request timed out: {exc}")
    if isinstance(exc, (httpx.NetworkError, httpx.RemoteProtocolError)):
        return TransientProviderError(f"Embedding connection failed: {exc}")
    return PermanentProviderError(f"Embedding request could not be sent: {exc}")


def _log_before_sleep(operation: str, policy: RetryPolicy) -> Callable[[RetryCallState], None]:
    def _log(retry_state: RetryCallState) -> None:
        failure = retry_state.outcome.exception() if retry_state.outcome else None
        logger.warning(
            f"{__name__}:{operation} - Retry {retry_state.attempt_number}/{policy.max_attempts} "
            f"after transient failure: {failure}"
        )

    return _log


def call_with_retry(
    operation: str,
    fn: Callable[[], T],
    policy: RetryPolicy,
    sleep: Callable[[float], None] = time.sleep,
) -> T:
    """
    Run ``fn`` until it succeeds, fails permanently, or attempts run out.

    Args:
        operation: Name used in log lines
        fn: Zero-argument callable performing one attempt
        policy: Attempt count and backoff bounds
        sleep: Sleep function, replaceable in tests

    Returns:
        The value returned by the first successful attempt

    Raises:
        TransientProviderError: After the final attempt, annotated with the attempt count
        Exception: Any non-retryable error, raised on first occurrence
    """
    retrying = Retrying(
        stop=stop_after_attempt(policy.max_attempts),
        wait=lambda retry_state: policy.delay_for(retry_state.attempt_number),
        retry=retry_if_exception(is_retryable_provider_error),
        before_sleep=_log_before_sleep(operation, policy),
        sleep=sleep,
        reraise=True,
    )

    attempts = 0
    try:
        for attempt in retrying:
            attempts = attempt.retry_state.attempt_number
            with attempt:
                result = fn()
    except TransientProviderError as exc:
        logger.error(
            f"{__name__}:{operation} - Retries exhausted after {attempts} attempts: {exc.message}"
        )
        raise exc.with_attempts(attempts)
    return result
