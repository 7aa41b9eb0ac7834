"""Caller-side retry with explicit contracts.

The executor issues every task exactly once. When a caller wants another try
it builds a fresh task; this module packages that loop:

    result = await retry_async(
        lambda: executor.fetch(descriptor).wait(timeout_s=5),
        policy=RetryPolicy(max_attempts=3),
    )

Design goals:
- Retry decisions are made on ``Reason`` values, never on exception text
- Explicit state (policy + attempt counter)
"""

from __future__ import annotations

import asyncio
from dataclasses import dataclass
import logging
import random
import time
from typing import TYPE_CHECKING

import httpx

from taskwire._http import RETRYABLE_STATUS_CODES
from taskwire.errors import _walk_exception_chain
from taskwire.reasons import BadStatusCode, TransportError
from taskwire.result import Failure

if TYPE_CHECKING:
    from collections.abc import Awaitable, Callable

    from taskwire.reasons import Reason
    from taskwire.result import Result

log = logging.getLogger(__name__)


@dataclass(frozen=True)
class RetryPolicy:
    """Bounded retry policy with exponential backoff and optional jitter."""

    # Defaults are intentionally conservative: retries should help without
    # surprising tail-latency.
    max_attempts: int = 2
    initial_delay_s: float = 0.5
    backoff_multiplier: float = 2.0
    max_delay_s: float = 5.0
    jitter: bool = True  # "full jitter" when enabled
    max_elapsed_s: float | None = 15.0

    def __post_init__(self) -> None:
        """Validate invariants to keep retry behavior predictable."""
        if self.max_attempts < 1:
            raise ValueError("RetryPolicy.max_attempts must be >= 1")
        if self.initial_delay_s < 0:
            raise ValueError("RetryPolicy.initial_delay_s must be >= 0")
        if self.backoff_multiplier <= 0:
            raise ValueError("RetryPolicy.backoff_multiplier must be > 0")
        if self.max_delay_s < 0:
            raise ValueError("RetryPolicy.max_delay_s must be >= 0")
        if self.max_elapsed_s is not None and self.max_elapsed_s < 0:
            raise ValueError("RetryPolicy.max_elapsed_s must be >= 0 or None")


def _is_transient(cause: BaseException | str) -> bool:
    if not isinstance(cause, BaseException):
        return False
    for e in _walk_exception_chain(cause):
        if isinstance(e, TimeoutError):
            return True
        # TransportError is httpx's base class for network-level failures.
        if isinstance(e, (httpx.TimeoutException, httpx.TransportError)):
            return True
    return False


def should_retry(reason: Reason) -> bool:
    """Return True when a failed task is worth issuing again.

    Contract:
    - Status codes are retried only when they are known to be transient.
    - Transport failures are retried when the cause is a timeout or a
      network-level httpx error.
    - Decode and response-shape failures are never retried.
    """
    match reason:
        case BadStatusCode(code=code):
            return code in RETRYABLE_STATUS_CODES
        case TransportError(cause=cause):
            return _is_transient(cause)
        case _:
            return False


def _compute_backoff_delay(policy: RetryPolicy, *, retry_index: int) -> float:
    # retry_index starts at 1 for the first retry sleep.
    base = policy.initial_delay_s * (
        policy.backoff_multiplier ** max(0, retry_index - 1)
    )
    base = min(policy.max_delay_s, base)
    if base <= 0:
        return 0.0
    if not policy.jitter:
        return base
    # Full jitter: random in [0, base] to avoid thundering herd.
    return random.random() * base  # noqa: S311


async def retry_async[T](
    factory: Callable[[], Awaitable[Result[T]]],
    *,
    policy: RetryPolicy,
    should_retry: Callable[[Reason], bool] = should_retry,
) -> Result[T]:
    """Await fresh attempts from *factory* until success or the policy gives up.

    Returns the last result; never raises for failed attempts.
    """
    start = time.monotonic()
    result: Result[T] | None = None

    for attempt in range(1, policy.max_attempts + 1):
        result = await factory()
        if not isinstance(result, Failure):
            return result
        if not should_retry(result.reason) or attempt >= policy.max_attempts:
            return result

        delay = _compute_backoff_delay(policy, retry_index=attempt)
        if policy.max_elapsed_s is not None:
            remaining = policy.max_elapsed_s - (time.monotonic() - start)
            if remaining <= 0:
                return result
            delay = min(delay, remaining)

        log.debug(
            "Attempt %d failed (%s); retrying in %.2fs",
            attempt,
            result.reason.describe(),
            delay,
        )
        if delay > 0:
            await asyncio.sleep(delay)

    # Defensive: loop should always return.
    if result is None:  # pragma: no cover
        raise RuntimeError("retry_async exhausted without a result")
    return result
