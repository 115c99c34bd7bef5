"""
identity_admin.services.retry

Bounded retry with exponential backoff for best-effort lifecycle steps.

Responsibilities:
- Describe a retry policy (attempts, base/max delay, jitter).
- Re-run an async call on transient `ProviderError`s, then re-raise the last one.
"""

from __future__ import annotations

import asyncio
import random
from collections.abc import Awaitable, Callable
from dataclasses import dataclass
from typing import TypeVar

from identity_admin.errors import ProviderError
from identity_admin.observability.logging import get_logger
from identity_admin.settings import Settings

T = TypeVar("T")

log = get_logger(__name__)


@dataclass(frozen=True, slots=True)
class RetryPolicy:
    max_attempts: int = 3
    base_delay: float = 0.2
    max_delay: float = 2.0
    exponential_base: float = 2.0
    jitter: bool = True

    @classmethod
    def from_settings(cls, settings: Settings) -> RetryPolicy:
        return cls(
            max_attempts=settings.retry_max_attempts,
            base_delay=settings.retry_base_delay,
            max_delay=settings.retry_max_delay,
        )

    def delay_for(self, attempt: int) -> float:
        delay = min(self.base_delay * (self.exponential_base ** (attempt - 1)), self.max_delay)
        if self.jitter:
            # Full jitter in [50%, 100%] of the computed delay.
            delay *= 0.5 + random.random() * 0.5
        return delay


SINGLE_ATTEMPT = RetryPolicy(max_attempts=1)


async def call_with_retry(
    fn: Callable[[], Awaitable[T]],
    *,
    policy: RetryPolicy,
    operation: str,
    retry_on: tuple[type[Exception], ...] = (ProviderError,),
    sleep: Callable[[float], Awaitable[None]] = asyncio.sleep,
) -> T:
    attempt = 1
    while True:
        try:
            result = await fn()
        except retry_on as e:
            if attempt >= policy.max_attempts:
                log.warning(
                    "retry_exhausted", operation=operation, attempts=attempt, error=str(e)
                )
                raise
            delay = policy.delay_for(attempt)
            log.info(
                "retry_scheduled",
                operation=operation,
                attempt=attempt,
                delay_s=round(delay, 3),
                error=str(e),
            )
            await sleep(delay)
            attempt += 1
            continue

        if attempt > 1:
            log.info("retry_succeeded", operation=operation, attempt=attempt)
        return result


# --- Module Notes -----------------------------------------------------------
# `NotFoundError` is deliberately outside the default `retry_on`: a missing principal
# will not appear on the next attempt.
