from __future__ import annotations

import pytest

from identity_admin.errors import NotFoundError, ProviderError
from identity_admin.services.retry import SINGLE_ATTEMPT, RetryPolicy, call_with_retry


class _Flaky:
    def __init__(self, failures: int, exc: Exception | None = None) -> None:
        self.failures = failures
        self.exc = exc or ProviderError("identity", "flaky")
        self.calls = 0

    async def __call__(self) -> str:
        self.calls += 1
        if self.calls <= self.failures:
            raise self.exc
        return "ok"


class _Sleeps:
    def __init__(self) -> None:
        self.delays: list[float] = []

    async def __call__(self, delay: float) -> None:
        self.delays.append(delay)


def test_backoff_is_exponential_and_capped() -> None:
    policy = RetryPolicy(base_delay=0.5, max_delay=1.5, jitter=False)

    assert [policy.delay_for(n) for n in (1, 2, 3, 4)] == [0.5, 1.0, 1.5, 1.5]


def test_jitter_stays_within_half_and_full_delay() -> None:
    policy = RetryPolicy(base_delay=1.0, max_delay=10.0, jitter=True)

    for _ in range(50):
        assert 0.5 <= policy.delay_for(1) <= 1.0


@pytest.mark.asyncio
async def test_succeeds_after_transient_failures() -> None:
    fn, sleeps = _Flaky(failures=2), _Sleeps()
    policy = RetryPolicy(max_attempts=3, base_delay=0.1, jitter=False)

    assert await call_with_retry(fn, policy=policy, operation="op", sleep=sleeps) == "ok"
    assert fn.calls == 3
    assert sleeps.delays == [0.1, 0.2]


@pytest.mark.asyncio
async def test_reraises_last_error_when_exhausted() -> None:
    fn, sleeps = _Flaky(failures=5), _Sleeps()
    policy = RetryPolicy(max_attempts=3, base_delay=0.0, jitter=False)

    with pytest.raises(ProviderError):
        await call_with_retry(fn, policy=policy, operation="op", sleep=sleeps)
    assert fn.calls == 3
    assert len(sleeps.delays) == 2


@pytest.mark.asyncio
async def test_single_attempt_never_sleeps() -> None:
    fn, sleeps = _Flaky(failures=1), _Sleeps()

    with pytest.raises(ProviderError):
        await call_with_retry(fn, policy=SINGLE_ATTEMPT, operation="op", sleep=sleeps)
    assert fn.calls == 1
    assert sleeps.delays == []


@pytest.mark.asyncio
async def test_not_found_is_not_retried() -> None:
    fn = _Flaky(failures=1, exc=NotFoundError())

    with pytest.raises(NotFoundError):
        await call_with_retry(fn, policy=RetryPolicy(max_attempts=5), operation="op")
    assert fn.calls == 1
