"""Tests for error classification and RetryExecutor."""

import asyncio
from unittest.mock import AsyncMock

import pytest

from factcheck_system.config.quality_gates import FallbackStrategy, RetryConfig
from factcheck_system.verification.circuit_breaker import CircuitBreaker, CircuitOpenError
from factcheck_system.verification.retry_executor import (
    ErrorType,
    RetryCancelledError,
    RetryExecutor,
    backoff_delay,
    classify_error,
    is_retryable,
    with_timeout,
)


# ── Fixtures ──────────────────────────────────────────────────────────────


class RecordingSleep:
    def __init__(self) -> None:
        self.calls: list[float] = []

    async def __call__(self, seconds: float) -> None:
        self.calls.append(seconds)


@pytest.fixture
def sleep() -> RecordingSleep:
    return RecordingSleep()


@pytest.fixture
def executor(sleep: RecordingSleep) -> RetryExecutor:
    return RetryExecutor(RetryConfig(), sleep=sleep)


# ── Classification Tests ─────────────────────────────────────────────────


class TestClassifyError:
    @pytest.mark.parametrize(
        "error, expected",
        [
            (ConnectionError("reset by peer"), ErrorType.NETWORK),
            (TimeoutError(), ErrorType.TIMEOUT),
            (asyncio.TimeoutError(), ErrorType.TIMEOUT),
            (RuntimeError("DNS lookup failed"), ErrorType.NETWORK),
            (RuntimeError("Rate limit exceeded"), ErrorType.RATE_LIMIT),
            (RuntimeError("quota exhausted"), ErrorType.RATE_LIMIT),
            (RuntimeError("HTTP 401 Unauthorized"), ErrorType.AUTH),
            (RuntimeError("request timed out"), ErrorType.TIMEOUT),
            (RuntimeError("HTTP 503"), ErrorType.SERVER),
            (ValueError("invalid payload"), ErrorType.VALIDATION),
            (RuntimeError("boom"), ErrorType.UNKNOWN),
            (None, ErrorType.UNKNOWN),
        ],
    )
    def test_table(self, error, expected: ErrorType) -> None:
        assert classify_error(error) == expected

    def test_unprintable_error_is_unknown(self) -> None:
        class Unprintable(Exception):
            def __str__(self) -> str:
                raise RuntimeError("no str")

        assert classify_error(Unprintable()) == ErrorType.UNKNOWN

    def test_retryable_set(self) -> None:
        assert is_retryable(ErrorType.SERVER)
        assert not is_retryable(ErrorType.AUTH)
        assert not is_retryable(ErrorType.VALIDATION)
        assert not is_retryable(ErrorType.UNKNOWN)

    def test_backoff_clamps_to_last_entry(self) -> None:
        schedule = [1000, 3000, 10000]
        assert [backoff_delay(i, schedule) for i in range(5)] == [1000, 3000, 10000, 10000, 10000]


# ── Retry Tests ──────────────────────────────────────────────────────────


class TestWithRetry:
    @pytest.mark.asyncio
    async def test_first_attempt_success(self, executor: RetryExecutor, sleep: RecordingSleep) -> None:
        outcome = await executor.with_retry(AsyncMock(return_value="ok"))

        assert outcome.success
        assert outcome.result == "ok"
        assert outcome.attempts == 1
        assert sleep.calls == []

    @pytest.mark.asyncio
    async def test_transient_errors_retried_on_schedule(
        self, executor: RetryExecutor, sleep: RecordingSleep
    ) -> None:
        operation = AsyncMock(side_effect=[ConnectionError("down"), RuntimeError("HTTP 502"), "ok"])

        outcome = await executor.with_retry(operation)

        assert outcome.success
        assert outcome.attempts == 3
        assert sleep.calls == [1.0, 3.0]

    @pytest.mark.asyncio
    async def test_gives_up_after_max_retries(self, executor: RetryExecutor, sleep: RecordingSleep) -> None:
        operation = AsyncMock(side_effect=ConnectionError("down"))

        outcome = await executor.with_retry(operation)

        assert not outcome.success
        assert outcome.attempts == 4
        assert operation.await_count == 4
        assert outcome.error_type == ErrorType.NETWORK
        assert isinstance(outcome.last_error, ConnectionError)
        assert sleep.calls == [1.0, 3.0, 10.0]

    @pytest.mark.asyncio
    async def test_auth_error_not_retried(self, executor: RetryExecutor, sleep: RecordingSleep) -> None:
        operation = AsyncMock(side_effect=RuntimeError("403 forbidden"))

        outcome = await executor.with_retry(operation)

        assert not outcome.success
        assert outcome.attempts == 1
        assert outcome.error_type == ErrorType.AUTH
        assert sleep.calls == []

    @pytest.mark.asyncio
    async def test_per_call_config(self, executor: RetryExecutor) -> None:
        operation = AsyncMock(side_effect=ConnectionError("down"))

        outcome = await executor.with_retry(operation, config=RetryConfig(max_retries=0))

        assert outcome.attempts == 1


# ── Fallback Tests ───────────────────────────────────────────────────────


class TestFallback:
    @pytest.mark.asyncio
    async def test_cache_fallback_after_exhaustion(self, sleep: RecordingSleep) -> None:
        config = RetryConfig(max_retries=1, backoff_ms=[10], fallback_strategy=FallbackStrategy.CACHE)
        executor = RetryExecutor(config, sleep=sleep)

        outcome = await executor.with_retry(
            AsyncMock(side_effect=ConnectionError("down")),
            fallback=AsyncMock(return_value="stale"),
        )

        assert outcome.success
        assert outcome.used_fallback
        assert outcome.result == "stale"
        assert outcome.attempts == 2

    @pytest.mark.asyncio
    async def test_manual_strategy_ignores_fallback(self, executor: RetryExecutor) -> None:
        fallback = AsyncMock(return_value="stale")

        outcome = await executor.with_retry(
            AsyncMock(side_effect=ConnectionError("down")),
            config=RetryConfig(max_retries=0),
            fallback=fallback,
        )

        assert not outcome.success
        fallback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_non_retryable_error_skips_fallback(self, sleep: RecordingSleep) -> None:
        executor = RetryExecutor(RetryConfig(fallback_strategy=FallbackStrategy.CACHE), sleep=sleep)
        fallback = AsyncMock(return_value="stale")

        outcome = await executor.with_retry(AsyncMock(side_effect=ValueError("invalid claim")), fallback=fallback)

        assert not outcome.success
        assert outcome.error_type == ErrorType.VALIDATION
        fallback.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_fallback_miss(self, sleep: RecordingSleep) -> None:
        config = RetryConfig(max_retries=0, fallback_strategy=FallbackStrategy.CACHE)
        executor = RetryExecutor(config, sleep=sleep)

        outcome = await executor.with_retry(
            AsyncMock(side_effect=ConnectionError("down")),
            fallback=AsyncMock(return_value=None),
        )

        assert not outcome.success
        assert not outcome.used_fallback

    @pytest.mark.asyncio
    async def test_open_breaker_stops_retrying_but_allows_fallback(self, sleep: RecordingSleep) -> None:
        config = RetryConfig(max_retries=3, fallback_strategy=FallbackStrategy.CACHE)
        executor = RetryExecutor(config, sleep=sleep)
        breaker = CircuitBreaker(threshold=1, reset_timeout_ms=60_000)
        with pytest.raises(ConnectionError):
            await breaker.execute(AsyncMock(side_effect=ConnectionError("down")))
        operation = AsyncMock(return_value="fresh")

        outcome = await executor.with_retry(
            operation, breaker=breaker, fallback=AsyncMock(return_value="stale")
        )

        operation.assert_not_awaited()
        assert outcome.attempts == 1
        assert outcome.used_fallback
        assert outcome.result == "stale"
        assert isinstance(outcome.last_error, CircuitOpenError)
        assert sleep.calls == []


# ── Cancellation Tests ───────────────────────────────────────────────────


class TestCancellation:
    @pytest.mark.asyncio
    async def test_cancelled_before_first_attempt(self, executor: RetryExecutor) -> None:
        event = asyncio.Event()
        event.set()
        operation = AsyncMock(return_value="ok")

        with pytest.raises(RetryCancelledError):
            await executor.with_retry(operation, cancel_event=event)

        operation.assert_not_awaited()

    @pytest.mark.asyncio
    async def test_cancelled_during_backoff(self) -> None:
        event = asyncio.Event()

        async def slow_sleep(seconds: float) -> None:
            await asyncio.sleep(10)

        executor = RetryExecutor(RetryConfig(), sleep=slow_sleep)
        operation = AsyncMock(side_effect=ConnectionError("down"))
        asyncio.get_running_loop().call_later(0.01, event.set)

        with pytest.raises(RetryCancelledError):
            await asyncio.wait_for(executor.with_retry(operation, cancel_event=event), timeout=5)

        assert operation.await_count == 1


class TestWithTimeout:
    @pytest.mark.asyncio
    async def test_overrun_raises_timeout(self) -> None:
        async def slow() -> str:
            await asyncio.sleep(1)
            return "late"

        with pytest.raises(TimeoutError) as exc:
            await with_timeout(slow, 0.01)

        assert classify_error(exc.value) == ErrorType.TIMEOUT
