"""Classification-aware retry around external verification calls.

Error taxonomy (first match wins, message checks are case-insensitive):

| Type       | Typed check        | Message contains           | Retried |
|------------|--------------------|----------------------------|---------|
| timeout    | TimeoutError       | -                          | yes     |
| network    | ConnectionError    | network, fetch, dns        | yes     |
| rate_limit | -                  | rate, limit, quota         | yes     |
| auth       | -                  | auth, 401, 403             | no      |
| timeout    | -                  | timeout, timed out         | yes     |
| server     | -                  | 500, 502, 503              | yes     |
| validation | -                  | valid, invalid             | no      |
| unknown    | anything else      |                            | no      |

Backoff follows the configured schedule: the sleep after failed attempt i is
``backoff_ms[i]``, clamped to the last entry. Retrying is built on tenacity's
AsyncRetrying with a schedule-driven wait and an injectable sleep.
"""

import asyncio
from dataclasses import dataclass
from enum import Enum
from functools import partial
from typing import Any, Awaitable, Callable, Generic, Optional, Sequence, TypeVar

import structlog
from tenacity import AsyncRetrying, RetryCallState, retry_if_exception, stop_after_attempt

from factcheck_system.config.quality_gates import FallbackStrategy, RetryConfig
from factcheck_system.verification.circuit_breaker import CircuitBreaker, CircuitOpenError

T = TypeVar("T")


class ErrorType(str, Enum):
    NETWORK = "network"
    RATE_LIMIT = "rate_limit"
    AUTH = "auth"
    TIMEOUT = "timeout"
    SERVER = "server"
    VALIDATION = "validation"
    UNKNOWN = "unknown"


RETRYABLE_ERRORS = frozenset(
    {ErrorType.NETWORK, ErrorType.RATE_LIMIT, ErrorType.TIMEOUT, ErrorType.SERVER}
)

_MESSAGE_RULES: tuple[tuple[ErrorType, tuple[str, ...]], ...] = (
    (ErrorType.NETWORK, ("network", "fetch", "dns")),
    (ErrorType.RATE_LIMIT, ("rate", "limit", "quota")),
    (ErrorType.AUTH, ("auth", "401", "403")),
    (ErrorType.TIMEOUT, ("timeout", "timed out")),
    (ErrorType.SERVER, ("500", "502", "503")),
    (ErrorType.VALIDATION, ("valid", "invalid")),
)


class RetryCancelledError(Exception):
    """Retry loop aborted because its cancel event was set."""


def classify_error(error: BaseException | None) -> ErrorType:
    """Best-effort classification of an exception. Never raises."""
    if not isinstance(error, BaseException):
        return ErrorType.UNKNOWN
    if isinstance(error, (TimeoutError, asyncio.TimeoutError)):
        return ErrorType.TIMEOUT
    if isinstance(error, ConnectionError):
        return ErrorType.NETWORK

    try:
        message = str(error).lower()
    except Exception:
        return ErrorType.UNKNOWN

    for error_type, needles in _MESSAGE_RULES:
        if any(needle in message for needle in needles):
            return error_type
    return ErrorType.UNKNOWN


def is_retryable(error_type: ErrorType) -> bool:
    return error_type in RETRYABLE_ERRORS


def backoff_delay(attempt: int, backoff_ms: Sequence[int]) -> int:
    """Delay in ms after failed attempt ``attempt`` (0-based), clamped to the last entry."""
    if not backoff_ms:
        return 0
    if attempt < len(backoff_ms):
        return backoff_ms[attempt]
    return backoff_ms[-1]


@dataclass
class RetryResult(Generic[T]):
    """Outcome of RetryExecutor.with_retry.

    Attributes:
        success: An attempt or the cache fallback produced a result.
        result: Operation result (or fallback value when used_fallback).
        attempts: Number of operation attempts made.
        used_fallback: The cache fallback supplied the result.
        last_error: Last exception raised by the operation, if any.
        error_type: Classification of last_error.
    """

    success: bool
    result: Optional[T] = None
    attempts: int = 0
    used_fallback: bool = False
    last_error: Optional[BaseException] = None
    error_type: Optional[ErrorType] = None


class RetryExecutor:
    """
    Runs async operations with retry, backoff, optional breaker and fallback.

    Usage:
        executor = RetryExecutor(config.retry)
        outcome = await executor.with_retry(
            lambda: oracle.verify(claim),
            breaker=breaker,
            fallback=load_stale_verdict,
        )
        if not outcome.success:
            ...

    Transient errors (network, rate_limit, timeout, server) are retried up
    to ``max_retries`` times. auth, validation and unknown errors stop at
    once and never reach the fallback. With the ``cache`` strategy the
    fallback is called once retries are exhausted or the breaker rejects the
    call; a fallback returning None counts as a miss.
    """

    def __init__(
        self,
        config: Optional[RetryConfig] = None,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        """
        Args:
            config: Default retry policy (defaults to RetryConfig()).
            sleep: Coroutine used for backoff sleeps, in seconds.
        """
        self.config = config or RetryConfig()
        self._sleep = sleep
        self._logger = structlog.get_logger().bind(component="RetryExecutor")

    async def with_retry(
        self,
        operation: Callable[[], Awaitable[T]],
        config: Optional[RetryConfig] = None,
        fallback: Optional[Callable[[], Awaitable[Optional[T]]]] = None,
        breaker: Optional[CircuitBreaker] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> RetryResult[T]:
        """Run operation until it succeeds or the policy gives up.

        Raises:
            RetryCancelledError: cancel_event was set before or between attempts.
        """
        config = config or self.config
        call: Callable[[], Awaitable[T]] = (
            partial(breaker.execute, operation) if breaker is not None else operation
        )

        def wait_for_attempt(retry_state: RetryCallState) -> float:
            return backoff_delay(retry_state.attempt_number - 1, config.backoff_ms) / 1000

        async def sleep(seconds: float) -> None:
            await self._cancellable_sleep(seconds, cancel_event)

        retrying = AsyncRetrying(
            stop=stop_after_attempt(config.max_retries + 1),
            wait=wait_for_attempt,
            retry=retry_if_exception(_should_retry),
            sleep=sleep,
            before_sleep=self._log_retry,
            reraise=True,
        )

        attempts = 0
        try:
            async for attempt in retrying:
                with attempt:
                    attempts = attempt.retry_state.attempt_number
                    if cancel_event is not None and cancel_event.is_set():
                        raise RetryCancelledError("retry cancelled before attempt")
                    result = await call()
            return RetryResult(success=True, result=result, attempts=attempts)
        except RetryCancelledError:
            self._logger.info("retry_cancelled", attempts=attempts)
            raise
        except Exception as e:
            last_error = e

        error_type = classify_error(last_error)
        self._logger.warning(
            "retry_gave_up",
            attempts=attempts,
            error_type=error_type.value,
            error=str(last_error),
        )

        exhausted = isinstance(last_error, CircuitOpenError) or is_retryable(error_type)
        if (
            exhausted
            and config.fallback_strategy == FallbackStrategy.CACHE
            and fallback is not None
        ):
            fallback_value = await self._run_fallback(fallback)
            if fallback_value is not None:
                return RetryResult(
                    success=True,
                    result=fallback_value,
                    attempts=attempts,
                    used_fallback=True,
                    last_error=last_error,
                    error_type=error_type,
                )

        return RetryResult(
            success=False,
            attempts=attempts,
            last_error=last_error,
            error_type=error_type,
        )

    async def _run_fallback(
        self,
        fallback: Callable[[], Awaitable[Optional[T]]],
    ) -> Optional[T]:
        try:
            return await fallback()
        except Exception as e:
            self._logger.warning("fallback_failed", error=str(e))
            return None

    async def _cancellable_sleep(
        self,
        seconds: float,
        cancel_event: Optional[asyncio.Event],
    ) -> None:
        if cancel_event is None:
            await self._sleep(seconds)
            return
        if cancel_event.is_set():
            raise RetryCancelledError("retry cancelled during backoff")

        sleeper = asyncio.ensure_future(self._sleep(seconds))
        waiter = asyncio.ensure_future(cancel_event.wait())
        try:
            await asyncio.wait({sleeper, waiter}, return_when=asyncio.FIRST_COMPLETED)
        finally:
            for task in (sleeper, waiter):
                if not task.done():
                    task.cancel()

        if cancel_event.is_set():
            raise RetryCancelledError("retry cancelled during backoff")

    def _log_retry(self, retry_state: RetryCallState) -> None:
        error = retry_state.outcome.exception() if retry_state.outcome else None
        self._logger.info(
            "retry_scheduled",
            attempt=retry_state.attempt_number,
            delay_ms=int((retry_state.next_action.sleep if retry_state.next_action else 0) * 1000),
            error_type=classify_error(error).value,
        )


def _should_retry(error: BaseException) -> bool:
    if isinstance(error, (RetryCancelledError, CircuitOpenError)):
        return False
    return is_retryable(classify_error(error))


async def with_timeout(operation: Callable[[], Awaitable[T]], timeout_s: float) -> T:
    """Await operation, raising TimeoutError (classified as timeout) when it overruns."""
    try:
        return await asyncio.wait_for(operation(), timeout=timeout_s)
    except asyncio.TimeoutError as e:
        raise TimeoutError(f"Operation timed out after {int(timeout_s * 1000)}ms") from e
