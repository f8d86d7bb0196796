"""Three-state circuit breaker for the verification oracle.

closed     calls pass through; each failure increments ``failures``
open       calls are rejected with CircuitOpenError until ``reset_timeout_ms``
           has elapsed since the last failure
half-open  exactly one probe call is admitted; success closes the breaker,
           failure reopens it

A breaker belongs to its caller. Share one instance across documents only
when failures of the dependency itself should be correlated (one breaker per
external dependency, never a module-level singleton).
"""

import time
from enum import Enum
from typing import Awaitable, Callable, Optional, TypeVar

import structlog

T = TypeVar("T")


class CircuitState(str, Enum):
    CLOSED = "closed"
    OPEN = "open"
    HALF_OPEN = "half-open"


class CircuitOpenError(Exception):
    """Call rejected because the breaker is open."""

    def __init__(self, message: str = "Circuit breaker is open - request blocked") -> None:
        super().__init__(message)


class CircuitBreaker:
    """
    Failure-isolation guard around an async operation.

    Usage:
        breaker = CircuitBreaker(threshold=5, reset_timeout_ms=60_000)
        verdict = await breaker.execute(lambda: oracle.verify(claim))

    ``clock`` returns seconds and defaults to ``time.monotonic``; tests pass a
    fake clock to step over the reset timeout.
    """

    def __init__(
        self,
        threshold: int = 5,
        reset_timeout_ms: int = 60_000,
        clock: Callable[[], float] = time.monotonic,
        name: str = "oracle",
    ) -> None:
        if threshold < 1:
            raise ValueError("threshold must be at least 1")
        self.threshold = threshold
        self.reset_timeout_ms = reset_timeout_ms
        self.name = name
        self._clock = clock
        self._state = CircuitState.CLOSED
        self._failures = 0
        self._last_failure: Optional[float] = None
        self._probe_in_flight = False
        self._logger = structlog.get_logger().bind(component="CircuitBreaker", breaker=name)

    @property
    def state(self) -> CircuitState:
        return self._state

    @property
    def failures(self) -> int:
        return self._failures

    @property
    def last_failure(self) -> Optional[float]:
        """Clock reading of the most recent failure, None if none recorded."""
        return self._last_failure

    async def execute(self, operation: Callable[[], Awaitable[T]]) -> T:
        """Run operation through the breaker.

        Raises:
            CircuitOpenError: Breaker is open, or a half-open probe is already
                running.
            Exception: Whatever the operation raised (after recording it).
        """
        self._admit()

        try:
            result = await operation()
        except BaseException:
            self._record_failure()
            raise

        self._record_success()
        return result

    def reset(self) -> None:
        self._state = CircuitState.CLOSED
        self._failures = 0
        self._last_failure = None
        self._probe_in_flight = False

    def _admit(self) -> None:
        if self._state == CircuitState.HALF_OPEN and self._probe_in_flight:
            raise CircuitOpenError("Circuit breaker is half-open - probe in flight")

        if self._state != CircuitState.OPEN:
            return

        elapsed_ms = (
            (self._clock() - self._last_failure) * 1000
            if self._last_failure is not None
            else float("inf")
        )
        if elapsed_ms < self.reset_timeout_ms:
            raise CircuitOpenError()

        self._state = CircuitState.HALF_OPEN
        self._probe_in_flight = True
        self._logger.info("circuit_half_open", failures=self._failures)

    def _record_success(self) -> None:
        if self._state != CircuitState.CLOSED or self._failures:
            self._logger.info("circuit_closed", previous_state=self._state.value)
        self._failures = 0
        self._state = CircuitState.CLOSED
        self._probe_in_flight = False

    def _record_failure(self) -> None:
        was_probe = self._state == CircuitState.HALF_OPEN
        self._failures += 1
        self._last_failure = self._clock()
        self._probe_in_flight = False

        if was_probe or self._failures >= self.threshold:
            if self._state != CircuitState.OPEN:
                self._logger.warning(
                    "circuit_opened",
                    failures=self._failures,
                    threshold=self.threshold,
                )
            self._state = CircuitState.OPEN
