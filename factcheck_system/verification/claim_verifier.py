"""Per-claim verification through the oracle, with caching and degradation.

Order of resolution for one claim:
1. Fresh record in the VerificationStore -> result with source ``cached``
2. Oracle call through RetryExecutor (and the shared CircuitBreaker if any)
3. With the ``cache`` fallback strategy, a stale record once retries give up
4. Otherwise the claim degrades to ``unknown`` with confidence 0

auth and validation failures are not degraded: they raise VerificationError,
since no retry or later run can fix them.
"""

import asyncio
from datetime import datetime, timezone
from typing import Any, Awaitable, Callable, Iterable, Optional, Union

import structlog
from pydantic import ValidationError

from factcheck_system.config.quality_gates import QualityGatesConfig
from factcheck_system.data_management.schemas.claim_schema import Claim, ClaimSeverity
from factcheck_system.data_management.schemas.verification_schema import (
    VerificationResult,
    VerificationSource,
    VerificationStatus,
)
from factcheck_system.data_management.verification_store import VerificationStore
from factcheck_system.verification.circuit_breaker import CircuitBreaker
from factcheck_system.verification.oracle import OracleVerdict, VerificationOracle
from factcheck_system.verification.retry_executor import ErrorType, RetryExecutor

ProgressCallback = Callable[[int, int, Claim], None]


class VerificationError(Exception):
    """Oracle rejected a claim in a way retrying cannot fix (auth, validation)."""

    def __init__(self, claim_id: str, error_type: ErrorType, cause: Optional[BaseException]) -> None:
        self.claim_id = claim_id
        self.error_type = error_type
        super().__init__(f"verification of {claim_id} failed ({error_type.value}): {cause}")


class ClaimVerifier:
    """
    Turns claims into VerificationResults, one oracle call at a time.

    Usage:
        verifier = ClaimVerifier(oracle, store=VerificationStore(), breaker=CircuitBreaker())
        results = await verifier.verify_claims(claims)
    """

    def __init__(
        self,
        oracle: VerificationOracle,
        store: Optional[VerificationStore] = None,
        executor: Optional[RetryExecutor] = None,
        breaker: Optional[CircuitBreaker] = None,
        config: Optional[QualityGatesConfig] = None,
        request_interval_ms: int = 0,
        sleep: Callable[[float], Awaitable[Any]] = asyncio.sleep,
    ) -> None:
        self.oracle = oracle
        self.store = store
        self.config = config or QualityGatesConfig.defaults()
        self.executor = executor or RetryExecutor(self.config.retry, sleep=sleep)
        self.breaker = breaker
        self.request_interval_ms = request_interval_ms
        self._sleep = sleep
        self._logger = structlog.get_logger().bind(component="ClaimVerifier")

    async def verify_claim(
        self,
        claim: Claim,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> VerificationResult:
        """Verify one claim. See module docstring for resolution order.

        Raises:
            VerificationError: auth or validation failure.
            RetryCancelledError: cancel_event set during retries.
        """
        cached = await self._lookup_cache(claim)
        if cached is not None:
            return cached

        outcome = await self.executor.with_retry(
            lambda: self.oracle.verify(claim),
            fallback=self._stale_fallback(claim),
            breaker=self.breaker,
            cancel_event=cancel_event,
        )

        if outcome.success and outcome.used_fallback:
            self._logger.info("verdict_from_stale_cache", claim_id=claim.id)
            return outcome.result

        if outcome.success:
            result = self._to_result(claim, outcome.result)
            if self.store is not None and self.config.factcheck.cache_results:
                await self.store.save(claim, result)
            return result

        if outcome.error_type in (ErrorType.AUTH, ErrorType.VALIDATION):
            self._logger.error(
                "verification_rejected",
                claim_id=claim.id,
                error_type=outcome.error_type.value,
                error=str(outcome.last_error),
            )
            raise VerificationError(claim.id, outcome.error_type, outcome.last_error) from outcome.last_error

        error_type = outcome.error_type or ErrorType.UNKNOWN
        self._logger.warning(
            "verification_degraded",
            claim_id=claim.id,
            attempts=outcome.attempts,
            error_type=error_type.value,
        )
        return VerificationResult(
            claim_id=claim.id,
            status=VerificationStatus.UNKNOWN,
            confidence=0,
            source=VerificationSource.UNKNOWN,
            details=f"all verification attempts failed ({error_type.value}): {outcome.last_error}",
        )

    async def verify_claims(
        self,
        claims: Iterable[Claim],
        on_progress: Optional[ProgressCallback] = None,
        cancel_event: Optional[asyncio.Event] = None,
    ) -> list[VerificationResult]:
        """Verify claims sequentially, critical claims first.

        Sleeps ``request_interval_ms`` between consecutive oracle calls;
        cache hits do not count as calls.
        """
        ordered = sorted(claims, key=lambda c: c.severity.rank)
        results: list[VerificationResult] = []

        for index, claim in enumerate(ordered):
            if on_progress is not None:
                on_progress(index + 1, len(ordered), claim)

            result = await self.verify_claim(claim, cancel_event=cancel_event)
            results.append(result)

            if result.status == VerificationStatus.FALSE and claim.severity == ClaimSeverity.CRITICAL:
                self._logger.warning("critical_claim_false", claim_id=claim.id, value=claim.value)

            is_last = index == len(ordered) - 1
            if not is_last and result.source != VerificationSource.CACHED and self.request_interval_ms:
                await self._sleep(self.request_interval_ms / 1000)

        self._logger.info(
            "claims_verified",
            total=len(results),
            verified=sum(1 for r in results if r.status == VerificationStatus.VERIFIED),
            false=sum(1 for r in results if r.status == VerificationStatus.FALSE),
            unknown=sum(1 for r in results if r.status == VerificationStatus.UNKNOWN),
        )
        return results

    async def _lookup_cache(self, claim: Claim) -> Optional[VerificationResult]:
        if self.store is None or not self.config.factcheck.cache_results:
            return None
        record = await self.store.get_cached(claim, self.config.factcheck.cache_ttl_hours)
        if record is None:
            return None
        self._logger.debug("verdict_cache_hit", claim_id=claim.id)
        return _as_cached(record.result, claim)

    def _stale_fallback(self, claim: Claim) -> Optional[Callable[[], Awaitable[Optional[VerificationResult]]]]:
        if self.store is None:
            return None
        store = self.store

        async def load_stale() -> Optional[VerificationResult]:
            record = await store.get_any(claim)
            return _as_cached(record.result, claim) if record is not None else None

        return load_stale

    def _to_result(
        self,
        claim: Claim,
        verdict: Union[OracleVerdict, dict[str, Any]],
    ) -> VerificationResult:
        try:
            if not isinstance(verdict, OracleVerdict):
                verdict = OracleVerdict.model_validate(verdict)
        except ValidationError as e:
            raise VerificationError(claim.id, ErrorType.VALIDATION, e) from e

        return VerificationResult(
            claim_id=claim.id,
            status=verdict.status,
            confidence=verdict.confidence,
            source=verdict.source,
            source_url=verdict.source_url,
            correct_value=verdict.correct_value,
            checked_at=datetime.now(timezone.utc),
            details=verdict.details,
        )


def _as_cached(result: VerificationResult, claim: Claim) -> VerificationResult:
    return result.model_copy(update={"claim_id": claim.id, "source": VerificationSource.CACHED})
