"""Verification layer: error taxonomy, retry, circuit breaker, oracle port, verifier."""

from factcheck_system.verification.circuit_breaker import (
    CircuitBreaker,
    CircuitOpenError,
    CircuitState,
)
from factcheck_system.verification.claim_verifier import ClaimVerifier, VerificationError
from factcheck_system.verification.oracle import (
    OracleLoadError,
    OracleVerdict,
    VerificationOracle,
    load_oracle,
)
from factcheck_system.verification.retry_executor import (
    RETRYABLE_ERRORS,
    ErrorType,
    RetryCancelledError,
    RetryExecutor,
    RetryResult,
    backoff_delay,
    classify_error,
    is_retryable,
    with_timeout,
)

__all__ = [
    "CircuitBreaker",
    "CircuitOpenError",
    "CircuitState",
    "ClaimVerifier",
    "VerificationError",
    "OracleLoadError",
    "OracleVerdict",
    "VerificationOracle",
    "load_oracle",
    "RETRYABLE_ERRORS",
    "ErrorType",
    "RetryCancelledError",
    "RetryExecutor",
    "RetryResult",
    "backoff_delay",
    "classify_error",
    "is_retryable",
    "with_timeout",
]
