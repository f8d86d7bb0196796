"""Application settings using Pydantic BaseSettings for environment variable management."""

from pydantic_settings import BaseSettings
from pydantic import Field


class Settings(BaseSettings):
    """
    Global application settings loaded from environment variables.

    Attributes:
        log_level: Logging level (DEBUG, INFO, WARNING, ERROR, CRITICAL)
        log_format: Log output format (json for production, console for dev)
        quality_config_path: JSON file holding quality gate overrides
        review_queue_path: JSON file backing the human review queue
        audit_log_dir: Directory receiving one audit log per auto-fix run
        verification_store_path: JSON file persisting verification records
        report_dir: Directory receiving persisted fact-check reports
        oracle: Import path ("package.module:attr") of the verification oracle
        request_interval_ms: Pause between consecutive oracle calls
        breaker_threshold: Consecutive failures before the oracle breaker opens
        breaker_reset_timeout_ms: Cooldown before a half-open probe is allowed
    """

    log_level: str = Field(
        default="INFO",
        description="Logging level"
    )
    log_format: str = Field(
        default="json",
        description="Log output format: json or console"
    )
    quality_config_path: str = Field(
        default="config/quality-gates.json",
        description="Quality gate configuration file"
    )
    review_queue_path: str = Field(
        default="data/human-review-queue.json",
        description="Human review queue file"
    )
    audit_log_dir: str = Field(
        default="data/factcheck-fixes",
        description="Auto-fix audit log directory"
    )
    verification_store_path: str | None = Field(
        default="data/verification-cache.json",
        description="Verification record file (None keeps records in memory)"
    )
    report_dir: str = Field(
        default="data/factcheck-reports",
        description="Fact-check report directory"
    )
    oracle: str = Field(
        default="",
        description="Import path of the verification oracle factory"
    )
    request_interval_ms: int = Field(
        default=500,
        ge=0,
        description="Delay between oracle calls to avoid API overload"
    )
    breaker_threshold: int = Field(
        default=5,
        ge=1,
        description="Consecutive oracle failures before the circuit opens"
    )
    breaker_reset_timeout_ms: int = Field(
        default=60_000,
        ge=0,
        description="Circuit breaker cooldown in milliseconds"
    )

    model_config = {
        "env_file": ".env",
        "env_file_encoding": "utf-8",
        "case_sensitive": False,
        "extra": "ignore",
    }


# Singleton instance - import this throughout the application
settings = Settings()
