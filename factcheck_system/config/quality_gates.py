"""Quality gate configuration with explicit defaults and field-level overrides.

Every threshold, weight and retry setting has a documented default on its
model, so a partial config file can never leave a gate without a value:

    factcheck.thresholds   critical=100, major=85, minor=70, overall=80
    factcheck.weights      critical=0.3, major=0.3, minor=0.4
    factcheck              block_on_critical_failure=True, cache_results=True,
                           cache_ttl_hours=24
    retry                  max_retries=3, backoff_ms=[1000, 3000, 10000],
                           fallback_strategy="manual"
    human_review           score_min=50, score_max=70,
                           unknown_ratio_threshold=50, max_case_age_days=30

Usage:
    from factcheck_system.config.quality_gates import load_quality_config

    config = load_quality_config("config/quality-gates.json")
    strict = config.with_overrides("retry", max_retries=0)
"""

import json
from enum import Enum
from pathlib import Path
from typing import Any, Optional, Union

from pydantic import BaseModel, Field, ValidationError, field_validator, model_validator

from factcheck_system.config.logging import get_logger
from factcheck_system.config.review_keywords import SENSITIVE_KEYWORDS

logger = get_logger("config.quality_gates")


class ConfigError(Exception):
    """Raised when a quality gate config file is malformed."""


class FallbackStrategy(str, Enum):
    """What RetryExecutor does once every attempt has failed."""

    SKIP = "skip"
    MANUAL = "manual"
    CACHE = "cache"


class _StrictModel(BaseModel):
    model_config = {"extra": "forbid", "validate_assignment": True}


class GateThresholds(_StrictModel):
    """Minimum category and overall scores (0-100) for passing the gate."""

    critical: float = Field(100, ge=0, le=100)
    major: float = Field(85, ge=0, le=100)
    minor: float = Field(70, ge=0, le=100)
    overall: float = Field(80, ge=0, le=100)


class ScoreWeights(_StrictModel):
    """Weights of the category scores inside the overall score."""

    critical: float = Field(0.3, ge=0)
    major: float = Field(0.3, ge=0)
    minor: float = Field(0.4, ge=0)


class FactCheckConfig(_StrictModel):
    thresholds: GateThresholds = Field(default_factory=GateThresholds)
    weights: ScoreWeights = Field(default_factory=ScoreWeights)
    block_on_critical_failure: bool = True
    cache_results: bool = True
    cache_ttl_hours: float = Field(24, ge=0)


class RetryConfig(_StrictModel):
    """Retry policy for external verification calls.

    ``backoff_ms[i]`` is the sleep after the (i+1)-th failed attempt; attempts
    past the end of the list reuse the last value.
    """

    max_retries: int = Field(3, ge=0)
    backoff_ms: list[int] = Field(default_factory=lambda: [1000, 3000, 10000])
    fallback_strategy: FallbackStrategy = FallbackStrategy.MANUAL

    @field_validator("backoff_ms")
    @classmethod
    def non_empty_schedule(cls, value: list[int]) -> list[int]:
        if not value:
            raise ValueError("backoff_ms must contain at least one delay")
        if any(v < 0 for v in value):
            raise ValueError("backoff_ms delays must be non-negative")
        return value


class HumanReviewConfig(_StrictModel):
    score_min: float = Field(50, ge=0, le=100)
    score_max: float = Field(70, ge=0, le=100)
    unknown_ratio_threshold: float = Field(50, ge=0, le=100)
    sensitive_keywords: list[str] = Field(default_factory=lambda: list(SENSITIVE_KEYWORDS))
    max_case_age_days: int = Field(30, ge=1)

    @model_validator(mode="after")
    def ordered_range(self) -> "HumanReviewConfig":
        if self.score_min > self.score_max:
            raise ValueError("score_min must not exceed score_max")
        return self


class QualityGatesConfig(_StrictModel):
    """Top-level quality gate configuration."""

    version: str = "1.0.0"
    factcheck: FactCheckConfig = Field(default_factory=FactCheckConfig)
    retry: RetryConfig = Field(default_factory=RetryConfig)
    human_review: HumanReviewConfig = Field(default_factory=HumanReviewConfig)

    @classmethod
    def defaults(cls) -> "QualityGatesConfig":
        """Return the documented default configuration."""
        return cls()

    def with_overrides(self, section: str, **fields: Any) -> "QualityGatesConfig":
        """Return a copy with individual fields of one section replaced.

        Nested sections of ``factcheck`` are addressed with a dotted name,
        e.g. ``with_overrides("factcheck.thresholds", overall=90)``.

        Raises:
            ConfigError: If the section or a field name is unknown, or a value
                fails validation.
        """
        path = section.split(".")
        data = self.model_dump()
        target: Any = data
        for part in path:
            if not isinstance(target, dict) or part not in target:
                raise ConfigError(f"Unknown config section: {section}")
            target = target[part]
        if not isinstance(target, dict):
            raise ConfigError(f"Config section {section} is not a group of fields")
        for name, value in fields.items():
            if name not in target:
                raise ConfigError(f"Unknown field {name!r} in section {section}")
            target[name] = value
        try:
            return QualityGatesConfig.model_validate(data)
        except ValidationError as e:
            raise ConfigError(str(e)) from e


def load_quality_config(
    path: Optional[Union[str, Path]] = None,
) -> QualityGatesConfig:
    """Load quality gate configuration from a JSON file.

    A missing file yields the defaults. Sections present in the file are
    validated field by field on top of the defaults; keys outside the known
    sections (e.g. settings for unrelated gates) are ignored.

    Args:
        path: Config file path. Defaults to ``settings.quality_config_path``.

    Returns:
        Fully populated QualityGatesConfig.

    Raises:
        ConfigError: If the file is not valid JSON or a value is invalid.
    """
    if path is None:
        from factcheck_system.config.settings import settings

        path = settings.quality_config_path

    config_path = Path(path)
    if not config_path.exists():
        logger.debug("No quality config file, using defaults", path=str(config_path))
        return QualityGatesConfig.defaults()

    try:
        raw = json.loads(config_path.read_text(encoding="utf-8"))
    except json.JSONDecodeError as e:
        raise ConfigError(f"Invalid JSON in {config_path}: {e}") from e

    if not isinstance(raw, dict):
        raise ConfigError(f"{config_path} must contain a JSON object")

    known = {k: raw[k] for k in QualityGatesConfig.model_fields if k in raw}
    try:
        config = QualityGatesConfig.model_validate(known)
    except ValidationError as e:
        raise ConfigError(f"Invalid quality config in {config_path}: {e}") from e

    logger.info(
        "Quality config loaded",
        path=str(config_path),
        sections=sorted(known),
    )
    return config


def save_quality_config(config: QualityGatesConfig, path: Union[str, Path]) -> None:
    """Write a configuration to disk, creating parent directories."""
    config_path = Path(path)
    config_path.parent.mkdir(parents=True, exist_ok=True)
    config_path.write_text(
        json.dumps(config.model_dump(mode="json"), indent=2, ensure_ascii=False),
        encoding="utf-8",
    )
