"""Verification result schema: one verdict per claim."""

from datetime import datetime, timedelta, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field, model_validator


class VerificationStatus(str, Enum):
    """Outcome of checking one claim.

    VERIFIED: The external source agrees with the claim.
    FALSE: The external source contradicts the claim (correct_value expected).
    UNKNOWN: Could not be established, including failed oracle calls.
    """

    VERIFIED = "verified"
    FALSE = "false"
    UNKNOWN = "unknown"


class VerificationSource(str, Enum):
    OFFICIAL_API = "official_api"
    WEB_SEARCH = "web_search"
    CACHED = "cached"
    UNKNOWN = "unknown"


class VerificationResult(BaseModel):
    """Verdict for a single claim.

    ``correct_value`` is only kept when ``status`` is FALSE; any value
    supplied alongside another status is dropped on validation.
    """

    claim_id: str
    status: VerificationStatus
    confidence: int = Field(..., ge=0, le=100)
    source: VerificationSource = VerificationSource.UNKNOWN
    source_url: Optional[str] = None
    correct_value: Optional[str] = None
    checked_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    details: Optional[str] = None

    @model_validator(mode="after")
    def correct_value_only_when_false(self) -> "VerificationResult":
        if self.status != VerificationStatus.FALSE and self.correct_value is not None:
            self.correct_value = None
        elif self.correct_value is not None and not self.correct_value.strip():
            self.correct_value = None
        return self

    model_config = {
        "json_schema_extra": {
            "examples": [
                {
                    "claim_id": "ct-3",
                    "status": "false",
                    "confidence": 88,
                    "source": "web_search",
                    "source_url": "https://www.museum.go.kr/visit",
                    "correct_value": "09:00-17:00",
                    "checked_at": "2026-10-01T09:00:00Z",
                    "details": "Winter hours apply from October",
                }
            ]
        }
    }


class VerificationRecord(BaseModel):
    """Stored verdict for a (claim type, normalised value) pair.

    Keyed by claim content rather than claim id, since ids are only unique
    within one document.
    """

    claim_type: str
    value: str
    result: VerificationResult
    stored_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    @property
    def key(self) -> str:
        return record_key(self.claim_type, self.value)

    def is_fresh(self, ttl_hours: float, now: Optional[datetime] = None) -> bool:
        now = now or datetime.now(timezone.utc)
        return now - self.stored_at <= timedelta(hours=ttl_hours)


def record_key(claim_type: str, value: str) -> str:
    return f"{claim_type}:{value.strip().lower()}"
