"""Claim schema for assertions extracted from posts.

Claims are immutable extraction output: created fresh on every extraction
run and only ever persisted inside a FactCheckReport.

Severity is never chosen freely. It is a total function of the claim type:

| Severity | Types                                  | Cost of being wrong        |
|----------|----------------------------------------|----------------------------|
| critical | venue_exists, location                 | Reader travels for nothing |
| major    | hours, event_period, heritage          | Reader is inconvenienced   |
| minor    | price, facilities, contact, transport, | Reader can check on site   |
|          | trail, general                         |                            |
"""

from enum import Enum
from typing import Any, Optional

from pydantic import BaseModel, Field, model_validator


class ClaimType(str, Enum):
    """Kinds of verifiable assertions."""

    VENUE_EXISTS = "venue_exists"
    LOCATION = "location"
    HOURS = "hours"
    EVENT_PERIOD = "event_period"
    PRICE = "price"
    FACILITIES = "facilities"
    CONTACT = "contact"
    TRANSPORT = "transport"
    HERITAGE = "heritage"
    TRAIL = "trail"
    GENERAL = "general"


class ClaimSeverity(str, Enum):
    """Criticality band of a claim."""

    CRITICAL = "critical"
    MAJOR = "major"
    MINOR = "minor"

    @property
    def rank(self) -> int:
        """Sort rank: critical (0) < major (1) < minor (2)."""
        return _SEVERITY_RANK[self]


_SEVERITY_RANK: dict[ClaimSeverity, int] = {
    ClaimSeverity.CRITICAL: 0,
    ClaimSeverity.MAJOR: 1,
    ClaimSeverity.MINOR: 2,
}

SEVERITY_MAP: dict[ClaimType, ClaimSeverity] = {
    ClaimType.VENUE_EXISTS: ClaimSeverity.CRITICAL,
    ClaimType.LOCATION: ClaimSeverity.CRITICAL,
    ClaimType.HOURS: ClaimSeverity.MAJOR,
    ClaimType.EVENT_PERIOD: ClaimSeverity.MAJOR,
    ClaimType.HERITAGE: ClaimSeverity.MAJOR,
    ClaimType.PRICE: ClaimSeverity.MINOR,
    ClaimType.FACILITIES: ClaimSeverity.MINOR,
    ClaimType.CONTACT: ClaimSeverity.MINOR,
    ClaimType.TRANSPORT: ClaimSeverity.MINOR,
    ClaimType.TRAIL: ClaimSeverity.MINOR,
    ClaimType.GENERAL: ClaimSeverity.MINOR,
}

_missing_severity = set(ClaimType) - set(SEVERITY_MAP)
if _missing_severity:
    raise RuntimeError(f"claim types without a severity: {sorted(t.value for t in _missing_severity)}")


def severity_of(claim_type: ClaimType) -> ClaimSeverity:
    """Return the fixed severity for a claim type."""
    return SEVERITY_MAP[ClaimType(claim_type)]


class Claim(BaseModel):
    """A single verifiable assertion extracted from a post.

    ``text`` is the raw matched span (what AutoFixer searches for), ``value``
    the normalised payload sent to the verification oracle.
    """

    id: str = Field(..., description="Unique within one document (fm-N / ct-N)")
    type: ClaimType
    text: str = Field(..., description="Raw matched span")
    value: str = Field(..., description="Normalised payload")
    severity: ClaimSeverity = Field(..., description="Derived from type when omitted")
    context: Optional[str] = Field(default=None, description="Enclosing source line")
    line_number: Optional[int] = Field(default=None, ge=1, description="1-based body line")

    @model_validator(mode="before")
    @classmethod
    def fill_severity(cls, data: Any) -> Any:
        if isinstance(data, dict) and data.get("severity") is None and "type" in data:
            data = {**data, "severity": severity_of(data["type"])}
        return data

    @model_validator(mode="after")
    def check_severity(self) -> "Claim":
        expected = severity_of(self.type)
        if self.severity != expected:
            raise ValueError(
                f"severity {self.severity.value} does not match type "
                f"{self.type.value} (expected {expected.value})"
            )
        return self

    @property
    def dedup_key(self) -> tuple[ClaimType, str]:
        return (self.type, self.value.strip().lower())

    model_config = {
        "frozen": True,
        "json_schema_extra": {
            "examples": [
                {
                    "id": "ct-3",
                    "type": "hours",
                    "text": "운영시간: 10:00-18:00",
                    "value": "10:00-18:00",
                    "severity": "major",
                    "context": "운영시간: 10:00-18:00 (월요일 휴관)",
                    "line_number": 12,
                }
            ]
        },
    }
