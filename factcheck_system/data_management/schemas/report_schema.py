"""Fact-check report schema: the persisted unit of record for one run.

A FactCheckReport is created once per verification run and never mutated.
Human review and AutoFixer both consume it as JSON.
"""

from datetime import datetime, timezone
from typing import Optional

from pydantic import BaseModel, Field

from factcheck_system.data_management.schemas.claim_schema import Claim, ClaimSeverity
from factcheck_system.data_management.schemas.verification_schema import VerificationResult

REPORT_VERSION = "1.0.0"


class Correction(BaseModel):
    """Proposed text replacement derived from a FALSE verdict.

    ``auto_applicable`` is False for every critical claim: those corrections
    always go to a human.
    """

    claim_id: str
    original_text: str
    suggested_text: str
    reason: str
    auto_applicable: bool


class ClaimCounts(BaseModel):
    total: int = 0
    verified: int = 0
    false: int = 0
    unknown: int = 0


class SeverityBreakdown(BaseModel):
    critical: ClaimCounts = Field(default_factory=ClaimCounts)
    major: ClaimCounts = Field(default_factory=ClaimCounts)
    minor: ClaimCounts = Field(default_factory=ClaimCounts)

    def for_severity(self, severity: ClaimSeverity) -> ClaimCounts:
        return getattr(self, ClaimSeverity(severity).value)


class CategoryScores(BaseModel):
    """Per-severity scores (0-100). An empty category scores 100."""

    critical: float = 100.0
    major: float = 100.0
    minor: float = 100.0

    def for_severity(self, severity: ClaimSeverity) -> float:
        return getattr(self, ClaimSeverity(severity).value)


class FactCheckReport(BaseModel):
    """Aggregate verification outcome for one post."""

    file_path: str
    title: str
    checked_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))

    overall_score: int = Field(100, ge=0, le=100)
    category_scores: CategoryScores = Field(default_factory=CategoryScores)

    claims: ClaimCounts = Field(default_factory=ClaimCounts)
    by_severity: SeverityBreakdown = Field(default_factory=SeverityBreakdown)

    results: list[VerificationResult] = Field(default_factory=list)
    extracted_claims: list[Claim] = Field(default_factory=list)
    corrections: list[Correction] = Field(default_factory=list)

    passes_gate: bool = True
    needs_human_review: bool = False
    block_publish: bool = False

    version: str = REPORT_VERSION

    model_config = {"frozen": True}

    def claim_by_id(self, claim_id: str) -> Optional[Claim]:
        for claim in self.extracted_claims:
            if claim.id == claim_id:
                return claim
        return None

    @classmethod
    def empty(cls, file_path: str, title: str) -> "FactCheckReport":
        """Report for a post with nothing to check (passes trivially)."""
        return cls(file_path=file_path, title=title)
