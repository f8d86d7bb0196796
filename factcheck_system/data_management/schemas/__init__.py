"""Schema package for claims, verdicts, reports, review cases and auto-fix records.

All models are Pydantic v2 and serialise with ``model_dump(mode="json")``:
- Claim: immutable extraction output, severity fixed by type
- VerificationResult: one verdict per claim
- FactCheckReport: immutable aggregate, unit of record for review and auto-fix
- ReviewCase / ReviewQueue: durable human review queue
- AutoFixReport / AutoFixAuditLog: auto-fix outcome and audit trail

Usage:
    from factcheck_system.data_management.schemas import Claim, ClaimType
    claim = Claim(id="fm-0", type=ClaimType.VENUE_EXISTS, text="장소: X", value="X")
"""

from factcheck_system.data_management.schemas.claim_schema import (
    SEVERITY_MAP,
    Claim,
    ClaimSeverity,
    ClaimType,
    severity_of,
)
from factcheck_system.data_management.schemas.verification_schema import (
    VerificationResult,
    VerificationSource,
    VerificationStatus,
    VerificationRecord,
    record_key,
)
from factcheck_system.data_management.schemas.report_schema import (
    REPORT_VERSION,
    CategoryScores,
    ClaimCounts,
    Correction,
    FactCheckReport,
    SeverityBreakdown,
)
from factcheck_system.data_management.schemas.review_schema import (
    REVIEW_TRANSITIONS,
    ReviewAction,
    ReviewCase,
    ReviewQueue,
    ReviewStatus,
    ReviewTrigger,
)
from factcheck_system.data_management.schemas.autofix_schema import (
    AUDIT_LOG_VERSION,
    AppliedCorrection,
    AutoFixAuditLog,
    AutoFixReport,
    AutoFixStats,
    DiffEntry,
)

__all__ = [
    "SEVERITY_MAP",
    "Claim",
    "ClaimSeverity",
    "ClaimType",
    "severity_of",
    "VerificationResult",
    "VerificationSource",
    "VerificationStatus",
    "VerificationRecord",
    "record_key",
    "REPORT_VERSION",
    "CategoryScores",
    "ClaimCounts",
    "Correction",
    "FactCheckReport",
    "SeverityBreakdown",
    "REVIEW_TRANSITIONS",
    "ReviewAction",
    "ReviewCase",
    "ReviewQueue",
    "ReviewStatus",
    "ReviewTrigger",
    "AUDIT_LOG_VERSION",
    "AppliedCorrection",
    "AutoFixAuditLog",
    "AutoFixReport",
    "AutoFixStats",
    "DiffEntry",
]
