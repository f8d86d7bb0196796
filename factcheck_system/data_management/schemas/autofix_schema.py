"""Auto-fix outcome and audit log schemas."""

from datetime import datetime, timezone
from typing import Literal, Optional

from pydantic import BaseModel, Field

AUDIT_LOG_VERSION = "1.0.0"


class AppliedCorrection(BaseModel):
    """What happened to one auto-applicable correction."""

    claim_id: str
    original_text: str
    suggested_text: str
    reason: str
    applied: bool
    skipped_reason: Optional[str] = None
    warning: Optional[str] = None


class DiffEntry(BaseModel):
    line_number: Optional[int] = None
    original: str
    modified: str
    type: Literal["body"] = "body"


class AutoFixStats(BaseModel):
    total_corrections: int = 0
    applied: int = 0
    skipped: int = 0
    critical_queued: int = 0


class AutoFixReport(BaseModel):
    file_path: str
    title: str
    fixed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    stats: AutoFixStats = Field(default_factory=AutoFixStats)
    applied_corrections: list[AppliedCorrection] = Field(default_factory=list)
    diffs: list[DiffEntry] = Field(default_factory=list)
    audit_log_path: Optional[str] = None
    before_hash: str
    after_hash: str
    dry_run: bool = False


class AutoFixAuditLog(BaseModel):
    """Immutable record of one auto-fix run; only applied corrections are listed."""

    file_path: str
    title: str
    fixed_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    before_hash: str
    after_hash: str
    corrections: list[AppliedCorrection]
    factcheck_score: int
    version: str = AUDIT_LOG_VERSION

    model_config = {"frozen": True}
