"""Data management package for the fact-check system.

Provides storage adapters and schemas for:
- Claims (Claim) - immutable extraction output
- Verdicts (VerificationResult) - per-claim oracle outcome
- Reports (FactCheckReport) - immutable per-run aggregate
- Review cases (ReviewCase) - durable human review queue
- Auto-fix audit logs (AutoFixAuditLog) - one file per applied run

Storage adapters:
- ReviewStore: Whole-file JSON review queue with atomic writes
- VerificationStore: TTL verdict cache and prior-verification lookup
- AuditLogStore: Dated, never-overwritten audit log files
- ReportStore: FactCheckReport JSON files
"""

from factcheck_system.data_management.audit_log_store import AuditLogStore
from factcheck_system.data_management.report_store import ReportStore
from factcheck_system.data_management.review_store import (
    InvalidTransitionError,
    ReviewCaseNotFoundError,
    ReviewQueueError,
    ReviewStore,
)
from factcheck_system.data_management.verification_store import VerificationStore

__all__ = [
    "AuditLogStore",
    "ReportStore",
    "ReviewStore",
    "ReviewQueueError",
    "ReviewCaseNotFoundError",
    "InvalidTransitionError",
    "VerificationStore",
]
