"""Safe, audited application of non-critical corrections.

Algorithm for one document and its FactCheckReport:

1. Partition corrections into auto-applicable and critical. Critical ones are
   never touched: they are filed as one critical_false/block review case,
   also in dry-run mode.
2. Sort auto-applicable corrections by the originating claim's line number,
   descending (claims without a line number sort last), so that an edit never
   shifts text a later correction still has to find.
3. For each correction count non-overlapping occurrences of original_text in
   the current body:
   - 0  -> skipped, "original text not found"
   - >1 -> first occurrence replaced, warning recorded
   - 1  -> replaced
4. Hash the whole document before and after (SHA-256, first 16 hex chars).
5. Unless dry-run, and only if something was applied: write the document,
   then write an audit log.

Only the body is rewritten; the front matter block is written back byte for
byte. Failing to find text is a skip, never an error; write failures
propagate.
"""

import hashlib
from pathlib import Path
from typing import Optional

import structlog

from factcheck_system.data_management.audit_log_store import AuditLogStore
from factcheck_system.data_management.schemas.autofix_schema import (
    AppliedCorrection,
    AutoFixAuditLog,
    AutoFixReport,
    AutoFixStats,
    DiffEntry,
)
from factcheck_system.data_management.schemas.report_schema import Correction, FactCheckReport
from factcheck_system.data_management.schemas.review_schema import ReviewTrigger
from factcheck_system.documents.markdown_document import UNTITLED, MarkdownDocument
from factcheck_system.review.review_escalator import ReviewEscalator

NOT_FOUND_REASON = "original text not found"


def compute_hash(content: str) -> str:
    """First 16 hex characters of the SHA-256 of the UTF-8 content."""
    return hashlib.sha256(content.encode("utf-8")).hexdigest()[:16]


def count_occurrences(text: str, search: str) -> int:
    """Non-overlapping occurrences of search in text (0 for an empty search)."""
    if not search:
        return 0
    return text.count(search)


class AutoFixer:
    """
    Applies auto-applicable corrections from a FactCheckReport to a post.

    Usage:
        fixer = AutoFixer(escalator, AuditLogStore("data/factcheck-fixes"))
        result = await fixer.apply_auto_fix("drafts/museum.md", report, dry_run=True)
        print(format_diff(result))

    Callers must serialise fixes per file; the document is rewritten in place
    without locking.
    """

    def __init__(self, escalator: ReviewEscalator, audit_store: AuditLogStore) -> None:
        self.escalator = escalator
        self.audit_store = audit_store
        self._logger = structlog.get_logger().bind(component="AutoFixer")

    async def apply_auto_fix(
        self,
        file_path: str | Path,
        report: FactCheckReport,
        dry_run: bool = False,
    ) -> AutoFixReport:
        file_path = str(file_path)
        document = MarkdownDocument.load(file_path)
        before_hash = compute_hash(document.content)
        title = document.title if document.title != UNTITLED else (report.title or UNTITLED)

        auto_applicable = [c for c in report.corrections if c.auto_applicable]
        critical = [c for c in report.corrections if not c.auto_applicable]

        if critical:
            await self._queue_critical(file_path, title, report, critical)

        body = document.body
        applied_corrections: list[AppliedCorrection] = []
        diffs: list[DiffEntry] = []

        for correction in self._bottom_up(auto_applicable, report):
            occurrences = count_occurrences(body, correction.original_text)
            line_number = self._line_number(correction, report)

            if occurrences == 0:
                applied_corrections.append(
                    AppliedCorrection(
                        claim_id=correction.claim_id,
                        original_text=correction.original_text,
                        suggested_text=correction.suggested_text,
                        reason=correction.reason,
                        applied=False,
                        skipped_reason=NOT_FOUND_REASON,
                    )
                )
                self._logger.info(
                    "correction_skipped",
                    claim_id=correction.claim_id,
                    reason=NOT_FOUND_REASON,
                )
                continue

            warning = None
            if occurrences > 1:
                warning = f"{occurrences} occurrences found; only the first was replaced"
                self._logger.warning(
                    "correction_ambiguous",
                    claim_id=correction.claim_id,
                    occurrences=occurrences,
                )

            body = body.replace(correction.original_text, correction.suggested_text, 1)
            applied_corrections.append(
                AppliedCorrection(
                    claim_id=correction.claim_id,
                    original_text=correction.original_text,
                    suggested_text=correction.suggested_text,
                    reason=correction.reason,
                    applied=True,
                    warning=warning,
                )
            )
            diffs.append(
                DiffEntry(
                    line_number=line_number,
                    original=correction.original_text,
                    modified=correction.suggested_text,
                )
            )

        fixed = document.with_body(body)
        after_hash = compute_hash(fixed.content)
        applied = [c for c in applied_corrections if c.applied]

        audit_log_path: Optional[str] = None
        if not dry_run and applied:
            fixed.save()
            audit_log = AutoFixAuditLog(
                file_path=file_path,
                title=title,
                before_hash=before_hash,
                after_hash=after_hash,
                corrections=applied,
                factcheck_score=report.overall_score,
            )
            audit_log_path = str(self.audit_store.write(audit_log))

        stats = AutoFixStats(
            total_corrections=len(report.corrections),
            applied=len(applied),
            skipped=len(applied_corrections) - len(applied),
            critical_queued=len(critical),
        )
        self._logger.info(
            "auto_fix_complete",
            file_path=file_path,
            dry_run=dry_run,
            applied=stats.applied,
            skipped=stats.skipped,
            critical_queued=stats.critical_queued,
            before_hash=before_hash,
            after_hash=after_hash,
        )

        return AutoFixReport(
            file_path=file_path,
            title=title,
            stats=stats,
            applied_corrections=applied_corrections,
            diffs=diffs,
            audit_log_path=audit_log_path,
            before_hash=before_hash,
            after_hash=after_hash,
            dry_run=dry_run,
        )

    async def _queue_critical(
        self,
        file_path: str,
        title: str,
        report: FactCheckReport,
        critical: list[Correction],
    ) -> None:
        # One pending case per file, so every critical correction goes into one case
        details = "; ".join(
            f'[not auto-fixable] {c.reason}: "{c.original_text}" -> "{c.suggested_text}"'
            for c in critical
        )
        await self.escalator.add_review_case(
            file_path,
            title,
            ReviewTrigger.CRITICAL_FALSE,
            report.overall_score,
            details,
        )

    @staticmethod
    def _line_number(correction: Correction, report: FactCheckReport) -> Optional[int]:
        claim = report.claim_by_id(correction.claim_id)
        return claim.line_number if claim is not None else None

    def _bottom_up(self, corrections: list[Correction], report: FactCheckReport) -> list[Correction]:
        return sorted(
            corrections,
            key=lambda c: self._line_number(c, report) or 0,
            reverse=True,
        )


def format_diff(report: AutoFixReport) -> str:
    """Human-readable summary of an AutoFixReport."""
    rule = "━" * 50
    lines = [
        "",
        f"{'(DRY-RUN) ' if report.dry_run else ''}Auto-fix result: {report.title}",
        rule,
        f"File: {report.file_path}",
        f"Hash: {report.before_hash}"
        + (f" -> {report.after_hash}" if report.after_hash != report.before_hash else ""),
        "",
        f"Applied: {report.stats.applied} | Skipped: {report.stats.skipped} | "
        f"Critical queued: {report.stats.critical_queued}",
        "",
    ]

    if report.diffs:
        lines.append("Changes:")
        for diff in report.diffs:
            line_info = f" (L{diff.line_number})" if diff.line_number else ""
            lines.append(f"  {diff.type}{line_info}:")
            lines.append(f"  - {diff.original}")
            lines.append(f"  + {diff.modified}")
            lines.append("")

    warnings = [c for c in report.applied_corrections if c.warning]
    for correction in warnings:
        lines.append(f"Warning ({correction.claim_id}): {correction.warning}")
    skipped = [c for c in report.applied_corrections if not c.applied]
    for correction in skipped:
        lines.append(f"Skipped ({correction.claim_id}): {correction.skipped_reason}")
    if warnings or skipped:
        lines.append("")

    if report.stats.critical_queued:
        lines.append(
            f"{report.stats.critical_queued} critical correction(s) added to the human review queue."
        )
        lines.append("Check with: factcheck review list")

    if report.audit_log_path:
        lines.append("")
        lines.append(f"Audit log: {report.audit_log_path}")

    lines.append(rule)
    return "\n".join(lines)
