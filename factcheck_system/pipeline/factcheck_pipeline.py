"""End-to-end fact-check of markdown posts.

Per document:
    load -> pre-filter -> extract -> note new venues -> verify -> score
         -> corrections -> report -> escalate (if needed) -> persist report

One unreachable claim never aborts a document (it degrades to unknown), and
one failing document never aborts a batch.

Usage:
    from factcheck_system.pipeline import FactCheckPipeline

    pipeline = FactCheckPipeline(verifier=ClaimVerifier(oracle), escalator=escalator)
    report = await pipeline.check_file("drafts/2026-10-01-museum.md")
    print(summarize_report(report))
"""

from dataclasses import dataclass, field
from pathlib import Path
from typing import Iterable, Optional

import structlog

from factcheck_system.autofix.auto_fixer import AutoFixer
from factcheck_system.config.quality_gates import QualityGatesConfig
from factcheck_system.data_management.report_store import ReportStore
from factcheck_system.data_management.review_store import ReviewQueueError
from factcheck_system.data_management.schemas.autofix_schema import AutoFixReport
from factcheck_system.data_management.schemas.claim_schema import Claim, ClaimType
from factcheck_system.data_management.schemas.report_schema import FactCheckReport
from factcheck_system.data_management.verification_store import VerificationStore
from factcheck_system.documents.markdown_document import DocumentError, MarkdownDocument
from factcheck_system.extraction.claim_extractor import ClaimExtractor, needs_fact_check
from factcheck_system.review.review_escalator import ReviewEscalator
from factcheck_system.scoring.correction_generator import CorrectionGenerator
from factcheck_system.scoring.score_evaluator import (
    ScoreEvaluator,
    claim_counts,
    severity_stats,
)
from factcheck_system.utils.logging import get_correlation_id, get_structured_logger
from factcheck_system.verification.claim_verifier import (
    ClaimVerifier,
    ProgressCallback,
    VerificationError,
)


@dataclass
class BatchResult:
    """Outcome of checking several files."""

    reports: list[FactCheckReport] = field(default_factory=list)
    failures: dict[str, str] = field(default_factory=dict)
    stopped_on: Optional[str] = None

    @property
    def blocked(self) -> list[FactCheckReport]:
        return [r for r in self.reports if r.block_publish]


class FactCheckPipeline:
    """Orchestrates extraction, verification, scoring and escalation."""

    def __init__(
        self,
        verifier: ClaimVerifier,
        escalator: Optional[ReviewEscalator] = None,
        config: Optional[QualityGatesConfig] = None,
        extractor: Optional[ClaimExtractor] = None,
        verification_store: Optional[VerificationStore] = None,
        report_store: Optional[ReportStore] = None,
        fixer: Optional[AutoFixer] = None,
        corrector: Optional[CorrectionGenerator] = None,
    ) -> None:
        """Initialize FactCheckPipeline.

        Args:
            verifier: Claim verifier wrapping the oracle.
            escalator: Files review cases. Escalation is skipped if None.
            config: Quality gate config (defaults if None).
            extractor: Claim extractor (default matcher table if None).
            verification_store: Prior verification records for new-venue
                detection. Falls back to the verifier's store.
            report_store: Persists reports if given.
            fixer: AutoFixer used by fix_file.
            corrector: Turns FALSE results into corrections.
        """
        self.verifier = verifier
        self.escalator = escalator
        self.config = config or verifier.config
        self.extractor = extractor or ClaimExtractor()
        self.evaluator = ScoreEvaluator(self.config)
        self.verification_store = verification_store or verifier.store
        self.report_store = report_store
        self.fixer = fixer
        self.corrector = corrector or CorrectionGenerator()
        self._logger = structlog.get_logger().bind(component="FactCheckPipeline")

    async def check_file(
        self,
        file_path: str | Path,
        on_progress: Optional[ProgressCallback] = None,
    ) -> FactCheckReport:
        """Fact-check one post and return its report.

        Raises:
            DocumentError: The post cannot be read or parsed.
            VerificationError: The oracle rejected a claim (auth, validation).
        """
        file_path = str(file_path)
        log = get_structured_logger("pipeline", run_id=get_correlation_id(), file_path=file_path)

        document = MarkdownDocument.load(file_path)

        if not needs_fact_check(document.body, document.metadata):
            log.info("fact_check_skipped", reason="nothing verifiable")
            return self._finish(FactCheckReport.empty(file_path, document.title))

        claims = self.extractor.extract(document.body, document.metadata)
        if not claims:
            log.info("fact_check_skipped", reason="no claims extracted")
            return self._finish(FactCheckReport.empty(file_path, document.title))

        log.info("claims_extracted", total=len(claims))

        # Must run before verification stores this run's verdicts
        is_new_venue = await self._has_new_venue(claims)

        results = await self.verifier.verify_claims(claims, on_progress=on_progress)
        evaluation = self.evaluator.evaluate(claims, results)
        corrections = self.corrector.generate(results, claims)

        report = FactCheckReport(
            file_path=file_path,
            title=document.title,
            overall_score=evaluation.overall_score,
            category_scores=evaluation.category_scores,
            claims=claim_counts(claims, results),
            by_severity=severity_stats(claims, results),
            results=results,
            extracted_claims=claims,
            corrections=corrections,
            passes_gate=evaluation.passes_gate,
            needs_human_review=evaluation.needs_human_review,
            block_publish=evaluation.block_publish,
        )

        log.info(
            "file_checked",
            score=report.overall_score,
            passes_gate=report.passes_gate,
            block_publish=report.block_publish,
            needs_human_review=report.needs_human_review,
            corrections=len(corrections),
        )

        if self.escalator is not None:
            case = await self.escalator.escalate(report, document.body, is_new_venue)
            if case is not None:
                log.info("review_case_filed", case_id=case.id, trigger=case.trigger.value)

        return self._finish(report)

    async def check_files(
        self,
        file_paths: Iterable[str | Path],
        stop_on_block: bool = False,
    ) -> BatchResult:
        """Check posts one after another; failures are recorded, not raised."""
        batch = BatchResult()
        for file_path in file_paths:
            try:
                report = await self.check_file(file_path)
            except (DocumentError, VerificationError, ReviewQueueError, OSError) as e:
                batch.failures[str(file_path)] = str(e)
                self._logger.error("file_check_failed", file_path=str(file_path), error=str(e))
                continue

            batch.reports.append(report)
            if stop_on_block and report.block_publish:
                batch.stopped_on = str(file_path)
                self._logger.warning(
                    "batch_stopped_on_block",
                    file_path=str(file_path),
                    score=report.overall_score,
                )
                break

        return batch

    async def fix_file(
        self,
        file_path: str | Path,
        report: FactCheckReport,
        dry_run: bool = False,
    ) -> AutoFixReport:
        if self.fixer is None:
            raise RuntimeError("FactCheckPipeline has no AutoFixer configured")
        return await self.fixer.apply_auto_fix(file_path, report, dry_run=dry_run)

    async def _has_new_venue(self, claims: list[Claim]) -> bool:
        if self.verification_store is None:
            return False
        for claim in claims:
            if claim.type == ClaimType.VENUE_EXISTS and not await self.verification_store.has_record(claim):
                return True
        return False

    def _finish(self, report: FactCheckReport) -> FactCheckReport:
        if self.report_store is not None:
            self.report_store.save(report)
        return report


def summarize_report(report: FactCheckReport, overall_threshold: float = 80) -> str:
    """Plain-text summary of a report for terminals and logs."""
    rule = "━" * 50
    lines = [
        "",
        f"Fact-check report: {report.title}",
        rule,
        f"File: {report.file_path}",
        f"Checked at: {report.checked_at.isoformat()}",
        "",
        f"Overall score: {report.overall_score}%",
        f"   - Critical: {report.category_scores.critical:.0f}%",
        f"   - Major: {report.category_scores.major:.0f}%",
        f"   - Minor: {report.category_scores.minor:.0f}%",
        "",
        "Claims:",
        f"   verified: {report.claims.verified}/{report.claims.total}",
        f"   false:    {report.claims.false}/{report.claims.total}",
        f"   unknown:  {report.claims.unknown}/{report.claims.total}",
        "",
    ]

    if report.block_publish:
        lines.append("BLOCKED: critical claims failed verification")
    elif report.needs_human_review:
        lines.append("Needs human review")
    elif report.passes_gate:
        lines.append("Quality gate passed")
    else:
        lines.append(f"Quality gate failed (overall threshold {overall_threshold:.0f}%)")

    if report.corrections:
        lines.append("")
        lines.append(f"Suggested corrections ({len(report.corrections)}):")
        for correction in report.corrections:
            marker = "auto" if correction.auto_applicable else "manual"
            lines.append(f"   - [{marker}] {correction.original_text}")
            lines.append(f"     -> {correction.suggested_text}")

    lines.append(rule)
    lines.append("")
    return "\n".join(lines)
