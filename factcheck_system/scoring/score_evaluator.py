"""Quality gate scoring over per-claim verdicts.

| Quantity          | Rule                                                        |
|-------------------|-------------------------------------------------------------|
| category score    | verified / total * 100 per severity; empty category = 100   |
| overall score     | weighted sum of category scores, rounded half up            |
| passes_gate       | every category and the overall score meet their threshold   |
| block_publish     | critical below threshold AND block_on_critical_failure      |
| needs_human_review| overall in [score_min, score_max), unknown ratio >= limit,  |
|                   | or any critical claim resolved false                        |

Unknown verdicts and claims without a verdict both count as not verified.
Category scores stay unrounded so a 99.6 critical score cannot round its way
through a 100 threshold. Empty categories keep their vacuous 100 at full
weight; weights are never re-normalised.
"""

import math
from dataclasses import dataclass
from typing import Iterable, Optional, Sequence

from factcheck_system.config.logging import get_logger
from factcheck_system.config.quality_gates import QualityGatesConfig
from factcheck_system.data_management.schemas.claim_schema import Claim, ClaimSeverity
from factcheck_system.data_management.schemas.report_schema import (
    CategoryScores,
    ClaimCounts,
    SeverityBreakdown,
)
from factcheck_system.data_management.schemas.verification_schema import (
    VerificationResult,
    VerificationStatus,
)


@dataclass
class GateEvaluation:
    """Result of scoring one document against the quality gate.

    Attributes:
        category_scores: Per-severity scores (0-100, unrounded).
        overall_score: Weighted overall score, rounded to an integer.
        passes_gate: All four thresholds hold.
        block_publish: Critical category failed with blocking enabled.
        needs_human_review: Escalation required.
        unknown_ratio: Share of claims not resolved, in percent.
        has_critical_false: A critical claim resolved false.
    """

    category_scores: CategoryScores
    overall_score: int
    passes_gate: bool
    block_publish: bool
    needs_human_review: bool
    unknown_ratio: float = 0.0
    has_critical_false: bool = False


def _results_by_claim(results: Iterable[VerificationResult]) -> dict[str, VerificationResult]:
    return {r.claim_id: r for r in results}


def _status_of(claim: Claim, by_claim: dict[str, VerificationResult]) -> VerificationStatus:
    result = by_claim.get(claim.id)
    return result.status if result is not None else VerificationStatus.UNKNOWN


def _tally(counts: ClaimCounts, status: VerificationStatus) -> None:
    counts.total += 1
    if status == VerificationStatus.VERIFIED:
        counts.verified += 1
    elif status == VerificationStatus.FALSE:
        counts.false += 1
    else:
        counts.unknown += 1


def severity_stats(
    claims: Sequence[Claim],
    results: Iterable[VerificationResult],
) -> SeverityBreakdown:
    """Per-severity total/verified/false/unknown counters."""
    by_claim = _results_by_claim(results)
    stats = SeverityBreakdown()
    for claim in claims:
        _tally(stats.for_severity(claim.severity), _status_of(claim, by_claim))
    return stats


def claim_counts(
    claims: Sequence[Claim],
    results: Iterable[VerificationResult],
) -> ClaimCounts:
    """Document-wide total/verified/false/unknown counters."""
    by_claim = _results_by_claim(results)
    counts = ClaimCounts()
    for claim in claims:
        _tally(counts, _status_of(claim, by_claim))
    return counts


def category_score(
    severity: ClaimSeverity,
    claims: Sequence[Claim],
    results: Iterable[VerificationResult],
) -> float:
    """verified / total * 100 for one severity band; 100 when the band is empty."""
    by_claim = _results_by_claim(results)
    band = [c for c in claims if c.severity == severity]
    if not band:
        return 100.0
    verified = sum(1 for c in band if _status_of(c, by_claim) == VerificationStatus.VERIFIED)
    return verified / len(band) * 100


def round_half_up(value: float) -> int:
    # Rounded to 6 places first so 76.99999999999999 from float weights lands on 77
    return int(math.floor(round(value, 6) + 0.5))


class ScoreEvaluator:
    """
    Scores verdicts against the configured quality gate.

    Usage:
        evaluator = ScoreEvaluator(config)
        evaluation = evaluator.evaluate(claims, results)
        if evaluation.block_publish:
            ...
    """

    def __init__(self, config: Optional[QualityGatesConfig] = None):
        self.config = config or QualityGatesConfig.defaults()
        self._logger = get_logger("ScoreEvaluator")

    def category_scores(
        self,
        claims: Sequence[Claim],
        results: Sequence[VerificationResult],
    ) -> CategoryScores:
        return CategoryScores(
            critical=category_score(ClaimSeverity.CRITICAL, claims, results),
            major=category_score(ClaimSeverity.MAJOR, claims, results),
            minor=category_score(ClaimSeverity.MINOR, claims, results),
        )

    def overall_score(self, scores: CategoryScores) -> int:
        weights = self.config.factcheck.weights
        weighted = (
            scores.critical * weights.critical
            + scores.major * weights.major
            + scores.minor * weights.minor
        )
        return max(0, min(100, round_half_up(weighted)))

    def evaluate(
        self,
        claims: Sequence[Claim],
        results: Sequence[VerificationResult],
    ) -> GateEvaluation:
        factcheck = self.config.factcheck
        thresholds = factcheck.thresholds
        review = self.config.human_review

        scores = self.category_scores(claims, results)
        overall = self.overall_score(scores)

        critical_ok = scores.critical >= thresholds.critical
        passes_gate = (
            critical_ok
            and scores.major >= thresholds.major
            and scores.minor >= thresholds.minor
            and overall >= thresholds.overall
        )
        block_publish = not critical_ok and factcheck.block_on_critical_failure

        by_claim = _results_by_claim(results)
        statuses = [_status_of(c, by_claim) for c in claims]
        unknown = sum(1 for s in statuses if s == VerificationStatus.UNKNOWN)
        unknown_ratio = unknown / len(claims) * 100 if claims else 0.0
        has_critical_false = any(
            c.severity == ClaimSeverity.CRITICAL and s == VerificationStatus.FALSE
            for c, s in zip(claims, statuses)
        )

        needs_human_review = (
            review.score_min <= overall < review.score_max
            or (bool(claims) and unknown_ratio >= review.unknown_ratio_threshold)
            or has_critical_false
        )

        self._logger.debug(
            "Quality gate evaluated",
            overall=overall,
            critical=scores.critical,
            major=scores.major,
            minor=scores.minor,
            passes_gate=passes_gate,
            block_publish=block_publish,
            needs_human_review=needs_human_review,
        )

        return GateEvaluation(
            category_scores=scores,
            overall_score=overall,
            passes_gate=passes_gate,
            block_publish=block_publish,
            needs_human_review=needs_human_review,
            unknown_ratio=unknown_ratio,
            has_critical_false=has_critical_false,
        )


def evaluate(
    claims: Sequence[Claim],
    results: Sequence[VerificationResult],
    config: Optional[QualityGatesConfig] = None,
) -> GateEvaluation:
    """Shortcut for ``ScoreEvaluator(config).evaluate(claims, results)``."""
    return ScoreEvaluator(config).evaluate(claims, results)
