"""Tests for quality gate scoring."""

import pytest

from factcheck_system.config.quality_gates import QualityGatesConfig
from factcheck_system.data_management.schemas import (
    Claim,
    ClaimSeverity,
    ClaimType,
    VerificationResult,
    VerificationStatus,
)
from factcheck_system.scoring.score_evaluator import (
    ScoreEvaluator,
    category_score,
    claim_counts,
    evaluate,
    round_half_up,
    severity_stats,
)

V, F, U = VerificationStatus.VERIFIED, VerificationStatus.FALSE, VerificationStatus.UNKNOWN


def _claims_and_results(pairs: list[tuple[ClaimType, VerificationStatus]]):
    claims, results = [], []
    for index, (claim_type, status) in enumerate(pairs):
        claim_id = f"ct-{index}"
        claims.append(Claim(id=claim_id, type=claim_type, text=f"claim {index}", value=f"value {index}"))
        results.append(VerificationResult(claim_id=claim_id, status=status, confidence=80))
    return claims, results


# ── Fixtures ──────────────────────────────────────────────────────────────


@pytest.fixture
def mixed():
    """2 critical (1 verified, 1 false), 3 major verified, 5 minor (4 verified, 1 unknown)."""
    return _claims_and_results(
        [
            (ClaimType.VENUE_EXISTS, V),
            (ClaimType.LOCATION, F),
            (ClaimType.HOURS, V),
            (ClaimType.EVENT_PERIOD, V),
            (ClaimType.HERITAGE, V),
            (ClaimType.PRICE, V),
            (ClaimType.CONTACT, V),
            (ClaimType.TRANSPORT, V),
            (ClaimType.FACILITIES, V),
            (ClaimType.TRAIL, U),
        ]
    )


# ── Scoring Tests ────────────────────────────────────────────────────────


class TestMixedDocument:
    def test_category_and_overall_scores(self, mixed) -> None:
        claims, results = mixed
        evaluation = ScoreEvaluator().evaluate(claims, results)

        assert evaluation.category_scores.critical == pytest.approx(50)
        assert evaluation.category_scores.major == pytest.approx(100)
        assert evaluation.category_scores.minor == pytest.approx(80)
        assert evaluation.overall_score == 77

    def test_gate_outcome(self, mixed) -> None:
        claims, results = mixed
        evaluation = ScoreEvaluator().evaluate(claims, results)

        assert evaluation.passes_gate is False
        assert evaluation.block_publish is True
        assert evaluation.has_critical_false is True
        assert evaluation.needs_human_review is True
        assert evaluation.unknown_ratio == pytest.approx(10)

    def test_blocking_can_be_disabled(self, mixed) -> None:
        claims, results = mixed
        config = QualityGatesConfig.defaults().with_overrides("factcheck", block_on_critical_failure=False)

        evaluation = evaluate(claims, results, config)

        assert evaluation.block_publish is False
        assert evaluation.passes_gate is False

    def test_counters(self, mixed) -> None:
        claims, results = mixed

        counts = claim_counts(claims, results)
        stats = severity_stats(claims, results)

        assert (counts.total, counts.verified, counts.false, counts.unknown) == (10, 8, 1, 1)
        assert stats.critical.false == 1
        assert stats.major.verified == 3
        assert stats.minor.unknown == 1


class TestEdgeCases:
    def test_empty_category_scores_100(self) -> None:
        claims, results = _claims_and_results([(ClaimType.HOURS, V), (ClaimType.PRICE, V)])

        evaluation = ScoreEvaluator().evaluate(claims, results)

        assert evaluation.category_scores.critical == 100
        assert evaluation.overall_score == 100
        assert evaluation.passes_gate is True
        assert evaluation.block_publish is False

    def test_no_claims(self) -> None:
        evaluation = ScoreEvaluator().evaluate([], [])

        assert evaluation.overall_score == 100
        assert evaluation.passes_gate is True
        assert evaluation.needs_human_review is False
        assert evaluation.unknown_ratio == 0

    def test_missing_result_counts_as_unknown(self) -> None:
        claims, results = _claims_and_results([(ClaimType.HOURS, V), (ClaimType.EVENT_PERIOD, V)])

        evaluation = ScoreEvaluator().evaluate(claims, results[:1])

        assert evaluation.category_scores.major == pytest.approx(50)
        assert claim_counts(claims, results[:1]).unknown == 1

    def test_critical_threshold_not_rounded_through(self) -> None:
        pairs = [(ClaimType.VENUE_EXISTS, V)] * 249 + [(ClaimType.VENUE_EXISTS, U)]
        claims, results = _claims_and_results(pairs)

        score = category_score(ClaimSeverity.CRITICAL, claims, results)

        assert score == pytest.approx(99.6)
        assert ScoreEvaluator().evaluate(claims, results).block_publish is True

    def test_grey_zone_needs_review(self) -> None:
        # critical 100, major 0, minor 50 -> 30 + 0 + 20 = 50
        claims, results = _claims_and_results(
            [
                (ClaimType.VENUE_EXISTS, V),
                (ClaimType.HOURS, F),
                (ClaimType.PRICE, V),
                (ClaimType.CONTACT, F),
            ]
        )

        evaluation = ScoreEvaluator().evaluate(claims, results)

        assert evaluation.overall_score == 50
        assert evaluation.needs_human_review is True
        assert evaluation.block_publish is False

    def test_high_unknown_ratio_needs_review(self) -> None:
        claims, results = _claims_and_results([(ClaimType.PRICE, U), (ClaimType.CONTACT, V)])

        evaluation = ScoreEvaluator().evaluate(claims, results)

        assert evaluation.unknown_ratio == pytest.approx(50)
        assert evaluation.needs_human_review is True


@pytest.mark.parametrize(
    "value, expected",
    [(76.5, 77), (76.49, 76), (76.99999999999999, 77), (0.0, 0), (99.5, 100)],
)
def test_round_half_up(value: float, expected: int) -> None:
    assert round_half_up(value) == expected
