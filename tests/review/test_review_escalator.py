"""Tests for the human review decision table and escalation."""

import pytest

from factcheck_system.config.quality_gates import HumanReviewConfig, QualityGatesConfig
from factcheck_system.data_management.review_store import ReviewStore
from factcheck_system.data_management.schemas import (
    ClaimCounts,
    FactCheckReport,
    ReviewAction,
    ReviewStatus,
    ReviewTrigger,
    SeverityBreakdown,
)
from factcheck_system.review.review_escalator import (
    ReviewEscalator,
    action_for_trigger,
    check_sensitive_topic,
    decide,
    unknown_ratio_of,
)


# ── Fixtures ──────────────────────────────────────────────────────────────


@pytest.fixture
def store(tmp_path) -> ReviewStore:
    return ReviewStore(tmp_path / "human-review-queue.json")


@pytest.fixture
def escalator(store: ReviewStore) -> ReviewEscalator:
    return ReviewEscalator(store, QualityGatesConfig.defaults())


def _report(score: int, total: int = 4, unknown: int = 0, critical_false: int = 0) -> FactCheckReport:
    return FactCheckReport(
        file_path="drafts/leeum.md",
        title="Leeum",
        overall_score=score,
        claims=ClaimCounts(total=total, verified=total - unknown - critical_false, false=critical_false, unknown=unknown),
        by_severity=SeverityBreakdown(critical=ClaimCounts(total=critical_false, false=critical_false)),
    )


# ── Decision Table Tests ─────────────────────────────────────────────────


class TestDecide:
    def test_critical_false_blocks_regardless_of_score(self) -> None:
        for score in (0, 60, 100):
            decision = decide(score, has_critical_false=True)
            assert decision.needed
            assert decision.trigger == ReviewTrigger.CRITICAL_FALSE
            assert decision.action == ReviewAction.BLOCK

    @pytest.mark.parametrize(
        "kwargs, trigger, action",
        [
            ({"score": 50}, ReviewTrigger.SCORE_50_70, ReviewAction.QUEUE),
            ({"score": 69.9}, ReviewTrigger.SCORE_50_70, ReviewAction.QUEUE),
            ({"score": 90, "unknown_ratio": 50}, ReviewTrigger.HIGH_UNKNOWN, ReviewAction.QUEUE),
            ({"score": 90, "content": "정치적 논란이 있었던 장소"}, ReviewTrigger.SENSITIVE_TOPIC, ReviewAction.FLAG),
            ({"score": 90, "is_new_venue": True}, ReviewTrigger.NEW_VENUE, ReviewAction.FLAG),
            ({"score": 60, "unknown_ratio": 80, "is_new_venue": True}, ReviewTrigger.SCORE_50_70, ReviewAction.QUEUE),
        ],
    )
    def test_first_matching_rule_wins(self, kwargs, trigger, action) -> None:
        decision = decide(**kwargs)
        assert (decision.trigger, decision.action) == (trigger, action)

    @pytest.mark.parametrize("score", [70, 85, 49])
    def test_no_review(self, score: float) -> None:
        assert not decide(score).needed

    def test_zero_unknowns_never_high_unknown(self) -> None:
        config = HumanReviewConfig(unknown_ratio_threshold=0)
        assert not decide(90, unknown_ratio=0, config=config).needed

    def test_sensitive_match_is_case_insensitive(self) -> None:
        assert check_sensitive_topic("Museum CLOSED for renovation", ["closed for"])
        assert not check_sensitive_topic("평범한 여행기", ["정치적 논란"])

    @pytest.mark.parametrize("trigger", list(ReviewTrigger))
    def test_every_trigger_has_an_action(self, trigger: ReviewTrigger) -> None:
        assert isinstance(action_for_trigger(trigger), ReviewAction)

    def test_manual_triggers_flag(self) -> None:
        assert action_for_trigger(ReviewTrigger.MANUAL_FLAG) == ReviewAction.FLAG
        assert action_for_trigger(ReviewTrigger.NEGATIVE_FEEDBACK) == ReviewAction.FLAG

    def test_unknown_ratio_of_report(self) -> None:
        assert unknown_ratio_of(_report(80, total=4, unknown=1)) == pytest.approx(25)
        assert unknown_ratio_of(FactCheckReport.empty("a.md", "A")) == 0


# ── Escalation Tests ─────────────────────────────────────────────────────


class TestEscalate:
    @pytest.mark.asyncio
    async def test_files_case_for_critical_false(self, escalator: ReviewEscalator, store: ReviewStore) -> None:
        case = await escalator.escalate(_report(77, total=10, critical_false=1))

        assert case is not None
        assert case.trigger == ReviewTrigger.CRITICAL_FALSE
        assert case.action == ReviewAction.BLOCK
        assert case.status == ReviewStatus.PENDING
        assert "critical_false=1" in case.details
        assert [c.id for c in await store.list_pending()] == [case.id]

    @pytest.mark.asyncio
    async def test_no_case_when_not_needed(self, escalator: ReviewEscalator, store: ReviewStore) -> None:
        assert await escalator.escalate(_report(95)) is None
        assert await store.list_all() == []

    @pytest.mark.asyncio
    async def test_new_venue_and_sensitive_content(self, escalator: ReviewEscalator) -> None:
        sensitive = await escalator.escalate(_report(95), content="심각한 사고 이후 재개장", is_new_venue=True)

        assert sensitive.trigger == ReviewTrigger.SENSITIVE_TOPIC

    @pytest.mark.asyncio
    async def test_repeat_escalation_updates_pending_case(self, escalator: ReviewEscalator, store: ReviewStore) -> None:
        first = await escalator.escalate(_report(60))
        second = await escalator.escalate(_report(95), is_new_venue=True)

        assert second.id == first.id
        assert second.trigger == ReviewTrigger.NEW_VENUE
        assert len(await store.list_pending()) == 1

    @pytest.mark.asyncio
    async def test_manual_case(self, escalator: ReviewEscalator) -> None:
        case = await escalator.add_review_case(
            "drafts/leeum.md", "Leeum", ReviewTrigger.NEGATIVE_FEEDBACK, 0, "reader says it closed"
        )

        assert case.action == ReviewAction.FLAG
        assert case.details == "reader says it closed"

    @pytest.mark.asyncio
    async def test_cleanup_uses_configured_age(self, store: ReviewStore) -> None:
        config = QualityGatesConfig.defaults().with_overrides("human_review", max_case_age_days=1)
        escalator = ReviewEscalator(store, config)

        assert await escalator.cleanup_old_cases() == 0
