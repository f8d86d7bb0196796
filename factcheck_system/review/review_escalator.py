"""Human review escalation policy.

Decision table, first match wins:

| # | Condition                                   | Trigger         | Action |
|---|---------------------------------------------|-----------------|--------|
| 1 | a critical claim resolved false             | critical_false  | block  |
| 2 | score_min <= score < score_max              | score_50_70     | queue  |
| 3 | unknown ratio >= unknown_ratio_threshold    | high_unknown    | queue  |
| 4 | body contains a sensitive keyword           | sensitive_topic | flag   |
| 5 | venue has no prior verification record      | new_venue       | flag   |

Triggers raised outside the table (negative_feedback, manual_flag) map to
``flag``. Cases are written through ReviewStore, which keeps at most one
pending case per file.
"""

from dataclasses import dataclass
from typing import Iterable, Optional

import structlog

from factcheck_system.config.quality_gates import HumanReviewConfig, QualityGatesConfig
from factcheck_system.data_management.review_store import ReviewStore
from factcheck_system.data_management.schemas.report_schema import FactCheckReport
from factcheck_system.data_management.schemas.review_schema import (
    ReviewAction,
    ReviewCase,
    ReviewTrigger,
)

_TRIGGER_ACTIONS: dict[ReviewTrigger, ReviewAction] = {
    ReviewTrigger.CRITICAL_FALSE: ReviewAction.BLOCK,
    ReviewTrigger.SCORE_50_70: ReviewAction.QUEUE,
    ReviewTrigger.HIGH_UNKNOWN: ReviewAction.QUEUE,
    ReviewTrigger.SENSITIVE_TOPIC: ReviewAction.FLAG,
    ReviewTrigger.NEW_VENUE: ReviewAction.FLAG,
    ReviewTrigger.NEGATIVE_FEEDBACK: ReviewAction.FLAG,
    ReviewTrigger.MANUAL_FLAG: ReviewAction.FLAG,
}

_missing_action = set(ReviewTrigger) - set(_TRIGGER_ACTIONS)
if _missing_action:
    raise RuntimeError(f"review triggers without an action: {sorted(t.value for t in _missing_action)}")


def action_for_trigger(trigger: ReviewTrigger) -> ReviewAction:
    return _TRIGGER_ACTIONS[ReviewTrigger(trigger)]


@dataclass(frozen=True)
class ReviewDecision:
    needed: bool
    trigger: Optional[ReviewTrigger] = None
    action: ReviewAction = ReviewAction.FLAG


NO_REVIEW = ReviewDecision(needed=False)


def check_sensitive_topic(content: str, keywords: Iterable[str]) -> bool:
    """Case-insensitive substring match against the keyword list."""
    normalized = content.lower()
    return any(keyword.lower() in normalized for keyword in keywords if keyword)


def decide(
    score: float,
    unknown_ratio: float = 0.0,
    has_critical_false: bool = False,
    content: str = "",
    is_new_venue: bool = False,
    config: Optional[HumanReviewConfig] = None,
) -> ReviewDecision:
    """Apply the decision table. ``unknown_ratio`` is a percentage (0-100)."""
    config = config or HumanReviewConfig()

    if has_critical_false:
        trigger = ReviewTrigger.CRITICAL_FALSE
    elif config.score_min <= score < config.score_max:
        trigger = ReviewTrigger.SCORE_50_70
    elif unknown_ratio >= config.unknown_ratio_threshold and unknown_ratio > 0:
        trigger = ReviewTrigger.HIGH_UNKNOWN
    elif content and check_sensitive_topic(content, config.sensitive_keywords):
        trigger = ReviewTrigger.SENSITIVE_TOPIC
    elif is_new_venue:
        trigger = ReviewTrigger.NEW_VENUE
    else:
        return NO_REVIEW

    return ReviewDecision(needed=True, trigger=trigger, action=action_for_trigger(trigger))


def unknown_ratio_of(report: FactCheckReport) -> float:
    if report.claims.total == 0:
        return 0.0
    return report.claims.unknown / report.claims.total * 100


class ReviewEscalator:
    """
    Decides whether a checked post needs a human and files the case.

    Usage:
        escalator = ReviewEscalator(ReviewStore("data/human-review-queue.json"))
        case = await escalator.escalate(report, body, is_new_venue=True)
    """

    def __init__(
        self,
        store: ReviewStore,
        config: Optional[QualityGatesConfig] = None,
    ) -> None:
        self.store = store
        self.config = config or QualityGatesConfig.defaults()
        self._logger = structlog.get_logger().bind(component="ReviewEscalator")

    def decide(
        self,
        score: float,
        unknown_ratio: float = 0.0,
        has_critical_false: bool = False,
        content: str = "",
        is_new_venue: bool = False,
    ) -> ReviewDecision:
        return decide(
            score,
            unknown_ratio=unknown_ratio,
            has_critical_false=has_critical_false,
            content=content,
            is_new_venue=is_new_venue,
            config=self.config.human_review,
        )

    def check_sensitive_topic(self, content: str) -> bool:
        return check_sensitive_topic(content, self.config.human_review.sensitive_keywords)

    def decide_for_report(
        self,
        report: FactCheckReport,
        content: str = "",
        is_new_venue: bool = False,
    ) -> ReviewDecision:
        return self.decide(
            report.overall_score,
            unknown_ratio=unknown_ratio_of(report),
            has_critical_false=report.by_severity.critical.false > 0,
            content=content,
            is_new_venue=is_new_venue,
        )

    async def escalate(
        self,
        report: FactCheckReport,
        content: str = "",
        is_new_venue: bool = False,
    ) -> Optional[ReviewCase]:
        """File a review case for the report if the decision table asks for one.

        Returns:
            The pending case, or None when no review is needed.
        """
        decision = self.decide_for_report(report, content, is_new_venue)
        if not decision.needed or decision.trigger is None:
            return None

        details = (
            f"score={report.overall_score} "
            f"unknown={report.claims.unknown}/{report.claims.total} "
            f"critical_false={report.by_severity.critical.false}"
        )
        return await self.add_review_case(
            report.file_path,
            report.title,
            decision.trigger,
            report.overall_score,
            details,
        )

    async def add_review_case(
        self,
        file_path: str,
        title: str,
        trigger: ReviewTrigger,
        score: float,
        details: str = "",
    ) -> ReviewCase:
        """Upsert a pending case; the action follows from the trigger."""
        trigger = ReviewTrigger(trigger)
        action = action_for_trigger(trigger)
        case = await self.store.upsert_case(
            file_path=file_path,
            title=title,
            trigger=trigger,
            action=action,
            score=score,
            details=details,
        )
        self._logger.info(
            "review_escalated",
            file_path=file_path,
            trigger=trigger.value,
            action=action.value,
            case_id=case.id,
        )
        return case

    async def cleanup_old_cases(self) -> int:
        return await self.store.cleanup_old_cases(self.config.human_review.max_case_age_days)
