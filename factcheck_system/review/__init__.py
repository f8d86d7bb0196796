"""Human review escalation."""

from factcheck_system.review.review_escalator import (
    NO_REVIEW,
    ReviewDecision,
    ReviewEscalator,
    action_for_trigger,
    check_sensitive_topic,
    decide,
    unknown_ratio_of,
)

__all__ = [
    "NO_REVIEW",
    "ReviewDecision",
    "ReviewEscalator",
    "action_for_trigger",
    "check_sensitive_topic",
    "decide",
    "unknown_ratio_of",
]
