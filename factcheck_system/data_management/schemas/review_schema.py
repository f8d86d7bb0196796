"""Human review case schema.

Review cases live in a single durable queue keyed by file path. A case moves
pending -> reviewed -> approved | rejected; no transition skips reviewed.
"""

from datetime import datetime, timezone
from enum import Enum
from typing import Optional

from pydantic import BaseModel, Field


class ReviewTrigger(str, Enum):
    """Why a post was escalated."""

    CRITICAL_FALSE = "critical_false"  # A critical claim resolved false
    SCORE_50_70 = "score_50_70"  # Overall score in the grey zone
    HIGH_UNKNOWN = "high_unknown"  # Too many claims could not be checked
    SENSITIVE_TOPIC = "sensitive_topic"  # Body mentions a sensitive keyword
    NEW_VENUE = "new_venue"  # Venue never verified before
    NEGATIVE_FEEDBACK = "negative_feedback"  # Reader feedback
    MANUAL_FLAG = "manual_flag"  # Editor flagged by hand


class ReviewAction(str, Enum):
    FLAG = "flag"
    QUEUE = "queue"
    NOTIFY = "notify"
    BLOCK = "block"


class ReviewStatus(str, Enum):
    PENDING = "pending"
    REVIEWED = "reviewed"
    APPROVED = "approved"
    REJECTED = "rejected"

    @property
    def is_terminal(self) -> bool:
        return self in (ReviewStatus.APPROVED, ReviewStatus.REJECTED)


# Allowed status transitions
REVIEW_TRANSITIONS: dict[ReviewStatus, frozenset[ReviewStatus]] = {
    ReviewStatus.PENDING: frozenset({ReviewStatus.REVIEWED}),
    ReviewStatus.REVIEWED: frozenset({ReviewStatus.APPROVED, ReviewStatus.REJECTED}),
    ReviewStatus.APPROVED: frozenset(),
    ReviewStatus.REJECTED: frozenset(),
}


class ReviewCase(BaseModel):
    id: str
    file_path: str
    title: str
    trigger: ReviewTrigger
    action: ReviewAction
    score: float
    details: str = ""
    created_at: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
    status: ReviewStatus = ReviewStatus.PENDING
    reviewed_at: Optional[datetime] = None
    reviewer_note: Optional[str] = None


class ReviewQueue(BaseModel):
    """On-disk shape of the review queue file."""

    cases: list[ReviewCase] = Field(default_factory=list)
    last_updated: datetime = Field(default_factory=lambda: datetime.now(timezone.utc))
