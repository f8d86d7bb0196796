"""Durable human review queue backed by a single JSON file.

The queue file is the source of truth and is read on every operation so that
separate CLI invocations see each other's writes. Every mutation rewrites the
whole file atomically (temp file + rename).

Invariants:
- At most one pending case per file_path (upsert replaces it in place)
- Status moves pending -> reviewed -> approved | rejected only
- Cleanup never removes pending or reviewed cases

Usage:
    from factcheck_system.data_management.review_store import ReviewStore

    store = ReviewStore("data/human-review-queue.json")
    case = await store.upsert_case(file_path="drafts/a.md", title="A", ...)
    await store.transition(case.id, ReviewStatus.REVIEWED, note="checked hours")
"""

import asyncio
import json
import os
import tempfile
import time
import uuid
from datetime import datetime, timedelta, timezone
from pathlib import Path
from typing import Any, Optional

import structlog
from pydantic import ValidationError

from factcheck_system.data_management.schemas.review_schema import (
    REVIEW_TRANSITIONS,
    ReviewAction,
    ReviewCase,
    ReviewQueue,
    ReviewStatus,
    ReviewTrigger,
)


class ReviewQueueError(Exception):
    """The queue file cannot be read, parsed or addressed."""


class ReviewCaseNotFoundError(ReviewQueueError):
    """No case with the requested id."""


class InvalidTransitionError(ReviewQueueError):
    """Requested status change is not allowed from the current status."""

    def __init__(self, case_id: str, current: ReviewStatus, requested: ReviewStatus) -> None:
        self.case_id = case_id
        self.current = current
        self.requested = requested
        super().__init__(
            f"review case {case_id}: cannot move {current.value} -> {requested.value}"
        )


def generate_case_id() -> str:
    return f"review-{int(time.time() * 1000)}-{uuid.uuid4().hex[:6]}"


class ReviewStore:
    """Repository for ReviewCase records persisted as ``{cases, last_updated}``."""

    def __init__(self, queue_path: str | Path) -> None:
        """Initialize ReviewStore.

        Args:
            queue_path: Path to the queue JSON file. Created on first write.
        """
        self._path = Path(queue_path)
        self._lock = asyncio.Lock()
        self._logger = structlog.get_logger().bind(component="ReviewStore")

    @property
    def path(self) -> Path:
        return self._path

    async def upsert_case(
        self,
        file_path: str,
        title: str,
        trigger: ReviewTrigger,
        action: ReviewAction,
        score: float,
        details: str = "",
    ) -> ReviewCase:
        """Create a pending case for file_path, or refresh the existing pending one.

        A refreshed case keeps its id and gets a new created_at. Non-pending
        cases for the same file are left untouched.

        Returns:
            The stored pending case.
        """
        async with self._lock:
            queue = self._load()
            now = datetime.now(timezone.utc)

            for index, existing in enumerate(queue.cases):
                if existing.file_path == file_path and existing.status == ReviewStatus.PENDING:
                    updated = existing.model_copy(
                        update={
                            "title": title,
                            "trigger": trigger,
                            "action": action,
                            "score": score,
                            "details": details,
                            "created_at": now,
                        }
                    )
                    queue.cases[index] = updated
                    self._save(queue)
                    self._logger.info(
                        "review_case_updated",
                        case_id=updated.id,
                        file_path=file_path,
                        trigger=trigger.value,
                    )
                    return updated

            case = ReviewCase(
                id=generate_case_id(),
                file_path=file_path,
                title=title,
                trigger=trigger,
                action=action,
                score=score,
                details=details,
                created_at=now,
            )
            queue.cases.append(case)
            self._save(queue)
            self._logger.info(
                "review_case_created",
                case_id=case.id,
                file_path=file_path,
                trigger=trigger.value,
                action=action.value,
            )
            return case

    async def transition(
        self,
        case_id: str,
        status: ReviewStatus,
        note: Optional[str] = None,
    ) -> ReviewCase:
        """Move a case to a new status.

        Raises:
            ReviewCaseNotFoundError: Unknown case id.
            InvalidTransitionError: Transition not allowed from the current status.
        """
        status = ReviewStatus(status)
        async with self._lock:
            queue = self._load()
            for index, case in enumerate(queue.cases):
                if case.id != case_id:
                    continue
                if status not in REVIEW_TRANSITIONS[case.status]:
                    raise InvalidTransitionError(case_id, case.status, status)

                updated = case.model_copy(
                    update={
                        "status": status,
                        "reviewed_at": datetime.now(timezone.utc),
                        "reviewer_note": note if note is not None else case.reviewer_note,
                    }
                )
                queue.cases[index] = updated
                self._save(queue)
                self._logger.info(
                    "review_case_transitioned",
                    case_id=case_id,
                    from_status=case.status.value,
                    to_status=status.value,
                )
                return updated

        raise ReviewCaseNotFoundError(f"review case not found: {case_id}")

    async def get(self, case_id: str) -> Optional[ReviewCase]:
        async with self._lock:
            for case in self._load().cases:
                if case.id == case_id:
                    return case
            return None

    async def get_by_file(self, file_path: str) -> list[ReviewCase]:
        """All cases (any status) recorded for a file, oldest first."""
        async with self._lock:
            return [c for c in self._load().cases if c.file_path == file_path]

    async def get_pending_by_file(self, file_path: str) -> Optional[ReviewCase]:
        async with self._lock:
            for case in self._load().cases:
                if case.file_path == file_path and case.status == ReviewStatus.PENDING:
                    return case
            return None

    async def list_pending(self) -> list[ReviewCase]:
        async with self._lock:
            return [c for c in self._load().cases if c.status == ReviewStatus.PENDING]

    async def list_all(self) -> list[ReviewCase]:
        async with self._lock:
            return list(self._load().cases)

    async def cleanup_old_cases(
        self,
        max_age_days: int = 30,
        now: Optional[datetime] = None,
    ) -> int:
        """Purge approved/rejected cases created more than max_age_days ago.

        Args:
            max_age_days: Age cutoff in days.
            now: Reference time (defaults to current UTC time).

        Returns:
            Number of cases removed.
        """
        cutoff = (now or datetime.now(timezone.utc)) - timedelta(days=max_age_days)
        async with self._lock:
            queue = self._load()
            kept = [
                c for c in queue.cases
                if not (c.status.is_terminal and c.created_at < cutoff)
            ]
            removed = len(queue.cases) - len(kept)
            if removed:
                queue.cases = kept
                self._save(queue)

            self._logger.info(
                "review_cases_cleaned",
                removed=removed,
                remaining=len(kept),
                max_age_days=max_age_days,
            )
            return removed

    async def get_stats(self) -> dict[str, Any]:
        """Case counts by status and trigger."""
        async with self._lock:
            cases = self._load().cases

        by_status: dict[str, int] = {}
        by_trigger: dict[str, int] = {}
        for case in cases:
            by_status[case.status.value] = by_status.get(case.status.value, 0) + 1
            by_trigger[case.trigger.value] = by_trigger.get(case.trigger.value, 0) + 1

        return {
            "total": len(cases),
            "by_status": by_status,
            "by_trigger": by_trigger,
        }

    def _load(self) -> ReviewQueue:
        """Read the queue file (synchronous). Missing file means empty queue."""
        if not self._path.exists():
            return ReviewQueue()

        try:
            with open(self._path, "r", encoding="utf-8") as f:
                data = json.load(f)
            return ReviewQueue.model_validate(data)
        except (json.JSONDecodeError, ValidationError) as e:
            self._logger.error("review_queue_corrupt", path=str(self._path), error=str(e))
            raise ReviewQueueError(f"review queue file is corrupt: {self._path}") from e

    def _save(self, queue: ReviewQueue) -> None:
        """Write the queue atomically (synchronous). Write errors propagate."""
        queue.last_updated = datetime.now(timezone.utc)
        self._path.parent.mkdir(parents=True, exist_ok=True)

        fd, tmp_name = tempfile.mkstemp(
            prefix=f".{self._path.name}.", suffix=".tmp", dir=self._path.parent
        )
        try:
            with os.fdopen(fd, "w", encoding="utf-8") as f:
                json.dump(queue.model_dump(mode="json"), f, indent=2, ensure_ascii=False)
            os.replace(tmp_name, self._path)
        except BaseException:
            Path(tmp_name).unlink(missing_ok=True)
            raise
