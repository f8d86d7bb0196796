"""Verdict records keyed by claim content.

Serves two purposes:
- TTL cache so an already-checked (type, value) pair skips the oracle
- Prior-verification lookup: a venue with no record is a new venue

UNKNOWN verdicts are never stored; a failed lookup must be retried next run.
Persistence is optional and best effort: the store keeps working in memory
when the file cannot be written.

Usage:
    from factcheck_system.data_management.verification_store import VerificationStore

    store = VerificationStore("data/verification-cache.json")
    cached = await store.get_cached(claim, ttl_hours=24)
    await store.save(claim, result)
"""

import asyncio
import json
from datetime import datetime
from pathlib import Path
from typing import Any, Optional

import structlog

from factcheck_system.data_management.schemas.claim_schema import Claim
from factcheck_system.data_management.schemas.verification_schema import (
    VerificationRecord,
    VerificationResult,
    VerificationStatus,
    record_key,
)


class VerificationStore:
    """Storage for verdict records with O(1) lookup by ``type:value`` key."""

    def __init__(self, persistence_path: Optional[str] = None) -> None:
        """Initialize VerificationStore.

        Args:
            persistence_path: Optional path to JSON file for persistence.
                            If None, storage is memory-only.
        """
        self._records: dict[str, VerificationRecord] = {}
        self._lock = asyncio.Lock()
        self._persistence_path = Path(persistence_path) if persistence_path else None
        self._logger = structlog.get_logger().bind(component="VerificationStore")

        if self._persistence_path:
            self._load_from_file()

    async def save(self, claim: Claim, result: VerificationResult) -> bool:
        """Store a verdict for a claim.

        Returns:
            True if stored, False for UNKNOWN verdicts (never cached).
        """
        if result.status == VerificationStatus.UNKNOWN:
            return False

        async with self._lock:
            record = VerificationRecord(
                claim_type=claim.type.value,
                value=claim.value,
                result=result,
            )
            self._records[record.key] = record

            self._logger.debug(
                "verdict_saved",
                claim_id=claim.id,
                claim_type=claim.type.value,
                status=result.status.value,
            )

            if self._persistence_path:
                self._save_to_file()
            return True

    async def get_cached(
        self,
        claim: Claim,
        ttl_hours: float,
        now: Optional[datetime] = None,
    ) -> Optional[VerificationRecord]:
        """Return the record for a claim if it is younger than ttl_hours."""
        async with self._lock:
            record = self._records.get(record_key(claim.type.value, claim.value))
            if record is None or not record.is_fresh(ttl_hours, now):
                return None
            return record

    async def get_any(self, claim: Claim) -> Optional[VerificationRecord]:
        """Return the record for a claim regardless of age."""
        async with self._lock:
            return self._records.get(record_key(claim.type.value, claim.value))

    async def has_record(self, claim: Claim) -> bool:
        async with self._lock:
            return record_key(claim.type.value, claim.value) in self._records

    async def clear(self) -> None:
        async with self._lock:
            self._records.clear()
            if self._persistence_path:
                self._save_to_file()

    async def get_stats(self) -> dict[str, Any]:
        async with self._lock:
            status_counts: dict[str, int] = {}
            for record in self._records.values():
                status_val = record.result.status.value
                status_counts[status_val] = status_counts.get(status_val, 0) + 1
            return {
                "size": len(self._records),
                "status_counts": status_counts,
                "entries": sorted(self._records),
            }

    def _save_to_file(self) -> None:
        """Save to JSON file (synchronous)."""
        if not self._persistence_path:
            return
        try:
            self._persistence_path.parent.mkdir(parents=True, exist_ok=True)
            data = {key: record.model_dump(mode="json") for key, record in self._records.items()}
            with open(self._persistence_path, "w", encoding="utf-8") as f:
                json.dump(data, f, indent=2, ensure_ascii=False)
        except OSError as e:
            self._logger.error("persistence_failed", error=str(e))

    def _load_from_file(self) -> None:
        """Load records from JSON file (synchronous)."""
        if not self._persistence_path or not self._persistence_path.exists():
            return
        try:
            with open(self._persistence_path, "r", encoding="utf-8") as f:
                data = json.load(f)
            self._records = {
                key: VerificationRecord.model_validate(raw) for key, raw in data.items()
            }
            self._logger.info("verdicts_loaded", count=len(self._records))
        except (OSError, ValueError) as e:
            # Cache only: start empty rather than refuse to run
            self._records = {}
            self._logger.warning("persistence_load_failed", error=str(e))
