"""Claim extraction: matcher table, extractor and pre-filter."""

from factcheck_system.extraction.claim_extractor import (
    FRONT_MATTER_FIELDS,
    ClaimExtractor,
    deduplicate_claims,
    extract_claims,
    get_claim_stats,
    needs_fact_check,
    sort_claims,
)
from factcheck_system.extraction.matchers import MATCHERS, ClaimMatcher

__all__ = [
    "ClaimExtractor",
    "ClaimMatcher",
    "FRONT_MATTER_FIELDS",
    "MATCHERS",
    "deduplicate_claims",
    "extract_claims",
    "get_claim_stats",
    "needs_fact_check",
    "sort_claims",
]
