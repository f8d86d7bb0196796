"""Claim extraction from markdown posts.

Two sources feed one claim list:
- Front matter: known keys map directly to one claim each (ids ``fm-N``)
- Body text: the matcher table is applied line by line (ids ``ct-N``)

The result is deduplicated by (type, lowercased trimmed value) and ordered by
severity rank, then claim type. Extraction is a pure function of content and
front matter: identical input always yields identical claims in identical
order.
"""

import re
from dataclasses import dataclass
from typing import Any, Iterable, Mapping, Optional, Sequence

from factcheck_system.config.logging import get_logger
from factcheck_system.data_management.schemas.claim_schema import (
    Claim,
    ClaimSeverity,
    ClaimType,
)
from factcheck_system.extraction.matchers import MATCHERS, ClaimMatcher


@dataclass(frozen=True)
class FrontMatterField:
    """A front matter claim source: first present key wins."""

    claim_type: ClaimType
    keys: tuple[str, ...]
    label: str


FRONT_MATTER_FIELDS: tuple[FrontMatterField, ...] = (
    FrontMatterField(ClaimType.VENUE_EXISTS, ("venue",), "장소"),
    FrontMatterField(ClaimType.LOCATION, ("address", "location"), "주소"),
    FrontMatterField(ClaimType.HOURS, ("openingHours", "hours"), "운영시간"),
    FrontMatterField(ClaimType.PRICE, ("ticketPrice", "price"), "가격"),
    FrontMatterField(ClaimType.EVENT_PERIOD, ("eventDate", "period"), "기간"),
)

# Front matter keys that on their own make a post worth checking
FACT_CHECK_METADATA_KEYS = (
    "venue",
    "location",
    "address",
    "eventDate",
    "ticketPrice",
    "period",
)

FACT_CHECK_BODY_PATTERNS = tuple(
    re.compile(p)
    for p in (
        r"운영시간|영업시간",
        r"주소\s*[:：]",
        r"입장료|가격",
        r"\d{4}[.\-/]\d{1,2}[.\-/]\d{1,2}",
        r"\d{1,2}:\d{2}\s*[-~]\s*\d{1,2}:\d{2}",
    )
)

MIN_VALUE_LENGTH = 3


def _metadata_text(value: Any) -> Optional[str]:
    """Render a YAML scalar or list as claim text; None when absent or blank."""
    if value is None or isinstance(value, (dict, bool)):
        return None
    if isinstance(value, (list, tuple)):
        parts = [str(v).strip() for v in value if v is not None and str(v).strip()]
        return ", ".join(parts) or None
    text = str(value).strip()
    return text or None


class ClaimExtractor:
    """
    Extracts verifiable claims from a post's front matter and body.

    Usage:
        extractor = ClaimExtractor()
        claims = extractor.extract(body, front_matter)

    The matcher table is injectable so coverage can be tested one matcher at
    a time:
        >>> ClaimExtractor(matchers=[HOURS_MATCHER]).extract("운영시간: 10:00-18:00")
    """

    def __init__(
        self,
        matchers: Sequence[ClaimMatcher] = MATCHERS,
        min_value_length: int = MIN_VALUE_LENGTH,
    ):
        self.matchers = tuple(matchers)
        self.min_value_length = min_value_length
        self._logger = get_logger("ClaimExtractor")

    def extract(
        self,
        content: str,
        front_matter: Optional[Mapping[str, Any]] = None,
    ) -> list[Claim]:
        fm_claims = self.extract_from_front_matter(front_matter or {})
        body_claims = self.extract_from_body(content)
        claims = sort_claims(deduplicate_claims([*fm_claims, *body_claims]))

        self._logger.debug(
            "Claims extracted",
            front_matter=len(fm_claims),
            body=len(body_claims),
            unique=len(claims),
        )
        return claims

    def extract_from_front_matter(self, front_matter: Mapping[str, Any]) -> list[Claim]:
        claims: list[Claim] = []
        for fm_field in FRONT_MATTER_FIELDS:
            value = None
            for key in fm_field.keys:
                value = _metadata_text(front_matter.get(key))
                if value is not None:
                    break
            if value is None:
                continue

            claims.append(
                Claim(
                    id=f"fm-{len(claims)}",
                    type=fm_field.claim_type,
                    text=f"{fm_field.label}: {value}",
                    value=value,
                )
            )
        return claims

    def extract_from_body(self, content: str) -> list[Claim]:
        """Apply every matcher to every line.

        Iteration order is matcher, pattern, line, match. A (type, value) pair
        already seen in this pass is skipped, so the first hit in that order
        wins and keeps its line number.
        """
        claims: list[Claim] = []
        seen: set[tuple[ClaimType, str]] = set()
        lines = content.split("\n")

        for matcher in self.matchers:
            for line_index, match, raw_value in matcher.find_in(lines):
                value = raw_value.strip()
                # Both the value and the span AutoFixer would replace must clear the minimum
                if len(value) < self.min_value_length or len(match.group(0).strip()) < self.min_value_length:
                    continue

                key = (matcher.claim_type, value.lower())
                if key in seen:
                    continue
                seen.add(key)

                claims.append(
                    Claim(
                        id=f"ct-{len(claims)}",
                        type=matcher.claim_type,
                        text=match.group(0),
                        value=value,
                        context=lines[line_index].strip(),
                        line_number=line_index + 1,
                    )
                )
        return claims


def deduplicate_claims(claims: Iterable[Claim]) -> list[Claim]:
    """Collapse claims sharing (type, normalised value); lower severity rank wins."""
    unique: dict[tuple[ClaimType, str], Claim] = {}
    for claim in claims:
        existing = unique.get(claim.dedup_key)
        if existing is None or claim.severity.rank < existing.severity.rank:
            unique[claim.dedup_key] = claim
    return list(unique.values())


def sort_claims(claims: Iterable[Claim]) -> list[Claim]:
    """Severity rank ascending, then claim type; stable for equal keys."""
    return sorted(claims, key=lambda c: (c.severity.rank, c.type.value))


_default_extractor: Optional[ClaimExtractor] = None


def _get_default_extractor() -> ClaimExtractor:
    global _default_extractor
    if _default_extractor is None:
        _default_extractor = ClaimExtractor()
    return _default_extractor


def extract_claims(
    content: str,
    front_matter: Optional[Mapping[str, Any]] = None,
) -> list[Claim]:
    """Extract claims with the default matcher table."""
    return _get_default_extractor().extract(content, front_matter)


def needs_fact_check(content: str, front_matter: Optional[Mapping[str, Any]] = None) -> bool:
    """Cheap pre-filter: does this post carry anything verifiable?

    True when venue, location or event metadata is present, or when the body
    mentions hours, an address, a price or a date.
    """
    front_matter = front_matter or {}
    if any(_metadata_text(front_matter.get(key)) for key in FACT_CHECK_METADATA_KEYS):
        return True
    return any(pattern.search(content) for pattern in FACT_CHECK_BODY_PATTERNS)


def get_claim_stats(claims: Iterable[Claim]) -> dict[str, Any]:
    """Counts by severity and by type; every severity and type key is present."""
    by_severity = {severity.value: 0 for severity in ClaimSeverity}
    by_type = {claim_type.value: 0 for claim_type in ClaimType}
    total = 0
    for claim in claims:
        total += 1
        by_severity[claim.severity.value] += 1
        by_type[claim.type.value] += 1

    return {
        "total": total,
        "by_severity": by_severity,
        "by_type": by_type,
    }
